"""Assembly generation for declarations, functions and statements."""

from __future__ import annotations

import io
from math import prod
from typing import Optional

from riscvcc.ast import AstNode, DataType, DeclKind, IdentifierKind, NodeType, StmtKind
from riscvcc.codegen_expr import ExpressionGenerator
from riscvcc.evaluate import bigger_type
from riscvcc.registers import FLOAT_BASE
from riscvcc.symbols import TypeDescriptor, TypeDescriptorKind

DEFAULT_OUTPUT = "output.s"
CALLEE_SAVE_AREA = 184
WORD_SIZE = 4


def _ft(reg: int) -> int:
    return reg - FLOAT_BASE


def _storage_size(descriptor: TypeDescriptor) -> int:
    if descriptor.kind is TypeDescriptorKind.SCALAR:
        return WORD_SIZE
    return WORD_SIZE * prod(descriptor.sizes)


def _initial_int(node: AstNode) -> int:
    if node.const is not None and isinstance(node.const.value, (int, float)):
        return int(node.const.value)
    if isinstance(node.const_eval_value, (int, float)):
        return int(node.const_eval_value)
    return 0


class CodeGenerator(ExpressionGenerator):
    """Writes RISC-V assembly for a whole analysed program."""

    def __init__(self, out) -> None:
        super().__init__(out)
        self.frame_offset = 0
        self.local_var_size = 0

    def gen_program(self, root: AstNode) -> None:
        """Generate every global declaration list and function in order."""
        for declaration in root.children:
            if declaration.node_type is NodeType.VARIABLE_DECL_LIST:
                self.gen_global_var_decl(declaration)
            else:
                self.gen_function_decl(declaration)

    def gen_global_var_decl(self, node: AstNode) -> None:
        """Reserve data words for global variables."""
        self.emit(".data")
        for declaration in node.children:
            if declaration.decl_kind is not DeclKind.VARIABLE:
                continue
            for identifier in declaration.children[1:]:
                label = f"_{identifier.name}"
                descriptor = identifier.symbol_entry.attribute.type_descriptor
                if descriptor.kind is not TypeDescriptorKind.SCALAR:
                    self.emit(f"{label}: .skip {_storage_size(descriptor)}")
                elif descriptor.data_type is DataType.INT:
                    value = _initial_int(identifier.children[0]) if identifier.children else 0
                    self.emit(f"{label}: .word {value}")
                elif descriptor.data_type is DataType.FLOAT:
                    self.emit(f"{label}: .word 0")
        self.gen_alignment()

    def gen_function_decl(self, node: AstNode) -> None:
        """Generate a function's entry, body and exit."""
        name = node.children[1].name
        block = node.children[3]
        self.gen_head(name)
        self.gen_prologue(name)
        self.gen_block(block)
        self.gen_epilogue(name)

    def gen_head(self, name: str) -> None:
        self.emit(".text")
        self.emit(f"_start_{name}:")

    def _saved_registers(self) -> list[tuple[str, str, int]]:
        saved: list[tuple[str, str, int]] = []
        offset = 8
        for number in range(7):
            saved.append(("d", f"t{number}", offset))
            offset += 8
        for number in range(2, 12):
            saved.append(("d", f"s{number}", offset))
            offset += 8
        saved.append(("d", "fp", offset))
        offset += 8
        for number in range(8):
            saved.append(("w", f"ft{number}", offset))
            offset += 4
        return saved

    def gen_prologue(self, name: str) -> None:
        """Open the stack frame and save the temporaries."""
        self.emit("sd ra,0(sp)")
        self.emit("sd fp,-8(sp)")
        self.emit("add fp, sp, -8")
        self.emit("add sp, sp, -16")
        self.emit(f"la ra, _frameSize_{name}")
        self.emit("lw ra,0(ra)")
        self.emit("sub sp,sp,ra")
        for width, register, offset in self._saved_registers():
            if width == "d":
                self.emit(f"sd {register},{offset}(sp)")
            else:
                self.emit(f"fsw {register},{offset}(sp)")
        self.frame_offset = 0

    def gen_epilogue(self, name: str) -> None:
        """Restore the temporaries, close the frame and emit the frame size."""
        self.emit(f"_end_{name}:")
        end = 8
        for width, register, offset in self._saved_registers():
            if width == "d":
                self.emit(f"ld {register},{offset}(sp)")
                end = offset + 8
            else:
                self.emit(f"flw {register},{offset}(sp)")
                end = offset + 4
        self.emit("ld ra,8(fp)")
        self.emit("mv sp,fp")
        self.emit("add sp,sp,8")
        self.emit("ld fp,0(fp)")
        self.emit("jr ra")
        self.emit(".data")
        self.emit(f"_frameSize_{name}: .word {end + self.local_var_size}")

    def gen_local_var_decl(self, node: AstNode) -> None:
        """Give each local variable its frame offset."""
        for declaration in node.children:
            if declaration.decl_kind is not DeclKind.VARIABLE:
                continue
            offset = 0
            for identifier in declaration.children[1:]:
                entry = identifier.symbol_entry
                offset += _storage_size(entry.attribute.type_descriptor)
                entry.offset = self.frame_offset + CALLEE_SAVE_AREA + offset
            self.frame_offset += offset
            self.local_var_size = offset

    def gen_block(self, node: AstNode) -> None:
        for child in node.children:
            if child.node_type is NodeType.VARIABLE_DECL_LIST:
                self.gen_local_var_decl(child)
            elif child.node_type is NodeType.STMT_LIST:
                self.gen_stmt_list(child)

    def gen_stmt_list(self, node: AstNode) -> None:
        for statement in node.children:
            self.gen_stmt(statement)

    def gen_stmt(self, node: AstNode) -> None:
        """Generate one statement of any kind."""
        if node.node_type is NodeType.NUL:
            return
        if node.node_type is NodeType.BLOCK:
            self.gen_block(node)
            return
        kind = node.stmt_kind
        if kind is StmtKind.WHILE:
            self.gen_while(node)
        elif kind is StmtKind.FOR:
            self.gen_for(node)
        elif kind is StmtKind.ASSIGN:
            self.gen_assign(node)
        elif kind is StmtKind.IF:
            self.gen_if(node)
        elif kind is StmtKind.FUNCTION_CALL:
            self.gen_func_call(node)
        elif kind is StmtKind.RETURN:
            self.gen_return(node)

    def _gen_condition(self, condition: AstNode, target: str) -> None:
        if condition.node_type is NodeType.STMT and condition.stmt_kind is StmtKind.ASSIGN:
            self.gen_assign(condition)
            condition = condition.children[0]
        reg = self.gen_expr_related(condition)
        self.registers.release(reg)
        if condition.data_type is DataType.FLOAT:
            int_reg = self.registers.acquire()
            self.registers.release(int_reg)
            self.emit(f"fcvt.w.s t{int_reg}, ft{_ft(reg)}")
            self.emit(f"beqz t{int_reg}, {target}")
        else:
            self.emit(f"beqz t{reg}, {target}")

    def gen_while(self, node: AstNode) -> None:
        number = self.next_label()
        condition, body = node.children[0], node.children[1]
        self.emit(f"_whileLabel_{number}:")
        self._gen_condition(condition, f"_whileExitLabel_{number}")
        self.gen_stmt(body)
        self.emit(f"j _whileLabel_{number}")
        self.emit(f"_whileExitLabel_{number}:")

    def gen_if(self, node: AstNode) -> None:
        condition, body, else_part = node.children[0], node.children[1], node.children[2]
        number = self.next_label()
        self._gen_condition(condition, f"_elseLabel_{number}")
        self.gen_stmt(body)
        self.emit(f"j _ifExitLabel_{number}")
        self.emit(f"_elseLabel_{number}:")
        self.gen_stmt(else_part)
        self.emit(f"_ifExitLabel_{number}:")

    def gen_for(self, node: AstNode) -> None:
        """For loops produce no code."""
        return None

    def _store(self, target_type: DataType, value: AstNode, result_reg: int, address_reg: int) -> None:
        if target_type is DataType.INT:
            if value.data_type is DataType.FLOAT:
                converted = self.registers.acquire()
                self.registers.release(converted)
                self.emit(f"fcvt.w.s t{converted}, ft{_ft(result_reg)}")
                self.emit(f"sw t{converted},0(t{address_reg})")
            else:
                self.emit(f"sw t{result_reg},0(t{address_reg})")
        elif value.data_type is DataType.INT:
            converted = self.registers.acquire()
            self.registers.release(converted)
            self.emit(f"fcvt.s.w t{converted}, t{result_reg}")
            self.emit(f"sw t{converted},0(t{address_reg})")
        else:
            self.emit(f"sw t{result_reg},0(t{address_reg})")

    def _address_into(self, reg: int, identifier: AstNode) -> None:
        entry = identifier.symbol_entry
        if entry.nesting_level == 0:
            self.emit(f"la t{reg},_{identifier.name}")
        else:
            self.gen_offset_data(reg, entry.offset)
            self.emit(f"sub t{reg}, fp, t{reg}")

    def gen_assign(self, node: AstNode) -> None:
        """Evaluate the right side and store it into the variable or element."""
        regs = self.registers
        identifier, value = node.children[0], node.children[1]
        result_reg = self.gen_expr_related(value)
        entry = identifier.symbol_entry
        if entry is None:
            raise ValueError(f"identifier '{identifier.name}' has no symbol entry")
        descriptor = entry.attribute.type_descriptor

        if identifier.id_kind is IdentifierKind.NORMAL:
            identifier.data_type = descriptor.data_type
            reg = regs.acquire()
            regs.release(reg)
            self._address_into(reg, identifier)
            self._store(identifier.data_type, value, result_reg, reg)
        else:
            identifier.data_type = descriptor.element_type
            reg = regs.acquire()
            self.emit(f"addi t{reg},t{reg},0")
            for size, subscript in zip(descriptor.sizes, identifier.children):
                index_reg = self.gen_expr_related(subscript)
                size_reg = regs.acquire()
                self.gen_offset_data(size_reg, size)
                self.emit(f"mulw t{reg}, t{reg}, t{size_reg}")
                self.emit(f"slli t{index_reg}, t{index_reg}, 2")
                self.emit(f"add t{reg}, t{reg}, t{index_reg}")
                regs.release(index_reg)
                regs.release(size_reg)
            base_reg = regs.acquire()
            self._address_into(base_reg, identifier)
            self.emit(f"add t{reg}, t{reg}, t{base_reg}")
            self._store(identifier.data_type, value, result_reg, reg)
            regs.release(reg)
            regs.release(base_reg)

        regs.release(result_reg)
        node.data_type = bigger_type(identifier.data_type, value.data_type)

    def _enclosing_function(self, node: AstNode) -> Optional[AstNode]:
        parent = node.parent
        while parent is not None:
            if parent.node_type is NodeType.DECLARATION:
                return parent
            parent = parent.parent
        return None

    def gen_return(self, node: AstNode) -> None:
        """Move the value into a0 and jump to the function's exit."""
        declaration = self._enclosing_function(node)
        if declaration is None:
            raise ValueError("return statement outside a function")
        if declaration.decl_kind is DeclKind.FUNCTION:
            node.data_type = declaration.children[0].data_type
        value = node.children[0]
        reg = self.gen_expr_related(value)
        if node.data_type is DataType.INT:
            if value.data_type is DataType.INT:
                self.emit(f"mv a0,t{reg}")
            else:
                self.emit(f"fcvt.w.s a0,ft{_ft(reg)}")
        elif node.data_type is DataType.FLOAT:
            if value.data_type is DataType.INT:
                self.emit(f"mv a0,t{reg}")
                self.emit("fcvt.s.w a0, a0")
            else:
                self.emit(f"fmv.x.w a0,ft{_ft(reg)}")
        self.emit(f"j _end_{declaration.children[1].name}")
        self.registers.release(reg)


def generate(root: AstNode) -> str:
    """The assembly text for an analysed program."""
    out = io.StringIO()
    CodeGenerator(out).gen_program(root)
    return out.getvalue()


def codegen(root: AstNode, path: str = DEFAULT_OUTPUT) -> str:
    """Write the assembly for root to path and return the path."""
    with open(path, "w", encoding="utf-8") as handle:
        CodeGenerator(handle).gen_program(root)
    return path