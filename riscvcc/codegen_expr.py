"""Assembly generation for expressions, function calls and write."""

from __future__ import annotations

from typing import TextIO

from riscvcc.ast import (
    AstNode,
    BinaryOperator,
    ConstType,
    DataType,
    ExprKind,
    IdentifierKind,
    NodeType,
    UnaryOperator,
)
from riscvcc.evaluate import bigger_type
from riscvcc.registers import FLOAT_BASE, RegisterPool

_INT_ARITHMETIC = {
    BinaryOperator.ADD: "addw",
    BinaryOperator.SUB: "subw",
    BinaryOperator.MUL: "mulw",
    BinaryOperator.DIV: "div",
}

_FLOAT_ARITHMETIC = {
    BinaryOperator.ADD: "fadd.s",
    BinaryOperator.SUB: "fsub.s",
    BinaryOperator.MUL: "fmul.s",
    BinaryOperator.DIV: "fdiv.s",
}

_FLOAT_COMPARISON = {
    BinaryOperator.EQ: "feq.s",
    BinaryOperator.GE: "bge",
    BinaryOperator.LE: "ble",
    BinaryOperator.NE: "bne",
    BinaryOperator.GT: "bgt",
    BinaryOperator.LT: "blt",
}

_LOGICAL = {BinaryOperator.AND: "and", BinaryOperator.OR: "or"}


def _ft(reg: int) -> int:
    return reg - FLOAT_BASE


class ExpressionGenerator:
    """Writes RISC-V assembly for expression nodes to a text stream."""

    def __init__(self, out: TextIO) -> None:
        self.out = out
        self.registers = RegisterPool()
        self.label_count = 0

    def emit(self, line: str) -> None:
        self.out.write(line + "\n")

    def next_label(self) -> int:
        """Return the current label number and advance the counter."""
        number = self.label_count
        self.label_count += 1
        return number

    def gen_alignment(self) -> None:
        self.emit(".align 3")

    def gen_offset_data(self, reg: int, offset: int) -> None:
        """Load a constant offset into an integer register through a data word."""
        number = self.next_label()
        self.emit(".data")
        self.emit(f"_const_offset_{number}: .word {offset}")
        self.gen_alignment()
        self.emit(".text")
        self.emit(f"lw t{reg}, _const_offset_{number}")

    def _load_int_const(self, reg: int, value: int) -> None:
        number = self.next_label()
        self.emit(f"_int_const_{number}: .word {int(value)}")
        self.gen_alignment()
        self.emit(".text")
        self.emit(f"lw t{reg}, _int_const_{number}")

    def _load_float_const(self, reg: int, value: float) -> None:
        number = self.next_label()
        self.emit(f"_float_const_{number}: .float {float(value):f}")
        self.gen_alignment()
        self.emit(".text")
        self.emit(f"flw ft{_ft(reg)}, _float_const_{number}")

    def _load_address(self, reg: int, node: AstNode) -> None:
        entry = node.symbol_entry
        if entry.nesting_level == 0:
            self.emit(f"la t{reg}, _{node.name}")
        else:
            self.gen_offset_data(reg, entry.offset)
            self.emit(f"sub t{reg}, fp, t{reg}")

    def gen_expr_related(self, node: AstNode) -> int:
        """Generate code leaving node's value in a register and return that register."""
        regs = self.registers
        reg = regs.acquire()
        node_type = node.node_type
        if node_type is NodeType.EXPR:
            regs.release(reg)
            return self.gen_expr(node)
        if node_type is NodeType.STMT:
            regs.release(reg)
            self.gen_func_call(node)
            if node.data_type is DataType.INT:
                reg = regs.acquire()
                self.emit(f"mv t{reg},a0")
            elif node.data_type is DataType.FLOAT:
                reg = regs.acquire_float()
                self.emit(f"fmv.w.x ft{_ft(reg)},a0")
            return reg
        if node_type is NodeType.IDENTIFIER:
            return self._gen_identifier(node, reg)
        if node_type is NodeType.CONST_VALUE:
            return self._gen_const(node, reg)
        return reg

    def _gen_identifier(self, node: AstNode, reg: int) -> int:
        regs = self.registers
        entry = node.symbol_entry
        if entry is None:
            raise ValueError(f"identifier '{node.name}' has no symbol entry")
        descriptor = entry.attribute.type_descriptor
        if node.id_kind is IdentifierKind.NORMAL:
            node.data_type = descriptor.data_type
            if entry.nesting_level == 0:
                if node.data_type is DataType.INT:
                    self.emit(f"lw t{reg},_{node.name}")
                else:
                    regs.release(reg)
                    reg = regs.acquire_float()
                    self.emit(f"flw ft{_ft(reg)},_{node.name}")
                return reg
            self.gen_offset_data(reg, entry.offset)
            self.emit(f"sub t{reg}, fp, t{reg}")
            if node.data_type is DataType.INT:
                self.emit(f"lw t{reg},0(t{reg})")
                return reg
            regs.release(reg)
            float_reg = regs.acquire_float()
            self.emit(f"flw ft{_ft(float_reg)},0(t{reg})")
            return float_reg

        node.data_type = descriptor.element_type
        self.emit(f"xor t{reg},t{reg},t{reg}")
        for size, subscript in zip(descriptor.sizes, node.children):
            size_reg = regs.acquire()
            self.gen_offset_data(size_reg, size)
            self.emit(f"mulw t{reg}, t{reg}, t{size_reg}")
            regs.release(size_reg)
            index_reg = self.gen_expr_related(subscript)
            self.emit(f"slli t{index_reg}, t{index_reg}, 2")
            self.emit(f"add t{reg}, t{reg}, t{index_reg}")
            regs.release(index_reg)
        base_reg = regs.acquire()
        self._load_address(base_reg, node)
        regs.release(base_reg)
        self.emit(f"add t{reg}, t{reg}, t{base_reg}")
        if node.data_type is DataType.INT:
            self.emit(f"lw t{reg},0(t{reg})")
            return reg
        regs.release(reg)
        float_reg = regs.acquire_float()
        self.emit(f"flw ft{_ft(float_reg)},0(t{reg})")
        return float_reg

    def _gen_const(self, node: AstNode, reg: int) -> int:
        const = node.const
        if const is None:
            return reg
        if const.const_type is ConstType.INTEGER:
            node.data_type = DataType.INT
            node.const_eval_value = int(const.value)
            self.emit(".data")
            self._load_int_const(reg, int(const.value))
        elif const.const_type is ConstType.FLOAT:
            node.data_type = DataType.FLOAT
            self.registers.release(reg)
            reg = self.registers.acquire_float()
            node.const_eval_value = float(const.value)
            self.emit(".data")
            self._load_float_const(reg, float(const.value))
        else:
            node.data_type = DataType.CONST_STRING
            number = self.next_label()
            self.emit(".data")
            self.emit(f"_string_const_{number}: .ascii {const.value}")
            self.gen_alignment()
            self.emit(".text")
            self.emit(f"la t{reg}, _string_const_{number}")
        return reg

    def gen_int_binary_op(self, node: AstNode, reg1: int, reg2: int, op: str) -> None:
        """Emit the 0/1 result sequence of an integer comparison into reg1."""
        node.data_type = DataType.INT
        number = self.next_label()
        self.emit(f"xor t{reg1},t{reg1},t{reg1}")
        self.emit(f"j _END_binaryOp_{number}")
        self.emit(f"_binaryOpLabel_{number}:")
        self.emit(f"addi t{reg1},x0,1")
        self.emit(f"_END_binaryOp_{number}:")

    def gen_float_binary_op(self, node: AstNode, reg1: int, reg2: int, op: str) -> int:
        """Compare two float registers into a new integer register and return it."""
        node.data_type = DataType.INT
        result = self.registers.acquire()
        self.emit(f"{op} t{result}, ft{_ft(reg1)}, ft{_ft(reg2)}")
        self.registers.release(reg1)
        return result

    def gen_expr(self, node: AstNode) -> int:
        """Generate code for an operator node and return the result register."""
        if node.expr_kind is ExprKind.BINARY:
            return self._gen_binary(node)
        return self._gen_unary(node)

    def _gen_folded(self, node: AstNode) -> int:
        regs = self.registers
        self.emit(".data")
        if node.data_type is DataType.INT:
            reg = regs.acquire()
            self._load_int_const(reg, int(node.const_eval_value))
        else:
            reg = regs.acquire_float()
            self._load_float_const(reg, float(node.const_eval_value))
        return reg

    def _gen_binary(self, node: AstNode) -> int:
        regs = self.registers
        left, right = node.children[0], node.children[1]
        node.data_type = bigger_type(left.data_type, right.data_type)
        if node.is_const_eval:
            return self._gen_folded(node)

        reg1 = self.gen_expr_related(left)
        regs.release(reg1)
        if left.data_type is DataType.INT:
            self.emit(f"sw t{reg1},0(sp)")
        else:
            self.emit(f"fsw ft{_ft(reg1)},0(sp)")
        self.emit("addi sp, sp, -8")
        reg2 = self.gen_expr_related(right)
        self.emit("addi sp, sp, 8")
        if left.data_type is DataType.INT:
            reg1 = regs.acquire()
            self.emit(f"lw t{reg1},0(sp)")
        else:
            reg1 = regs.acquire_float()
            self.emit(f"flw ft{_ft(reg1)},0(sp)")

        op = node.binary_op
        if left.data_type is DataType.INT and right.data_type is DataType.INT:
            node.data_type = DataType.INT
            if op in _INT_ARITHMETIC:
                self.emit(f"{_INT_ARITHMETIC[op]} t{reg1}, t{reg1}, t{reg2}")
            elif op is BinaryOperator.EQ:
                self.gen_int_binary_op(node, reg1, reg2, "beq")
            elif op is BinaryOperator.GE:
                self.gen_int_binary_op(node, reg1, reg2, "bge")
            elif op is BinaryOperator.LE:
                reg1, reg2 = reg2, reg1
                self.gen_int_binary_op(node, reg1, reg2, "bge")
            elif op is BinaryOperator.NE:
                self.gen_int_binary_op(node, reg1, reg2, "bne")
            elif op is BinaryOperator.GT:
                reg1, reg2 = reg2, reg1
                self.gen_int_binary_op(node, reg1, reg2, "blt")
            elif op is BinaryOperator.LT:
                self.gen_int_binary_op(node, reg1, reg2, "blt")
            elif op in _LOGICAL:
                self.emit(f"{_LOGICAL[op]} {reg1}, {reg1}, {reg2}")
            regs.release(reg2)
            return reg1

        node.data_type = DataType.FLOAT
        if left.data_type is DataType.INT:
            reg1 = self._int_to_float_reg(reg1)
        if right.data_type is DataType.INT:
            reg2 = self._int_to_float_reg(reg2)
        if op in _FLOAT_ARITHMETIC:
            self.emit(f"{_FLOAT_ARITHMETIC[op]} ft{_ft(reg1)}, ft{_ft(reg1)}, ft{_ft(reg2)}")
        elif op in _FLOAT_COMPARISON:
            reg1 = self.gen_float_binary_op(node, reg1, reg2, _FLOAT_COMPARISON[op])
        elif op in _LOGICAL:
            self.emit(f"{_LOGICAL[op]} {reg1}, {reg1}, {reg2}")
        regs.release(reg2)
        return reg1

    def _int_to_float_reg(self, reg: int) -> int:
        self.emit(f"fcvt.s.w t{reg}, t{reg}")
        self.registers.release(reg)
        float_reg = self.registers.acquire_float()
        self.emit(f"fmv.w.x ft{_ft(float_reg)} t{reg}")
        return float_reg

    def _gen_unary(self, node: AstNode) -> int:
        operand = node.children[0]
        node.data_type = operand.data_type
        if node.is_const_eval:
            return self._gen_folded(node)

        reg = self.gen_expr_related(operand)
        op = node.unary_op
        if operand.data_type is DataType.INT:
            if op is UnaryOperator.NEGATIVE:
                self.emit(f"subw t{reg},x0,t{reg}")
            elif op is UnaryOperator.LOGICAL_NEGATION:
                number = self.next_label()
                self.emit(f"beqz t{reg},_unaryOpLabel_{number}")
                self.emit(f"addi t{reg},x0,1")
                self.emit(f"j _END_unaryOp_{number}")
                self.emit(f"_unaryOpLabel_{number}:")
                self.emit(f"addi t{reg},x0,1")
                self.emit(f"_END_unaryOp_{number}:")
            return reg

        node.data_type = DataType.FLOAT
        if op is UnaryOperator.NEGATIVE:
            self.emit(f"fsub.s ft{_ft(reg)},x0,ft{_ft(reg)}")
        elif op is UnaryOperator.LOGICAL_NEGATION:
            result = self.registers.acquire()
            self.registers.release(reg)
            self.emit(f"fcvt.w.s t{result}, t{_ft(reg)}")
            reg = result
            number = self.next_label()
            self.emit(f"beqz t{reg},_unaryOpLabel_{number}")
            self.emit(f"xor t{reg},t{reg},t{reg}")
            self.emit(f"j _END_unaryOp_{number}")
            self.emit(f"_unaryOpLabel_{number}:")
            self.emit(f"addi t{reg},x0,1")
            self.emit(f"_END_unaryOp_{number}:")
        return reg

    def gen_func_call(self, node: AstNode) -> None:
        """Generate a call; the result is left in a0."""
        function_id = node.children[0]
        name = function_id.name
        if name == "write":
            self.gen_write(function_id)
            return
        entry = function_id.symbol_entry
        if entry is None or entry.attribute.signature is None:
            raise ValueError(f"function '{name}' has no resolved signature")
        if name == "read":
            self.emit("jal _read_int")
        elif name == "fread":
            self.emit("jal _read_float")
        else:
            self.emit(f"jal _start_{name}")
        node.data_type = entry.attribute.signature.return_type

    def gen_write(self, node: AstNode) -> None:
        """Generate a call of write; node is the call's function identifier."""
        argument_list = node.right_sibling()
        if argument_list is None or not argument_list.children:
            raise ValueError("write needs one argument")
        argument = argument_list.children[0]
        reg = self.gen_expr_related(argument)
        if argument.data_type is DataType.INT:
            self.emit(f"mv a0, t{reg}")
            self.emit("jal _write_int")
        elif argument.data_type is DataType.FLOAT:
            self.emit(f"fmv.x.w a0, ft{_ft(reg)}")
            self.emit("jal _write_float")
        elif argument.data_type is DataType.CONST_STRING:
            self.emit(f"mv a0,t{reg}")
            self.emit("jal _write_str")
        self.registers.release(reg)