"""Type checking of expressions, variable references and function calls."""

from __future__ import annotations

from typing import Optional

from riscvcc.ast import AstNode, DataType, ExprKind, IdentifierKind, NodeType, ConstType
from riscvcc.errors import Diagnostic, ErrorKind, format_message
from riscvcc.evaluate import bigger_type, evaluate_expr_value
from riscvcc.symbols import (
    Parameter,
    SymbolAttributeKind,
    SymbolTable,
    TypeDescriptorKind,
)

_POINTERS = (DataType.INT_PTR, DataType.FLOAT_PTR)


def _is_constant(node: AstNode) -> bool:
    return node.node_type is NodeType.CONST_VALUE or (
        node.node_type is NodeType.EXPR and node.is_const_eval
    )


def _pointer_to(element_type: DataType) -> DataType:
    return DataType.INT_PTR if element_type is DataType.INT else DataType.FLOAT_PTR


class ExpressionChecker:
    """Annotates expression nodes with types and collects diagnostics."""

    def __init__(self, symbols: SymbolTable) -> None:
        self.symbols = symbols
        self.diagnostics: list[Diagnostic] = []

    def report(self, node: AstNode, kind: ErrorKind, name: Optional[str] = None) -> Diagnostic:
        """Record an error found at node and return it."""
        diagnostic = Diagnostic(kind, node.line, format_message(kind, node, name))
        self.diagnostics.append(diagnostic)
        return diagnostic

    def has_errors(self) -> bool:
        return bool(self.diagnostics)

    def process_expr_related(self, node: AstNode) -> None:
        """Check any node that can stand where a value is expected."""
        if node.node_type is NodeType.EXPR:
            self.process_expr(node)
        elif node.node_type is NodeType.STMT:
            self.check_function_call(node)
        elif node.node_type is NodeType.IDENTIFIER:
            self.process_variable_rvalue(node)
        elif node.node_type is NodeType.CONST_VALUE:
            self.process_const_value(node)
        else:
            node.data_type = DataType.ERROR

    def process_expr(self, node: AstNode) -> None:
        """Check an operator node and fold it when its operands are constant."""
        if node.expr_kind is ExprKind.BINARY:
            left, right = node.children[0], node.children[1]
            self.process_expr_related(left)
            self.process_expr_related(right)
            if left.data_type in _POINTERS:
                self.report(left, ErrorKind.INCOMPATIBLE_ARRAY_DIMENSION)
                node.data_type = DataType.ERROR
            if right.data_type in _POINTERS:
                self.report(left, ErrorKind.INCOMPATIBLE_ARRAY_DIMENSION)
                node.data_type = DataType.ERROR
            if DataType.CONST_STRING in (left.data_type, right.data_type):
                self.report(node, ErrorKind.STRING_OPERATION)
                node.data_type = DataType.ERROR
            if DataType.ERROR in (left.data_type, right.data_type):
                node.data_type = DataType.ERROR
            if node.data_type is not DataType.ERROR:
                node.data_type = bigger_type(left.data_type, right.data_type)
            if (
                node.data_type is not DataType.ERROR
                and _is_constant(left)
                and _is_constant(right)
            ):
                evaluate_expr_value(node)
                node.is_const_eval = True
            return

        operand = node.children[0]
        self.process_expr_related(operand)
        if operand.data_type in _POINTERS:
            self.report(operand, ErrorKind.INCOMPATIBLE_ARRAY_DIMENSION)
            node.data_type = DataType.ERROR
        elif operand.data_type is DataType.CONST_STRING:
            self.report(node, ErrorKind.STRING_OPERATION)
            node.data_type = DataType.ERROR
        elif operand.data_type is DataType.ERROR:
            node.data_type = DataType.ERROR
        else:
            node.data_type = operand.data_type
        if node.data_type is not DataType.ERROR and _is_constant(operand):
            evaluate_expr_value(node)
            node.is_const_eval = True

    def _check_subscripts(self, node: AstNode) -> int:
        for subscript in node.children:
            self.process_expr_related(subscript)
            if subscript.data_type is DataType.ERROR:
                node.data_type = DataType.ERROR
            elif subscript.data_type is DataType.FLOAT:
                self.report(node, ErrorKind.ARRAY_SUBSCRIPT_NOT_INT)
                node.data_type = DataType.ERROR
        return len(node.children)

    def process_variable_lvalue(self, node: AstNode) -> None:
        """Check an identifier on the left of an assignment."""
        entry = self.symbols.retrieve(node.name)
        if entry is None:
            self.report(node, ErrorKind.SYMBOL_UNDECLARED)
            node.data_type = DataType.ERROR
            return
        node.symbol_entry = entry
        if entry.attribute.kind is SymbolAttributeKind.TYPE:
            self.report(node, ErrorKind.IS_TYPE_NOT_VARIABLE)
            node.data_type = DataType.ERROR
            return
        if entry.attribute.kind is SymbolAttributeKind.FUNCTION_SIGNATURE:
            self.report(node, ErrorKind.IS_FUNCTION_NOT_VARIABLE)
            node.data_type = DataType.ERROR
            return

        descriptor = entry.attribute.type_descriptor
        if node.id_kind is IdentifierKind.NORMAL:
            if descriptor.kind is TypeDescriptorKind.ARRAY:
                self.report(node, ErrorKind.INCOMPATIBLE_ARRAY_DIMENSION)
                node.data_type = DataType.ERROR
            else:
                node.data_type = descriptor.data_type
        elif node.id_kind is IdentifierKind.ARRAY:
            dimension = self._check_subscripts(node)
            if descriptor.kind is TypeDescriptorKind.SCALAR:
                self.report(node, ErrorKind.NOT_ARRAY)
                node.data_type = DataType.ERROR
            elif dimension == descriptor.dimension:
                node.data_type = descriptor.element_type
            else:
                self.report(node, ErrorKind.INCOMPATIBLE_ARRAY_DIMENSION)
                node.data_type = DataType.ERROR

    def process_variable_rvalue(self, node: AstNode) -> None:
        """Check an identifier whose value is read."""
        entry = self.symbols.retrieve(node.name)
        node.symbol_entry = entry
        if entry is None:
            self.report(node, ErrorKind.SYMBOL_UNDECLARED)
            node.data_type = DataType.ERROR
            return
        if entry.attribute.kind is SymbolAttributeKind.TYPE:
            self.report(node, ErrorKind.IS_TYPE_NOT_VARIABLE)
            node.data_type = DataType.ERROR
            return
        if entry.attribute.kind is SymbolAttributeKind.FUNCTION_SIGNATURE:
            self.report(node, ErrorKind.IS_FUNCTION_NOT_VARIABLE)
            node.data_type = DataType.ERROR
            return

        descriptor = entry.attribute.type_descriptor
        if node.id_kind is IdentifierKind.NORMAL:
            if descriptor.kind is TypeDescriptorKind.ARRAY:
                node.data_type = _pointer_to(descriptor.element_type)
            else:
                node.data_type = descriptor.data_type
        elif node.id_kind is IdentifierKind.ARRAY:
            if descriptor.kind is TypeDescriptorKind.SCALAR:
                self.report(node, ErrorKind.NOT_ARRAY)
                node.data_type = DataType.ERROR
                return
            dimension = self._check_subscripts(node)
            if node.data_type is DataType.ERROR:
                return
            if dimension == descriptor.dimension:
                node.data_type = descriptor.element_type
            elif dimension > descriptor.dimension:
                self.report(node, ErrorKind.INCOMPATIBLE_ARRAY_DIMENSION)
                node.data_type = DataType.ERROR
            else:
                node.data_type = _pointer_to(descriptor.element_type)

    def process_const_value(self, node: AstNode) -> None:
        """Give a literal its type and constant value."""
        const = node.const
        if const is None:
            node.data_type = DataType.ERROR
        elif const.const_type is ConstType.INTEGER:
            node.data_type = DataType.INT
            node.const_eval_value = int(const.value)
        elif const.const_type is ConstType.FLOAT:
            node.data_type = DataType.FLOAT
            node.const_eval_value = float(const.value)
        else:
            node.data_type = DataType.CONST_STRING

    def _process_arguments(self, list_node: Optional[AstNode]) -> list[AstNode]:
        if list_node is None:
            return []
        if list_node.node_type is NodeType.NONEMPTY_RELOP_EXPR_LIST:
            for argument in list_node.children:
                self.process_expr_related(argument)
                if argument.data_type is DataType.ERROR:
                    list_node.data_type = DataType.ERROR
        elif list_node.node_type is not NodeType.NUL:
            list_node.data_type = DataType.ERROR
        return list(list_node.children)

    def check_function_call(self, node: AstNode) -> None:
        """Check a call against the callee's signature."""
        function_id = node.children[0]
        if function_id.name == "write":
            self.check_write_function(node)
            return

        entry = self.symbols.retrieve(function_id.name)
        function_id.symbol_entry = entry
        if entry is None:
            self.report(function_id, ErrorKind.SYMBOL_UNDECLARED)
            function_id.data_type = DataType.ERROR
            node.data_type = DataType.ERROR
            return
        if entry.attribute.kind is not SymbolAttributeKind.FUNCTION_SIGNATURE:
            self.report(function_id, ErrorKind.NOT_FUNCTION_NAME)
            function_id.data_type = DataType.ERROR
            node.data_type = DataType.ERROR
            return

        actuals = self._process_arguments(function_id.right_sibling())
        signature = entry.attribute.signature
        formals = signature.parameters

        passing_error = False
        for formal, actual in zip(formals, actuals):
            if actual.data_type is not DataType.ERROR:
                self.check_parameter_passing(formal, actual)
            if actual.data_type is DataType.ERROR:
                passing_error = True

        if passing_error:
            node.data_type = DataType.ERROR
        if len(actuals) > len(formals):
            self.report(function_id, ErrorKind.TOO_MANY_ARGUMENTS)
            node.data_type = DataType.ERROR
        elif len(actuals) < len(formals):
            self.report(function_id, ErrorKind.TOO_FEW_ARGUMENTS)
            node.data_type = DataType.ERROR
        else:
            node.data_type = signature.return_type

    def check_write_function(self, node: AstNode) -> None:
        """Check a call of the built-in write, which takes one printable value."""
        function_id = node.children[0]
        actuals = self._process_arguments(function_id.right_sibling())
        for actual in actuals:
            if actual.data_type is DataType.ERROR:
                node.data_type = DataType.ERROR
            elif actual.data_type not in (DataType.INT, DataType.FLOAT, DataType.CONST_STRING):
                self.report(actual, ErrorKind.PARAMETER_TYPE_UNMATCH)
                node.data_type = DataType.ERROR

        if len(actuals) > 1:
            self.report(function_id, ErrorKind.TOO_MANY_ARGUMENTS)
            node.data_type = DataType.ERROR
        elif len(actuals) < 1:
            self.report(function_id, ErrorKind.TOO_FEW_ARGUMENTS)
            node.data_type = DataType.ERROR
        else:
            node.data_type = DataType.VOID

    def check_parameter_passing(self, formal: Parameter, actual: AstNode) -> None:
        """Check one argument against its formal parameter."""
        actual_is_pointer = actual.data_type in _POINTERS
        if formal.type.kind is TypeDescriptorKind.SCALAR and actual_is_pointer:
            self.report(actual, ErrorKind.PASS_ARRAY_TO_SCALAR, formal.name)
            actual.data_type = DataType.ERROR
        elif formal.type.kind is TypeDescriptorKind.ARRAY and not actual_is_pointer:
            self.report(actual, ErrorKind.PASS_SCALAR_TO_ARRAY, formal.name)
            actual.data_type = DataType.ERROR
        elif actual.data_type is DataType.CONST_STRING:
            self.report(actual, ErrorKind.PARAMETER_TYPE_UNMATCH)
            actual.data_type = DataType.ERROR