"""Semantic analysis of a whole program: declarations and statements."""

from __future__ import annotations

from typing import Optional

from riscvcc.ast import AstNode, DataType, DeclKind, NodeType, StmtKind
from riscvcc.checker_decl import DeclarationChecker
from riscvcc.errors import Diagnostic, ErrorKind
from riscvcc.evaluate import bigger_type
from riscvcc.symbols import SymbolTable

_POINTERS = (DataType.INT_PTR, DataType.FLOAT_PTR)
_NUMERIC = (DataType.INT, DataType.FLOAT)


class SemanticAnalyzer(DeclarationChecker):
    """Walks a program tree, annotating types and collecting diagnostics."""

    def analyze(self, root: AstNode) -> list[Diagnostic]:
        """Check the program under root and return the errors found."""
        self.process_program(root)
        return list(self.diagnostics)

    def process_program(self, node: AstNode) -> None:
        for declaration in node.children:
            if declaration.node_type is NodeType.VARIABLE_DECL_LIST:
                self.process_general(declaration)
            else:
                self.process_declaration(declaration)
            if declaration.data_type is DataType.ERROR:
                node.data_type = DataType.ERROR

    def process_block(self, node: AstNode) -> None:
        """Check a block in its own scope."""
        self.symbols.open_scope()
        for child in node.children:
            self.process_general(child)
        self.symbols.close_scope()

    def process_stmt(self, node: AstNode) -> None:
        if node.node_type is NodeType.NUL:
            return
        if node.node_type is NodeType.BLOCK:
            self.process_block(node)
            return
        kind = node.stmt_kind
        if kind is StmtKind.WHILE:
            self.check_while(node)
        elif kind is StmtKind.FOR:
            self.check_for(node)
        elif kind is StmtKind.ASSIGN:
            self.check_assignment(node)
        elif kind is StmtKind.IF:
            self.check_if(node)
        elif kind is StmtKind.FUNCTION_CALL:
            self.check_function_call(node)
        elif kind is StmtKind.RETURN:
            self.check_return(node)
        else:
            node.data_type = DataType.ERROR

    def process_general(self, node: AstNode) -> None:
        """Check a statement list, an assignment list, or what the base class handles."""
        if node.node_type is NodeType.STMT_LIST:
            for child in node.children:
                self.process_stmt(child)
                if child.data_type is DataType.ERROR:
                    node.data_type = DataType.ERROR
        elif node.node_type is NodeType.NONEMPTY_ASSIGN_EXPR_LIST:
            for child in node.children:
                self.check_assign_or_expr(child)
                if child.data_type is DataType.ERROR:
                    node.data_type = DataType.ERROR
        else:
            super().process_general(node)

    def check_assign_or_expr(self, node: AstNode) -> None:
        if node.node_type is NodeType.STMT:
            if node.stmt_kind is StmtKind.ASSIGN:
                self.check_assignment(node)
            elif node.stmt_kind is StmtKind.FUNCTION_CALL:
                self.check_function_call(node)
        else:
            self.process_expr_related(node)

    def check_while(self, node: AstNode) -> None:
        condition, body = node.children[0], node.children[1]
        self.check_assign_or_expr(condition)
        self.process_stmt(body)

    def check_for(self, node: AstNode) -> None:
        init, condition, step, body = node.children[:4]
        self.process_general(init)
        self.process_general(condition)
        self.process_general(step)
        self.process_stmt(body)

    def check_assignment(self, node: AstNode) -> None:
        left, right = node.children[0], node.children[1]
        self.process_variable_lvalue(left)
        self.process_expr_related(right)
        if DataType.ERROR in (left.data_type, right.data_type):
            node.data_type = DataType.ERROR
        if right.data_type in _POINTERS:
            self.report(right, ErrorKind.INCOMPATIBLE_ARRAY_DIMENSION)
            node.data_type = DataType.ERROR
        elif right.data_type is DataType.CONST_STRING:
            self.report(right, ErrorKind.STRING_OPERATION)
            node.data_type = DataType.ERROR
        else:
            node.data_type = bigger_type(left.data_type, right.data_type)

    def check_if(self, node: AstNode) -> None:
        condition, body, else_part = node.children[0], node.children[1], node.children[2]
        self.check_assign_or_expr(condition)
        self.process_stmt(body)
        self.process_stmt(else_part)

    def _enclosing_return_type(self, node: AstNode) -> DataType:
        parent: Optional[AstNode] = node.parent
        while parent is not None:
            if parent.node_type is NodeType.DECLARATION:
                if parent.decl_kind is DeclKind.FUNCTION:
                    return parent.children[0].data_type
                break
            parent = parent.parent
        return DataType.NONE

    def check_return(self, node: AstNode) -> None:
        """Check a return value against the enclosing function's return type."""
        return_type = self._enclosing_return_type(node)
        value = node.children[0]
        error = False
        if value.node_type is NodeType.NUL:
            error = return_type is not DataType.VOID
        else:
            self.process_expr_related(value)
            if return_type is not value.data_type:
                error = not (return_type in _NUMERIC and value.data_type in _NUMERIC)
        if error:
            self.report(node, ErrorKind.RETURN_TYPE_UNMATCH)
            node.data_type = DataType.ERROR
        else:
            node.data_type = return_type


def semantic_analysis(root: AstNode, symbols: Optional[SymbolTable] = None) -> list[Diagnostic]:
    """Analyze the program under root; returns the errors found."""
    return SemanticAnalyzer(symbols if symbols is not None else SymbolTable()).analyze(root)