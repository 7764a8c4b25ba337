"""Rendering a syntax tree as a Graphviz digraph."""

from __future__ import annotations

from typing import Optional

from riscvcc.ast import AstNode, ConstType, DeclKind, ExprKind, IdentifierKind, NodeType, StmtKind

DEFAULT_FILE_NAME = "AST_Graph.gv"

_DECL_LABELS = {
    DeclKind.VARIABLE: "VARIABLE_DECL",
    DeclKind.TYPE: "TYPE_DECL",
    DeclKind.FUNCTION: "FUNCTION_DECL",
    DeclKind.FUNCTION_PARAMETER: "FUNCTION_PARAMETER_DECL",
}

_ID_LABELS = {
    IdentifierKind.NORMAL: "NORMAL_ID",
    IdentifierKind.ARRAY: "ARRAY_ID",
    IdentifierKind.WITH_INIT: "WITH_INIT_ID",
}

_STMT_LABELS = {
    StmtKind.WHILE: "WHILE_STMT",
    StmtKind.FOR: "FOR_STMT",
    StmtKind.ASSIGN: "ASSIGN_STMT",
    StmtKind.IF: "IF_STMT",
    StmtKind.FUNCTION_CALL: "FUNCTION_CALL_STMT",
    StmtKind.RETURN: "RETURN_STMT",
}


def _const_label(node: AstNode) -> str:
    const = node.const
    if const is None:
        return ""
    if const.const_type is ConstType.INTEGER:
        return f"{const.value:d}"
    if const.const_type is ConstType.FLOAT:
        return f"{const.value:f}"
    return '\\"' + str(const.value)[1:-1] + '\\"'


def label_string(node: AstNode) -> str:
    """The text shown inside a node's box."""
    node_type = node.node_type
    if node_type is NodeType.DECLARATION:
        return "DECLARATION_NODE " + _DECL_LABELS.get(node.decl_kind, "")
    if node_type is NodeType.IDENTIFIER:
        return f"IDENTIFIER_NODE {node.name} " + _ID_LABELS.get(node.id_kind, "")
    if node_type is NodeType.STMT:
        return "STMT_NODE " + _STMT_LABELS.get(node.stmt_kind, "")
    if node_type is NodeType.EXPR:
        if node.expr_kind is ExprKind.BINARY and node.binary_op is not None:
            return "EXPR_NODE " + node.binary_op.value
        if node.expr_kind is ExprKind.UNARY and node.unary_op is not None:
            return "EXPR_NODE " + node.unary_op.value
        return "EXPR_NODE "
    if node_type is NodeType.CONST_VALUE:
        return "CONST_VALUE_NODE " + _const_label(node)
    return f"{node_type.name}_NODE"


def _emit(lines: list[str], siblings: list[AstNode], index: int, count: int) -> int:
    node = siblings[index]
    current = count
    lines.append(f'node{current} [label ="{label_string(node)}"]')
    count += 1
    after_children = count
    if node.children:
        after_children = _emit(lines, node.children, 0, count)
        lines.append(f"node{current} -> node{count} [style = bold]")
    after_siblings = after_children
    if index + 1 < len(siblings):
        after_siblings = _emit(lines, siblings, index + 1, after_children)
        lines.append(f"node{current} -> node{after_children} [style = dashed]")
    return after_siblings


def render_gv(root: Optional[AstNode], label: str = DEFAULT_FILE_NAME) -> str:
    """The whole digraph text for the tree under root."""
    lines = ["Digraph AST", "{", f'label = "{label}"']
    if root is not None:
        _emit(lines, [root], 0, 0)
    lines.append("}")
    return "\n".join(lines) + "\n"


def write_gv(root: Optional[AstNode], file_name: Optional[str] = None) -> str:
    """Write the digraph to file_name and return the name used."""
    if file_name is None:
        file_name = DEFAULT_FILE_NAME
    with open(file_name, "w", encoding="utf-8") as handle:
        handle.write(render_gv(root, file_name))
    return file_name