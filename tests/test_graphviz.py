import pytest

from riscvcc.ast import (
    BinaryOperator,
    DeclKind,
    IdentifierKind,
    NodeType,
    StmtKind,
    UnaryOperator,
    binary_expr,
    const_node,
    decl_node,
    identifier_node,
    list_node,
    stmt_node,
    unary_expr,
)
from riscvcc.graphviz import label_string, render_gv, write_gv


@pytest.mark.parametrize(
    "node, expected",
    [
        (list_node(NodeType.PROGRAM), "PROGRAM_NODE"),
        (list_node(NodeType.BLOCK), "BLOCK_NODE"),
        (list_node(NodeType.NUL), "NUL_NODE"),
        (list_node(NodeType.STMT_LIST), "STMT_LIST_NODE"),
        (list_node(NodeType.VARIABLE_DECL_LIST), "VARIABLE_DECL_LIST_NODE"),
        (list_node(NodeType.PARAM_LIST), "PARAM_LIST_NODE"),
        (list_node(NodeType.NONEMPTY_ASSIGN_EXPR_LIST), "NONEMPTY_ASSIGN_EXPR_LIST_NODE"),
        (list_node(NodeType.NONEMPTY_RELOP_EXPR_LIST), "NONEMPTY_RELOP_EXPR_LIST_NODE"),
        (decl_node(DeclKind.FUNCTION), "DECLARATION_NODE FUNCTION_DECL"),
        (decl_node(DeclKind.FUNCTION_PARAMETER), "DECLARATION_NODE FUNCTION_PARAMETER_DECL"),
        (identifier_node("a", IdentifierKind.ARRAY), "IDENTIFIER_NODE a ARRAY_ID"),
        (identifier_node("b", IdentifierKind.WITH_INIT), "IDENTIFIER_NODE b WITH_INIT_ID"),
        (stmt_node(StmtKind.RETURN), "STMT_NODE RETURN_STMT"),
        (stmt_node(StmtKind.FUNCTION_CALL), "STMT_NODE FUNCTION_CALL_STMT"),
    ],
)
def test_structural_labels(node, expected):
    assert label_string(node) == expected


def test_expression_labels_use_operator_spelling():
    binary = binary_expr(BinaryOperator.LE, const_node(1), const_node(2))
    unary = unary_expr(UnaryOperator.LOGICAL_NEGATION, const_node(1))
    assert label_string(binary) == "EXPR_NODE <="
    assert label_string(unary) == "EXPR_NODE !"


def test_constant_labels():
    assert label_string(const_node(42)) == "CONST_VALUE_NODE 42"
    assert label_string(const_node(1.5)) == "CONST_VALUE_NODE 1.500000"
    assert label_string(const_node('"hi"')) == 'CONST_VALUE_NODE \\"hi\\"'


def test_string_label_leaves_constant_untouched():
    node = const_node('"abc"')
    label_string(node)
    assert node.const.value == '"abc"'


def test_render_single_node():
    text = render_gv(list_node(NodeType.PROGRAM), "g.gv")
    assert text == 'Digraph AST\n{\nlabel = "g.gv"\nnode0 [label ="PROGRAM_NODE"]\n}\n'


def test_render_child_and_sibling_edges():
    left = const_node(1)
    right = const_node(2)
    root = binary_expr(BinaryOperator.ADD, left, right)
    lines = render_gv(root, "t").splitlines()
    assert lines[3] == 'node0 [label ="EXPR_NODE +"]'
    assert lines[4] == 'node1 [label ="CONST_VALUE_NODE 1"]'
    assert lines[5] == 'node2 [label ="CONST_VALUE_NODE 2"]'
    assert "node1 -> node2 [style = dashed]" in lines
    assert "node0 -> node1 [style = bold]" in lines
    assert lines.index("node1 -> node2 [style = dashed]") < lines.index(
        "node0 -> node1 [style = bold]"
    )


def test_render_numbers_every_node_once():
    body = list_node(
        NodeType.STMT_LIST,
        [stmt_node(StmtKind.ASSIGN, [identifier_node("x"), const_node(3)])],
    )
    root = list_node(NodeType.PROGRAM, [list_node(NodeType.BLOCK, [body])])
    lines = render_gv(root, "t").splitlines()
    node_lines = [line for line in lines if "[label" in line]
    assert [line.split(" ")[0] for line in node_lines] == [f"node{i}" for i in range(6)]
    edges = [line for line in lines if "->" in line]
    assert len(edges) == 5


def test_write_gv_to_path(tmp_path):
    path = str(tmp_path / "tree.gv")
    root = list_node(NodeType.PROGRAM)
    assert write_gv(root, path) == path
    with open(path, encoding="utf-8") as handle:
        assert handle.read() == render_gv(root, path)


def test_write_gv_default_name(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    name = write_gv(list_node(NodeType.PROGRAM))
    assert name == "AST_Graph.gv"
    content = (tmp_path / "AST_Graph.gv").read_text(encoding="utf-8")
    assert 'label = "AST_Graph.gv"' in content


def test_write_gv_unwritable_location(tmp_path):
    with pytest.raises(OSError):
        write_gv(list_node(NodeType.PROGRAM), str(tmp_path / "missing" / "x.gv"))