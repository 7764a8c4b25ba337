"""Abstract syntax tree nodes and the enumerations that describe them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Iterable, Optional, Union

MAX_ARRAY_DIMENSION = 10


class DataType(Enum):
    """Type attached to a node during semantic analysis."""

    INT = auto()
    FLOAT = auto()
    VOID = auto()
    INT_PTR = auto()
    FLOAT_PTR = auto()
    CONST_STRING = auto()
    NONE = auto()
    ERROR = auto()


class IdentifierKind(Enum):
    """How an identifier node is used."""

    NORMAL = auto()
    ARRAY = auto()
    WITH_INIT = auto()


class BinaryOperator(Enum):
    """Binary operators; the value is the operator's source spelling."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    EQ = "=="
    GE = ">="
    LE = "<="
    NE = "!="
    GT = ">"
    LT = "<"
    AND = "&&"
    OR = "||"


class UnaryOperator(Enum):
    """Unary operators; the value is the operator's source spelling."""

    POSITIVE = "+"
    NEGATIVE = "-"
    LOGICAL_NEGATION = "!"


class ConstType(Enum):
    """Kind of a literal constant."""

    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()


class StmtKind(Enum):
    WHILE = auto()
    FOR = auto()
    ASSIGN = auto()
    IF = auto()
    FUNCTION_CALL = auto()
    RETURN = auto()


class ExprKind(Enum):
    BINARY = auto()
    UNARY = auto()


class DeclKind(Enum):
    VARIABLE = auto()
    TYPE = auto()
    FUNCTION = auto()
    FUNCTION_PARAMETER = auto()


class NodeType(Enum):
    PROGRAM = auto()
    DECLARATION = auto()
    IDENTIFIER = auto()
    PARAM_LIST = auto()
    NUL = auto()
    BLOCK = auto()
    VARIABLE_DECL_LIST = auto()
    STMT_LIST = auto()
    STMT = auto()
    EXPR = auto()
    CONST_VALUE = auto()
    NONEMPTY_ASSIGN_EXPR_LIST = auto()
    NONEMPTY_RELOP_EXPR_LIST = auto()


ConstValue = Union[int, float, str]


@dataclass(frozen=True)
class Const:
    """A literal value; string literals keep their surrounding quotes."""

    const_type: ConstType
    value: ConstValue


@dataclass(eq=False)
class AstNode:
    """One node of the syntax tree, with its ordered children."""

    node_type: NodeType
    data_type: DataType = DataType.NONE
    line: int = 0
    children: list[AstNode] = field(default_factory=list, repr=False)
    parent: Optional[AstNode] = field(default=None, repr=False)
    name: Optional[str] = None
    id_kind: Optional[IdentifierKind] = None
    symbol_entry: Any = field(default=None, repr=False)
    stmt_kind: Optional[StmtKind] = None
    expr_kind: Optional[ExprKind] = None
    decl_kind: Optional[DeclKind] = None
    binary_op: Optional[BinaryOperator] = None
    unary_op: Optional[UnaryOperator] = None
    const: Optional[Const] = None
    is_const_eval: bool = False
    const_eval_value: Optional[Union[int, float]] = None

    def add_child(self, *args: AstNode) -> AstNode:
        """Append children in order, linking them to this node; returns self."""
        for child in args:
            child.parent = self
            self.children.append(child)
        return self

    def right_sibling(self) -> Optional[AstNode]:
        """The next child of this node's parent, or None."""
        if self.parent is None:
            return None
        siblings = self.parent.children
        for position, node in enumerate(siblings):
            if node is self:
                return siblings[position + 1] if position + 1 < len(siblings) else None
        return None


def _node(node_type: NodeType, children: Iterable[AstNode], line: int, **fields: Any) -> AstNode:
    node = AstNode(node_type, line=line, **fields)
    node.add_child(*children)
    return node


def identifier_node(
    name: str,
    kind: IdentifierKind = IdentifierKind.NORMAL,
    children: Iterable[AstNode] = (),
    line: int = 0,
) -> AstNode:
    """An identifier; array subscripts or an initial value go in children."""
    return _node(NodeType.IDENTIFIER, children, line, name=name, id_kind=kind)


def const_node(value: ConstValue, line: int = 0) -> AstNode:
    """A literal whose constant kind follows the Python type of value."""
    if isinstance(value, bool):
        raise TypeError("boolean is not a literal constant")
    if isinstance(value, int):
        const_type = ConstType.INTEGER
    elif isinstance(value, float):
        const_type = ConstType.FLOAT
    elif isinstance(value, str):
        const_type = ConstType.STRING
    else:
        raise TypeError(f"unsupported constant {value!r}")
    return AstNode(NodeType.CONST_VALUE, line=line, const=Const(const_type, value))


def binary_expr(op: BinaryOperator, left: AstNode, right: AstNode, line: int = 0) -> AstNode:
    """A binary operation node with its two operands."""
    return _node(NodeType.EXPR, (left, right), line, expr_kind=ExprKind.BINARY, binary_op=op)


def unary_expr(op: UnaryOperator, operand: AstNode, line: int = 0) -> AstNode:
    """A unary operation node with its operand."""
    return _node(NodeType.EXPR, (operand,), line, expr_kind=ExprKind.UNARY, unary_op=op)


def stmt_node(kind: StmtKind, children: Iterable[AstNode] = (), line: int = 0) -> AstNode:
    """A statement node of the given kind."""
    return _node(NodeType.STMT, children, line, stmt_kind=kind)


def decl_node(kind: DeclKind, children: Iterable[AstNode] = (), line: int = 0) -> AstNode:
    """A declaration node; the first child names the type."""
    return _node(NodeType.DECLARATION, children, line, decl_kind=kind)


def list_node(node_type: NodeType, children: Iterable[AstNode] = (), line: int = 0) -> AstNode:
    """A structural node such as a program, block or list."""
    return _node(node_type, children, line)