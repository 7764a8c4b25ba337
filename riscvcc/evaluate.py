"""Compile-time evaluation of constant expressions."""

from __future__ import annotations

import math
import struct
from typing import Callable, Union

from riscvcc.ast import AstNode, BinaryOperator, DataType, ExprKind, NodeType, UnaryOperator

Number = Union[int, float]


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _int_div(left: int, right: int) -> int:
    if right == 0:
        raise ZeroDivisionError("integer division by zero in constant expression")
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return _to_int32(quotient)


def _float_div(left: float, right: float) -> float:
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return _to_float32(left / right)


_INT_BINARY: dict[BinaryOperator, Callable[[int, int], int]] = {
    BinaryOperator.ADD: lambda a, b: _to_int32(a + b),
    BinaryOperator.SUB: lambda a, b: _to_int32(a - b),
    BinaryOperator.MUL: lambda a, b: _to_int32(a * b),
    BinaryOperator.DIV: _int_div,
    BinaryOperator.EQ: lambda a, b: int(a == b),
    BinaryOperator.GE: lambda a, b: int(a >= b),
    BinaryOperator.LE: lambda a, b: int(a <= b),
    BinaryOperator.NE: lambda a, b: int(a != b),
    BinaryOperator.GT: lambda a, b: int(a > b),
    BinaryOperator.LT: lambda a, b: int(a < b),
    BinaryOperator.AND: lambda a, b: int(bool(a) and bool(b)),
    BinaryOperator.OR: lambda a, b: int(bool(a) or bool(b)),
}

_FLOAT_BINARY: dict[BinaryOperator, Callable[[float, float], float]] = {
    BinaryOperator.ADD: lambda a, b: _to_float32(a + b),
    BinaryOperator.SUB: lambda a, b: _to_float32(a - b),
    BinaryOperator.MUL: lambda a, b: _to_float32(a * b),
    BinaryOperator.DIV: _float_div,
    BinaryOperator.EQ: lambda a, b: float(a == b),
    BinaryOperator.GE: lambda a, b: float(a >= b),
    BinaryOperator.LE: lambda a, b: float(a <= b),
    BinaryOperator.NE: lambda a, b: float(a != b),
    BinaryOperator.GT: lambda a, b: float(a > b),
    BinaryOperator.LT: lambda a, b: float(a < b),
    BinaryOperator.AND: lambda a, b: float(bool(a) and bool(b)),
    BinaryOperator.OR: lambda a, b: float(bool(a) or bool(b)),
}

_INT_UNARY: dict[UnaryOperator, Callable[[int], int]] = {
    UnaryOperator.POSITIVE: lambda a: a,
    UnaryOperator.NEGATIVE: lambda a: _to_int32(-a),
    UnaryOperator.LOGICAL_NEGATION: lambda a: int(not a),
}

_FLOAT_UNARY: dict[UnaryOperator, Callable[[float], float]] = {
    UnaryOperator.POSITIVE: lambda a: a,
    UnaryOperator.NEGATIVE: lambda a: -a,
    UnaryOperator.LOGICAL_NEGATION: lambda a: float(not a),
}


def bigger_type(first: DataType, second: DataType) -> DataType:
    """FLOAT if either side is FLOAT, otherwise INT."""
    if first is DataType.FLOAT or second is DataType.FLOAT:
        return DataType.FLOAT
    return DataType.INT


def operand_value(node: AstNode, as_float: bool = False) -> Number:
    """The constant value of a literal or folded expression node.

    Integer operands are widened to single precision when as_float is set.
    """
    if node.node_type is NodeType.CONST_VALUE:
        raw = node.const.value if node.const is not None else None
    else:
        raw = node.const_eval_value
    if raw is None or isinstance(raw, str):
        raise ValueError("node has no numeric constant value")
    if node.data_type is DataType.INT:
        return _to_float32(float(raw)) if as_float else int(raw)
    return _to_float32(float(raw))


def evaluate_expr_value(node: AstNode) -> Number:
    """Fold an expression whose operands are constants; stores and returns the value."""
    if node.expr_kind is ExprKind.BINARY:
        left, right = node.children[0], node.children[1]
        if node.binary_op is None:
            raise ValueError("binary expression without an operator")
        if left.data_type is DataType.INT and right.data_type is DataType.INT:
            node.data_type = DataType.INT
            value: Number = _INT_BINARY[node.binary_op](
                operand_value(left), operand_value(right)
            )
        else:
            node.data_type = DataType.FLOAT
            value = _FLOAT_BINARY[node.binary_op](
                operand_value(left, True), operand_value(right, True)
            )
    else:
        operand = node.children[0]
        if node.unary_op is None:
            raise ValueError("unary expression without an operator")
        if operand.data_type is DataType.INT:
            node.data_type = DataType.INT
            value = _INT_UNARY[node.unary_op](operand_value(operand))
        else:
            node.data_type = DataType.FLOAT
            value = _FLOAT_UNARY[node.unary_op](operand_value(operand, True))
    node.const_eval_value = value
    return value