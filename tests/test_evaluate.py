import math

import pytest

from riscvcc.ast import (
    BinaryOperator,
    DataType,
    UnaryOperator,
    binary_expr,
    const_node,
    unary_expr,
)
from riscvcc.evaluate import bigger_type, evaluate_expr_value, operand_value


def _int(value):
    node = const_node(value)
    node.data_type = DataType.INT
    return node


def _float(value):
    node = const_node(value)
    node.data_type = DataType.FLOAT
    return node


def _folded(op, left, right):
    node = binary_expr(op, left, right)
    evaluate_expr_value(node)
    node.is_const_eval = True
    return node


@pytest.mark.parametrize(
    "first, second, expected",
    [
        (DataType.INT, DataType.INT, DataType.INT),
        (DataType.INT, DataType.FLOAT, DataType.FLOAT),
        (DataType.FLOAT, DataType.INT, DataType.FLOAT),
        (DataType.FLOAT, DataType.FLOAT, DataType.FLOAT),
    ],
)
def test_bigger_type(first, second, expected):
    assert bigger_type(first, second) is expected


def test_add_then_subtract_round_trip():
    total = _folded(BinaryOperator.ADD, _int(1234), _int(98765))
    back = _folded(BinaryOperator.SUB, total, _int(98765))
    assert back.data_type is DataType.INT
    assert back.const_eval_value == 1234


def test_multiplication_commutes():
    one = _folded(BinaryOperator.MUL, _int(17), _int(-29))
    two = _folded(BinaryOperator.MUL, _int(-29), _int(17))
    assert one.const_eval_value == two.const_eval_value


def test_integer_division_truncates_toward_zero():
    node = _folded(BinaryOperator.DIV, _int(-7), _int(2))
    assert node.const_eval_value == -3


def test_integer_addition_wraps_at_32_bits():
    node = _folded(BinaryOperator.ADD, _int(2147483647), _int(1))
    assert node.const_eval_value == -2147483648


def test_integer_division_by_zero_raises():
    with pytest.raises(ZeroDivisionError):
        _folded(BinaryOperator.DIV, _int(1), _int(0))


def test_mixed_operands_give_float():
    node = _folded(BinaryOperator.ADD, _int(3), _float(0.5))
    assert node.data_type is DataType.FLOAT
    assert node.const_eval_value == 3.5


def test_float_division_by_zero_is_infinite():
    node = _folded(BinaryOperator.DIV, _float(1.0), _float(0.0))
    assert math.isinf(node.const_eval_value)
    assert node.const_eval_value > 0


@pytest.mark.parametrize(
    "op, left, right, expected",
    [
        (BinaryOperator.LT, 1, 2, True),
        (BinaryOperator.GT, 1, 2, False),
        (BinaryOperator.GE, 2, 2, True),
        (BinaryOperator.LE, 3, 2, False),
        (BinaryOperator.EQ, 4, 4, True),
        (BinaryOperator.NE, 4, 4, False),
        (BinaryOperator.AND, 1, 0, False),
        (BinaryOperator.OR, 1, 0, True),
    ],
)
def test_int_relations(op, left, right, expected):
    node = _folded(op, _int(left), _int(right))
    assert node.data_type is DataType.INT
    assert bool(node.const_eval_value) is expected


@pytest.mark.parametrize(
    "op, left, right, expected",
    [
        (BinaryOperator.LT, 1.0, 2.0, True),
        (BinaryOperator.GT, 1.0, 2.0, False),
        (BinaryOperator.NE, 1.0, 2.0, True),
        (BinaryOperator.EQ, 1.5, 1.5, True),
    ],
)
def test_float_relations(op, left, right, expected):
    node = _folded(op, _float(left), _float(right))
    assert node.data_type is DataType.FLOAT
    assert bool(node.const_eval_value) is expected


def test_double_negation_restores_value():
    inner = unary_expr(UnaryOperator.NEGATIVE, _int(42))
    evaluate_expr_value(inner)
    outer = unary_expr(UnaryOperator.NEGATIVE, inner)
    assert evaluate_expr_value(outer) == 42
    assert outer.data_type is DataType.INT


def test_logical_negation():
    of_zero = unary_expr(UnaryOperator.LOGICAL_NEGATION, _int(0))
    of_five = unary_expr(UnaryOperator.LOGICAL_NEGATION, _int(5))
    assert evaluate_expr_value(of_zero)
    assert not evaluate_expr_value(of_five)


def test_operand_value_widens_int():
    value = operand_value(_int(7), True)
    assert isinstance(value, float)
    assert value == 7


def test_operand_value_rounds_to_single_precision():
    value = operand_value(_float(0.1), True)
    assert abs(value - 0.1) < 1e-7
    assert value != 0.1


def test_operand_value_without_constant_raises():
    node = binary_expr(BinaryOperator.ADD, _int(1), _int(2))
    node.data_type = DataType.INT
    with pytest.raises(ValueError):
        operand_value(node)