"""Semantic error kinds and the messages reported for them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from riscvcc.ast import MAX_ARRAY_DIMENSION, AstNode


class ErrorKind(Enum):
    """Every semantic error the analyzer can report."""

    SYMBOL_IS_NOT_TYPE = auto()
    SYMBOL_REDECLARE = auto()
    SYMBOL_UNDECLARED = auto()
    NOT_FUNCTION_NAME = auto()
    TRY_TO_INIT_ARRAY = auto()
    EXCESSIVE_ARRAY_DIM_DECLARATION = auto()
    RETURN_ARRAY = auto()
    VOID_VARIABLE = auto()
    TYPEDEF_VOID_ARRAY = auto()
    PARAMETER_TYPE_UNMATCH = auto()
    TOO_FEW_ARGUMENTS = auto()
    TOO_MANY_ARGUMENTS = auto()
    RETURN_TYPE_UNMATCH = auto()
    INCOMPATIBLE_ARRAY_DIMENSION = auto()
    NOT_ASSIGNABLE = auto()
    NOT_ARRAY = auto()
    IS_TYPE_NOT_VARIABLE = auto()
    IS_FUNCTION_NOT_VARIABLE = auto()
    STRING_OPERATION = auto()
    ARRAY_SIZE_NOT_INT = auto()
    ARRAY_SIZE_NEGATIVE = auto()
    ARRAY_SUBSCRIPT_NOT_INT = auto()
    PASS_ARRAY_TO_SCALAR = auto()
    PASS_SCALAR_TO_ARRAY = auto()


_NAMED_TEMPLATES = {
    ErrorKind.SYMBOL_IS_NOT_TYPE: "ID '{0}' is not a type name.",
    ErrorKind.SYMBOL_REDECLARE: "ID '{0}' redeclared.",
    ErrorKind.SYMBOL_UNDECLARED: "ID '{0}' undeclared.",
    ErrorKind.NOT_FUNCTION_NAME: "ID '{0}' is not a function.",
    ErrorKind.TRY_TO_INIT_ARRAY: "Cannot initialize array '{0}'.",
    ErrorKind.EXCESSIVE_ARRAY_DIM_DECLARATION: (
        "ID '{0}' array dimension cannot be greater than " + str(MAX_ARRAY_DIMENSION)
    ),
    ErrorKind.VOID_VARIABLE: "Type '{0}' cannot be a variable's type.",
    ErrorKind.TYPEDEF_VOID_ARRAY: "Declaration of '{0}' as array of voids.",
    ErrorKind.TOO_FEW_ARGUMENTS: "too few arguments to function '{0}'.",
    ErrorKind.TOO_MANY_ARGUMENTS: "too many arguments to function '{0}'.",
    ErrorKind.NOT_ASSIGNABLE: "ID '{0}' is not assignable.",
    ErrorKind.NOT_ARRAY: "ID '{0}' is not array.",
    ErrorKind.IS_TYPE_NOT_VARIABLE: "ID '{0}' is a type, not a variable's name.",
    ErrorKind.IS_FUNCTION_NOT_VARIABLE: "ID '{0}' is a function, not a variable's name.",
    ErrorKind.ARRAY_SIZE_NOT_INT: "Size of array '{0}' has non-integer type.",
    ErrorKind.ARRAY_SIZE_NEGATIVE: "Size of array '{0}' is negative.",
}

_FIXED_MESSAGES = {
    ErrorKind.PARAMETER_TYPE_UNMATCH: "Parameter is incompatible with parameter type.",
    ErrorKind.RETURN_TYPE_UNMATCH: "Incompatible return type.",
    ErrorKind.INCOMPATIBLE_ARRAY_DIMENSION: "Incompatible array dimensions.",
    ErrorKind.STRING_OPERATION: "String operation is unsupported.",
    ErrorKind.ARRAY_SUBSCRIPT_NOT_INT: "Array subscript is not an integer.",
}

_PARAMETER_TEMPLATES = {
    ErrorKind.PASS_ARRAY_TO_SCALAR: "Array '{0}' passed to scalar parameter '{1}'.",
    ErrorKind.PASS_SCALAR_TO_ARRAY: "Scalar '{0}' passed to array parameter '{1}'.",
}


def format_message(kind: ErrorKind, node: AstNode, name: Optional[str] = None) -> str:
    """The message text for an error found at node.

    The parameter-passing errors need the formal parameter's name in name.
    """
    if kind in _FIXED_MESSAGES:
        return _FIXED_MESSAGES[kind]
    if kind in _PARAMETER_TEMPLATES:
        if name is None:
            raise ValueError(f"{kind.name} needs the parameter name")
        return _PARAMETER_TEMPLATES[kind].format(node.name, name)
    if kind is ErrorKind.RETURN_ARRAY:
        function_id = node.right_sibling()
        function_name = function_id.name if function_id is not None else None
        return f"Function '{function_name}' cannot return array."
    return _NAMED_TEMPLATES[kind].format(node.name)


@dataclass(frozen=True)
class Diagnostic:
    """One reported semantic error with its source line."""

    kind: ErrorKind
    line: int
    message: str

    def __str__(self) -> str:
        return f"Error found in line {self.line}\n{self.message}"