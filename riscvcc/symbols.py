"""Scoped symbol table with the predeclared types and library functions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from riscvcc.ast import DataType

HASH_TABLE_SIZE = 256


class SymbolTableError(Exception):
    """Raised on an inconsistent symbol table operation."""


class SymbolAttributeKind(Enum):
    VARIABLE = auto()
    TYPE = auto()
    FUNCTION_SIGNATURE = auto()


class TypeDescriptorKind(Enum):
    SCALAR = auto()
    ARRAY = auto()


@dataclass
class TypeDescriptor:
    """A scalar type, or an array with its element type and dimension sizes."""

    kind: TypeDescriptorKind
    data_type: DataType = DataType.NONE
    sizes: list[int] = field(default_factory=list)
    element_type: DataType = DataType.NONE

    @property
    def dimension(self) -> int:
        return len(self.sizes)


@dataclass
class Parameter:
    name: str
    type: TypeDescriptor


@dataclass
class FunctionSignature:
    return_type: DataType
    parameters: list[Parameter] = field(default_factory=list)
    parameters_count: int = 0


@dataclass
class SymbolAttribute:
    kind: SymbolAttributeKind
    type_descriptor: Optional[TypeDescriptor] = None
    signature: Optional[FunctionSignature] = None


@dataclass(eq=False)
class SymbolTableEntry:
    name: str
    attribute: SymbolAttribute
    nesting_level: int
    offset: int = 0
    shadowed: Optional[SymbolTableEntry] = field(default=None, repr=False)


def symbol_hash(name: str) -> int:
    """Bucket index of a name, computed over its bytes as signed chars."""
    index = 0
    for byte in name.encode("utf-8"):
        index = (index << 1) + (byte - 256 if byte > 127 else byte)
    return index & (HASH_TABLE_SIZE - 1)


def _type_attribute(data_type: DataType) -> SymbolAttribute:
    return SymbolAttribute(
        SymbolAttributeKind.TYPE,
        type_descriptor=TypeDescriptor(TypeDescriptorKind.SCALAR, data_type=data_type),
    )


def _function_attribute(return_type: DataType) -> SymbolAttribute:
    return SymbolAttribute(
        SymbolAttributeKind.FUNCTION_SIGNATURE,
        signature=FunctionSignature(return_type),
    )


class SymbolTable:
    """Nested scopes where an inner declaration hides an outer one."""

    def __init__(self) -> None:
        self._visible: dict[str, SymbolTableEntry] = {}
        self._scopes: list[list[SymbolTableEntry]] = [[]]
        self.enter("int", _type_attribute(DataType.INT))
        self.enter("float", _type_attribute(DataType.FLOAT))
        self.enter("void", _type_attribute(DataType.VOID))
        self.enter("read", _function_attribute(DataType.INT))
        self.enter("fread", _function_attribute(DataType.FLOAT))

    @property
    def current_level(self) -> int:
        return len(self._scopes) - 1

    def retrieve(self, name: str) -> Optional[SymbolTableEntry]:
        """The innermost visible entry for name, or None."""
        return self._visible.get(name)

    def enter(self, name: str, attribute: SymbolAttribute) -> SymbolTableEntry:
        """Declare name in the current scope, hiding any outer declaration."""
        if not self._scopes:
            raise SymbolTableError("no open scope")
        existing = self._visible.get(name)
        if existing is not None and existing.nesting_level == self.current_level:
            raise SymbolTableError(
                f"ID '{name}' is redeclared (at the same level #{self.current_level})"
            )
        entry = SymbolTableEntry(name, attribute, self.current_level, shadowed=existing)
        self._visible[name] = entry
        self._scopes[-1].append(entry)
        return entry

    def remove(self, name: str) -> None:
        """Remove name from the current scope, uncovering any outer declaration."""
        entry = self._visible.get(name)
        if entry is None:
            raise SymbolTableError(f"ID '{name}' is not in the symbol table")
        if entry.nesting_level != self.current_level:
            raise SymbolTableError(
                f"ID '{name}' is not declared in the current scope"
            )
        self._unlink(entry)
        self._scopes[-1].remove(entry)

    def declared_locally(self, name: str) -> bool:
        """Whether the visible declaration of name belongs to the current scope."""
        entry = self._visible.get(name)
        return entry is not None and entry.nesting_level == self.current_level

    def open_scope(self) -> None:
        self._scopes.append([])

    def close_scope(self) -> None:
        """Drop every declaration of the current scope."""
        if not self._scopes:
            raise SymbolTableError("no scope can be closed")
        for entry in reversed(self._scopes.pop()):
            self._unlink(entry)

    def _unlink(self, entry: SymbolTableEntry) -> None:
        if entry.shadowed is not None:
            self._visible[entry.name] = entry.shadowed
        else:
            del self._visible[entry.name]