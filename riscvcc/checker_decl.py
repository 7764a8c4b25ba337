"""Type checking of declarations: variables, type names, arrays and functions."""

from __future__ import annotations

from riscvcc.ast import (
    MAX_ARRAY_DIMENSION,
    AstNode,
    DataType,
    DeclKind,
    IdentifierKind,
    NodeType,
)
from riscvcc.checker_expr import ExpressionChecker
from riscvcc.errors import ErrorKind
from riscvcc.symbols import (
    FunctionSignature,
    Parameter,
    SymbolAttribute,
    SymbolAttributeKind,
    TypeDescriptor,
    TypeDescriptorKind,
)


def _is_void_scalar(descriptor: TypeDescriptor) -> bool:
    return (
        descriptor.kind is TypeDescriptorKind.SCALAR
        and descriptor.data_type is DataType.VOID
    )


def _is_constant(node: AstNode) -> bool:
    return node.node_type is NodeType.CONST_VALUE or (
        node.node_type is NodeType.EXPR and node.is_const_eval
    )


class DeclarationChecker(ExpressionChecker):
    """Enters declared names into the symbol table and checks their types."""

    def process_declaration(self, node: AstNode) -> None:
        """Check one declaration node of any kind."""
        type_node = node.children[0]
        self.process_type_node(type_node)
        if type_node.data_type is DataType.ERROR:
            node.data_type = DataType.ERROR
            return
        kind = node.decl_kind
        if kind is DeclKind.VARIABLE:
            self.declare_id_list(node, SymbolAttributeKind.VARIABLE, False)
        elif kind is DeclKind.TYPE:
            self.declare_id_list(node, SymbolAttributeKind.TYPE, False)
        elif kind is DeclKind.FUNCTION:
            self.declare_function(node)
        elif kind is DeclKind.FUNCTION_PARAMETER:
            self.declare_id_list(node, SymbolAttributeKind.VARIABLE, True)

    def process_type_node(self, node: AstNode) -> None:
        """Resolve an identifier used as a type name."""
        entry = self.symbols.retrieve(node.name)
        if entry is None or entry.attribute.kind is not SymbolAttributeKind.TYPE:
            self.report(node, ErrorKind.SYMBOL_IS_NOT_TYPE)
            node.data_type = DataType.ERROR
            return
        node.symbol_entry = entry
        descriptor = entry.attribute.type_descriptor
        if descriptor.kind is TypeDescriptorKind.SCALAR:
            node.data_type = descriptor.data_type
        else:
            node.data_type = descriptor.element_type

    def declare_id_list(
        self,
        node: AstNode,
        attribute_kind: SymbolAttributeKind,
        ignore_first_dim: bool,
    ) -> None:
        """Declare every identifier after the type node as a variable or type name."""
        type_node = node.children[0]
        type_descriptor: TypeDescriptor = type_node.symbol_entry.attribute.type_descriptor
        if attribute_kind is SymbolAttributeKind.VARIABLE and _is_void_scalar(type_descriptor):
            self.report(type_node, ErrorKind.VOID_VARIABLE)
            type_node.data_type = DataType.ERROR
            node.data_type = DataType.ERROR
            return

        for identifier in node.children[1:]:
            if self.symbols.declared_locally(identifier.name):
                self.report(identifier, ErrorKind.SYMBOL_REDECLARE)
                identifier.data_type = DataType.ERROR
                node.data_type = DataType.ERROR
                continue

            attribute = SymbolAttribute(attribute_kind)
            if identifier.id_kind is IdentifierKind.NORMAL:
                attribute.type_descriptor = type_descriptor
            elif identifier.id_kind is IdentifierKind.ARRAY:
                self._declare_array(node, identifier, attribute, type_descriptor, ignore_first_dim)
            elif identifier.id_kind is IdentifierKind.WITH_INIT:
                if type_descriptor.kind is TypeDescriptorKind.ARRAY:
                    self.report(identifier, ErrorKind.TRY_TO_INIT_ARRAY)
                    identifier.data_type = DataType.ERROR
                else:
                    attribute.type_descriptor = type_descriptor
            else:
                identifier.data_type = DataType.ERROR

            if identifier.data_type is DataType.ERROR:
                node.data_type = DataType.ERROR
            else:
                identifier.symbol_entry = self.symbols.enter(identifier.name, attribute)

    def _declare_array(
        self,
        node: AstNode,
        identifier: AstNode,
        attribute: SymbolAttribute,
        type_descriptor: TypeDescriptor,
        ignore_first_dim: bool,
    ) -> None:
        if attribute.kind is SymbolAttributeKind.TYPE and _is_void_scalar(type_descriptor):
            self.report(identifier, ErrorKind.TYPEDEF_VOID_ARRAY)
            identifier.data_type = DataType.ERROR
            return
        descriptor = TypeDescriptor(TypeDescriptorKind.ARRAY)
        self.process_decl_dim_list(identifier, descriptor, ignore_first_dim)
        if identifier.data_type is DataType.ERROR:
            node.data_type = DataType.ERROR
            return
        if type_descriptor.kind is TypeDescriptorKind.SCALAR:
            descriptor.element_type = type_descriptor.data_type
        elif type_descriptor.dimension + descriptor.dimension > MAX_ARRAY_DIMENSION:
            self.report(identifier, ErrorKind.EXCESSIVE_ARRAY_DIM_DECLARATION)
            identifier.data_type = DataType.ERROR
            return
        else:
            descriptor.element_type = type_descriptor.element_type
            descriptor.sizes = descriptor.sizes + type_descriptor.sizes
        attribute.type_descriptor = descriptor

    def process_decl_dim_list(
        self,
        id_node: AstNode,
        descriptor: TypeDescriptor,
        ignore_first_dim: bool,
    ) -> None:
        """Fill descriptor with the dimension sizes written after an array name."""
        descriptor.kind = TypeDescriptorKind.ARRAY
        dims = list(id_node.children)
        sizes: list[int] = []
        if ignore_first_dim and dims and dims[0].node_type is NodeType.NUL:
            sizes.append(0)
            dims = dims[1:]
        for dim in dims:
            if len(sizes) >= MAX_ARRAY_DIMENSION:
                self.report(id_node, ErrorKind.EXCESSIVE_ARRAY_DIM_DECLARATION)
                id_node.data_type = DataType.ERROR
                break
            self.process_expr_related(dim)
            size = 0
            if dim.data_type is DataType.ERROR:
                id_node.data_type = DataType.ERROR
            elif dim.data_type is DataType.FLOAT:
                self.report(id_node, ErrorKind.ARRAY_SIZE_NOT_INT)
                id_node.data_type = DataType.ERROR
            elif (
                _is_constant(dim)
                and isinstance(dim.const_eval_value, int)
                and dim.const_eval_value < 0
            ):
                self.report(id_node, ErrorKind.ARRAY_SIZE_NEGATIVE)
                id_node.data_type = DataType.ERROR
            elif isinstance(dim.const_eval_value, (int, float)):
                size = int(dim.const_eval_value)
            sizes.append(size)
        descriptor.sizes = sizes

    def declare_function(self, node: AstNode) -> None:
        """Declare a function, its parameters, and check its body."""
        return_type_node = node.children[0]
        error = False
        if (
            return_type_node.symbol_entry.attribute.type_descriptor.kind
            is TypeDescriptorKind.ARRAY
        ):
            self.report(return_type_node, ErrorKind.RETURN_ARRAY)
            return_type_node.data_type = DataType.ERROR
            error = True

        function_id = node.children[1]
        if self.symbols.declared_locally(function_id.name):
            self.report(function_id, ErrorKind.SYMBOL_REDECLARE)
            function_id.data_type = DataType.ERROR
            error = True

        signature = FunctionSignature(return_type_node.data_type)
        attribute = SymbolAttribute(SymbolAttributeKind.FUNCTION_SIGNATURE, signature=signature)
        entered = False
        if not error:
            function_id.symbol_entry = self.symbols.enter(function_id.name, attribute)
            entered = True

        self.symbols.open_scope()
        parameter_list = node.children[2]
        parameters: list[Parameter] = []
        for parameter_decl in parameter_list.children:
            self.process_declaration(parameter_decl)
            if parameter_decl.data_type is DataType.ERROR:
                error = True
            elif not error:
                parameter_id = parameter_decl.children[1]
                parameters.append(
                    Parameter(
                        parameter_id.name,
                        parameter_id.symbol_entry.attribute.type_descriptor,
                    )
                )
        signature.parameters_count = len(parameter_list.children)
        signature.parameters = [] if error else parameters

        if not error:
            for part in node.children[3].children:
                self.process_general(part)
        self.symbols.close_scope()

        if error and entered:
            node.data_type = DataType.ERROR
            self.symbols.remove(function_id.name)

    def process_general(self, node: AstNode) -> None:
        """Check a declaration list or an expression list."""
        if node.node_type is NodeType.VARIABLE_DECL_LIST:
            for child in node.children:
                self.process_declaration(child)
                if child.data_type is DataType.ERROR:
                    node.data_type = DataType.ERROR
        elif node.node_type is NodeType.NONEMPTY_RELOP_EXPR_LIST:
            for child in node.children:
                self.process_expr_related(child)
                if child.data_type is DataType.ERROR:
                    node.data_type = DataType.ERROR
        elif node.node_type is not NodeType.NUL:
            node.data_type = DataType.ERROR