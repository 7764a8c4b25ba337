import pytest

from riscvcc.ast import (
    DataType,
    DeclKind,
    IdentifierKind,
    NodeType,
    UnaryOperator,
    const_node,
    decl_node,
    identifier_node,
    list_node,
    unary_expr,
)
from riscvcc.checker_decl import DeclarationChecker
from riscvcc.errors import ErrorKind
from riscvcc.symbols import SymbolAttributeKind, SymbolTable, TypeDescriptor, TypeDescriptorKind


@pytest.fixture
def checker():
    return DeclarationChecker(SymbolTable())


def ident(name, line=0):
    return identifier_node(name, line=line)


def array(name, *sizes):
    dims = [const_node(s) if isinstance(s, (int, float)) else s for s in sizes]
    return identifier_node(name, IdentifierKind.ARRAY, dims)


def var_decl(type_name, *ids):
    return decl_node(DeclKind.VARIABLE, [ident(type_name), *ids])


def type_decl(type_name, *ids):
    return decl_node(DeclKind.TYPE, [ident(type_name), *ids])


def kinds(checker):
    return [d.kind for d in checker.diagnostics]


def test_declares_scalar_variables(checker):
    checker.process_declaration(var_decl("int", ident("a"), ident("b")))
    for name in ("a", "b"):
        entry = checker.symbols.retrieve(name)
        assert entry.attribute.kind is SymbolAttributeKind.VARIABLE
        assert entry.attribute.type_descriptor.data_type is DataType.INT
    assert not checker.has_errors()


def test_redeclaration_is_reported(checker):
    node = var_decl("int", ident("a"), ident("a", line=4))
    checker.process_declaration(node)
    assert kinds(checker) == [ErrorKind.SYMBOL_REDECLARE]
    assert checker.diagnostics[0].line == 4
    assert node.data_type is DataType.ERROR


def test_unknown_type_name(checker):
    node = var_decl("INT", ident("a"))
    checker.process_declaration(node)
    assert kinds(checker) == [ErrorKind.SYMBOL_IS_NOT_TYPE]
    assert node.data_type is DataType.ERROR
    assert checker.symbols.retrieve("a") is None


def test_void_variable(checker):
    node = var_decl("void", ident("a"))
    checker.process_declaration(node)
    assert kinds(checker) == [ErrorKind.VOID_VARIABLE]
    assert checker.symbols.retrieve("a") is None


def test_array_sizes(checker):
    checker.process_declaration(var_decl("float", array("m", 3, 4)))
    descriptor = checker.symbols.retrieve("m").attribute.type_descriptor
    assert descriptor.kind is TypeDescriptorKind.ARRAY
    assert descriptor.sizes == [3, 4]
    assert descriptor.element_type is DataType.FLOAT


def test_typedef_array_combines_dimensions(checker):
    checker.process_declaration(type_decl("int", array("INTA", 2)))
    type_entry = checker.symbols.retrieve("INTA")
    assert type_entry.attribute.kind is SymbolAttributeKind.TYPE
    checker.process_declaration(var_decl("INTA", array("x", 3)))
    descriptor = checker.symbols.retrieve("x").attribute.type_descriptor
    assert descriptor.sizes == [3, 2]
    assert descriptor.dimension == 2
    assert descriptor.element_type is DataType.INT


def test_typedef_array_scalar_use(checker):
    checker.process_declaration(type_decl("int", array("INTA", 2)))
    decl = var_decl("INTA", ident("g9"))
    checker.process_declaration(decl)
    assert decl.children[0].data_type is DataType.INT
    assert checker.symbols.retrieve("g9").attribute.type_descriptor.sizes == [2]


def test_negative_array_size(checker):
    checker.process_declaration(
        var_decl("int", array("a", unary_expr(UnaryOperator.NEGATIVE, const_node(1))))
    )
    assert kinds(checker) == [ErrorKind.ARRAY_SIZE_NEGATIVE]
    assert checker.symbols.retrieve("a") is None


def test_float_array_size(checker):
    checker.process_declaration(var_decl("int", array("a", 2.5)))
    assert kinds(checker) == [ErrorKind.ARRAY_SIZE_NOT_INT]


def test_too_many_dimensions(checker):
    checker.process_declaration(var_decl("int", array("a", *([1] * 11))))
    assert kinds(checker) == [ErrorKind.EXCESSIVE_ARRAY_DIM_DECLARATION]
    assert checker.symbols.retrieve("a") is None


def test_dim_list_counts_sizes(checker):
    id_node = array("a", 5, 6, 7)
    descriptor = TypeDescriptor(TypeDescriptorKind.SCALAR)
    checker.process_decl_dim_list(id_node, descriptor, False)
    assert descriptor.kind is TypeDescriptorKind.ARRAY
    assert descriptor.sizes == [5, 6, 7]


def test_dim_list_ignores_missing_first_size(checker):
    id_node = identifier_node("p", IdentifierKind.ARRAY, [list_node(NodeType.NUL), const_node(5)])
    descriptor = TypeDescriptor(TypeDescriptorKind.SCALAR)
    checker.process_decl_dim_list(id_node, descriptor, True)
    assert descriptor.sizes == [0, 5]


def test_cannot_initialize_array_type(checker):
    checker.process_declaration(type_decl("int", array("INTA", 2)))
    init = identifier_node("x", IdentifierKind.WITH_INIT, [const_node(1)])
    checker.process_declaration(var_decl("INTA", init))
    assert kinds(checker) == [ErrorKind.TRY_TO_INIT_ARRAY]


def test_typedef_void_array(checker):
    checker.process_declaration(type_decl("void", array("V", 2)))
    assert kinds(checker) == [ErrorKind.TYPEDEF_VOID_ARRAY]
    assert checker.symbols.retrieve("V") is None


def function(ret, name, params=(), decls=()):
    block = list_node(NodeType.BLOCK, [list_node(NodeType.VARIABLE_DECL_LIST, decls)])
    return decl_node(
        DeclKind.FUNCTION,
        [ident(ret), ident(name), list_node(NodeType.PARAM_LIST, params), block],
    )


def param(type_name, id_node):
    return decl_node(DeclKind.FUNCTION_PARAMETER, [ident(type_name), id_node])


def test_function_signature(checker):
    node = function(
        "float",
        "f",
        [param("int", ident("x")), param("float", identifier_node(
            "arr", IdentifierKind.ARRAY, [list_node(NodeType.NUL), const_node(4)]))],
        [var_decl("int", ident("local"))],
    )
    checker.process_declaration(node)
    entry = checker.symbols.retrieve("f")
    signature = entry.attribute.signature
    assert signature.return_type is DataType.FLOAT
    assert [p.name for p in signature.parameters] == ["x", "arr"]
    assert signature.parameters_count == 2
    assert signature.parameters[1].type.sizes == [0, 4]
    assert checker.symbols.retrieve("x") is None
    assert checker.symbols.retrieve("local") is None
    assert checker.symbols.current_level == 0


def test_function_with_bad_parameter_is_removed(checker):
    node = function("int", "g", [param("void", ident("x"))])
    checker.process_declaration(node)
    assert ErrorKind.VOID_VARIABLE in kinds(checker)
    assert node.data_type is DataType.ERROR
    assert checker.symbols.retrieve("g") is None


def test_function_returning_array(checker):
    checker.process_declaration(type_decl("int", array("INTA", 2)))
    checker.process_declaration(function("INTA", "h"))
    assert kinds(checker) == [ErrorKind.RETURN_ARRAY]
    assert checker.diagnostics[0].message == "Function 'h' cannot return array."
    assert checker.symbols.retrieve("h") is None


def test_function_redeclared(checker):
    checker.process_declaration(function("int", "k"))
    checker.process_declaration(function("float", "k"))
    assert kinds(checker) == [ErrorKind.SYMBOL_REDECLARE]
    assert checker.symbols.retrieve("k").attribute.signature.return_type is DataType.INT


def test_process_general_propagates_errors(checker):
    decls = list_node(NodeType.VARIABLE_DECL_LIST, [var_decl("int", ident("a")), var_decl("nope", ident("b"))])
    checker.process_general(decls)
    assert decls.data_type is DataType.ERROR
    assert checker.symbols.retrieve("a") is not None and checker.symbols.retrieve("b") is None


def test_process_general_unhandled_node(checker):
    node = list_node(NodeType.STMT_LIST)
    checker.process_general(node)
    assert node.data_type is DataType.ERROR