# riscvcc

`riscvcc` is the back half of a compiler for a small C-like language. It takes
an abstract syntax tree, checks it, and emits RISC-V assembly text.

The language has `int`, `float` and `void` types, `typedef`, global and local
variables, arrays of up to ten dimensions, functions, `if`/`else`, `while`,
`for`, assignments, `return`, and the built-in functions `read()`, `fread()` and
`write(...)`.

## What is in the package

- `riscvcc.ast` – the syntax tree. `AstNode` holds a node's type, data type,
  line, ordered `children` and `parent`; `add_child(*nodes)` appends children and
  `right_sibling()` returns the next child of the parent. The enumerations are
  `NodeType`, `DataType`, `StmtKind`, `DeclKind`, `ExprKind`, `IdentifierKind`,
  `BinaryOperator`, `UnaryOperator` and `ConstType`; `Const` holds a literal.
  Trees are built with `identifier_node`, `const_node` (the constant kind
  follows the Python type of the value; string literals keep their quotes),
  `binary_expr`, `unary_expr`, `stmt_node`, `decl_node` and `list_node`.
- `riscvcc.symbols` – a scoped `SymbolTable`. A fresh table already knows the
  types `int`, `float` and `void` and the functions `read` and `fread`. Names
  are looked up with `retrieve`, added with `enter`, removed with `remove`;
  `open_scope` and `close_scope` nest scopes, and `declared_locally` tells
  whether a name is declared in the current scope. An inner declaration hides
  an outer one until its scope closes. Redeclaring a name in the same scope, or
  removing one that is missing or belongs to another scope, raises
  `SymbolTableError`. `symbol_hash(name)` gives a name's bucket index (0–255).
- `riscvcc.analyzer` – `semantic_analysis(root, symbols=None)` or the
  `SemanticAnalyzer` class checks a program. It resolves identifiers, sets the
  data type of every expression, folds constant expressions, and returns a
  list of `Diagnostic` objects. Declarations are checked by
  `riscvcc.checker_decl.DeclarationChecker` and expressions and calls by
  `riscvcc.checker_expr.ExpressionChecker`, which the analyzer builds on.
- `riscvcc.errors` – the `ErrorKind` enumeration, `format_message(kind, node, name)`
  and `Diagnostic` (`kind`, `line`, `message`; `str()` gives
  `Error found in line N` followed by the message). Reported problems include
  undeclared and redeclared names, names that are not types or not functions,
  wrong argument counts, arrays passed to scalar parameters and the reverse,
  string operations, non-integer or negative array sizes, non-integer
  subscripts, wrong array dimensions and mismatched return types.
- `riscvcc.evaluate` – constant folding: `bigger_type`, `operand_value` and
  `evaluate_expr_value`. Integer results wrap to 32 bits, float results are
  rounded to single precision, and integer division by zero raises
  `ZeroDivisionError`.
- `riscvcc.codegen` – `generate(root)` returns the assembly for an analysed
  tree and `codegen(root, path="output.s")` writes it to a file and returns the
  path. `CodeGenerator` does the work for declarations and statements, building
  on `riscvcc.codegen_expr.ExpressionGenerator` for expressions, calls and
  `write`.
- `riscvcc.registers` – `RegisterPool` hands out the temporaries `t0`–`t6`
  (numbers 0–6) and `ft0`–`ft7` (numbers 7–14); running out raises
  `RegisterExhaustedError`.
- `riscvcc.graphviz` – `label_string(node)`, `render_gv(root, label)` returning
  dot text, and `write_gv(root, file_name=None)` writing it (to `AST_Graph.gv`
  by default). Children are joined by bold edges and siblings by dashed edges.

## Example

```python
from riscvcc.analyzer import semantic_analysis
from riscvcc.ast import DeclKind, NodeType, StmtKind, const_node, decl_node
from riscvcc.ast import identifier_node, list_node, stmt_node
from riscvcc.codegen import generate

call = stmt_node(StmtKind.FUNCTION_CALL, [
    identifier_node("write"),
    list_node(NodeType.NONEMPTY_RELOP_EXPR_LIST, [const_node('"hi\\n"')]),
])
main = decl_node(DeclKind.FUNCTION, [
    identifier_node("int"),
    identifier_node("main"),
    list_node(NodeType.PARAM_LIST),
    list_node(NodeType.BLOCK, [list_node(NodeType.STMT_LIST, [call])]),
])
program = list_node(NodeType.PROGRAM, [main])

assert semantic_analysis(program) == []
print(generate(program))
```

## Generated code

Each function `f` becomes a label `_start_f`, a prologue that saves `ra`, `fp`
and the temporary registers, its body, and an epilogue at `_end_f`; the frame
size goes into a data word `_frameSize_f`. Global variables are placed in
`.data` under their names prefixed with an underscore. Constants and offsets
become numbered `_int_const_N`, `_float_const_N`, `_string_const_N` and
`_const_offset_N` entries. `read`, `fread` and `write` become calls to
`_read_int`, `_read_float`, `_write_int`, `_write_float` and `_write_str`, which
a runtime linked with the output must provide.

## What the package does not do

- There is no lexer or parser and no command: trees are built in Python with
  the helpers in `riscvcc.ast`.
- `for` loops are checked but produce no code.
- Calls are emitted as a bare `jal`; no arguments are passed to user functions.
- Float globals are always initialised to 0.
- Code generation expects a tree that has passed analysis without errors.