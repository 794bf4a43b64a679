"""
ifuzz Source Extraction
=======================
Reads the input of the pipeline: the package name, imports, interface
declarations and comment blocks of a Go source file.

Two formats are accepted:
  .go    Go source, parsed with tree-sitter-go
  .json  A description of the same data:

    {
      "package": "store",
      "imports": [{"path": "example.com/model", "name": "m"}],
      "interfaces": [
        {"name": "Store",
         "methods": [{"name": "Get", "parameters": ["m.ID"], "returns": ["*m.Message", "error"]}]}
      ],
      "comments": ["@fuzz interface: Store\\n@known correct: makeStore"]
    }

Types in a JSON description use the compact type notation.
"""
import json
import logging
from pathlib import Path

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from .errors import GrammarError, SourceError
from .interface import ImportSpec, InterfaceDeclaration, MethodSignature, SourceUnit
from .types import ArrayType, ChanType, MapType, NamedType, PointerType, QualifiedType, Type, parse_complete_type

logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(tree_sitter_go.language())

# Interface method nodes, named differently across grammar releases.
METHOD_NODES = ("method_elem", "method_spec")


def load_source(path) -> SourceUnit:
    """Read a .go or .json file. Raises SourceError on failure."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise SourceError(f"cannot read '{path}': {e}") from e

    if path.suffix == ".json":
        unit = parse_json_source(data.decode("utf-8"))
    else:
        unit = parse_go_source(data)

    unit.filename = str(path)
    logger.debug(
        "Loaded %s: %d interface(s), %d comment block(s)",
        path, len(unit.interfaces), len(unit.comments),
    )
    return unit


# ─────────────────────────────────────────────────────────────
#  JSON
# ─────────────────────────────────────────────────────────────

def parse_json_source(text: str) -> SourceUnit:
    """Build a SourceUnit from a JSON description."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SourceError(f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SourceError("expected a JSON object at the top level")

    try:
        return SourceUnit(
            package=data.get("package", ""),
            imports=[ImportSpec(path=i["path"], name=i.get("name")) for i in data.get("imports", [])],
            interfaces=[_json_interface(i) for i in data.get("interfaces", [])],
            comments=list(data.get("comments", [])),
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise SourceError(f"malformed source description: {e!r}") from e


def _json_interface(data: dict) -> InterfaceDeclaration:
    methods = []
    for method in data.get("methods", []):
        methods.append(MethodSignature(
            name=method["name"],
            parameters=tuple(_json_type(t) for t in method.get("parameters", [])),
            returns=tuple(_json_type(t) for t in method.get("returns", [])),
        ))
    return InterfaceDeclaration(name=data["name"], methods=tuple(methods))


def _json_type(text: str) -> Type:
    try:
        return parse_complete_type(text)
    except GrammarError as e:
        raise SourceError(f"bad type '{text}': {e}") from e


# ─────────────────────────────────────────────────────────────
#  Go
# ─────────────────────────────────────────────────────────────

def parse_go_source(data: bytes) -> SourceUnit:
    """Build a SourceUnit from Go source code."""
    parser = Parser(GO_LANGUAGE)
    tree = parser.parse(data)
    root = tree.root_node

    if root.has_error:
        raise SourceError("Go source contains syntax errors")

    unit = SourceUnit()
    for child in root.named_children:
        if child.type == "package_clause":
            for name in child.named_children:
                unit.package = _text(name)
        elif child.type == "import_declaration":
            unit.imports.extend(_imports(child))
        elif child.type == "type_declaration":
            unit.interfaces.extend(_interfaces(child))

    unit.comments = comment_blocks(_comments(root))
    return unit


def _text(node: Node) -> str:
    return node.text.decode("utf-8")


def _imports(node: Node) -> list[ImportSpec]:
    imports = []
    for spec in _descendants(node, "import_spec"):
        path = _text(spec.child_by_field_name("path"))[1:-1]
        name = spec.child_by_field_name("name")
        imports.append(ImportSpec(path=path, name=_text(name) if name is not None else None))
    return imports


def _interfaces(node: Node) -> list[InterfaceDeclaration]:
    interfaces = []
    for spec in node.named_children:
        if spec.type != "type_spec":
            continue
        body = spec.child_by_field_name("type")
        if body is None or body.type != "interface_type":
            continue

        methods = []
        for element in body.named_children:
            if element.type in METHOD_NODES:
                methods.append(_method(element))
            elif element.type != "comment":
                # Embedded interfaces and type constraints have no methods
                # of their own to call.
                logger.debug("Ignoring interface element '%s'", _text(element))

        name = _text(spec.child_by_field_name("name"))
        interfaces.append(InterfaceDeclaration(name=name, methods=tuple(methods)))
    return interfaces


def _method(node: Node) -> MethodSignature:
    parameters = _parameter_types(node.child_by_field_name("parameters"))

    result = node.child_by_field_name("result")
    if result is None:
        returns = []
    elif result.type == "parameter_list":
        returns = _parameter_types(result)
    else:
        returns = [go_type(result)]

    return MethodSignature(
        name=_text(node.child_by_field_name("name")),
        parameters=tuple(parameters),
        returns=tuple(returns),
    )


def _parameter_types(node) -> list[Type]:
    """Types of a parameter list, one per parameter: `a, b int` is two ints."""
    types = []
    if node is None:
        return types

    for declaration in node.named_children:
        if declaration.type == "parameter_declaration":
            ty = go_type(declaration.child_by_field_name("type"))
            names = declaration.children_by_field_name("name")
            types.extend([ty] * max(len(names), 1))
        elif declaration.type == "variadic_parameter_declaration":
            types.append(NamedType("..." + _text(declaration.child_by_field_name("type"))))
    return types


def go_type(node: Node) -> Type:
    """Convert a tree-sitter type node to a Type.

    Types without a counterpart in the type tree (functions, structs,
    generics and the like) become a NamedType of their source text.
    """
    kind = node.type

    if kind == "type_identifier":
        return NamedType(_text(node))
    if kind == "qualified_type":
        package = _text(node.child_by_field_name("package"))
        return QualifiedType(package, NamedType(_text(node.child_by_field_name("name"))))
    if kind == "pointer_type":
        return PointerType(go_type(node.named_children[-1]))
    if kind in ("slice_type", "array_type"):
        return ArrayType(go_type(node.child_by_field_name("element")))
    if kind == "map_type":
        return MapType(go_type(node.child_by_field_name("key")), go_type(node.child_by_field_name("value")))
    if kind == "channel_type":
        return ChanType(go_type(node.child_by_field_name("value")))
    if kind == "parenthesized_type":
        return go_type(node.named_children[0])

    return NamedType(_text(node))


# ─────────────────────────────────────────────────────────────
#  Comments
# ─────────────────────────────────────────────────────────────

def _descendants(node: Node, kind: str) -> list[Node]:
    found = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == kind:
            found.append(current)
        stack.extend(reversed(current.children))
    return found


def _comments(root: Node) -> list[Node]:
    return sorted(_descendants(root, "comment"), key=lambda n: n.start_byte)


def comment_blocks(nodes: list[Node]) -> list[str]:
    """Group comments into blocks, stripping the comment markers.

    A /* ... */ comment is a block by itself. Line comments on
    consecutive lines form one block.
    """
    blocks: list[str] = []
    lines: list[str] = []
    last_row = None

    for node in nodes:
        text = _text(node)
        if text.startswith("/*"):
            if lines:
                blocks.append("\n".join(lines))
                lines = []
            blocks.append(text[2:-2])
            last_row = None
            continue

        row = node.start_point[0]
        if lines and last_row is not None and row != last_row + 1:
            blocks.append("\n".join(lines))
            lines = []
        lines.append(text[2:])
        last_row = row

    if lines:
        blocks.append("\n".join(lines))
    return blocks
