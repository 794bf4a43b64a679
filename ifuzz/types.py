"""
ifuzz Types
===========
Representation of Go types and a recursive-descent parser for the
compact type notation used in special comments.

Grammar:
    Type := "[]" Type
          | "chan" Type
          | "map[" Type "]" Type
          | "*" Type
          | "(" Type ")"
          | Name "." Name
          | Name

Every type has an unambiguous string rendition (to_string), which is
also valid Go type syntax. Generators and comparisons are looked up by
that rendition, so the rendering rules must not change:

    NamedType      name
    ArrayType      [](t)
    ChanType       chan (t)
    MapType        map[k](v)
    PointerType    *(t)
    QualifiedType  pkg.t
"""
from dataclasses import dataclass

from .errors import TypeSyntaxError
from .strings import NAME_CHARS, match_prefix, parse_name


# ─────────────────────────────────────────────────────────────
#  Type Nodes
# ─────────────────────────────────────────────────────────────

class Type:
    """Base class of the type tree. Instances are immutable."""

    def to_string(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class NamedType(Type):
    """A simple named type with no additional structure."""
    name: str

    def to_string(self) -> str:
        return self.name


@dataclass(frozen=True)
class ArrayType(Type):
    """Slices (and arrays, which are not distinguished)."""
    element: Type

    def to_string(self) -> str:
        return f"[]({self.element.to_string()})"


@dataclass(frozen=True)
class ChanType(Type):
    element: Type

    def to_string(self) -> str:
        return f"chan ({self.element.to_string()})"


@dataclass(frozen=True)
class MapType(Type):
    key: Type
    value: Type

    def to_string(self) -> str:
        return f"map[{self.key.to_string()}]({self.value.to_string()})"


@dataclass(frozen=True)
class PointerType(Type):
    target: Type

    def to_string(self) -> str:
        return f"*({self.target.to_string()})"


@dataclass(frozen=True)
class QualifiedType(Type):
    """A type with a package qualifier: pkg.Name."""
    package: str
    type: Type

    def to_string(self) -> str:
        return f"{self.package}.{self.type.to_string()}"


# ─────────────────────────────────────────────────────────────
#  Parser
# ─────────────────────────────────────────────────────────────

def parse_type(text: str) -> tuple[Type, str]:
    """Parse a type from the front of a string.

    Returns the type and the unconsumed remainder, with leading
    whitespace trimmed. Raises TypeSyntaxError naming the offending
    fragment if no type can be read.
    """
    s = text.lstrip()

    # []Type
    suffix, ok = match_prefix(s, "[]")
    if ok:
        element, rest = _parse_operand(suffix, s)
        return ArrayType(element), rest

    # chan Type, unless "chan" is a whole name: "chanX", "chan)", "chan]"
    suffix, ok = match_prefix(s, "chan")
    if ok and s[len("chan"):][:1] not in NAME_CHARS and suffix[:1] not in ("", ")", "]", ":", "."):
        element, rest = _parse_operand(suffix, s)
        return ChanType(element), rest

    # map[Type]Type
    suffix, ok = match_prefix(s, "map[")
    if ok:
        key, rest = _parse_operand(suffix, s)
        if not rest.startswith("]"):
            raise TypeSyntaxError(f"expected ']' after map key in '{s}'", s)
        value, rest = _parse_operand(rest[1:].lstrip(), s)
        return MapType(key, value), rest

    # *Type
    suffix, ok = match_prefix(s, "*")
    if ok:
        target, rest = _parse_operand(suffix, s)
        return PointerType(target), rest

    # (Type)
    suffix, ok = match_prefix(s, "(")
    if ok:
        inner, rest = _parse_operand(suffix, s)
        if not rest.startswith(")"):
            raise TypeSyntaxError(f"mismatched parentheses in '{s}'", s)
        return inner, rest[1:].lstrip()

    # Name.Name | Name
    name, rest = parse_name(s)
    if not name:
        if s.startswith(")"):
            raise TypeSyntaxError(f"mismatched parentheses in '{s}'", s)
        raise TypeSyntaxError(f"expected a type in '{s}'", s)

    if rest.startswith("."):
        tyname, rest = parse_name(rest[1:].lstrip())
        if not tyname:
            raise TypeSyntaxError(f"expected a type name after '{name}.' in '{s}'", s)
        return QualifiedType(name, NamedType(tyname)), rest

    return NamedType(name), rest


def _parse_operand(text: str, orig: str) -> tuple[Type, str]:
    """Parse the operand of a type constructor, reporting failures
    against the whole constructor expression."""
    if not text.strip():
        raise TypeSyntaxError(f"missing type operand in '{orig}'", orig)
    return parse_type(text)


def parse_type_list(text: str) -> list[Type]:
    """Parse types until the input is exhausted."""
    types = []
    rest = text.strip()
    while rest:
        ty, rest = parse_type(rest)
        types.append(ty)
    return types


def parse_complete_type(text: str) -> Type:
    """Parse a string holding exactly one type."""
    ty, rest = parse_type(text)
    if rest:
        raise TypeSyntaxError(f"unexpected left over input in '{text}' (got '{rest}')", rest)
    return ty
