"""
ifuzz Declarations
==================
The interface declarations the core consumes. They are produced by an
upstream extractor (see ifuzz.source) and are read-only from here on.
"""
import re
from dataclasses import dataclass, field
from typing import Optional

from .types import Type

_MAJOR_VERSION = re.compile(r"v[0-9]+")
_IDENTIFIER_PREFIX = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class MethodSignature:
    """A function name and type. Used both for interface methods and
    for the reference constructor of a harness."""
    name: str
    parameters: tuple[Type, ...] = ()
    returns: tuple[Type, ...] = ()

    def __str__(self) -> str:
        params = ", ".join(ty.to_string() for ty in self.parameters)
        returns = ", ".join(ty.to_string() for ty in self.returns)
        if len(self.returns) > 1:
            returns = f"({returns})"
        return f"{self.name}({params}) {returns}".rstrip()


@dataclass(frozen=True)
class InterfaceDeclaration:
    """An interface: a name and its methods, in declaration order."""
    name: str
    methods: tuple[MethodSignature, ...] = ()


@dataclass(frozen=True)
class ImportSpec:
    """An import of the source file: `import name "path"`."""
    path: str
    name: Optional[str] = None

    @property
    def local_name(self) -> str:
        """The identifier the importing file refers to the package by.

        Without an explicit name this is the package name assumed from
        the path, as Go tooling assumes it: a trailing major version
        element is skipped, a "go-" prefix is dropped, and the name ends
        at the first character which cannot be in an identifier:

            github.com/go-redis/redis/v8   redis
            gopkg.in/yaml.v2               yaml
            example.com/go-foo-bar         foo

        Empty if no name can be assumed.
        """
        if self.name:
            return self.name

        elements = [element for element in self.path.split("/") if element]
        if not elements:
            return ""
        base = elements[-1]
        if _MAJOR_VERSION.fullmatch(base) and len(elements) > 1:
            base = elements[-2]
        if base.startswith("go-"):
            base = base[len("go-"):]
        match = _IDENTIFIER_PREFIX.match(base)
        return match.group(0) if match else ""

    def render(self) -> str:
        if self.name:
            return f'{self.name} "{self.path}"'
        return f'"{self.path}"'


@dataclass
class SourceUnit:
    """Everything the core needs from one source file.

    Attributes:
        package: Package name of the source file.
        imports: Imports of the source file, in order.
        interfaces: Interface declarations, in order.
        comments: Raw text of every comment block (comment markers
                  already removed), in order.
        filename: Where the unit was read from, for display.
    """
    package: str = ""
    imports: list[ImportSpec] = field(default_factory=list)
    interfaces: list[InterfaceDeclaration] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    filename: str = ""

    @property
    def display_name(self) -> str:
        """Human-readable name of the host module, for error messages."""
        return self.package or self.filename
