# ifuzz: differential fuzz test generator for Go interfaces
"""
ifuzz: generate differential fuzz tests for Go interfaces.

Special comments next to an interface name a reference implementation,
and ifuzz writes Go functions which drive a random sequence of method
calls against both the reference and an implementation under test.
"""
from .errors import (
    FuzzgenError, GrammarError, TypeSyntaxError, DirectiveError,
    ReconcileError, CodegenError, SourceError,
)
from .types import (
    Type, NamedType, ArrayType, ChanType, MapType, PointerType, QualifiedType,
    parse_type, parse_type_list, parse_complete_type,
)
from .interface import MethodSignature, InterfaceDeclaration, ImportSpec, SourceUnit
from .directives import Comparison, Generator, HarnessSpec, parse_block, parse_harnesses
from .reconcile import Fuzzer, reconcile
from .config import CodeGenOptions
from .codegen import FuzzerCodeGenerator, GeneratedFuzzer, generate, render_source
from .pipeline import FuzzResult, process

__version__ = "0.1.0"
__all__ = [
    "FuzzgenError", "GrammarError", "TypeSyntaxError", "DirectiveError",
    "ReconcileError", "CodegenError", "SourceError",
    "Type", "NamedType", "ArrayType", "ChanType", "MapType", "PointerType",
    "QualifiedType", "parse_type", "parse_type_list", "parse_complete_type",
    "MethodSignature", "InterfaceDeclaration", "ImportSpec", "SourceUnit",
    "Comparison", "Generator", "HarnessSpec", "parse_block", "parse_harnesses",
    "Fuzzer", "reconcile",
    "CodeGenOptions",
    "FuzzerCodeGenerator", "GeneratedFuzzer", "generate", "render_source",
    "FuzzResult", "process",
]
