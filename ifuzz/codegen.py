"""
ifuzz Code Generator
====================
Generates differential fuzz tests for Go interfaces from a reconciled
fuzzer. For an interface `Store` three functions are produced:

    FuzzTestStore(makeTest func(...) Store, t *testing.T)
    FuzzStore(makeTest func(...) Store, rand *rand.Rand, max uint) error
    FuzzStoreWith(reference Store, test Store, rand *rand.Rand, maxops uint) error

FuzzStoreWith performs a sequence of random method calls on both
implementations, comparing every result and checking every invariant
after each call. FuzzStore builds the reference with the "@known
correct:" function and FuzzTestStore wraps that as a test case.

Nothing is written for a fuzzer whose generation fails; the remaining
fuzzers are unaffected.
"""
import logging
import os
import re
from dataclasses import dataclass
from typing import Optional

from .config import CodeGenOptions
from .directives import INVARIANT_PLACEHOLDER, HarnessSpec
from .errors import CodegenError
from .interface import ImportSpec, MethodSignature
from .naming import actual_names, argument_names, expected_names
from .reconcile import Fuzzer
from .strings import go_string, indent_lines
from .types import Type

logger = logging.getLogger(__name__)


# Default generators for builtin types, assuming a PRNG called 'rand'
# is in scope. Any other type needs a "@generator:".
DEFAULT_GENERATORS = {
    "bool": "rand.Intn(2) == 0",
    "byte": "byte(rand.Uint32())",
    "float32": "float32(rand.NormFloat64())",
    "float64": "rand.NormFloat64()",
    "int": "rand.Int()",
    "int8": "int8(rand.Int())",
    "int16": "int16(rand.Int())",
    "int32": "rand.Int31()",
    "int64": "rand.Int63()",
    "rune": "rune(rand.Int31())",
    "uint": "uint(rand.Uint32())",
    "uint8": "uint8(rand.Uint32())",
    "uint16": "uint16(rand.Uint32())",
    "uint32": "rand.Uint32()",
    "uint64": "(uint64(rand.Uint32()) << 32) | uint64(rand.Uint32())",
}

# Default comparisons for builtin types. Errors are only compared for
# presence, as messages commonly differ between implementations.
DEFAULT_COMPARISONS = {
    "error": "(({expected} == nil) == ({actual} == nil))",
}

FALLBACK_COMPARISON = "reflect.DeepEqual({expected}, {actual})"

# Standard library packages the generated code may refer to.
STDLIB_IMPORTS = {
    "errors": "errors",
    "fmt": "fmt",
    "rand": "math/rand",
    "reflect": "reflect",
    "testing": "testing",
}


# ─────────────────────────────────────────────────────────────
#  Generated Code
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GeneratedFuzzer:
    """The generated functions for one interface. The test case and
    the default-reference function are None when disabled."""
    name: str
    test_case: Optional[str]
    with_default_reference: Optional[str]
    with_reference: str

    def render(self) -> str:
        parts = [self.test_case, self.with_default_reference, self.with_reference]
        body = "\n\n".join(part for part in parts if part is not None)
        return f"// {self.name}\n\n{body}\n"


# ─────────────────────────────────────────────────────────────
#  Generator
# ─────────────────────────────────────────────────────────────

class FuzzerCodeGenerator:
    """Generates the fuzz test functions for one fuzzer.

    Usage:
        generator = FuzzerCodeGenerator(fuzzer, CodeGenOptions())
        code = generator.with_reference()

    Each public method raises CodegenError if the fuzzer description is
    not sufficient to produce compilable code.
    """

    def __init__(self, fuzzer: Fuzzer, options: Optional[CodeGenOptions] = None):
        self.fuzzer = fuzzer
        self.options = options or CodeGenOptions()

    @property
    def name(self) -> str:
        return self.fuzzer.name

    @property
    def wanted(self) -> HarnessSpec:
        return self.fuzzer.wanted

    def generate(self) -> GeneratedFuzzer:
        """Generate every function the options ask for."""
        test_case = self.test_case() if self.options.emit_test_case else None
        default = self.with_default_reference() if self.options.emit_default_fuzz else None
        return GeneratedFuzzer(
            name=self.name,
            test_case=test_case,
            with_default_reference=default,
            with_reference=self.with_reference(),
        )

    # ─────────────────────────────────────────────────────────
    #  FuzzTest<I>
    # ─────────────────────────────────────────────────────────

    def test_case(self) -> str:
        """A test case calling Fuzz<I> with a fixed seed and number of
        operations:

            FuzzTestStore(makeTest func(int) Store, t *testing.T)
        """
        name = self.name
        lines = []
        lines.append(f"func FuzzTest{name}(makeTest {self._constructor_type()}, t *testing.T) {{")
        lines.append(f"\trand := rand.New(rand.NewSource({self.options.seed}))")
        lines.append("")
        lines.append(f"\terr := Fuzz{name}(makeTest, rand, {self.options.max_ops})")
        lines.append("")
        lines.append("\tif err != nil {")
        lines.append("\t\tt.Error(err)")
        lines.append("\t}")
        lines.append("}")
        return "\n".join(lines)

    # ─────────────────────────────────────────────────────────
    #  Fuzz<I>
    # ─────────────────────────────────────────────────────────

    def with_default_reference(self) -> str:
        """Compare a supplied implementation against the reference:

            FuzzStore(makeTest func(int) Store, rand *rand.Rand, max uint) error

        Both are built from the same random arguments.
        """
        name = self.name
        reference = self._reference()
        expected = expected_names(reference)[0]
        actual = actual_names(reference)[0]
        ampersand = "&" if self.wanted.returns_value else ""

        body = []
        if self._uses_state([reference]):
            body.append(f"state := {self.wanted.generator_state}")
            body.append("")
        body.extend(self.function_calls(reference, reference.name, "makeTest"))

        lines = []
        lines.append(f"func Fuzz{name}(makeTest {self._constructor_type()}, rand *rand.Rand, max uint) error {{")
        lines.append(indent_lines("\n".join(body), "\t"))
        lines.append("")
        lines.append(f"\treturn Fuzz{name}With({ampersand}{expected}, {actual}, rand, max)")
        lines.append("}")
        return "\n".join(lines)

    # ─────────────────────────────────────────────────────────
    #  Fuzz<I>With
    # ─────────────────────────────────────────────────────────

    def with_reference(self) -> str:
        """Compare two arbitrary implementations:

            FuzzStoreWith(reference Store, test Store, rand *rand.Rand, maxops uint) error

        Discrepancies show the result of `reference` as "expected" and
        the result of `test` as "actual".
        """
        name = self.name
        methods = self.fuzzer.interface.methods
        if not methods:
            raise CodegenError(f"interface '{name}' has no methods to call", name)

        lines = []
        lines.append(f"func Fuzz{name}With(reference {name}, test {name}, rand *rand.Rand, maxops uint) error {{")

        if self._uses_state(methods):
            lines.append("\t// Create initial state")
            lines.append(f"\tstate := {self.wanted.generator_state}")
            lines.append("")

        lines.append("\tfor i := uint(0); i < maxops; i++ {")
        lines.append("\t\t// Pick a random method of the interface, call it on both")
        lines.append("\t\t// implementations, and bail out on the first discrepancy.")
        lines.append(f"\t\tactionToPerform := rand.Intn({len(methods)})")
        lines.append("")
        lines.append("\t\tswitch actionToPerform {")

        for i, method in enumerate(methods):
            lines.append(f"\t\tcase {i}:")
            lines.append("\t\t\t// Call the method on both implementations")
            calls = self.function_calls(method, f"reference.{method.name}", f"test.{method.name}")
            lines.append(indent_lines("\n".join(calls), "\t\t\t"))
            lines.extend(self._result_checks(method))

        lines.append("\t\t}")

        for invariant in self.wanted.invariants:
            check = invariant.replace(INVARIANT_PLACEHOLDER, "reference")
            lines.append("")
            lines.append(f"\t\tif !({check}) {{")
            lines.append(f"\t\t\treturn errors.New({go_string('invariant violated: ' + invariant)})")
            lines.append("\t\t}")

        lines.append("\t}")
        lines.append("")
        lines.append("\treturn nil")
        lines.append("}")
        return "\n".join(lines)

    def _result_checks(self, method: MethodSignature) -> list[str]:
        lines = []
        if not method.returns:
            return lines

        message = go_string(f"inconsistent result in {method.name}\nexpected: %v\nactual:   %v")
        lines.append("")
        lines.append("\t\t\t// And check for discrepancies.")
        names = zip(method.returns, expected_names(method), actual_names(method))
        for ty, expected, actual in names:
            lines.append(f"\t\t\tif !{self.value_comparison(ty, expected, actual)} {{")
            lines.append(f"\t\t\t\treturn fmt.Errorf({message}, {expected}, {actual})")
            lines.append("\t\t\t}")
        return lines

    # ─────────────────────────────────────────────────────────
    #  Function Calls
    # ─────────────────────────────────────────────────────────

    def function_calls(self, function: MethodSignature, expected_func: str, actual_func: str) -> list[str]:
        """Call two functions of the same signature with the same random
        arguments, binding their results to the expected... and actual...
        variables."""
        arguments = argument_names(function)
        expecteds = expected_names(function)
        actuals = actual_names(function)
        call_args = ", ".join(arguments)

        lines = []
        if arguments:
            lines.append("var (")
            for argument, ty in zip(arguments, function.parameters):
                lines.append(f"\t{argument} {ty.to_string()}")
            lines.append(")")
            lines.append("")
            for argument, ty in zip(arguments, function.parameters):
                lines.append(self.type_generator(argument, ty))
            lines.append("")

        if expecteds:
            lines.append(f"{', '.join(expecteds)} := {expected_func}({call_args})")
            lines.append(f"{', '.join(actuals)} := {actual_func}({call_args})")
        else:
            lines.append(f"{expected_func}({call_args})")
            lines.append(f"{actual_func}({call_args})")
        return lines

    # ─────────────────────────────────────────────────────────
    #  Value Initialisation and Comparison
    # ─────────────────────────────────────────────────────────

    def type_generator(self, varname: str, ty: Type) -> str:
        """A statement assigning a random value of a type to a variable."""
        tyname = ty.to_string()

        generator = self.wanted.generators.get(tyname)
        if generator is not None:
            if generator.is_stateful:
                if not self.wanted.generator_state:
                    raise CodegenError("stateful generator used when no initial state given", self.name)
                return f"{varname}, state = {generator.name}(rand, state)"
            return f"{varname} = {generator.name}(rand)"

        default = DEFAULT_GENERATORS.get(tyname)
        if default is not None:
            return f"{varname} = {default}"

        raise CodegenError(f"I don't know how to generate a {tyname}", self.name)

    def value_comparison(self, ty: Type, expected: str, actual: str) -> str:
        """A boolean expression which is true if two values agree."""
        tyname = ty.to_string()

        comparison = self.wanted.comparisons.get(tyname)
        if comparison is not None:
            if comparison.is_function:
                return f"{comparison.name}({expected}, {actual})"
            return f"{expected}.{comparison.name}({actual})"

        template = DEFAULT_COMPARISONS.get(tyname, FALLBACK_COMPARISON)
        return template.format(expected=expected, actual=actual)

    # ─────────────────────────────────────────────────────────
    #  Helpers
    # ─────────────────────────────────────────────────────────

    def _reference(self) -> MethodSignature:
        if self.wanted.reference is None:
            raise CodegenError("no reference implementation given with '@known correct:'", self.name)
        return self.wanted.reference

    def _constructor_type(self) -> str:
        params = ", ".join(ty.to_string() for ty in self._reference().parameters)
        return f"func({params}) {self.name}"

    def _uses_state(self, functions) -> bool:
        for function in functions:
            for ty in function.parameters:
                generator = self.wanted.generators.get(ty.to_string())
                if generator is not None and generator.is_stateful:
                    return True
        return False


# ─────────────────────────────────────────────────────────────
#  Entry Points
# ─────────────────────────────────────────────────────────────

def generate(fuzzer: Fuzzer, options: Optional[CodeGenOptions] = None, module_name: str = "") -> GeneratedFuzzer:
    """Generate the fuzz test functions for one fuzzer.

    Raises CodegenError naming the interface (qualified by the module's
    display name, if given) on failure.
    """
    try:
        generated = FuzzerCodeGenerator(fuzzer, options).generate()
    except CodegenError as e:
        display = f"{module_name}.{fuzzer.name}" if module_name else fuzzer.name
        raise CodegenError(
            f"error occurred whilst generating code for '{display}': {e}", fuzzer.name
        ) from e

    logger.debug("Generated fuzzer for '%s'", fuzzer.name)
    return generated


def render_source(
    fuzzers: list[Fuzzer],
    options: Optional[CodeGenOptions] = None,
    imports: Optional[list[ImportSpec]] = None,
    module_name: str = "",
) -> tuple[str, list[CodegenError]]:
    """Generate code for every fuzzer, in order.

    Fuzzers which fail are left out of the code and reported in the
    error list. With options.complete, the code is prefixed with a
    package clause and the imports it uses.
    """
    options = options or CodeGenOptions()
    chunks: list[str] = []
    errors: list[CodegenError] = []

    for fuzzer in fuzzers:
        try:
            chunks.append(generate(fuzzer, options, module_name).render())
        except CodegenError as e:
            logger.debug("Skipping fuzzer for '%s': %s", fuzzer.name, e)
            errors.append(e)

    code = "\n".join(chunks)
    if options.complete:
        code = generate_preamble(options.package_name, imports or [], code, options.filename) + code
    return code, errors


def generate_preamble(package_name: str, imports: list[ImportSpec], code: str, filename: str = "") -> str:
    """The package clause and import block for a complete file, after a
    generated-code header naming the source file, if given.

    Source imports are kept only if the code refers to them, or if no
    package name can be assumed from their path; standard library
    packages the code uses are added.
    """
    stdlib = [
        ImportSpec(path)
        for local, path in sorted(STDLIB_IMPORTS.items(), key=lambda item: item[1])
        if _refers_to(code, local)
    ]
    taken_paths = {spec.path for spec in stdlib}
    taken_names = {spec.local_name for spec in stdlib}

    kept = []
    for spec in imports:
        if spec.name in ("_", ".") or spec.path in taken_paths:
            continue
        # Without a known name, use cannot be ruled out.
        if not spec.local_name:
            kept.append(spec)
            taken_paths.add(spec.path)
            continue
        if spec.local_name in taken_names or not _refers_to(code, spec.local_name):
            continue
        kept.append(spec)
        taken_paths.add(spec.path)
        taken_names.add(spec.local_name)

    preamble = ""
    if filename:
        preamble += f"// Code generated by ifuzz from {os.path.basename(filename)}. DO NOT EDIT.\n\n"
    preamble += f"package {package_name}\n\n"
    groups = [group for group in (stdlib, kept) if group]
    if groups:
        preamble += "import (\n"
        preamble += "\n\n".join("\n".join(f"\t{spec.render()}" for spec in group) for group in groups)
        preamble += "\n)\n\n"
    return preamble


def _refers_to(code: str, package: str) -> bool:
    return re.search(rf"(?<![\w.]){re.escape(package)}\.", code) is not None
