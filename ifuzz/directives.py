"""
ifuzz Directives
================
Parses the special comments that describe a wanted fuzzer.

    /*
    @fuzz interface: Store

    @known correct: & makeReferenceStore int

    @comparison: compareMessageIterators *MessageIterator
    @comparison: *Message:Equals

    @generator state: uint(0)
    @generator:   generateChannel   model.Channel
    @generator: ! generateID        model.ID

    @invariant: %var.Len() >= 0
    */

"@fuzz interface:" starts a new harness; every following special
comment in the same block adds to it, until the next "@fuzz interface:"
or the end of the block. Unknown lines inside a harness are ignored.

Syntax of each directive:

    @fuzz interface:  Name
    @known correct:   [&] FunctionName [ArgType1 ... ArgTypeN]
    @comparison:      (Type:MethodName | FunctionName Type)
    @generator:       [!] FunctionName Type
    @generator state: Expression
    @invariant:       Expression, with %var standing for the reference
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .errors import DirectiveError, GrammarError, TypeSyntaxError
from .interface import MethodSignature
from .strings import match_prefix, parse_name, split_lines
from .types import NamedType, Type, parse_type, parse_type_list

logger = logging.getLogger(__name__)

FUZZ_INTERFACE = "@fuzz interface:"
KNOWN_CORRECT = "@known correct:"
COMPARISON = "@comparison:"
GENERATOR = "@generator:"
GENERATOR_STATE = "@generator state:"
INVARIANT = "@invariant:"

# Stands for the reference implementation in an invariant.
INVARIANT_PLACEHOLDER = "%var"


# ─────────────────────────────────────────────────────────────
#  Wanted Fuzzer Description
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Comparison:
    """A function or a method comparing two values of one type.

    A method is applied as `expected.Name(actual)`, a function as
    `Name(expected, actual)`.
    """
    name: str
    type: Type
    is_function: bool = False


@dataclass(frozen=True)
class Generator:
    """A function producing random values of one type.

    A stateful generator also takes and returns the generator state.
    """
    name: str
    is_stateful: bool = False


@dataclass
class HarnessSpec:
    """Description of a fuzzer we want to generate.

    The comparisons and generators are keyed by the to_string()
    rendition of the type they handle.
    """
    interface_name: str
    reference: Optional[MethodSignature] = None
    returns_value: bool = False
    comparisons: dict[str, Comparison] = field(default_factory=dict)
    generators: dict[str, Generator] = field(default_factory=dict)
    generator_state: str = ""
    invariants: list[str] = field(default_factory=list)


# ─────────────────────────────────────────────────────────────
#  Comment Blocks
# ─────────────────────────────────────────────────────────────

def parse_harnesses(blocks: list[str]) -> tuple[list[HarnessSpec], list[GrammarError]]:
    """Extract every wanted fuzzer from a list of comment blocks.

    A malformed directive discards its whole block; the remaining
    blocks are still processed, and one error is reported per bad block.
    """
    specs: list[HarnessSpec] = []
    errors: list[GrammarError] = []

    for block in blocks:
        try:
            found = parse_block(block)
        except GrammarError as e:
            logger.debug("Rejected comment block: %s", e)
            errors.append(e)
            continue
        specs.extend(found)

    logger.debug("Found %d wanted fuzzer(s) in %d comment block(s)", len(specs), len(blocks))
    return specs, errors


def parse_block(text: str) -> list[HarnessSpec]:
    """Parse one comment block into the harnesses it describes.

    A block without "@fuzz interface:" describes nothing. Raises
    DirectiveError on the first malformed directive.
    """
    specs: list[HarnessSpec] = []
    current: Optional[HarnessSpec] = None

    for line in split_lines(text):
        line = line.strip()

        suffix, ok = match_prefix(line, FUZZ_INTERFACE)
        if ok:
            name = _run_directive(FUZZ_INTERFACE, parse_fuzz_interface, suffix, line)
            if current is not None:
                specs.append(current)
            current = HarnessSpec(interface_name=name)
            continue

        if current is None:
            for prefix in _HARNESS_DIRECTIVES:
                if line.startswith(prefix):
                    raise DirectiveError(
                        f"'{prefix}' appears before any '{FUZZ_INTERFACE}' in its comment", line
                    )
            continue

        parse_line(line, current)

    if current is not None:
        specs.append(current)
    return specs


def parse_line(line: str, spec: HarnessSpec):
    """Apply one line of a comment to a harness. Lines which are not
    special comments are ignored."""
    for prefix, handler in _HARNESS_DIRECTIVES.items():
        suffix, ok = match_prefix(line, prefix)
        if ok:
            _run_directive(prefix, lambda text: handler(text, spec), suffix, line)
            return


def _run_directive(prefix: str, parse: Callable, suffix: str, line: str):
    try:
        return parse(suffix)
    except GrammarError as e:
        raise DirectiveError(f"{prefix} {e}", line) from e


# ─────────────────────────────────────────────────────────────
#  Directive Payloads
# ─────────────────────────────────────────────────────────────

def parse_fuzz_interface(text: str) -> str:
    """SYNTAX: Name"""
    name, rest = parse_name(text)
    if not name:
        raise DirectiveError(f"expected a name in '{text}'", text)
    if rest:
        raise DirectiveError(f"unexpected left over input in '{text}' (got '{rest}')", rest)
    return name


def parse_known_correct(text: str, interface_name: str) -> tuple[MethodSignature, bool]:
    """SYNTAX: [&] FunctionName [ArgType1 ... ArgTypeN]

    The flag is true if the function returns a value rather than a
    pointer. The function always returns the interface type.
    """
    if not text:
        raise DirectiveError("empty argument", text)

    rest, returns_value = match_prefix(text, "&")

    name, rest = parse_name(rest)
    if not name:
        raise DirectiveError(f"expected a function name in '{text}'", text)

    parameters = parse_type_list(rest)
    function = MethodSignature(
        name=name,
        parameters=tuple(parameters),
        returns=(NamedType(interface_name),),
    )
    return function, returns_value


def parse_comparison(text: str) -> Comparison:
    """SYNTAX: (Type:MethodName | FunctionName Type)"""
    comparison, rest = parse_function_or_method(text)
    if rest:
        raise DirectiveError(f"unexpected left over input in '{text}' (got '{rest}')", rest)
    return comparison


def parse_function_or_method(text: str) -> tuple[Comparison, str]:
    """Parse a function or a method, returning the remainder.

    Names and types overlap, so both readings are tried: if the line
    reads as a type followed by ':' it is a method; failing that, if it
    starts with a name it is a function; otherwise it is neither.
    """
    method = _try_method(text)
    if method is not None:
        return method

    name, rest = parse_name(text)
    if not name:
        raise DirectiveError(f"'{text}' does not appear to be a method or function", text)

    ty, rest = parse_type(rest)
    return Comparison(name=name, type=ty, is_function=True), rest


def _try_method(text: str) -> Optional[tuple[Comparison, str]]:
    try:
        ty, rest = parse_type(text)
    except TypeSyntaxError:
        return None

    suffix, ok = match_prefix(rest, ":")
    if not ok:
        return None

    name, rest = parse_name(suffix)
    if not name:
        raise DirectiveError(f"expected a method name in '{text}'", text)
    return Comparison(name=name, type=ty, is_function=False), rest


def parse_generator(text: str) -> tuple[Type, Generator]:
    """SYNTAX: [!] FunctionName Type"""
    rest, stateful = match_prefix(text, "!")

    name, rest = parse_name(rest)
    if not name:
        raise DirectiveError(f"expected a name in '{text}'", text)

    ty, rest = parse_type(rest)
    if rest:
        raise DirectiveError(f"unexpected left over input in '{text}' (got '{rest}')", rest)

    return ty, Generator(name=name, is_stateful=stateful)


def parse_generator_state(text: str) -> str:
    """SYNTAX: Expression

    Nothing is checked beyond presence.
    """
    if not text:
        raise DirectiveError("expected an initial state", text)
    return text


def parse_invariant(text: str) -> str:
    """SYNTAX: Expression

    Nothing is checked beyond presence.
    """
    if not text:
        raise DirectiveError("expected an invariant expression", text)
    return text


# ─────────────────────────────────────────────────────────────
#  Harness Mutators
# ─────────────────────────────────────────────────────────────

def _known_correct(text: str, spec: HarnessSpec):
    spec.reference, spec.returns_value = parse_known_correct(text, spec.interface_name)


def _comparison(text: str, spec: HarnessSpec):
    comparison = parse_comparison(text)
    spec.comparisons[comparison.type.to_string()] = comparison


def _generator(text: str, spec: HarnessSpec):
    ty, generator = parse_generator(text)
    spec.generators[ty.to_string()] = generator


def _generator_state(text: str, spec: HarnessSpec):
    spec.generator_state = parse_generator_state(text)


def _invariant(text: str, spec: HarnessSpec):
    spec.invariants.append(parse_invariant(text))


_HARNESS_DIRECTIVES: dict[str, Callable[[str, HarnessSpec], None]] = {
    KNOWN_CORRECT: _known_correct,
    COMPARISON: _comparison,
    GENERATOR: _generator,
    GENERATOR_STATE: _generator_state,
    INVARIANT: _invariant,
}
