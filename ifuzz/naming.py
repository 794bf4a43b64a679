"""
Type-directed variable naming.

Generated variables are named after their types, so that the emitted
code reads naturally: an `int` argument becomes `argInt`, a
`[]model.Message` result becomes `expectedModelMessage` and
`actualModelMessage`.
"""
from .interface import MethodSignature
from .strings import letters_only
from .types import Type

ARGUMENT_PREFIX = "arg"
EXPECTED_PREFIX = "expected"
ACTUAL_PREFIX = "actual"


def argument_names(function: MethodSignature) -> list[str]:
    """Unique names for the arguments of a call."""
    return type_list_names(ARGUMENT_PREFIX, function.parameters)


def expected_names(function: MethodSignature) -> list[str]:
    """Unique names for the results of the reference call."""
    return type_list_names(EXPECTED_PREFIX, function.returns)


def actual_names(function: MethodSignature) -> list[str]:
    """Unique names for the results of the tested call."""
    return type_list_names(ACTUAL_PREFIX, function.returns)


def type_list_names(prefix: str, types) -> list[str]:
    """Produce distinct variable names for a list of types.

    A name already taken gets the position of its type appended. Base
    names contain no digits, so a suffixed name cannot clash with
    another base name or with a name suffixed at another position.
    """
    names: list[str] = []
    for i, ty in enumerate(types):
        name = type_var_name(prefix, ty)
        if name in names:
            name = f"{name}{i}"
        names.append(name)
    return names


def type_var_name(prefix: str, ty: Type) -> str:
    """A (possibly not unique) variable name for a type."""
    name = letters_only(ty.to_string())
    return prefix + name[:1].upper() + name[1:]
