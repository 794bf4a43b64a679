"""
ifuzz Errors
============
Exception hierarchy shared by every stage of the pipeline.

Stages raise one of these per failing item (a comment block, a harness
request, a fuzzer) and the stage entry points collect them into lists,
so a single run reports every independent problem at once.
"""


class FuzzgenError(Exception):
    """Base class for all ifuzz errors."""
    pass


# ─────────────────────────────────────────────────────────────
#  Grammar errors: malformed type or directive text
# ─────────────────────────────────────────────────────────────

class GrammarError(FuzzgenError):
    """Malformed annotation text. Fatal to the enclosing comment block."""

    def __init__(self, message: str, fragment: str = ""):
        super().__init__(message)
        self.fragment = fragment


class TypeSyntaxError(GrammarError):
    """A type expression could not be parsed."""
    pass


class DirectiveError(GrammarError):
    """A special comment line could not be parsed."""
    pass


# ─────────────────────────────────────────────────────────────
#  Semantic errors: fatal to the enclosing harness
# ─────────────────────────────────────────────────────────────

class ReconcileError(FuzzgenError):
    """A harness request does not match the declared interfaces."""

    def __init__(self, message: str, interface_name: str):
        super().__init__(message)
        self.interface_name = interface_name


class CodegenError(FuzzgenError):
    """Code could not be generated for one fuzzer."""

    def __init__(self, message: str, interface_name: str = ""):
        super().__init__(message)
        self.interface_name = interface_name


class SourceError(FuzzgenError):
    """An input file could not be read or understood."""
    pass
