"""
ifuzz Pipeline
==============
Runs the stages for one source unit:

    comments ──▶ directives ──▶ reconcile ──▶ codegen ──▶ Go source

Each stage reports every problem it finds. The pipeline stops after
the directive or reconcile stage if it reports any, so code generation
never sees partial input. A fuzzer which fails code generation is left
out; the code for the others is kept alongside the errors, and the
caller decides whether to use it.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from .codegen import render_source
from .config import CodeGenOptions
from .directives import parse_harnesses
from .errors import FuzzgenError
from .interface import SourceUnit
from .reconcile import reconcile

logger = logging.getLogger(__name__)

STAGE_DIRECTIVES = "directives"
STAGE_RECONCILE = "reconcile"
STAGE_CODEGEN = "codegen"


@dataclass
class FuzzResult:
    """Outcome of processing one source unit.

    Attributes:
        code: The generated source. Empty if the directive or reconcile
              stage failed; after codegen errors, the code of the
              fuzzers which succeeded.
        failed_stage: Name of the stage that reported errors, if any.
        errors: The errors reported by that stage, in input order.
        fuzzer_names: Interfaces a fuzzer was generated for, in order.
    """
    code: str = ""
    failed_stage: Optional[str] = None
    errors: list[FuzzgenError] = field(default_factory=list)
    fuzzer_names: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed_stage is None


def process(unit: SourceUnit, options: Optional[CodeGenOptions] = None) -> FuzzResult:
    """Generate fuzz tests for every wanted fuzzer in a source unit."""
    options = options or CodeGenOptions()
    if not options.package_name:
        options = replace(options, package_name=unit.package)

    specs, grammar_errors = parse_harnesses(unit.comments)
    if grammar_errors:
        return FuzzResult(failed_stage=STAGE_DIRECTIVES, errors=list(grammar_errors))

    fuzzers, reconcile_errors = reconcile(unit.interfaces, specs)
    if reconcile_errors:
        return FuzzResult(failed_stage=STAGE_RECONCILE, errors=list(reconcile_errors))

    code, codegen_errors = render_source(fuzzers, options, unit.imports, unit.display_name)
    failed = {error.interface_name for error in codegen_errors}
    names = [fuzzer.name for fuzzer in fuzzers if fuzzer.name not in failed]

    logger.info("Generated %d fuzzer(s) for %s", len(names), unit.display_name or "<input>")
    if codegen_errors:
        return FuzzResult(
            code=code,
            failed_stage=STAGE_CODEGEN,
            errors=list(codegen_errors),
            fuzzer_names=names,
        )
    return FuzzResult(code=code, fuzzer_names=names)
