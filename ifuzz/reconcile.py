"""
ifuzz Reconciliation
====================
Matches wanted fuzzers against the interfaces declared in a file.

Every problem is reported, not just the first:
  1. A wanted fuzzer whose interface is not declared
  2. A wanted fuzzer whose interface is declared more than once
  3. More than one wanted fuzzer for the same interface
"""
import logging
from dataclasses import dataclass

from .directives import HarnessSpec
from .errors import ReconcileError
from .interface import InterfaceDeclaration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fuzzer:
    """An interface declaration paired with how to fuzz it."""
    interface: InterfaceDeclaration
    wanted: HarnessSpec

    @property
    def name(self) -> str:
        return self.interface.name


def reconcile(
    declarations: list[InterfaceDeclaration],
    specs: list[HarnessSpec],
) -> tuple[list[Fuzzer], list[ReconcileError]]:
    """Pair each wanted fuzzer with its interface declaration.

    Errors are returned in the order of the wanted fuzzers. Only the
    first wanted fuzzer for an interface becomes a Fuzzer.
    """
    by_name: dict[str, list[InterfaceDeclaration]] = {}
    for declaration in declarations:
        by_name.setdefault(declaration.name, []).append(declaration)

    fuzzers: list[Fuzzer] = []
    errors: list[ReconcileError] = []
    requested: set[str] = set()

    for spec in specs:
        name = spec.interface_name
        found = by_name.get(name, [])
        declaration = found[0] if len(found) == 1 else None

        if not found:
            errors.append(ReconcileError(f"couldn't find interface '{name}' in this file", name))
        elif len(found) > 1:
            errors.append(ReconcileError(f"interface '{name}' is declared {len(found)} times in this file", name))

        if name in requested:
            errors.append(ReconcileError(f"already have a fuzzer for '{name}'", name))
        elif declaration is not None:
            fuzzers.append(Fuzzer(interface=declaration, wanted=spec))

        requested.add(name)

    logger.debug("Reconciled %d fuzzer(s) with %d error(s)", len(fuzzers), len(errors))
    return fuzzers, errors
