"""Configuration for the code generator."""

from dataclasses import dataclass


@dataclass
class CodeGenOptions:
    """Options for the code generator.

    Attributes:
        complete: Generate a complete source file, with package clause
                  and imports.
        filename: Source file named in the generated-code header of a
                  complete file. The CLI defaults it to the input file.
        package_name: Package of the generated code. Defaults to the
                      package of the source file.
        no_test_case: Skip the FuzzTest...(..., *testing.T) function.
        no_default_fuzz: Skip the Fuzz...(..., *rand.Rand, uint)
                         function. Implies no_test_case.
        seed: Seed of the PRNG in the generated test case.
        max_ops: Number of operations the generated test case performs.
    """

    complete: bool = False
    filename: str = ""
    package_name: str = ""
    no_test_case: bool = False
    no_default_fuzz: bool = False
    seed: int = 0
    max_ops: int = 100

    @property
    def emit_test_case(self) -> bool:
        return not (self.no_test_case or self.no_default_fuzz)

    @property
    def emit_default_fuzz(self) -> bool:
        return not self.no_default_fuzz
