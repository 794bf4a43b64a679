"""
Shared Hypothesis configuration.

Profiles:
    dev    100 examples (default)
    ci     1000 examples, reproducible
    debug  10 examples, verbose

Select one with HYPOTHESIS_PROFILE=ci.
"""
import os

from hypothesis import Phase, Verbosity, settings

settings.register_profile(
    "ci",
    max_examples=1000,
    deadline=None,
    print_blob=True,
    derandomize=True,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)

settings.register_profile(
    "dev",
    max_examples=100,
    deadline=None,
    print_blob=True,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)

settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "dev"))
