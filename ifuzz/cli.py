"""
ifuzz CLI
=========
Generate differential fuzz tests for the Go interfaces of a file.

Usage:
    ifuzz store.go                  # Print the fuzzers to stdout
    ifuzz store.go -c -o fuzz_test.go
    ifuzz store.json --no-test-case
    ifuzz store.go -v               # Debug logging

Status messages go to stderr so the generated code can be piped.
"""
import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import CodeGenOptions
from .errors import SourceError
from .pipeline import process
from .source import load_source

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging.

    Args:
        verbose: If True, set DEBUG level
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ifuzz",
        description="Generate differential fuzz tests for Go interfaces",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Usage:", 1)[1],
    )
    parser.add_argument("file", help="Go source file (.go) or source description (.json)")
    parser.add_argument(
        "-c", "--complete", action="store_true",
        help="generate a complete source file, with package clause and imports",
    )
    parser.add_argument(
        "-f", "--filename", default="",
        help="source file named in the header of a complete file (default: the input file)",
    )
    parser.add_argument(
        "-p", "--package", dest="package_name", default="",
        help="package of the generated code (default: the package of the input)",
    )
    parser.add_argument(
        "--no-test-case", action="store_true",
        help="do not generate the FuzzTest... (*testing.T) function",
    )
    parser.add_argument(
        "--no-default-fuzz", action="store_true",
        help="do not generate the Fuzz... function using the reference; implies --no-test-case",
    )
    parser.add_argument("--seed", type=int, default=0, help="PRNG seed of the generated test case (default: 0)")
    parser.add_argument(
        "--max-ops", type=_positive_int, default=100,
        help="operations performed by the generated test case (default: 100)",
    )
    parser.add_argument("-o", "--output", default=None, help="write the code to a file instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {value}")
    return value


def options_from_args(args: argparse.Namespace) -> CodeGenOptions:
    return CodeGenOptions(
        complete=args.complete,
        filename=args.filename or args.file,
        package_name=args.package_name,
        no_test_case=args.no_test_case,
        no_default_fuzz=args.no_default_fuzz,
        seed=args.seed,
        max_ops=args.max_ops,
    )


def _status(message: str = "") -> None:
    print(message, file=sys.stderr)


def run(args: argparse.Namespace) -> int:
    """Process one file. Returns the exit code."""
    try:
        unit = load_source(args.file)
    except SourceError as e:
        _status(f"✘ {e}")
        return 1

    result = process(unit, options_from_args(args))

    # Fuzzers which generated are written even if others failed.
    if result.ok or result.fuzzer_names:
        if args.output:
            Path(args.output).write_text(result.code, encoding="utf-8")
        else:
            sys.stdout.write(result.code)

    if result.fuzzer_names:
        _status(f"✔ Generated {len(result.fuzzer_names)} fuzzer(s): {', '.join(result.fuzzer_names)}")
    elif result.ok:
        _status(f"✔ No fuzzers requested in {unit.filename}")

    if not result.ok:
        _status(f"✘ {len(result.errors)} error(s) in {result.failed_stage}:")
        for error in result.errors:
            _status(f"  ✘ {error}")
        return 1
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
