from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import BinaryIO, List, Optional, TextIO

from . import __version__
from .api import compile_string, run_program, run_string
from .bridge import StreamIO
from .config import EngineConfig, EofPolicy, PointerPolicy
from .errors import ConfigError, DerstandRuntimeError, DerstandStructuralError
from .lexer import INSTRUCTION_CHARS

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="derstand",
        description="Derstand interpreter (Brainfuck with # $ % & extensions).",
    )
    parser.add_argument("file", nargs="?", help="Source file to run. Starts a REPL when omitted.")
    parser.add_argument("--memory-size", type=int, default=None, help="Number of tape cells (default 30000)")
    parser.add_argument("--pointer-policy", choices=[p.value for p in PointerPolicy], default=None,
                        help="What happens when the pointer leaves the tape (default clamp)")
    parser.add_argument("--eof-policy", choices=[p.value for p in EofPolicy], default=None,
                        help="What ',' does at end of input (default zero)")
    parser.add_argument("--max-steps", type=int, default=None, help="Abort after this many instructions")
    parser.add_argument("--no-jit", action="store_true", help="Use the pure Python step loop")
    parser.add_argument("--time", action="store_true", help="Print the execution time to stderr")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def config_from_args(args: argparse.Namespace) -> EngineConfig:
    return EngineConfig.from_env().with_overrides(
        memory_size=args.memory_size,
        pointer_policy=args.pointer_policy,
        eof_policy=args.eof_policy,
        max_steps=args.max_steps,
        jit=False if args.no_jit else None,
    )


def run_path(path: str, config: EngineConfig, *, stdin: Optional[BinaryIO] = None,
             stdout: Optional[BinaryIO] = None, show_time: bool = False) -> int:
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            source = f.read()
    except FileNotFoundError:
        print(f"File not found: {path}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    try:
        program = compile_string(source)
    except DerstandStructuralError as e:
        print(f"Compilation error: {e}", file=sys.stderr)
        return 1

    start = time.perf_counter()
    try:
        run_program(program, StreamIO(stdin, stdout), config=config)
    except DerstandRuntimeError as e:
        print(f"Execution error: {e}", file=sys.stderr)
        return 1
    elapsed = time.perf_counter() - start

    if show_time:
        print(f"\nExecution time: {elapsed * 1000:.3f} ms", file=sys.stderr)
    return 0


def repl(config: EngineConfig, *, lines: Optional[TextIO] = None, out: Optional[TextIO] = None) -> int:
    """Read-eval-print loop. Every line is a separate program on a fresh tape.

    Lines share the terminal with the REPL itself, so ',' sees end of input.
    """
    lines = lines if lines is not None else sys.stdin
    out = out if out is not None else sys.stdout

    print(f"Derstand Interpreter v{__version__}", file=out)
    print(f"Instructions: {' '.join(INSTRUCTION_CHARS)}", file=out)
    print("Type 'quit' to exit.", file=out)

    while True:
        out.write("\n> ")
        out.flush()

        line = lines.readline()
        if not line:
            break
        line = line.strip()
        if line in ("quit", "exit"):
            break
        if not line:
            continue

        try:
            result = run_string(line, config=config)
        except DerstandStructuralError as e:
            print(f"Compilation error: {e}", file=out)
            continue
        except DerstandRuntimeError as e:
            print(f"Execution error: {e}", file=out)
            continue

        if result.output:
            print(f"Output: {result.text}", file=out)
        else:
            print("(no output)", file=out)
        print(f"Execution time: {result.elapsed * 1000:.3f} ms", file=out)

    return 0


def main(argv: Optional[List[str]] = None, *, stdin: Optional[BinaryIO] = None,
         stdout: Optional[BinaryIO] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(levelname)5s %(name)s: %(message)s")

    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    logger.debug("using %s", config)

    if args.file is None:
        return repl(config)
    return run_path(args.file, config, stdin=stdin, stdout=stdout, show_time=args.time)


if __name__ == "__main__":
    raise SystemExit(main())
