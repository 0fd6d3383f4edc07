from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .api import CompileOptions, compile_file, compile_string
from .errors import BFError
from .instructions import format_listing
from .tape import DATA_CHUNK_SIZE
from .vm import ENGINES, RunOptions, VirtualMachine

LOG = logging.getLogger("bfvm")


def _setup_logging(verbose: bool) -> None:
    if not LOG.handlers:
        h = logging.StreamHandler(sys.stderr)
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        LOG.addHandler(h)
    LOG.setLevel(logging.DEBUG if verbose else logging.INFO)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfvm",
        description="Compile and run a tape language program. Program input is read from stdin.",
    )
    parser.add_argument("file", nargs="?", help="program file (default: read the program from stdin)")
    parser.add_argument("-O", dest="level", type=int, choices=(0, 1), default=1,
                        help="0 = fold only, 1 = also fuse clear/move loops (default)")
    parser.add_argument("--dump", action="store_true", help="print the compiled instructions instead of running")
    parser.add_argument("--strict", action="store_true", help="treat cell overflow/underflow as an error")
    parser.add_argument("--max-steps", type=int, default=None, help="abort after this many instructions")
    parser.add_argument("--chunk-size", type=int, default=DATA_CHUNK_SIZE, help="tape growth granularity")
    parser.add_argument("--engine", choices=ENGINES, default="python", help="execution engine")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    compile_options = CompileOptions(optimize_level=args.level)
    try:
        if args.file:
            result = compile_file(args.file, options=compile_options)
        else:
            result = compile_string(sys.stdin.buffer.read(), options=compile_options)
    except OSError as e:
        LOG.error("Failed to read program code: %s", e)
        return 1
    except BFError as e:
        LOG.error("%s", e)
        return 1

    LOG.debug("%d commands compiled to %d instructions", result.command_count, len(result.instructions))

    if args.dump:
        sys.stdout.write(format_listing(result.instructions) + "\n")
        return 0

    run_options = RunOptions(
        allow_overflows=not args.strict,
        max_steps=args.max_steps,
        chunk_size=args.chunk_size,
        engine=args.engine,
    )
    try:
        vm = VirtualMachine(result.instructions, options=run_options)
    except ValueError as e:
        LOG.error("%s", e)
        return 2
    try:
        vm.run()
    except ImportError as e:
        LOG.error("The jit engine needs numba (install bfvm[jit]): %s", e)
        return 2
    except BFError as e:
        LOG.error("%s", e)
        return 1
    except OSError as e:
        LOG.error("I/O error: %s", e)
        return 1
    finally:
        sys.stdout.buffer.flush()
    LOG.debug("first cells: %s", vm.tape.snapshot().hex(" "))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
