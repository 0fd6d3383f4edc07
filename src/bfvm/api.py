from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from .compiler import Compiler, Source
from .instructions import COMMANDS, Instruction
from .vm import RunOptions, VirtualMachine


@dataclass(frozen=True)
class CompileOptions:
    optimize_level: int = 1


@dataclass(frozen=True)
class CompileResult:
    instructions: Tuple[Instruction, ...]
    command_count: int


@dataclass(frozen=True)
class RunResult:
    output: bytes
    pointer: int
    steps: int


def _count_commands(source: Source) -> int:
    if isinstance(source, (bytes, bytearray)):
        source = bytes(source).decode('latin-1')
    return sum(1 for ch in source if ch in COMMANDS or ch in '[]')


def compile_string(source: Source, *, options: Optional[CompileOptions] = None) -> CompileResult:
    opt_level = 1 if options is None else options.optimize_level
    compiler = Compiler(optimize_level=opt_level)
    program = compiler.compile(source)
    return CompileResult(instructions=program, command_count=_count_commands(source))


def compile_file(path: str | Path, *, options: Optional[CompileOptions] = None) -> CompileResult:
    p = Path(path)
    return compile_string(p.read_bytes(), options=options)


def run_string(
    source: Source,
    stdin: bytes = b"",
    *,
    options: Optional[RunOptions] = None,
    compile_options: Optional[CompileOptions] = None,
) -> RunResult:
    """Compile and run source against in-memory input; returns everything written."""
    result = compile_string(source, options=compile_options)
    out = io.BytesIO()
    vm = VirtualMachine(result.instructions, reader=io.BytesIO(stdin), writer=out, options=options)
    vm.run()
    return RunResult(output=out.getvalue(), pointer=vm.pointer, steps=vm.steps)
