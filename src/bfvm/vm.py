from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import BinaryIO, Optional, Sequence

from .errors import CellOverflowError, InputExhaustedError, StepLimitError, TapeUnderflowError
from .instructions import Instruction, Kind
from .tape import DATA_CHUNK_SIZE, Tape

logger = logging.getLogger(__name__)

ENGINES = ('python', 'jit')


@dataclass(frozen=True)
class RunOptions:
    """
    allow_overflows: wrap 255+1 -> 0 and 0-1 -> 255. When False, a Modify, Add
    or Sub whose result leaves 0..255 raises CellOverflowError. The check sees
    compiled instructions, not source commands: a folded run is checked by its
    net delta ("+-" at 255 passes) and a fused Clear never overflows ("[+]"
    passes).
    max_steps: abort with StepLimitError before executing instruction number
    max_steps; None means no limit. Must not be negative.
    """
    allow_overflows: bool = True
    max_steps: Optional[int] = None
    chunk_size: int = DATA_CHUNK_SIZE
    engine: str = 'python'


class VirtualMachine:
    """
    Runs a compiled instruction sequence against a growable byte tape.

    Loop instructions carry relative jump distances, so the dispatch loop is
    a single instruction index with no bracket scanning and no recursion.
    """

    def __init__(
        self,
        program: Sequence[Instruction],
        *,
        reader: Optional[BinaryIO] = None,
        writer: Optional[BinaryIO] = None,
        options: Optional[RunOptions] = None,
    ):
        self.program = tuple(program)
        self.reader = reader if reader is not None else sys.stdin.buffer
        self.writer = writer if writer is not None else sys.stdout.buffer
        self.options = options if options is not None else RunOptions()
        if self.options.engine not in ENGINES:
            raise ValueError(f"Unknown engine {self.options.engine!r}, expected one of {ENGINES}")
        if self.options.engine == 'jit' and not self.options.allow_overflows:
            raise ValueError('The jit engine does not support strict cell overflow checks')
        if self.options.max_steps is not None and self.options.max_steps < 0:
            raise ValueError(f"max_steps must not be negative, got {self.options.max_steps}")
        self.tape = Tape(self.options.chunk_size)
        self.pointer = 0
        self.steps = 0

    def reset(self) -> None:
        """Zero the tape and rewind the pointer so the program can run again."""
        self.tape.reset()
        self.pointer = 0
        self.steps = 0

    def run(self) -> None:
        if self.options.engine == 'jit':
            from . import jit
            jit.execute(self)
        else:
            self._execute()
        logger.debug("run finished after %d steps, pointer at %d", self.steps, self.pointer)

    # ---------------- error helpers ----------------
    def _underflow(self, pointer: int, target: int, index: int) -> TapeUnderflowError:
        return TapeUnderflowError(
            message=f"Data pointer underflow: cell #{target} (instruction {index})",
            pointer=pointer,
            index=index,
        )

    def _overflow(self, pointer: int, cell: int, value: int, index: int) -> CellOverflowError:
        kind = 'overflow' if value > 255 else 'underflow'
        return CellOverflowError(
            message=f"Cell #{cell} {kind}: value {value} (instruction {index})",
            pointer=pointer,
            index=index,
        )

    def _step_limit(self, pointer: int, index: int) -> StepLimitError:
        return StepLimitError(
            message=f"Step limit of {self.options.max_steps} exceeded (instruction {index})",
            pointer=pointer,
            index=index,
        )

    def _scan(self, pointer: int, index: int) -> int:
        data = self.reader.read(1)
        if not data:
            raise InputExhaustedError(
                message=f"Input exhausted (instruction {index})",
                pointer=pointer,
                index=index,
            )
        return data[0]

    def _print(self, value: int, count: int) -> None:
        out = bytes((value,))
        for _ in range(count):
            self.writer.write(out)

    # ---------------- dispatch loop ----------------
    def _execute(self) -> None:
        program = self.program
        size = len(program)
        tape = self.tape
        cells = tape.cells
        strict = not self.options.allow_overflows
        max_steps = self.options.max_steps
        ptr = self.pointer
        steps = self.steps
        i = 0

        try:
            while i < size:
                if max_steps is not None and steps >= max_steps:
                    raise self._step_limit(ptr, i)
                ins = program[i]
                kind = ins.kind
                arg = ins.arg

                if kind is Kind.MODIFY:
                    value = int(cells[ptr]) + arg
                    if strict and not 0 <= value <= 255:
                        raise self._overflow(ptr, ptr, value, i)
                    cells[ptr] = value & 0xFF
                elif kind is Kind.SHIFT:
                    target = ptr + arg
                    if target < 0:
                        raise self._underflow(ptr, target, i)
                    if target >= len(cells):
                        cells = tape.ensure(target)
                    ptr = target
                elif kind is Kind.BEGIN_LOOP:
                    if cells[ptr] == 0:
                        i += arg
                elif kind is Kind.END_LOOP:
                    if cells[ptr] != 0:
                        i -= arg
                elif kind is Kind.CLEAR:
                    cells[ptr] = 0
                elif kind is Kind.ADD or kind is Kind.SUB:
                    target = ptr + arg
                    if target < 0:
                        raise self._underflow(ptr, target, i)
                    if target >= len(cells):
                        cells = tape.ensure(target)
                    current = int(cells[ptr])
                    if kind is Kind.ADD:
                        value = int(cells[target]) + current
                    else:
                        value = int(cells[target]) - current
                    if strict and not 0 <= value <= 255:
                        raise self._overflow(ptr, target, value, i)
                    cells[target] = value & 0xFF
                    cells[ptr] = 0
                elif kind is Kind.PRINT:
                    self._print(int(cells[ptr]), arg)
                elif kind is Kind.SCAN:
                    cells[ptr] = self._scan(ptr, i)

                i += 1
                steps += 1
        finally:
            self.pointer = ptr
            self.steps = steps
