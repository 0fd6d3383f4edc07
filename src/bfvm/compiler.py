from __future__ import annotations

import logging
from typing import List, Optional, Tuple, Union

from .errors import make_bracket_error, make_empty_loop_error
from .instructions import COMMANDS, Instruction, Kind, fold, is_flat

logger = logging.getLogger(__name__)

Source = Union[str, bytes, bytearray]


def _as_text(source: Source) -> str:
    if isinstance(source, (bytes, bytearray)):
        # latin-1 keeps one character per byte so positions stay byte offsets
        return bytes(source).decode('latin-1')
    return source


def _match_move_loop(body: List[Instruction]) -> Optional[Instruction]:
    """Recognize the two four-instruction move idioms and return the fused Add/Sub."""
    if len(body) != 4:
        return None
    kinds = tuple(ins.kind for ins in body)
    if kinds == (Kind.SHIFT, Kind.MODIFY, Kind.SHIFT, Kind.MODIFY):
        shift, middle, back, dec = body
    elif kinds == (Kind.MODIFY, Kind.SHIFT, Kind.MODIFY, Kind.SHIFT):
        dec, shift, middle, back = body
    else:
        return None
    if dec.arg != -1 or back.arg != -shift.arg or middle.arg not in (1, -1):
        return None
    return Instruction(Kind.ADD if middle.arg == 1 else Kind.SUB, shift.arg)


class Compiler:
    """
    Compiles program text into a flat instruction sequence.

    Pipeline, applied at top level and inside every loop, innermost first:
    - scan a straight-line run of commands and fold it
    - on '[' open a new body on the loop stack, on ']' close it
    - lower the loop to BeginLoop/EndLoop with relative jump distances,
      or replace it with a fused Clear/Add/Sub when it matches an idiom

    optimize_level 0 keeps folding and loop validation but emits every
    loop as a real loop.
    """

    def __init__(self, optimize_level: int = 1):
        self.optimize_level = optimize_level
        self.source = ''
        self.loops = 0
        self.fused = 0

    def compile(self, source: Source) -> Tuple[Instruction, ...]:
        self.source = _as_text(source)
        self.loops = 0
        self.fused = 0

        code = self._compile_block()
        program = tuple(code)
        logger.debug(
            "compiled %d source bytes into %d instructions (%d loops, %d fused)",
            len(self.source), len(program), self.loops, self.fused,
        )
        return program

    def _scan_run(self, pos: int) -> Tuple[List[Instruction], int]:
        text = self.source
        run: List[Instruction] = []
        while pos < len(text):
            ch = text[pos]
            if ch == '[' or ch == ']':
                break
            ins = COMMANDS.get(ch)
            if ins is not None:
                run.append(ins)
            pos += 1
        return fold(run), pos

    def _compile_block(self) -> List[Instruction]:
        """
        Compile the whole source with an explicit stack of open loops.

        Each '[' pushes (enclosing code, position of the '[') and starts a
        fresh body; the matching ']' pops the frame and appends the lowered
        loop to the enclosing code. Nesting depth is bounded by memory only.
        """
        text = self.source
        code: List[Instruction] = []
        frames: List[Tuple[List[Instruction], int]] = []
        pos = 0
        while True:
            run, pos = self._scan_run(pos)
            code.extend(run)
            if pos >= len(text):
                if frames:
                    raise make_bracket_error(bracket='[', source=text, position=frames[-1][1])
                return code

            if text[pos] == '[':
                frames.append((code, pos))
                code = []
            else:
                if not frames:
                    raise make_bracket_error(bracket=']', source=text, position=pos)
                outer, bracket = frames.pop()
                outer.extend(self._lower_loop(code, bracket))
                code = outer
            pos += 1

    def _lower_loop(self, body: List[Instruction], bracket: int) -> List[Instruction]:
        self.loops += 1
        if is_flat(body):
            body = fold(body)
            if not body:
                raise make_empty_loop_error(source=self.source, position=bracket)
            if self.optimize_level >= 1:
                if all(ins.kind is Kind.MODIFY for ins in body):
                    self.fused += 1
                    return [Instruction(Kind.CLEAR)]
                fused = _match_move_loop(body)
                if fused is not None:
                    self.fused += 1
                    return [fused]

        jump = len(body) + 1
        return [Instruction(Kind.BEGIN_LOOP, jump), *body, Instruction(Kind.END_LOOP, jump)]


def compile_source(source: Source, *, optimize_level: int = 1) -> Tuple[Instruction, ...]:
    return Compiler(optimize_level=optimize_level).compile(source)
