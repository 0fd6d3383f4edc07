from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence


# ---------------- Instruction model ----------------
class Kind(Enum):
    MODIFY = 'Modify'      # add delta to current cell
    SHIFT = 'Shift'        # add delta to data pointer
    PRINT = 'Print'        # emit current cell arg times
    SCAN = 'Scan'          # read one byte into current cell
    BEGIN_LOOP = 'BeginLoop'
    END_LOOP = 'EndLoop'
    CLEAR = 'Clear'        # fused [-]
    ADD = 'Add'            # fused move-add to offset
    SUB = 'Sub'            # fused move-sub to offset


@dataclass(frozen=True)
class Instruction:
    kind: Kind
    arg: int = 0

    def __str__(self) -> str:
        if self.kind is Kind.CLEAR:
            return 'Clear'
        if self.kind in (Kind.MODIFY, Kind.SHIFT, Kind.ADD, Kind.SUB):
            return f"{self.kind.value}({self.arg:+d})"
        return f"{self.kind.value}({self.arg})"


FOLDABLE = frozenset((Kind.MODIFY, Kind.SHIFT, Kind.PRINT))
LOOP_KINDS = frozenset((Kind.BEGIN_LOOP, Kind.END_LOOP))

COMMANDS = {
    '+': Instruction(Kind.MODIFY, 1),
    '-': Instruction(Kind.MODIFY, -1),
    '>': Instruction(Kind.SHIFT, 1),
    '<': Instruction(Kind.SHIFT, -1),
    '.': Instruction(Kind.PRINT, 1),
    ',': Instruction(Kind.SCAN, 1),
}


def fold(instructions: Iterable[Instruction]) -> List[Instruction]:
    """Combine adjacent Modify/Modify, Shift/Shift and Print/Print; remove zeros."""
    out: List[Instruction] = []
    for ins in instructions:
        if ins.kind in FOLDABLE and out and out[-1].kind is ins.kind:
            total = out[-1].arg + ins.arg
            out.pop()
            if total != 0:
                out.append(Instruction(ins.kind, total))
            continue
        if ins.kind in FOLDABLE and ins.arg == 0:
            continue
        out.append(ins)
    return out


def is_flat(instructions: Iterable[Instruction]) -> bool:
    return not any(ins.kind in LOOP_KINDS for ins in instructions)


# ---------------- Listing + emit ----------------
def format_listing(instructions: Sequence[Instruction]) -> str:
    width = len(str(max(len(instructions) - 1, 0)))
    depth = 0
    out: List[str] = []
    for i, ins in enumerate(instructions):
        if ins.kind is Kind.END_LOOP:
            depth -= 1
        out.append(f"{i:>{width}}  {'  ' * depth}{ins}")
        if ins.kind is Kind.BEGIN_LOOP:
            depth += 1
    return "\n".join(out)


def _shift_text(n: int) -> str:
    return ('>' * n) if n > 0 else ('<' * (-n))


def to_source(instructions: Iterable[Instruction]) -> str:
    """Emit standard source that compiles back to the same instruction sequence."""
    out: List[str] = []
    for ins in instructions:
        k = ins.kind
        if k is Kind.MODIFY:
            out.append(('+' * ins.arg) if ins.arg > 0 else ('-' * (-ins.arg)))
        elif k is Kind.SHIFT:
            out.append(_shift_text(ins.arg))
        elif k is Kind.PRINT:
            out.append('.' * ins.arg)
        elif k is Kind.SCAN:
            out.append(',')
        elif k is Kind.BEGIN_LOOP:
            out.append('[')
        elif k is Kind.END_LOOP:
            out.append(']')
        elif k is Kind.CLEAR:
            out.append('[-]')
        elif k in (Kind.ADD, Kind.SUB):
            sign = '+' if k is Kind.ADD else '-'
            out.append('[-' + _shift_text(ins.arg) + sign + _shift_text(-ins.arg) + ']')
    return ''.join(out)
