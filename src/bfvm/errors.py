from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple


def _locate(source: str, position: int) -> Tuple[int, int]:
    line = source.count('\n', 0, position) + 1
    column = position - (source.rfind('\n', 0, position) + 1) + 1
    return line, column


def _build_context(lines: List[str], line_no_1: int, column: int, *, context: int = 1) -> str:
    idx = max(1, min(line_no_1, len(lines)))
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
        if i == idx:
            out.append(f"       | {' ' * (column - 1)}^")
    return "\n".join(out)


def _hint_for(message: str) -> Optional[str]:
    msg = message.lower()
    if "unmatched '['" in msg:
        return "Every '[' needs a closing ']' later in the program."
    if "unmatched ']'" in msg:
        return "This ']' closes nothing. Remove it or add the missing '['."
    if 'empty loop' in msg:
        return 'A loop whose body cancels out never terminates once entered. Use [-] to clear a cell.'
    return None


@dataclass
class BFError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class CompileError(BFError):
    position: int
    line: int
    column: int
    context: str


@dataclass
class UnmatchedBracketError(CompileError):
    bracket: str


@dataclass
class EmptyLoopError(CompileError):
    pass


@dataclass
class RunError(BFError):
    pointer: int
    index: int


@dataclass
class TapeUnderflowError(RunError):
    pass


@dataclass
class InputExhaustedError(RunError):
    pass


@dataclass
class CellOverflowError(RunError):
    pass


@dataclass
class StepLimitError(RunError):
    pass


def _compile_message(message: str, source: str, position: int) -> Tuple[str, int, int, str]:
    line, column = _locate(source, position)
    ctx = _build_context(source.split('\n'), line, column)
    hint = _hint_for(message)
    hint_block = f"\nHint: {hint}" if hint else ""
    text = f"CompileError: {message} (line {line}, column {column})\n{ctx}{hint_block}"
    return text, line, column, ctx


def make_bracket_error(*, bracket: str, source: str, position: int) -> UnmatchedBracketError:
    text, line, column, ctx = _compile_message(f"unmatched '{bracket}'", source, position)
    return UnmatchedBracketError(
        message=text,
        position=position,
        line=line,
        column=column,
        context=ctx,
        bracket=bracket,
    )


def make_empty_loop_error(*, source: str, position: int) -> EmptyLoopError:
    text, line, column, ctx = _compile_message('empty loop', source, position)
    return EmptyLoopError(
        message=text,
        position=position,
        line=line,
        column=column,
        context=ctx,
    )
