from .compiler import Compiler, compile_source
from .errors import (
    BFError,
    CellOverflowError,
    CompileError,
    EmptyLoopError,
    InputExhaustedError,
    RunError,
    StepLimitError,
    TapeUnderflowError,
    UnmatchedBracketError,
)
from .instructions import Instruction, Kind, fold, format_listing, to_source
from .tape import DATA_CHUNK_SIZE, Tape
from .vm import RunOptions, VirtualMachine
from .api import CompileOptions, CompileResult, RunResult, compile_file, compile_string, run_string

__all__ = [
    'Compiler',
    'compile_source',
    'BFError',
    'CompileError',
    'UnmatchedBracketError',
    'EmptyLoopError',
    'RunError',
    'TapeUnderflowError',
    'InputExhaustedError',
    'CellOverflowError',
    'StepLimitError',
    'Instruction',
    'Kind',
    'fold',
    'format_listing',
    'to_source',
    'DATA_CHUNK_SIZE',
    'Tape',
    'RunOptions',
    'VirtualMachine',
    'CompileOptions',
    'CompileResult',
    'RunResult',
    'compile_string',
    'compile_file',
    'run_string',
]
