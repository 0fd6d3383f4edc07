from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence, Tuple

import numpy as np
from numba import njit

from .instructions import Instruction, Kind

if TYPE_CHECKING:
    from .vm import VirtualMachine

logger = logging.getLogger(__name__)

# numeric opcodes for the compiled loop
OP_MODIFY = 0
OP_SHIFT = 1
OP_PRINT = 2
OP_SCAN = 3
OP_BEGIN_LOOP = 4
OP_END_LOOP = 5
OP_CLEAR = 6
OP_ADD = 7
OP_SUB = 8

OPCODES = {
    Kind.MODIFY: OP_MODIFY,
    Kind.SHIFT: OP_SHIFT,
    Kind.PRINT: OP_PRINT,
    Kind.SCAN: OP_SCAN,
    Kind.BEGIN_LOOP: OP_BEGIN_LOOP,
    Kind.END_LOOP: OP_END_LOOP,
    Kind.CLEAR: OP_CLEAR,
    Kind.ADD: OP_ADD,
    Kind.SUB: OP_SUB,
}

# stop reasons
STOP_END = 0
STOP_PRINT = 1
STOP_SCAN = 2
STOP_GROW = 3
STOP_UNDERFLOW = 4
STOP_LIMIT = 5


@njit(cache=True)
def jit_loop(ops, args, memory, pc, pointer, max_steps):
    """
    Execute until the program ends or an instruction needs the host.

    Print and Scan stop with pc on the instruction so the caller performs
    the I/O. Shift/Add/Sub past the end of memory stop before executing so
    the caller can grow the tape and resume at the same pc.
    """
    stop_reason = STOP_END
    prog_len = len(ops)
    mem_len = len(memory)
    steps = 0

    while pc < prog_len:
        if max_steps >= 0 and steps >= max_steps:
            stop_reason = STOP_LIMIT
            break
        op = ops[pc]
        arg = args[pc]

        if op == OP_MODIFY:
            memory[pointer] = np.uint8((np.int64(memory[pointer]) + arg) & 255)
        elif op == OP_SHIFT:
            target = pointer + arg
            if target < 0:
                stop_reason = STOP_UNDERFLOW
                break
            if target >= mem_len:
                stop_reason = STOP_GROW
                break
            pointer = target
        elif op == OP_BEGIN_LOOP:
            if memory[pointer] == 0:
                pc += arg
        elif op == OP_END_LOOP:
            if memory[pointer] != 0:
                pc -= arg
        elif op == OP_CLEAR:
            memory[pointer] = 0
        elif op == OP_ADD or op == OP_SUB:
            target = pointer + arg
            if target < 0:
                stop_reason = STOP_UNDERFLOW
                break
            if target >= mem_len:
                stop_reason = STOP_GROW
                break
            if op == OP_ADD:
                memory[target] = np.uint8((np.int64(memory[target]) + np.int64(memory[pointer])) & 255)
            else:
                memory[target] = np.uint8((np.int64(memory[target]) - np.int64(memory[pointer])) & 255)
            memory[pointer] = 0
        elif op == OP_PRINT:
            stop_reason = STOP_PRINT
            break
        elif op == OP_SCAN:
            stop_reason = STOP_SCAN
            break

        pc += 1
        steps += 1

    return pc, pointer, stop_reason, steps


def encode(program: Sequence[Instruction]) -> Tuple[np.ndarray, np.ndarray]:
    ops = np.array([OPCODES[ins.kind] for ins in program], dtype=np.int64)
    args = np.array([ins.arg for ins in program], dtype=np.int64)
    return ops, args


def execute(vm: VirtualMachine) -> None:
    """Run vm.program through the compiled loop, handling I/O and growth here."""
    ops, args = encode(vm.program)
    max_steps = vm.options.max_steps
    pc = 0

    while True:
        budget = -1 if max_steps is None else max_steps - vm.steps
        pc, pointer, stop_reason, steps = jit_loop(ops, args, vm.tape.cells, pc, vm.pointer, budget)
        pc = int(pc)
        vm.pointer = int(pointer)
        vm.steps += int(steps)

        if stop_reason == STOP_END:
            return
        if stop_reason == STOP_GROW:
            logger.debug("jit loop yielded for tape growth at instruction %d", pc)
            vm.tape.ensure(vm.pointer + int(args[pc]))
            continue
        if stop_reason == STOP_UNDERFLOW:
            raise vm._underflow(vm.pointer, vm.pointer + int(args[pc]), pc)
        if stop_reason == STOP_LIMIT:
            raise vm._step_limit(vm.pointer, pc)

        cells = vm.tape.cells
        if stop_reason == STOP_PRINT:
            vm._print(int(cells[vm.pointer]), int(args[pc]))
        elif stop_reason == STOP_SCAN:
            cells[vm.pointer] = vm._scan(vm.pointer, pc)
        pc += 1
        vm.steps += 1
