#!/usr/bin/env python3
"""
Tests for the growable cell tape.
"""

import os
import sys

import numpy as np
import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bfvm import DATA_CHUNK_SIZE, Tape


def test_initial_allocation():
    tape = Tape()
    assert len(tape) == DATA_CHUNK_SIZE
    assert tape.cells.dtype == np.uint8
    assert not tape.cells.any()


def test_growth_preserves_values():
    tape = Tape(chunk_size=4)
    for i in range(4):
        tape[i] = i + 10
    cells = tape.ensure(9)
    assert cells is tape.cells
    assert len(tape) == 12
    assert [tape[i] for i in range(12)] == [10, 11, 12, 13] + [0] * 8


def test_ensure_within_capacity_is_noop():
    tape = Tape(chunk_size=8)
    before = tape.cells
    assert tape.ensure(7) is before
    assert len(tape) == 8


def test_setitem_wraps():
    tape = Tape(chunk_size=2)
    tape[0] = 256 + 7
    tape[1] = -1
    assert tape[0] == 7
    assert tape[1] == 255


def test_reset_zeroes_and_shrinks_to_one_chunk():
    tape = Tape(chunk_size=4)
    tape.ensure(10)
    tape[10] = 5
    tape.reset()
    assert len(tape) == 4
    assert not tape.cells.any()


def test_snapshot():
    tape = Tape(chunk_size=8)
    tape[1] = 72
    assert tape.snapshot(3) == b"\x00H\x00"


def test_chunk_size_must_be_positive():
    with pytest.raises(ValueError):
        Tape(chunk_size=0)
