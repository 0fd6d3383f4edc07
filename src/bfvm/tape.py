from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

# count of cells to allocate each time the tape needs to grow
DATA_CHUNK_SIZE = 30000


class Tape:
    """Byte cells backed by a numpy uint8 buffer that grows in whole chunks."""

    def __init__(self, chunk_size: int = DATA_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self.cells = np.zeros(chunk_size, dtype=np.uint8)

    def __len__(self) -> int:
        return len(self.cells)

    def __getitem__(self, index: int) -> int:
        return int(self.cells[index])

    def __setitem__(self, index: int, value: int) -> None:
        self.cells[index] = np.uint8(value % 256)

    def ensure(self, index: int) -> np.ndarray:
        """Grow the tape so that index is addressable; returns the (possibly new) buffer."""
        size = len(self.cells)
        if index >= size:
            chunks = (index - size) // self.chunk_size + 1
            extra = np.zeros(chunks * self.chunk_size, dtype=np.uint8)
            self.cells = np.concatenate((self.cells, extra))
            logger.debug("tape grown from %d to %d cells", size, len(self.cells))
        return self.cells

    def reset(self) -> None:
        self.cells = np.zeros(self.chunk_size, dtype=np.uint8)

    def snapshot(self, length: int = 16) -> bytes:
        return self.cells[:length].tobytes()
