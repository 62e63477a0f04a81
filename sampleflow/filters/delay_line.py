"""
Fixed-size delay line used as filter history.
"""

from typing import Sequence
import numpy as np

from sampleflow.exceptions import FilterStateError

class DelayLine:
    """
    Fixed-length history of the most recent samples, newest first.

    Storage is a mirrored ring buffer: every sample is written at ``head`` and
    at ``head + length``, so ``buffer[head:head + length]`` is always the whole
    history in newest-first order as a contiguous view. Nothing is allocated
    after construction.
    """

    __slots__ = ('_length', '_dtype', '_buffer', '_head')

    def __init__(self, length: int, dtype=np.float64):
        if length < 0:
            raise ValueError("Delay line length cannot be negative")

        self._length = int(length)
        self._dtype = np.dtype(dtype)
        self._buffer = np.zeros(2 * self._length, dtype=self._dtype)
        self._head = 0

    def __len__(self) -> int:
        return self._length

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    def push(self, sample) -> None:
        """Insert the newest sample, discarding the oldest"""
        if self._length == 0:
            return
        head = self._head - 1
        if head < 0:
            head = self._length - 1
        self._buffer[head] = sample
        self._buffer[head + self._length] = sample
        self._head = head

    def history(self) -> np.ndarray:
        """Read-only view of the retained samples: [x[n-1], x[n-2], ...]"""
        view = self._buffer[self._head:self._head + self._length]
        view.flags.writeable = False
        return view

    def snapshot(self) -> np.ndarray:
        """Copy of the retained samples, newest first"""
        return self._buffer[self._head:self._head + self._length].copy()

    def clear(self) -> None:
        """Zero every retained sample"""
        self._buffer.fill(0)
        self._head = 0

    def load(self, values: Sequence[float]) -> None:
        """
        Replace the retained samples.

        Args:
            values: New contents, newest first; must match the line length

        Raises:
            FilterStateError: If the values don't fit the line
        """
        array = np.asarray(values, dtype=self._dtype)
        if array.ndim != 1 or array.size != self._length:
            raise FilterStateError(
                f"Delay line holds {self._length} samples, got shape {array.shape}"
            )
        self._head = 0
        self._buffer[:self._length] = array
        self._buffer[self._length:] = array

    def __deepcopy__(self, memo):
        clone = DelayLine(self._length, self._dtype)
        clone._buffer[:] = self._buffer
        clone._head = self._head
        return clone

    def __repr__(self) -> str:
        return f"DelayLine(length={self._length}, dtype={self._dtype})"
