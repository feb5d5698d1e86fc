"""Arena allocator: a set of power-of-two slabs chosen by request size."""

from __future__ import annotations

from typing import List, Optional

from .bits import log2, round_of_two
from .log import Log
from .slab import Slab
from .slabpage import Slot

#: Smallest block is ``1 << MIN_SHIFT`` bytes.
MIN_SHIFT = 4
#: Largest block is ``1 << MAX_SHIFT`` bytes.
MAX_SHIFT = 16


class Arena:
    """Serves requests of any size from slabs of 16, 32, ... 65536 bytes.

    A request is rounded up to the next power of two (at least the smallest
    block) and served by the matching slab. The slab's index is stored in
    the slot header so that ``free`` finds the owning slab without a search.
    """

    def __init__(self, log: Optional[Log] = None) -> None:
        self.min_shift = MIN_SHIFT
        self.max_shift = MAX_SHIFT
        self.min_size = 1 << self.min_shift
        self.shift_count = self.max_shift - self.min_shift + 1
        self.log = log
        self.slabs: List[Slab] = [
            Slab(1 << (self.min_shift + index), log)
            for index in range(self.shift_count)
        ]
        self._closed = False

    @property
    def max_size(self) -> int:
        """Largest request the arena can serve."""
        return 1 << self.max_shift

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("arena is closed")

    def slab_index(self, size: int) -> int:
        """Return the index of the slab that serves requests of ``size`` bytes."""
        if size <= 1:
            raise ValueError(f"allocation size must be greater than 1, got {size}")
        if size > self.max_size:
            raise ValueError(
                f"allocation size {size} exceeds the largest block of {self.max_size}")
        block = max(round_of_two(size), self.min_size)
        return log2(block) - self.min_shift

    def alloc(self, size: int) -> Slot:
        """Take a slot of at least ``size`` bytes.

        Raises ValueError when ``size`` is 1 or less, or larger than the
        largest block.
        """
        self._check_open()
        index = self.slab_index(size)
        slot = self.slabs[index].alloc()
        slot.header = index
        if self.log is not None:
            self.log.debug("Arena alloc: size: %d, slab: %d, slot: %d\n",
                           size, index, slot.index)
        return slot

    def calloc(self, size: int) -> Slot:
        """Take a slot of at least ``size`` bytes with its first ``size`` bytes zeroed."""
        slot = self.alloc(size)
        slot.data[:size] = bytes(size)
        return slot

    def free(self, slot: Slot) -> None:
        """Return ``slot`` to the slab recorded in its header.

        Raises ValueError when the header names no slab, or when that slab
        did not hand out the slot or it is already free.
        """
        self._check_open()
        index = slot.header
        if not 0 <= index < self.shift_count:
            raise ValueError(f"slot header {index} names no slab of this arena")
        if self.log is not None:
            self.log.debug("Arena free: slab: %d, slot: %d\n", index, slot.index)
        self.slabs[index].free(slot)

    def close(self) -> None:
        """Close every slab and reset the arena; later calls are no-ops."""
        if self._closed:
            return
        for slab in self.slabs:
            slab.close()
        self.min_size = 0
        self.shift_count = self.min_shift = self.max_shift = 0
        self.log = None
        self._closed = True

    def __enter__(self) -> "Arena":
        return self

    def __exit__(self, *args) -> None:
        self.close()