"""Building blocks of the slab allocator: slot masks, pages, slots and stats."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .bits import WORD_BITS
from .dlist import ListHead

#: Mask value of a page with every slot free.
PAGE_FREE = 0
#: Mask value of a page with every slot taken (all bits of a word set).
PAGE_BUSY = (1 << WORD_BITS) - 1

#: Largest number of slots a page may hold: one per mask bit.
PAGE_MAX = WORD_BITS
#: Smallest number of slots a shrunk page must still hold.
PAGE_MIN = 8
#: Size of a standard allocation block in bytes.
PAGE_SIZE = 4096
#: Bytes taken by the per-slot header that precedes user data.
SLOT_HEADER = 1
#: Bytes taken by a page's bookkeeping before its slot data
#: (two list links, the boss link, the mask and the reference count).
PAGE_HEADER_SIZE = 5 * (WORD_BITS // 8)


def _check_count(count: int) -> None:
    if not 0 <= count <= WORD_BITS:
        raise ValueError(f"slot count must be between 0 and {WORD_BITS}, got {count}")


def _low_bits(count: int) -> int:
    return (1 << count) - 1


def page_init_mask(count: int) -> int:
    """Return the mask of an empty page with ``count`` usable slots.

    The low ``count`` bits are clear (free slots); every higher bit is set,
    so a page whose slots are all taken has a mask equal to PAGE_BUSY.
    """
    _check_count(count)
    return PAGE_BUSY ^ _low_bits(count)


def page_one_used(mask: int, count: int) -> bool:
    """Return True when exactly one of the low ``count`` slots is taken."""
    _check_count(count)
    relevant = mask & _low_bits(count)
    return relevant != 0 and relevant & (relevant - 1) == 0


def first_free_slot(mask: int) -> int:
    """Return the index of the lowest clear bit of ``mask``.

    Raises ValueError when the mask has no free slot.
    """
    free = ~mask & PAGE_BUSY
    if not free:
        raise ValueError("page has no free slot")
    return (free & -free).bit_length() - 1


def used_slots(mask: int, count: int) -> Iterator[int]:
    """Yield, in ascending order, the indices of taken slots among the low ``count``."""
    _check_count(count)
    remaining = mask & _low_bits(count)
    while remaining:
        lowest = remaining & -remaining
        yield lowest.bit_length() - 1
        remaining ^= lowest


@dataclass
class SlabStats:
    """Usage counters of a slab allocator."""

    total: int = 0
    used: int = 0
    reqs: int = 0
    fails: int = 0

    def reset(self) -> None:
        """Set every counter back to zero."""
        self.total = self.used = self.reqs = self.fails = 0


class SlabPage(ListHead):
    """A page of fixed-size slots tracked by a bitmask.

    The first page of an allocation block is its boss and counts how many
    pages of the block are in use in ``refcount``; the other pages (slaves)
    keep ``refcount`` at 0 and point at their boss through ``boss``.
    """

    def __init__(self, item_count: int, item_size: int,
                 boss: Optional["SlabPage"] = None, refcount: int = 0) -> None:
        super().__init__()
        _check_count(item_count)
        if item_size < 0:
            raise ValueError(f"item size must not be negative, got {item_size}")
        self.item_count = item_count
        self.item_size = item_size
        self.boss = boss
        self.refcount = refcount
        self.mask = page_init_mask(item_count)
        self.data: List[bytearray] = [bytearray(item_size) for _ in range(item_count)]

    def __repr__(self) -> str:
        role = "boss" if self.refcount else "slave"
        return (f"SlabPage({role}, items={self.item_count}, size={self.item_size}, "
                f"mask={self.mask:#x}, refcount={self.refcount})")


@dataclass(eq=False)
class Slot:
    """A slot handed out by a slab: its page, its index and its storage.

    ``header`` is the one-byte tag stored in front of the slot's data; the
    slab writes the slot index there and an arena may overwrite it with the
    index of the slab that owns the slot.
    """

    page: SlabPage
    index: int
    header: int = 0
    data: bytearray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not 0 <= self.index < self.page.item_count:
            raise IndexError(
                f"slot {self.index} is outside a page of {self.page.item_count} slots")
        if not 0 <= self.header <= 0xFF:
            raise ValueError(f"slot header must fit in one byte, got {self.header}")
        self.data = self.page.data[self.index]