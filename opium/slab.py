"""Slab allocator for fixed-size objects."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from .dlist import ListHead
from .log import Log
from .slabpage import (
    PAGE_BUSY,
    PAGE_HEADER_SIZE,
    PAGE_MAX,
    PAGE_MIN,
    PAGE_SIZE,
    SLOT_HEADER,
    SlabPage,
    SlabStats,
    Slot,
    first_free_slot,
    page_init_mask,
    used_slots,
)


class Slab:
    """Allocator handing out slots of one fixed size.

    Pages are grouped into blocks of ``pages_per_alloc`` bytes. The first page
    of a block is its boss; the rest are slaves. Pages move between the
    ``empty``, ``partial`` and ``full`` lists as slots are taken and released,
    and a block is dropped once its last used slot is freed.
    """

    def __init__(self, item_size: int, log: Optional[Log] = None) -> None:
        if item_size < 1:
            raise ValueError(f"item size must be at least 1, got {item_size}")

        self.object_size = item_size
        self.item_size = item_size + SLOT_HEADER
        item_count = PAGE_MAX

        needed = PAGE_HEADER_SIZE + item_count * self.item_size
        page_size = 1 << (needed - 1).bit_length()

        if page_size != needed:
            shrunk = page_size >> 1
            if PAGE_HEADER_SIZE < shrunk:
                shrunk_data = shrunk - PAGE_HEADER_SIZE
                if shrunk_data > self.item_size * PAGE_MIN:
                    page_size = shrunk
                    item_count = shrunk_data // self.item_size

        self.page_size = page_size
        self.item_count = item_count
        self.pages_per_alloc = max(page_size, PAGE_SIZE)
        self.alignment_mask = ~(page_size - 1) & PAGE_BUSY

        self.empty = ListHead()
        self.partial = ListHead()
        self.full = ListHead()

        self.counters = SlabStats()
        self.log = log

        self._blocks: Dict[SlabPage, List[SlabPage]] = {}
        self._live: Dict[SlabPage, Dict[int, Slot]] = {}
        self._closed = False

        if log is not None:
            log.debug(
                "Slab initialization: item_size: %d, item_count: %d data_offset: %d, "
                "page_size: %d\n",
                self.item_size, self.item_count, PAGE_HEADER_SIZE, self.page_size)

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("slab is closed")

    @property
    def _pages_per_block(self) -> int:
        return self.pages_per_alloc // self.page_size

    def _new_block(self) -> SlabPage:
        try:
            boss = SlabPage(self.item_count, self.object_size, refcount=1)
            slaves = [
                SlabPage(self.item_count, self.object_size, boss=boss, refcount=0)
                for _ in range(self._pages_per_block - 1)
            ]
        except MemoryError:
            self.counters.fails += 1
            if self.log is not None:
                self.log.err("Failed to allocate slab block!\n")
            raise

        self.partial.add(boss)
        for slave in slaves:
            self.empty.add(slave)
        self._blocks[boss] = [boss, *slaves]
        self.counters.total += self.item_count * (len(slaves) + 1)
        return boss

    def _new_slot(self, page: SlabPage) -> Slot:
        index = first_free_slot(page.mask)
        page.mask |= 1 << index

        if page.mask == PAGE_BUSY:
            page.delete()
            self.full.add(page)

        self.counters.used += 1
        slot = Slot(page, index, header=index)
        self._live.setdefault(page, {})[index] = slot
        return slot

    def alloc(self) -> Slot:
        """Take a free slot; its data keeps whatever it last held."""
        self._check_open()
        self.counters.reqs += 1

        if not self.partial.empty():
            page = self.partial.next
        elif not self.empty.empty():
            page = self.empty.next
            page.delete()
            self.partial.add(page)
            page.mask = page_init_mask(self.item_count)
            if page.refcount:
                page.refcount += 1
            else:
                page.boss.refcount += 1
        else:
            page = self._new_block()

        return self._new_slot(page)

    def calloc(self) -> Slot:
        """Take a free slot and zero its data."""
        slot = self.alloc()
        slot.data[:] = bytes(len(slot.data))
        return slot

    def free(self, slot: Slot) -> None:
        """Return ``slot`` to the slab.

        Raises ValueError when the slot was not handed out by this slab or
        has already been freed.
        """
        self._check_open()
        page = slot.page
        live = self._live.get(page)
        if live is None or live.get(slot.index) is not slot:
            raise ValueError("slot was not allocated by this slab or is already free")

        self.counters.reqs += 1
        del live[slot.index]
        if not live:
            del self._live[page]

        was_full = page.mask == PAGE_BUSY
        page.mask &= ~(1 << slot.index) & PAGE_BUSY
        self.counters.used -= 1

        if page.mask == page_init_mask(self.item_count):
            boss = page if page.refcount else page.boss
            if boss.refcount == 1:
                self._release_block(boss)
            else:
                page.delete()
                self.empty.add(page)
                boss.refcount -= 1
        elif was_full:
            page.delete()
            self.partial.add(page)

    def _release_block(self, boss: SlabPage) -> None:
        pages = self._blocks.pop(boss)
        for page in pages:
            if page.is_linked():
                page.delete()
        self.counters.total -= self.item_count * len(pages)

    def traverse(self, func: Callable[[Slot], object]) -> None:
        """Call ``func`` on every used slot: partial pages first, then full ones."""
        self._check_open()
        for head in (self.partial, self.full):
            for page in head:
                live = self._live.get(page, {})
                for index in list(used_slots(page.mask, self.item_count)):
                    func(live[index])

    def stats(self) -> str:
        """Render usage counters and boss pages, write them to the log and return them."""
        lines = [
            "%45s" % "Slab Stats",
            "%5s %15s %15s %10s %10s" % ("", "Total", "Used", "Reqs", "Fails"),
            "%5s %13d %16d %10d %10d" % (
                "", self.counters.total, self.counters.used,
                self.counters.reqs, self.counters.fails),
            "%45s" % "Slab Chunks",
            "%5s %15s %15s %10s %10s %10s" % (
                "", "Schunk", "Type", "Refcount", "Used", "Free"),
        ]
        for label, head in (("Empty", self.empty), ("Partial", self.partial),
                            ("Full", self.full)):
            for page in head:
                if page.refcount:
                    used = sum(1 for _ in used_slots(page.mask, self.item_count))
                    lines.append("%10s %#x %12s %6d %12d %10d" % (
                        "Address:", id(page), label, page.refcount,
                        used, self.item_count - used))

        text = "\n".join(lines) + "\n"
        if self.log is not None:
            self.log.debug_inline(text)
        return text

    def close(self) -> None:
        """Drop every page and reset the slab; later calls are no-ops."""
        if self._closed:
            return
        for head in (self.empty, self.partial, self.full):
            for page in head:
                page.delete()
        self._blocks.clear()
        self._live.clear()
        self.page_size = self.pages_per_alloc = 0
        self.item_size = self.item_count = 0
        self.alignment_mask = 0
        self.counters.reset()
        self.log = None
        self._closed = True