import pytest
from hypothesis import given, strategies as st

from opium.bits import WORD_BITS
from opium.slabpage import (
    PAGE_BUSY,
    PAGE_FREE,
    SlabPage,
    SlabStats,
    Slot,
    first_free_slot,
    page_init_mask,
    page_one_used,
    used_slots,
)


def test_busy_mask_marks_every_slot_used():
    assert list(used_slots(PAGE_BUSY, WORD_BITS)) == list(range(WORD_BITS))
    assert list(used_slots(PAGE_FREE, WORD_BITS)) == []
    assert page_init_mask(0) == (1 << WORD_BITS) - 1


def test_init_mask_zero_count_is_busy():
    assert page_init_mask(0) == PAGE_BUSY


def test_init_mask_full_count_is_free():
    assert page_init_mask(WORD_BITS) == PAGE_FREE


def test_init_mask_low_bits_clear_high_bits_set():
    mask = page_init_mask(5)
    assert mask & 0b11111 == 0
    assert mask | 0b11111 == PAGE_BUSY


@pytest.mark.parametrize("count", [-1, WORD_BITS + 1])
def test_init_mask_rejects_bad_count(count):
    with pytest.raises(ValueError):
        page_init_mask(count)


def test_worked_example_five_slots_fill_in_order():
    mask = page_init_mask(5)
    taken = []
    while mask != PAGE_BUSY:
        slot = first_free_slot(mask)
        taken.append(slot)
        mask |= 1 << slot
    assert taken == [0, 1, 2, 3, 4]


def test_first_free_slot_on_busy_mask_raises():
    with pytest.raises(ValueError):
        first_free_slot(PAGE_BUSY)


def test_first_free_slot_skips_taken():
    assert first_free_slot(0b1011) == 2


@given(st.integers(min_value=0, max_value=PAGE_BUSY - 1))
def test_first_free_slot_is_lowest_clear_bit(mask):
    slot = first_free_slot(mask)
    assert not mask & (1 << slot)
    assert mask & ((1 << slot) - 1) == (1 << slot) - 1


def test_one_used_detects_single_slot():
    count = 5
    mask = page_init_mask(count) | (1 << 3)
    assert page_one_used(mask, count) is True


def test_one_used_false_for_empty_and_two():
    count = 5
    empty = page_init_mask(count)
    assert page_one_used(empty, count) is False
    assert page_one_used(empty | 0b11, count) is False


def test_one_used_ignores_bits_beyond_count():
    assert page_one_used(page_init_mask(4), 4) is False


def test_used_slots_lists_taken_indices():
    count = 8
    mask = page_init_mask(count) | (1 << 1) | (1 << 6)
    assert list(used_slots(mask, count)) == [1, 6]


@given(st.integers(min_value=0, max_value=WORD_BITS),
       st.integers(min_value=0, max_value=PAGE_BUSY))
def test_used_slots_invariants(count, mask):
    slots = list(used_slots(mask, count))
    assert slots == sorted(set(slots))
    assert all(0 <= s < count and mask & (1 << s) for s in slots)
    assert len(slots) == bin(mask & ((1 << count) - 1)).count("1")
    assert page_one_used(mask, count) == (len(slots) == 1)


def test_stats_reset():
    stats = SlabStats(total=4, used=3, reqs=9, fails=1)
    stats.reset()
    assert stats == SlabStats()


def test_page_defaults():
    page = SlabPage(item_count=6, item_size=16)
    assert page.mask == page_init_mask(6)
    assert page.refcount == 0
    assert page.boss is None
    assert len(page.data) == 6
    assert all(len(buf) == 16 for buf in page.data)
    assert page.empty()


def test_page_slaves_point_at_boss():
    boss = SlabPage(4, 8, refcount=1)
    slave = SlabPage(4, 8, boss=boss)
    assert slave.boss is boss
    assert boss.refcount == 1


def test_page_rejects_too_many_slots():
    with pytest.raises(ValueError):
        SlabPage(WORD_BITS + 1, 8)


def test_slot_shares_page_storage():
    page = SlabPage(3, 4)
    slot = Slot(page, 2, header=2)
    slot.data[0] = 0xAB
    assert page.data[2][0] == 0xAB
    assert slot.header == 2


@pytest.mark.parametrize("index", [-1, 3])
def test_slot_index_out_of_range(index):
    page = SlabPage(3, 4)
    with pytest.raises(IndexError):
        Slot(page, index)


def test_slot_header_must_fit_byte():
    page = SlabPage(3, 4)
    with pytest.raises(ValueError):
        Slot(page, 0, header=256)