# opium

Core data-structure building blocks in pure Python:

- `opium.slab` – `Slab`, a fixed-size slot allocator. Slots live on pages
  tracked by a bitmask; pages are grouped into blocks with one boss page and
  slave pages, and move between `empty`, `partial` and `full` lists. A block
  is dropped once its last used slot is freed.
- `opium.slabpage` – the pieces behind it: `SlabPage`, `Slot`, `SlabStats`
  and the mask helpers `page_init_mask`, `page_one_used`, `first_free_slot`
  and `used_slots`.
- `opium.arena` – `Arena`, which serves requests of 2 to 65536 bytes from
  power-of-two slabs (16, 32, … 65536 bytes) and records the slab index in
  the slot header so `free` finds the owning slab directly.
- `opium.rbt` – `RedBlackTree` with unique keys: `insert`, `delete`, `find`,
  `items`, `len()`, `in`, and the `left_rotate` / `right_rotate` primitives.
- `opium.dlist` – `ListHead`, a circular doubly linked list node.
- `opium.hashing` – `djb2`, the 64-bit xor variant of the djb2 hash.
- `opium.bits` – `is_little_endian`, `round_of_two` and `log2`.
- `opium.log` – `Log`, a logger with separate debug, warning and error files
  (falling back to stdout/stderr), plus `log_stdout` and `log_stderr`.

## Install

```
pip install .
pip install ".[test]"   # with the test tools
```

## Usage

```python
from opium.log import Log
from opium.slab import Slab
from opium.arena import Arena
from opium.rbt import RedBlackTree
from opium.hashing import djb2
from opium.bits import round_of_two, log2

with Log("debug.log", "warn.log", "err.log") as log:
    slab = Slab(32, log)
    slot = slab.alloc()          # a Slot; slot.data is a 32-byte bytearray
    slab.free(slot)
    print(slab.stats())          # also written to the debug log
    slab.close()

    with Arena(log) as arena:
        block = arena.alloc(100)     # served by the 128-byte slab
        arena.free(block)

    with RedBlackTree(log) as tree:
        tree.insert(42, "answer")
        tree.find(42).data           # "answer"
        tree.delete(42)              # True

djb2(b"hello")
round_of_two(33)   # 64
log2(20)           # 4
```

Freeing a slot twice, or a slot from another slab, raises `ValueError`;
asking an arena for 1 byte or less, or more than 65536 bytes, raises
`ValueError`. Using a slab, arena or tree after `close()` raises
`RuntimeError`.

## What it does not do

The slab and arena model an allocator's bookkeeping: slot storage is a
Python `bytearray` per slot, not raw memory, and no memory is mapped or
aligned. The package is a library only; it installs no command.

## Tests

```
pytest
```