"""Intrusive circular doubly linked list."""

from __future__ import annotations

from typing import Iterator, Optional


class ListHead:
    """A node of a circular doubly linked list.

    A fresh node links to itself and can act as the head of a list. Objects
    that live in a list subclass ListHead; iterating a head yields the nodes
    after it. Deleting a node unlinks it, after which ``is_linked`` is False.
    """

    def __init__(self) -> None:
        self.next: Optional[ListHead] = self
        self.prev: Optional[ListHead] = self

    def empty(self) -> bool:
        """Return True when the list headed by this node holds no entries."""
        return self.next is self

    @staticmethod
    def _insert(entry: "ListHead", prev: "ListHead", nxt: "ListHead") -> None:
        if prev.next is not nxt or nxt.prev is not prev:
            raise ValueError("list is corrupted: neighbours are not linked")
        nxt.prev = entry
        entry.next = nxt
        entry.prev = prev
        prev.next = entry

    def add(self, entry: "ListHead") -> None:
        """Insert ``entry`` right after this node (at the front of the list)."""
        self._insert(entry, self, self.next)

    def add_tail(self, entry: "ListHead") -> None:
        """Insert ``entry`` right before this node (at the back of the list)."""
        self._insert(entry, self.prev, self)

    def delete(self) -> None:
        """Unlink this node from the list it belongs to."""
        if not self.is_linked():
            raise ValueError("entry is not linked")
        self.next.prev = self.prev
        self.prev.next = self.next
        self.next = None
        self.prev = None

    def is_linked(self) -> bool:
        """Return True unless the node has been deleted and not re-added."""
        return self.next is not None and self.prev is not None

    def __iter__(self) -> Iterator["ListHead"]:
        """Yield the entries after this head; the current one may be deleted."""
        pos = self.next
        while pos is not self:
            following = pos.next
            yield pos
            pos = following