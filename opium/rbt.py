"""Red-black tree keyed by ordered keys, with arbitrary data per node.

The tree keeps the usual red-black properties:

1. every node is red or black;
2. the root is black;
3. the sentinel leaves are black;
4. a red node has no red children;
5. every path from a node down to the leaves holds the same number of
   black nodes.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional, Tuple

from .log import Log


class RBNode:
    """A tree node. Empty children point at the tree's sentinel."""

    __slots__ = ("key", "data", "parent", "left", "right", "red")

    def __init__(self, key: Any = None, data: Any = None,
                 parent: Optional["RBNode"] = None,
                 left: Optional["RBNode"] = None,
                 right: Optional["RBNode"] = None,
                 red: bool = False) -> None:
        self.key = key
        self.data = data
        self.parent = parent
        self.left = left
        self.right = right
        self.red = red

    def __repr__(self) -> str:
        color = "red" if self.red else "black"
        return f"RBNode(key={self.key!r}, data={self.data!r}, {color})"


class RedBlackTree:
    """Balanced binary search tree with unique keys.

    ``head`` is the root node, or ``sentinel`` when the tree is empty. The
    root's ``parent`` is None.
    """

    def __init__(self, log: Optional[Log] = None) -> None:
        sentinel = RBNode(red=False)
        sentinel.parent = sentinel.left = sentinel.right = sentinel
        self.sentinel: Optional[RBNode] = sentinel
        self.head: Optional[RBNode] = sentinel
        self.log = log
        self._count = 0
        self._closed = False

    # -- helpers ---------------------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("tree is closed")

    def _new_node(self, parent: Optional[RBNode], key: Any) -> RBNode:
        nil = self.sentinel
        # New nodes start red: that can only break rule 4, which is fixed locally.
        return RBNode(key=key, parent=parent, left=nil, right=nil, red=True)

    def _minimum(self, node: RBNode) -> RBNode:
        while node.left is not self.sentinel:
            node = node.left
        return node

    def _replace_child(self, old: RBNode, new: RBNode) -> None:
        parent = old.parent
        if parent is None:
            self.head = new
        elif parent.right is old:
            parent.right = new
        elif parent.left is old:
            parent.left = new

    # -- queries ---------------------------------------------------------

    def find(self, key: Any) -> Optional[RBNode]:
        """Return the node holding ``key``, or None."""
        self._check_open()
        node = self.head
        while node is not self.sentinel:
            if key == node.key:
                return node
            node = node.right if node.key < key else node.left
        return None

    def __len__(self) -> int:
        return self._count

    def __contains__(self, key: Any) -> bool:
        return self.find(key) is not None

    def items(self) -> Iterator[Tuple[Any, Any]]:
        """Yield ``(key, data)`` pairs in ascending key order."""
        self._check_open()
        stack = []
        node = self.head
        while stack or node is not self.sentinel:
            while node is not self.sentinel:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node.key, node.data
            node = node.right

    def __iter__(self) -> Iterator[Any]:
        return (key for key, _ in self.items())

    # -- rotations -------------------------------------------------------

    def left_rotate(self, node: RBNode) -> RBNode:
        """Rotate left around ``node`` and return the new subtree root.

        A node without a right child is returned unchanged.
        """
        self._check_open()
        nil = self.sentinel
        pivot = node.right
        if pivot is nil:
            return node

        node.right = pivot.left
        if pivot.left is not nil:
            pivot.left.parent = node

        pivot.parent = node.parent
        self._replace_child(node, pivot)

        pivot.left = node
        node.parent = pivot
        return pivot

    def right_rotate(self, node: RBNode) -> RBNode:
        """Rotate right around ``node`` and return the new subtree root.

        A node without a left child is returned unchanged.
        """
        self._check_open()
        nil = self.sentinel
        pivot = node.left
        if pivot is nil:
            return node

        node.left = pivot.right
        if pivot.right is not nil:
            pivot.right.parent = node

        pivot.parent = node.parent
        self._replace_child(node, pivot)

        pivot.right = node
        node.parent = pivot
        return pivot

    # -- insertion -------------------------------------------------------

    def insert(self, key: Any, data: Any = None) -> RBNode:
        """Insert ``key`` with ``data`` and return its node.

        When the key is already present its data is replaced and the
        existing node is returned.
        """
        self._check_open()
        nil = self.sentinel

        parent: Optional[RBNode] = None
        current = self.head
        while current is not nil:
            if current.key < key:
                parent, current = current, current.right
            elif key < current.key:
                parent, current = current, current.left
            else:
                current.data = data
                return current

        node = self._new_node(parent, key)
        node.data = data
        self._count += 1

        if parent is None:
            node.red = False
            self.head = node
            return node

        if key < parent.key:
            parent.left = node
        else:
            parent.right = node

        self._insert_fixup(node)
        return node

    def _insert_fixup(self, node: RBNode) -> None:
        while node is not self.head and node.red and node.parent.red:
            parent = node.parent
            grand = parent.parent
            if grand is None:
                break

            if parent is grand.right:
                uncle = grand.left
                if uncle.red:
                    parent.red = False
                    uncle.red = False
                    grand.red = True
                    node = grand
                else:
                    if node is parent.left:
                        node = parent
                        self.right_rotate(node)
                    node.parent.red = False
                    node.parent.parent.red = True
                    self.left_rotate(node.parent.parent)
            else:
                uncle = grand.right
                if uncle.red:
                    parent.red = False
                    uncle.red = False
                    grand.red = True
                    node = grand
                else:
                    if node is parent.right:
                        node = parent
                        self.left_rotate(node)
                    node.parent.red = False
                    node.parent.parent.red = True
                    self.right_rotate(node.parent.parent)

        self.head.red = False

    # -- deletion --------------------------------------------------------

    def delete(self, key: Any) -> bool:
        """Remove ``key``; return False when it was not in the tree.

        A node with two children takes over the key and data of its in-order
        successor, and the successor's node is the one unlinked.
        """
        self._check_open()
        nil = self.sentinel

        node = self.find(key)
        if node is None:
            return False

        target = node
        if node.left is not nil and node.right is not nil:
            target = self._minimum(node.right)
            node.key = target.key
            node.data = target.data

        child = target.left if target.left is not nil else target.right
        child.parent = target.parent
        self._replace_child(target, child)

        if not target.red:
            self._delete_fixup(child)

        # The sentinel's parent may have been borrowed during the fix-up.
        nil.parent = nil
        nil.red = False
        if self.head is not nil:
            self.head.parent = None
            self.head.red = False

        target.parent = target.left = target.right = None
        self._count -= 1
        return True

    def _delete_fixup(self, current: RBNode) -> None:
        while current is not self.head and not current.red:
            parent = current.parent
            if current is parent.left:
                sibling = parent.right
                if sibling.red:
                    sibling.red = False
                    parent.red = True
                    self.left_rotate(parent)
                    sibling = parent.right
                if not sibling.left.red and not sibling.right.red:
                    sibling.red = True
                    current = parent
                else:
                    if not sibling.right.red:
                        sibling.left.red = False
                        sibling.red = True
                        self.right_rotate(sibling)
                        sibling = parent.right
                    sibling.red = parent.red
                    parent.red = False
                    sibling.right.red = False
                    self.left_rotate(parent)
                    current = self.head
            else:
                sibling = parent.left
                if sibling.red:
                    sibling.red = False
                    parent.red = True
                    self.right_rotate(parent)
                    sibling = parent.left
                if not sibling.right.red and not sibling.left.red:
                    sibling.red = True
                    current = parent
                else:
                    if not sibling.left.red:
                        sibling.right.red = False
                        sibling.red = True
                        self.left_rotate(sibling)
                        sibling = parent.left
                    sibling.red = parent.red
                    parent.red = False
                    sibling.left.red = False
                    self.right_rotate(parent)
                    current = self.head
        current.red = False

    # -- lifecycle -------------------------------------------------------

    def close(self) -> None:
        """Drop every node; the tree can no longer be used. Idempotent."""
        if self._closed:
            return
        self.head = self.sentinel = None
        self.log = None
        self._count = 0
        self._closed = True

    def __enter__(self) -> "RedBlackTree":
        return self

    def __exit__(self, *args) -> None:
        self.close()