import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from opium.rbt import RBNode, RedBlackTree


def _check(tree):
    """Verify every red-black and BST invariant; return the in-order keys."""
    nil = tree.sentinel
    assert not nil.red
    if tree.head is nil:
        return []
    assert tree.head.parent is None
    assert not tree.head.red

    keys = []

    def walk(node, low, high):
        if node is nil:
            return 1
        if low is not None:
            assert node.key > low
        if high is not None:
            assert node.key < high
        for child in (node.left, node.right):
            if child is not nil:
                assert child.parent is node
                if node.red:
                    assert not child.red
        left = walk(node.left, low, node.key)
        keys.append(node.key)
        right = walk(node.right, node.key, high)
        assert left == right
        return left + (0 if node.red else 1)

    walk(tree.head, None, None)
    return keys


def test_empty_tree():
    tree = RedBlackTree(None)
    assert tree.head is tree.sentinel
    assert len(tree) == 0
    assert list(tree) == []
    assert tree.find(5) is None


def test_first_insert_becomes_black_root():
    tree = RedBlackTree(None)
    node = tree.insert(10, "ten")
    assert tree.head is node
    assert node.parent is None
    assert not node.red
    assert node.data == "ten"
    assert node.left is tree.sentinel and node.right is tree.sentinel


def test_ascending_three_rebalances():
    tree = RedBlackTree(None)
    for key in (1, 2, 3):
        tree.insert(key, None)
    assert tree.head.key == 2
    assert tree.head.left.key == 1
    assert tree.head.right.key == 3
    assert tree.head.left.red and tree.head.right.red
    assert _check(tree) == [1, 2, 3]


def test_duplicate_insert_replaces_data():
    tree = RedBlackTree(None)
    first = tree.insert(7, "a")
    second = tree.insert(7, "b")
    assert first is second
    assert second.data == "b"
    assert len(tree) == 1


def test_items_in_order():
    tree = RedBlackTree(None)
    for key in (5, 3, 8, 1, 4):
        tree.insert(key, key * 10)
    assert list(tree.items()) == [(1, 10), (3, 30), (4, 40), (5, 50), (8, 80)]
    assert 4 in tree
    assert 6 not in tree


def test_delete_missing_returns_false():
    tree = RedBlackTree(None)
    tree.insert(1, None)
    assert tree.delete(2) is False
    assert len(tree) == 1


def test_delete_root_only():
    tree = RedBlackTree(None)
    tree.insert(1, "x")
    assert tree.delete(1) is True
    assert tree.head is tree.sentinel
    assert len(tree) == 0


def test_delete_two_children_takes_successor():
    tree = RedBlackTree(None)
    for key in (2, 1, 3):
        tree.insert(key, str(key))
    root = tree.head
    assert root.key == 2
    tree.delete(2)
    assert root.key == 3
    assert root.data == "3"
    assert _check(tree) == [1, 3]


def test_left_rotate_preserves_order():
    tree = RedBlackTree(None)
    for key in (1, 2, 3):
        tree.insert(key, None)
    old_root = tree.head
    new_root = tree.left_rotate(old_root)
    assert tree.head is new_root
    assert new_root.key == 3
    assert new_root.left is old_root
    assert old_root.parent is new_root
    assert new_root.parent is None
    assert list(tree) == [1, 2, 3]


def test_right_rotate_preserves_order():
    tree = RedBlackTree(None)
    for key in (1, 2, 3):
        tree.insert(key, None)
    old_root = tree.head
    new_root = tree.right_rotate(old_root)
    assert tree.head is new_root
    assert new_root.key == 1
    assert new_root.right is old_root
    assert list(tree) == [1, 2, 3]


def test_rotate_without_child_is_noop():
    tree = RedBlackTree(None)
    node = tree.insert(1, None)
    assert tree.left_rotate(node) is node
    assert tree.right_rotate(node) is node
    assert tree.head is node


def test_close_blocks_use():
    tree = RedBlackTree(None)
    tree.insert(1, None)
    tree.close()
    tree.close()
    assert tree.head is None
    with pytest.raises(RuntimeError):
        tree.insert(2, None)
    with pytest.raises(RuntimeError):
        tree.delete(1)


def test_context_manager_closes():
    with RedBlackTree(None) as tree:
        tree.insert(4, None)
        assert len(tree) == 1
    with pytest.raises(RuntimeError):
        tree.find(4)


def test_node_repr_mentions_color():
    node = RBNode(key=3, red=True)
    assert "red" in repr(node)


def test_sequential_inserts_and_deletes_stay_balanced():
    tree = RedBlackTree(None)
    for key in range(200):
        tree.insert(key, key)
        _check(tree)
    for key in range(0, 200, 2):
        assert tree.delete(key)
        _check(tree)
    assert list(tree) == list(range(1, 200, 2))


@settings(max_examples=150, deadline=None)
@given(st.lists(st.tuples(st.booleans(), st.integers(0, 60)), max_size=120))
def test_matches_reference_set(ops):
    tree = RedBlackTree(None)
    reference = {}
    for is_insert, key in ops:
        if is_insert:
            tree.insert(key, -key)
            reference[key] = -key
        else:
            assert tree.delete(key) == (key in reference)
            reference.pop(key, None)
        assert _check(tree) == sorted(reference)
        assert len(tree) == len(reference)
    assert dict(tree.items()) == reference