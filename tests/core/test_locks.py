"""Tests for helm.core.locks.LockGate."""

import pytest

from helm.core.locks import LockGate
from helm.core.models import Tree


@pytest.fixture
def tree():
    tree = Tree.create("t", seed_text="Once")
    tree.add_child(tree.root_id, " upon")
    return tree


@pytest.fixture
def gate(tree):
    return LockGate(lambda: tree)


class TestAcquireRelease:
    """Tests for acquire and release."""

    def test_acquire_sets_reason(self, tree, gate):
        assert gate.acquire(tree.root_id, "scout-active") is True
        root = tree.nodes[tree.root_id]
        assert root.locked is True
        assert root.lock_reason == "scout-active"

    def test_same_reason_is_idempotent(self, tree, gate):
        assert gate.acquire(tree.root_id, "scout-active")
        assert gate.acquire(tree.root_id, "scout-active")
        assert tree.nodes[tree.root_id].lock_reason == "scout-active"

    def test_different_reason_denied_without_raising(self, tree, gate):
        gate.acquire(tree.root_id, "scout-active")
        assert gate.acquire(tree.root_id, "witness-active") is False
        assert tree.nodes[tree.root_id].lock_reason == "scout-active"

    def test_missing_node_denied(self, gate):
        assert gate.acquire("ghost", "expanding") is False

    def test_unknown_reason_rejected(self, tree, gate):
        with pytest.raises(ValueError):
            gate.acquire(tree.root_id, "napping")

    def test_release_always_clears(self, tree, gate):
        gate.acquire(tree.root_id, "copilot-deciding")
        gate.release(tree.root_id)
        gate.release(tree.root_id)
        gate.release("ghost")
        root = tree.nodes[tree.root_id]
        assert root.locked is False
        assert root.lock_reason is None

    def test_release_all_only_matching_reason(self, tree, gate):
        child_id = tree.nodes[tree.root_id].child_ids[0]
        gate.acquire(tree.root_id, "scout-active")
        gate.acquire(child_id, "trident-active")
        assert gate.release_all("scout-active") == 1
        assert not gate.is_locked(tree.root_id)
        assert gate.is_locked(child_id)


class TestHeld:
    """Tests for scoped acquisition."""

    def test_released_on_normal_exit(self, tree, gate):
        with gate.held(tree.root_id, "expanding") as acquired:
            assert acquired is True
            assert gate.is_locked(tree.root_id)
        assert not gate.is_locked(tree.root_id)

    def test_released_on_exception(self, tree, gate):
        with pytest.raises(RuntimeError):
            with gate.held(tree.root_id, "expanding"):
                raise RuntimeError("model exploded")
        assert not gate.is_locked(tree.root_id)

    def test_does_not_release_foreign_lock(self, tree, gate):
        gate.acquire(tree.root_id, "witness-active")
        with gate.held(tree.root_id, "scout-active") as acquired:
            assert acquired is False
        assert tree.nodes[tree.root_id].lock_reason == "witness-active"

    def test_nested_scope_keeps_outer_lock(self, tree, gate):
        with gate.held(tree.root_id, "trident-active"):
            with gate.held(tree.root_id, "trident-active") as inner:
                assert inner is True
            assert gate.is_locked(tree.root_id)
        assert not gate.is_locked(tree.root_id)

    def test_reads_latest_tree(self):
        trees = [Tree.create("one")]
        gate = LockGate(lambda: trees[-1])
        trees.append(Tree.create("two"))
        gate.acquire(trees[-1].root_id, "expanding")
        assert trees[-1].nodes[trees[-1].root_id].locked
        assert not trees[0].nodes[trees[0].root_id].locked
