"""Per-node exclusive locks tagged with the operation that holds them."""

from contextlib import contextmanager
import logging
from typing import Callable, Iterator

from helm.core.models import LOCK_REASONS, Tree


logger = logging.getLogger(__name__)


class LockGate:
    """
    Gate deciding which operation may touch a node.

    The tree is read through `get_tree` on every call, so the gate always
    sees the latest tree even if the caller swaps it out.
    """

    def __init__(self, get_tree: Callable[[], Tree]):
        self.get_tree = get_tree

    def acquire(self, node_id: str, reason: str) -> bool:
        """
        Lock node_id for `reason`. Returns False instead of raising when the
        node is gone or held under a different reason; re-acquiring under
        the same reason succeeds.
        """
        if reason not in LOCK_REASONS:
            raise ValueError(f"Unknown lock reason: {reason}")
        node = self.get_tree().get(node_id)
        if node is None:
            return False
        if node.locked and node.lock_reason != reason:
            logger.debug("Lock on %s denied: held by %s", node_id, node.lock_reason)
            return False
        node.locked = True
        node.lock_reason = reason
        return True

    def release(self, node_id: str) -> None:
        node = self.get_tree().get(node_id)
        if node is None:
            return
        node.locked = False
        node.lock_reason = None

    def is_locked(self, node_id: str) -> bool:
        node = self.get_tree().get(node_id)
        return node is not None and node.locked

    @contextmanager
    def held(self, node_id: str, reason: str) -> Iterator[bool]:
        """
        Scoped acquisition. Yields whether the lock is held; on every exit
        path releases it, but only if this scope was the one that took it.
        """
        node = self.get_tree().get(node_id)
        already_held = node is not None and node.locked and node.lock_reason == reason
        acquired = self.acquire(node_id, reason)
        try:
            yield acquired
        finally:
            if acquired and not already_held:
                self.release(node_id)

    def release_all(self, reason: str) -> int:
        """Clear every lock tagged with `reason`; returns how many were cleared."""
        cleared = 0
        for node in self.get_tree().nodes.values():
            if node.locked and node.lock_reason == reason:
                node.locked = False
                node.lock_reason = None
                cleared += 1
        return cleared
