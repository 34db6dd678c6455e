"""Core data model for Helm: TreeNode and Tree, with structural mutations."""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Set, Tuple
import uuid

from helm.core.errors import LockConflict, StructuralViolation


LOCK_REASONS = (
    "expanding",
    "scout-active",
    "witness-active",
    "copilot-deciding",
    "trident-active",
)


def new_id() -> str:
    """Generate a short unique ID."""
    return uuid.uuid4().hex[:12]


@dataclass
class TreeNode:
    """
    A fragment of text in the tree. A node's text is never meaningful on
    its own: the branch text is every fragment from the root down to it.
    """

    id: str
    text: str
    parent_id: Optional[str]
    child_ids: List[str] = field(default_factory=list)

    # Process-local; never survives a reload
    locked: bool = False
    lock_reason: Optional[str] = None

    ever_expanded: bool = False  # sticky


@dataclass
class Tree:
    """
    The branching text structure.

    nodes: every node keyed by id, forming one tree rooted at root_id
    current_node_id: the human cursor
    bookmarked_node_ids: ids the user pinned, all present in nodes
    """

    id: str
    name: str
    root_id: str
    current_node_id: str
    nodes: Dict[str, TreeNode] = field(default_factory=dict)
    bookmarked_node_ids: List[str] = field(default_factory=list)

    @classmethod
    def create(cls, name: str, seed_text: str = "", tree_id: Optional[str] = None) -> "Tree":
        """Initialize a new tree holding a single root node."""
        root = TreeNode(id=new_id(), text=seed_text, parent_id=None)
        tree = cls(
            id=tree_id or name.strip(),
            name=name,
            root_id=root.id,
            current_node_id=root.id,
        )
        tree.nodes[root.id] = root
        return tree

    # === Query methods ===

    def get(self, node_id: str) -> Optional[TreeNode]:
        return self.nodes.get(node_id)

    def require(self, node_id: str) -> TreeNode:
        node = self.nodes.get(node_id)
        if node is None:
            raise StructuralViolation(f"Node {node_id} does not exist")
        return node

    def ancestry(self, node_id: str) -> List[str]:
        """Node ids from the root down to node_id, inclusive."""
        path: List[str] = []
        current: Optional[str] = node_id
        while current is not None:
            node = self.nodes.get(current)
            if node is None:
                break
            path.append(current)
            current = node.parent_id
        path.reverse()
        return path

    def branch_text(self, node_id: str) -> str:
        """Full text of the branch ending at node_id."""
        return "".join(self.nodes[nid].text for nid in self.ancestry(node_id))

    def ancestor_text(self, node_id: str, vision: int) -> str:
        """Text of up to `vision` ancestors directly above node_id."""
        if vision <= 0:
            return ""
        above = self.ancestry(node_id)[:-1]
        return "".join(self.nodes[nid].text for nid in above[-vision:])

    def context_text(self, node_id: str, vision: int) -> str:
        """Up to `vision` ancestors plus the node's own text."""
        return self.ancestor_text(node_id, vision) + self.require(node_id).text

    def subtree_ids(self, node_id: str) -> List[str]:
        """node_id and all its descendants, in pre-order."""
        result: List[str] = []
        stack = [node_id]
        while stack:
            current = stack.pop()
            node = self.nodes.get(current)
            if node is None:
                continue
            result.append(current)
            stack.extend(reversed(node.child_ids))
        return result

    def leaves(self, node_id: Optional[str] = None) -> List[str]:
        """Leaf ids below node_id (the root by default), left to right."""
        start = node_id or self.root_id
        return [nid for nid in self.subtree_ids(start) if not self.nodes[nid].child_ids]

    def depth_of(self, node_id: str) -> int:
        return len(self.ancestry(node_id)) - 1

    def is_descendant(self, node_id: str, ancestor_id: str) -> bool:
        """True if node_id is ancestor_id or lies below it."""
        return ancestor_id in self.ancestry(node_id)

    def check_integrity(self) -> List[str]:
        """
        Return every structural problem found; an empty list means the tree
        is a single connected tree rooted at root_id.
        """
        problems: List[str] = []
        root = self.nodes.get(self.root_id)
        if root is None:
            return [f"root {self.root_id} missing"]
        if root.parent_id is not None:
            problems.append("root has a parent")

        for node_id, node in self.nodes.items():
            if node.id != node_id:
                problems.append(f"{node_id} stored under wrong key")
            if node.locked != (node.lock_reason is not None):
                problems.append(f"{node_id} lock flag and reason disagree")
            if node_id != self.root_id:
                parent = self.nodes.get(node.parent_id) if node.parent_id else None
                if parent is None:
                    problems.append(f"{node_id} has no parent")
                elif node_id not in parent.child_ids:
                    problems.append(f"{node_id} missing from parent {parent.id}")
            for child_id in node.child_ids:
                child = self.nodes.get(child_id)
                if child is None:
                    problems.append(f"{node_id} references missing child {child_id}")
                elif child.parent_id != node_id:
                    problems.append(f"{child_id} does not point back to {node_id}")

        seen: Set[str] = set()
        stack = [self.root_id]
        while stack:
            current = stack.pop()
            if current in seen:
                problems.append(f"{current} reachable twice")
                continue
            seen.add(current)
            node = self.nodes.get(current)
            if node is not None:
                stack.extend(node.child_ids)
        orphans = set(self.nodes) - seen
        if orphans:
            problems.append(f"unreachable nodes: {sorted(orphans)}")

        if self.current_node_id not in self.nodes:
            problems.append(f"current node {self.current_node_id} missing")
        for bookmark in self.bookmarked_node_ids:
            if bookmark not in self.nodes:
                problems.append(f"bookmark {bookmark} missing")
        return problems

    # === Mutations ===

    def add_child(self, parent_id: str, text: str, reason: Optional[str] = None) -> str:
        """
        Append a child to parent_id and return its id.

        A locked parent only accepts children from the holder of its lock,
        identified by `reason`.
        """
        parent = self.require(parent_id)
        _check_lock(parent, reason)
        child = TreeNode(id=new_id(), text=text, parent_id=parent_id)
        self.nodes[child.id] = child
        parent.child_ids.append(child.id)
        parent.ever_expanded = True
        return child.id

    def delete(self, node_id: str, reason: Optional[str] = None) -> List[str]:
        """Remove node_id and its whole subtree; return the removed ids."""
        if node_id == self.root_id:
            raise StructuralViolation("Cannot delete the root node")
        node = self.require(node_id)
        removed = self.subtree_ids(node_id)
        for nid in removed:
            _check_lock(self.nodes[nid], reason)

        parent = self.nodes[node.parent_id]
        parent.child_ids.remove(node_id)
        for nid in removed:
            del self.nodes[nid]
        self._forget(set(removed), fallback=parent.id)
        return removed

    def split_at(self, node_id: str, offset: int) -> Tuple[str, str]:
        """
        Split a node's text at offset. The original id keeps the first half;
        a new node holds the rest and inherits every existing child.
        """
        node = self.require(node_id)
        if not 0 < offset < len(node.text):
            raise StructuralViolation(
                f"Split offset {offset} out of bounds for text of length {len(node.text)}"
            )
        _check_lock(node, None)

        second = TreeNode(
            id=new_id(),
            text=node.text[offset:],
            parent_id=node.id,
            child_ids=node.child_ids,
            ever_expanded=node.ever_expanded,
        )
        for child_id in second.child_ids:
            self.nodes[child_id].parent_id = second.id
        self.nodes[second.id] = second
        node.text = node.text[:offset]
        node.child_ids = [second.id]

        if self.current_node_id == node.id:
            self.current_node_id = second.id
        return node.id, second.id

    def merge_with_parent(self, node_id: str) -> str:
        """Fold node_id into its parent; return the parent id."""
        node = self.require(node_id)
        if node.parent_id is None:
            raise StructuralViolation("Cannot merge the root node")
        if node.parent_id == self.root_id:
            raise StructuralViolation("Cannot merge into the root node")
        parent = self.require(node.parent_id)
        _check_lock(node, None)
        _check_lock(parent, None)
        if parent.child_ids != [node_id]:
            raise StructuralViolation(f"Node {parent.id} has other children; merge would alter them")

        parent.text += node.text
        parent.child_ids = node.child_ids
        parent.ever_expanded = parent.ever_expanded or node.ever_expanded
        for child_id in parent.child_ids:
            self.nodes[child_id].parent_id = parent.id
        del self.nodes[node_id]

        if node_id in self.bookmarked_node_ids and parent.id not in self.bookmarked_node_ids:
            self.bookmarked_node_ids.append(parent.id)
        self._forget({node_id}, fallback=parent.id)
        return parent.id

    def mass_merge(self) -> int:
        """
        Collapse every single-child chain until none remains. Returns the
        number of merges performed; zero on an already merged tree.
        """
        merged = 0
        changed = True
        while changed:
            changed = False
            for node_id in self.subtree_ids(self.root_id):
                node = self.nodes.get(node_id)
                if node is None or node_id == self.root_id or len(node.child_ids) != 1:
                    continue
                child = self.nodes[node.child_ids[0]]
                if node.locked or child.locked:
                    continue
                self.merge_with_parent(child.id)
                merged += 1
                changed = True
        return merged

    def select(self, node_id: str) -> None:
        self.require(node_id)
        self.current_node_id = node_id

    def toggle_bookmark(self, node_id: str) -> bool:
        """Flip the bookmark on node_id; return whether it is now bookmarked."""
        self.require(node_id)
        if node_id in self.bookmarked_node_ids:
            self.bookmarked_node_ids.remove(node_id)
            return False
        self.bookmarked_node_ids.append(node_id)
        return True

    def clear_locks(self) -> None:
        for node in self.nodes.values():
            node.locked = False
            node.lock_reason = None

    def extract_subtree(self, node_id: str, name: str) -> "Tree":
        """Copy node_id and its descendants into a new, unlocked tree."""
        self.require(node_id)
        tree = Tree(id=name.strip(), name=name, root_id=node_id, current_node_id=node_id)
        for nid in self.subtree_ids(node_id):
            source = self.nodes[nid]
            tree.nodes[nid] = TreeNode(
                id=nid,
                text=source.text,
                parent_id=None if nid == node_id else source.parent_id,
                child_ids=list(source.child_ids),
                ever_expanded=source.ever_expanded,
            )
        return tree

    def _forget(self, removed: Set[str], fallback: str) -> None:
        """Repair the cursor and bookmarks after nodes disappeared."""
        if self.current_node_id in removed:
            self.current_node_id = fallback
        self.bookmarked_node_ids = [b for b in self.bookmarked_node_ids if b not in removed]

    # === Serialization ===

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict for JSON export."""
        return {
            "id": self.id,
            "name": self.name,
            "nodes": [asdict(node) for node in self.nodes.values()],
            "root_id": self.root_id,
            "current_node_id": self.current_node_id,
            "bookmarked_node_ids": list(self.bookmarked_node_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tree":
        """
        Deserialize from dict. Locks found here are leftovers of a crashed
        process and are always cleared.
        """
        tree = cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            root_id=data["root_id"],
            current_node_id=data.get("current_node_id", data["root_id"]),
        )
        for raw in data["nodes"]:
            node = TreeNode(
                id=raw["id"],
                text=raw.get("text", ""),
                parent_id=raw.get("parent_id"),
                child_ids=list(raw.get("child_ids", [])),
                ever_expanded=bool(raw.get("ever_expanded", False)),
            )
            tree.nodes[node.id] = node
        if tree.current_node_id not in tree.nodes:
            tree.current_node_id = tree.root_id
        tree.bookmarked_node_ids = [
            b for b in data.get("bookmarked_node_ids", []) if b in tree.nodes
        ]
        return tree


def _check_lock(node: TreeNode, reason: Optional[str]) -> None:
    if node.locked and node.lock_reason != reason:
        raise LockConflict(node.id, node.lock_reason)
