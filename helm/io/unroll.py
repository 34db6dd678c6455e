"""Plain-text exports of a tree."""

from typing import List

from helm.core.models import Tree


NODE_SEPARATOR = "\n\n" + "─" * 40 + "\n\n"
BRANCH_SEPARATOR = "\n\n" + "═" * 40 + "\n\n"


def _label(text: str) -> str:
    return text[:50].replace("\n", " ") or "(empty)"


def _path_labels(tree: Tree, node_id: str) -> str:
    return " > ".join(_label(tree.nodes[nid].text) for nid in tree.ancestry(node_id))


def _index_lines(tree: Tree, node_id: str, prefix: str, is_last: bool) -> List[str]:
    node = tree.nodes[node_id]
    lines = [prefix + ("└─ " if is_last else "├─ ") + _label(node.text)]
    child_prefix = prefix + ("   " if is_last else "│  ")
    for idx, child_id in enumerate(node.child_ids):
        lines.extend(_index_lines(tree, child_id, child_prefix, idx == len(node.child_ids) - 1))
    return lines


def unroll_tree(tree: Tree) -> str:
    """
    Render the structure index followed by every node, depth first, each
    with its path from the root.
    """
    root = tree.nodes[tree.root_id]
    parts = ["TREE STRUCTURE INDEX", "====================", "", _label(root.text)]
    for idx, child_id in enumerate(root.child_ids):
        parts.extend(_index_lines(tree, child_id, "", idx == len(root.child_ids) - 1))

    body = [
        f"[Path: {_path_labels(tree, nid)}]\n[Node ID: {nid}]\n{tree.nodes[nid].text or '(empty)'}"
        for nid in tree.subtree_ids(tree.root_id)
    ]
    return (
        "\n".join(parts)
        + "\n\n\nFULL TREE CONTENT\n=================\n\n"
        + NODE_SEPARATOR.join(body)
    )


def unroll_branches(tree: Tree) -> str:
    """Render every root-to-leaf branch with its full text."""
    leaves = tree.leaves()
    header = (
        "TREE BRANCHES (Leaf Nodes with Full Context)\n"
        "=============================================\n\n"
        f"Total branches: {len(leaves)}\n\n"
    )
    branches = []
    for idx, leaf_id in enumerate(leaves, start=1):
        text = tree.branch_text(leaf_id) or "(empty)"
        branches.append(
            f"BRANCH {idx} of {len(leaves)}\n"
            + "─" * 40
            + f"\n\n[Path: {_path_labels(tree, leaf_id)}]\n[Leaf Node ID: {leaf_id}]\n\n{text}"
        )
    return header + BRANCH_SEPARATOR.join(branches)
