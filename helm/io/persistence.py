"""JSON persistence for trees."""

import json
import logging
from pathlib import Path
from typing import List, Union

from helm.core.models import Tree


logger = logging.getLogger(__name__)

TREE_FILENAME = "tree.json"


def tree_path(trees_dir: Union[str, Path], tree_id: str) -> Path:
    """Location of a tree inside a trees directory: <trees_dir>/<id>/tree.json."""
    return Path(trees_dir) / tree_id / TREE_FILENAME


def save_tree(tree: Tree, path: Union[str, Path]) -> None:
    """
    Save a Tree to a JSON file.

    Args:
        tree: The Tree instance to save.
        path: Path to the output JSON file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(tree.to_dict(), f, indent=2)


def load_tree(path: Union[str, Path]) -> Tree:
    """
    Load a Tree from a JSON file. Any lock in the file is cleared: no
    operation survives a restart.

    Args:
        path: Path to the JSON file.

    Returns:
        The deserialized Tree instance.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    tree = Tree.from_dict(data)
    problems = tree.check_integrity()
    if problems:
        logger.warning("Tree %s loaded with structural problems: %s", tree.id, problems)
    return tree


def list_trees(trees_dir: Union[str, Path]) -> List[str]:
    """Ids of the trees stored under trees_dir, sorted."""
    trees_dir = Path(trees_dir)
    if not trees_dir.exists():
        return []
    return sorted(p.parent.name for p in trees_dir.glob(f"*/{TREE_FILENAME}"))
