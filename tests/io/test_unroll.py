"""Tests for helm.io.unroll."""

import pytest

from helm.core.models import Tree
from helm.io.unroll import unroll_branches, unroll_tree


@pytest.fixture
def tree():
    tree = Tree.create("story", seed_text="Once")
    upon = tree.add_child(tree.root_id, " upon")
    tree.add_child(upon, " a time")
    tree.add_child(tree.root_id, " more")
    return tree


def test_unroll_tree_index_and_content(tree):
    text = unroll_tree(tree)

    index, content = text.split("FULL TREE CONTENT")
    assert index.startswith("TREE STRUCTURE INDEX")
    assert "├─  upon" in index
    assert "│  └─  a time" in index
    assert "└─  more" in index
    assert "[Path: Once >  upon >  a time]" in content
    assert content.count("[Node ID:") == 4


def test_unroll_tree_depth_first_order(tree):
    content = unroll_tree(tree).split("FULL TREE CONTENT")[1]
    assert content.index(" a time") < content.index(" more")


def test_unroll_branches(tree):
    text = unroll_branches(tree)

    assert "Total branches: 2" in text
    assert "BRANCH 1 of 2" in text
    assert "Once upon a time" in text
    assert "Once more" in text


def test_empty_root_is_labelled():
    tree = Tree.create("blank")
    assert "(empty)" in unroll_tree(tree)
