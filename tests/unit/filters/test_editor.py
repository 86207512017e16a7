"""Tests for path-addressed tree edits.

Tests cover:
- Locating nodes by path
- Structural sharing of untouched subtrees
- Add condition / add group / remove node
- Field edits including right-type switching
- Precondition violations on stale paths
"""

from dataclasses import replace

import pytest

from screener.filters import editor
from screener.filters.model import (
    ConditionNode,
    GroupNode,
    IndicatorRef,
    Logic,
    RightType,
    create_condition,
    default_exit_tree,
)


class TestGetNode:
    """Tests for get_node."""

    def test_empty_path_is_root(self, nested_tree):
        assert editor.get_node(nested_tree, ()) is nested_tree

    def test_nested_path(self, nested_tree):
        node = editor.get_node(nested_tree, (1, 0))
        assert node.left.key == "SMA"

    def test_out_of_range_raises(self, nested_tree):
        with pytest.raises(IndexError):
            editor.get_node(nested_tree, (3,))

    def test_descending_through_condition_raises(self, nested_tree):
        with pytest.raises(TypeError):
            editor.get_node(nested_tree, (0, 0))


class TestUpdateNode:
    """Rebuild-on-path semantics."""

    def test_target_reflects_update(self, nested_tree):
        new_root = editor.update_node(nested_tree, (1, 1), lambda n: replace(n, operator="<"))
        assert editor.get_node(new_root, (1, 1)).operator == "<"

    def test_off_path_nodes_are_shared(self, nested_tree):
        new_root = editor.update_node(nested_tree, (1, 1), lambda n: replace(n, operator="<"))

        assert new_root is not nested_tree
        assert new_root.children[1] is not nested_tree.children[1]
        # Siblings along the way are reused as-is
        assert new_root.children[0] is nested_tree.children[0]
        assert new_root.children[2] is nested_tree.children[2]
        assert new_root.children[1].children[0] is nested_tree.children[1].children[0]

    def test_original_tree_unchanged(self, nested_tree):
        before = nested_tree
        snapshot = replace(nested_tree)
        editor.update_node(nested_tree, (0,), lambda n: replace(n, right_value="70"))
        assert nested_tree == snapshot
        assert before.children[0].right_value == "30"

    def test_empty_path_applies_to_root(self, nested_tree):
        new_root = editor.update_node(nested_tree, (), lambda n: replace(n, logic=Logic.OR))
        assert new_root.logic is Logic.OR
        assert new_root.children == nested_tree.children

    def test_every_path_in_tree(self, nested_tree):
        """Any path derived from the current shape can be edited."""
        for path, node in list(editor.iter_paths(nested_tree)):
            marker = GroupNode(logic=Logic.OR) if isinstance(node, GroupNode) else ConditionNode(operator="=")
            new_root = editor.update_node(nested_tree, path, lambda _n, m=marker: m)
            assert editor.get_node(new_root, path) is marker


class TestAddCondition:
    """Tests for add_condition."""

    def test_appends_empty_condition_to_root(self, nested_tree):
        new_root = editor.add_condition(nested_tree, ())
        assert len(new_root.children) == 4
        assert new_root.children[-1] == create_condition()
        assert new_root.children[:3] == nested_tree.children

    def test_appends_to_nested_group(self, nested_tree):
        new_root = editor.add_condition(nested_tree, (1,))
        assert len(new_root.children[1].children) == 3
        assert len(nested_tree.children[1].children) == 2

    def test_into_empty_exit_tree(self):
        new_root = editor.add_condition(default_exit_tree(), ())
        assert len(new_root.children) == 1

    def test_on_condition_raises(self, nested_tree):
        with pytest.raises(TypeError):
            editor.add_condition(nested_tree, (0,))


class TestAddGroup:
    """Tests for add_group."""

    def test_appends_or_group_with_one_condition(self, nested_tree):
        new_root = editor.add_group(nested_tree, ())
        group = new_root.children[-1]
        assert isinstance(group, GroupNode)
        assert group.logic is Logic.OR
        assert group.children == (create_condition(),)

    def test_deeply_nested(self, nested_tree):
        root = editor.add_group(nested_tree, (1,))
        root = editor.add_group(root, (1, 2))
        assert isinstance(editor.get_node(root, (1, 2, 1)), GroupNode)

    def test_insertion_order_preserved(self, nested_tree):
        root = editor.add_group(nested_tree, ())
        root = editor.add_condition(root, ())
        assert isinstance(root.children[3], GroupNode)
        assert isinstance(root.children[4], ConditionNode)


class TestRemoveNode:
    """Tests for remove_node."""

    def test_remove_root_is_noop(self, nested_tree):
        assert editor.remove_node(nested_tree, ()) is nested_tree

    def test_remove_middle_child(self, nested_tree):
        new_root = editor.remove_node(nested_tree, (1,))
        assert new_root.children == (nested_tree.children[0], nested_tree.children[2])

    def test_remove_nested_condition(self, nested_tree):
        new_root = editor.remove_node(nested_tree, (1, 1))
        assert len(new_root.children[1].children) == 1
        assert new_root.children[1].children[0] is nested_tree.children[1].children[0]

    def test_group_may_become_empty(self, nested_tree):
        root = editor.remove_node(nested_tree, (1, 1))
        root = editor.remove_node(root, (1, 0))
        assert root.children[1].children == ()

    def test_out_of_range_raises(self, nested_tree):
        with pytest.raises(IndexError):
            editor.remove_node(nested_tree, (5,))


class TestFieldEdits:
    """Tests for single-field edits on conditions and groups."""

    def test_set_operator(self, nested_tree):
        new_root = editor.set_operator(nested_tree, (0,), ">")
        assert new_root.children[0].operator == ">"

    def test_set_left(self, nested_tree):
        ema = IndicatorRef.select("EMA")
        new_root = editor.set_left(nested_tree, (2,), ema)
        assert new_root.children[2].left is ema

    def test_set_logic(self, nested_tree):
        new_root = editor.set_logic(nested_tree, (1,), "and")
        assert new_root.children[1].logic is Logic.AND

    def test_set_logic_on_condition_raises(self, nested_tree):
        with pytest.raises(TypeError):
            editor.set_logic(nested_tree, (0,), Logic.OR)

    def test_set_operator_on_group_raises(self, nested_tree):
        with pytest.raises(TypeError):
            editor.set_operator(nested_tree, (1,), "<")

    def test_switch_to_indicator_resets_selection(self, nested_tree):
        root = editor.set_right_type(nested_tree, (1, 0), RightType.VALUE)
        root = editor.set_right_type(root, (1, 0), RightType.INDICATOR)
        cond = editor.get_node(root, (1, 0))
        assert cond.right_type is RightType.INDICATOR
        assert cond.right_indicator == IndicatorRef()

    def test_switch_to_value_keeps_literal(self, nested_tree):
        root = editor.set_right_type(nested_tree, (0,), "indicator")
        root = editor.set_right_type(root, (0,), "value")
        cond = root.children[0]
        assert cond.right_type is RightType.VALUE
        assert cond.right_value == "30"

    def test_set_right_value_and_indicator(self, nested_tree):
        root = editor.set_right_value(nested_tree, (2,), "12.5")
        root = editor.set_right_indicator(root, (1, 0), IndicatorRef.select("EMA"))
        assert root.children[2].right_value == "12.5"
        assert root.children[1].children[0].right_indicator.key == "EMA"


class TestIterPaths:
    """Tests for iter_paths."""

    def test_depth_first_order(self, nested_tree):
        paths = [path for path, _ in editor.iter_paths(nested_tree)]
        assert paths == [(), (0,), (1,), (1, 0), (1, 1), (2,)]
