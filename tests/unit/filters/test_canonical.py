"""Tests for wire serialization and the submission check."""

import json

from screener.filters import editor
from screener.filters.canonical import count_conditions, has_any_valid_rule, serialize
from screener.filters.model import (
    ConditionNode,
    GroupNode,
    IndicatorRef,
    Logic,
    RightType,
    create_condition,
    default_entry_tree,
    default_exit_tree,
)


class TestSerializeCondition:
    """Condition nodes flatten to one rule record."""

    def test_value_condition(self, rsi):
        cond = ConditionNode(left=rsi, operator="<", right_value="30")
        assert serialize(cond) == {
            "type": "rule",
            "left": "RSI",
            "leftLookback": 0,
            "operator": "<",
            "rightType": "value",
            "rightValue": "30",
            "rightLookback": 0,
        }

    def test_indicator_condition_uses_right_key(self, rsi, sma):
        cond = ConditionNode(left=sma, right_type=RightType.INDICATOR, right_indicator=rsi)
        wire = serialize(cond)
        assert wire["rightType"] == "indicator"
        assert wire["rightValue"] == "RSI"

    def test_unset_operands_degrade_to_empty_strings(self):
        wire = serialize(create_condition())
        assert wire["left"] == ""
        assert wire["rightValue"] == ""

    def test_unset_right_indicator(self, rsi):
        cond = ConditionNode(left=rsi, right_type=RightType.INDICATOR)
        assert serialize(cond)["rightValue"] == ""

    def test_lookbacks_carried_when_present(self, rsi):
        cond = ConditionNode(left=rsi, left_lookback=3, right_lookback=1)
        wire = serialize(cond)
        assert wire["leftLookback"] == 3
        assert wire["rightLookback"] == 1

    def test_literal_text_not_parsed(self, rsi):
        cond = ConditionNode(left=rsi, right_value="abc")
        assert serialize(cond)["rightValue"] == "abc"


class TestSerializeRoundTrip:
    """Right-type switching through the editor before submission."""

    def test_indicator_then_back_to_value(self, rsi, sma):
        root = GroupNode(children=(ConditionNode(left=sma, right_value="42"),))
        root = editor.set_right_type(root, (0,), RightType.INDICATOR)
        root = editor.set_right_indicator(root, (0,), rsi)
        assert serialize(root)["children"][0]["rightValue"] == "RSI"

        root = editor.set_right_type(root, (0,), RightType.VALUE)
        assert serialize(root)["children"][0]["rightValue"] == "42"


class TestSerializeGroup:
    """Group nodes serialize recursively."""

    def test_nested_shape(self, nested_tree):
        wire = serialize(nested_tree)
        assert wire["type"] == "group"
        assert wire["logic"] == "AND"
        assert len(wire["children"]) == 3
        inner = wire["children"][1]
        assert inner["logic"] == "OR"
        assert [c["left"] for c in inner["children"]] == ["SMA", ""]

    def test_empty_exit_tree(self):
        assert serialize(default_exit_tree()) == {"type": "group", "logic": "OR", "children": []}

    def test_none(self):
        assert serialize(None) is None

    def test_output_is_json_serializable(self, nested_tree):
        json.dumps(serialize(nested_tree))

    def test_total_over_editor_reachable_trees(self):
        root = default_entry_tree()
        root = editor.add_group(root, ())
        root = editor.add_group(root, (1,))
        root = editor.remove_node(root, (1, 1, 0))
        root = editor.remove_node(root, (0,))
        wire = serialize(root)
        assert wire["children"][0]["children"][1] == {"type": "group", "logic": "OR", "children": []}


class TestHasAnyValidRule:
    """Truth table for the submission check."""

    def test_default_entry_tree_is_invalid(self):
        assert has_any_valid_rule(default_entry_tree()) is False

    def test_empty_group_is_invalid(self):
        assert has_any_valid_rule(default_exit_tree()) is False

    def test_all_left_keys_empty(self):
        root = GroupNode(children=(
            ConditionNode(right_value="5"),
            GroupNode(logic=Logic.OR, children=(ConditionNode(right_type=RightType.INDICATOR,
                                                              right_indicator=IndicatorRef.select("RSI")),)),
        ))
        assert has_any_valid_rule(root) is False

    def test_one_left_key_deep_in_tree(self, rsi):
        root = GroupNode(children=(
            ConditionNode(),
            GroupNode(children=(GroupNode(children=(ConditionNode(left=rsi),)),)),
        ))
        assert has_any_valid_rule(root) is True

    def test_right_side_not_required(self, rsi):
        assert has_any_valid_rule(ConditionNode(left=rsi, right_value="")) is True

    def test_none(self):
        assert has_any_valid_rule(None) is False


def test_count_conditions(nested_tree):
    assert count_conditions(nested_tree) == 4
    assert count_conditions(default_exit_tree()) == 0
