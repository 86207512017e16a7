"""Filter expression trees: model, path editor, wire serialization."""

from screener.filters.model import (
    ConditionNode,
    GroupNode,
    IndicatorRef,
    Logic,
    Node,
    RightType,
    create_condition,
    create_group,
    default_entry_tree,
    default_exit_tree,
)
from screener.filters.editor import (
    add_condition,
    add_group,
    get_node,
    remove_node,
    update_node,
)
from screener.filters.canonical import has_any_valid_rule, serialize

__all__ = [
    "ConditionNode",
    "GroupNode",
    "IndicatorRef",
    "Logic",
    "Node",
    "RightType",
    "create_condition",
    "create_group",
    "default_entry_tree",
    "default_exit_tree",
    "add_condition",
    "add_group",
    "get_node",
    "remove_node",
    "update_node",
    "has_any_valid_rule",
    "serialize",
]
