"""Wire serialization and submission check for filter trees.

``serialize`` turns a live tree into the JSON-compatible shape the
``/filters/apply`` endpoint expects. It never raises for trees built through
the editor: unset operands become empty strings and are left for the
backend to judge. ``has_any_valid_rule`` is the only admission check made
before a scan is sent.
"""

import logging
from typing import Optional

from screener.filters.model import IndicatorRef, Node, RightType, is_condition

logger = logging.getLogger(__name__)


def _operand_key(operand) -> str:
    """Bare key of an operand that may be an IndicatorRef, a raw key or None."""
    if isinstance(operand, IndicatorRef):
        return operand.key
    if operand is None:
        return ""
    return str(operand)


def serialize(node: Optional[Node]) -> Optional[dict]:
    """Convert a tree node to its wire representation.

    Args:
        node: Condition or group node (or None)

    Returns:
        ``{"type": "rule", ...}`` / ``{"type": "group", ...}`` dict, or None
    """
    if node is None:
        return None

    if is_condition(node):
        if node.right_type == RightType.INDICATOR:
            right_value = _operand_key(node.right_indicator)
        else:
            right_value = node.right_value
        return {
            "type": "rule",
            "left": _operand_key(node.left) or "",
            "leftLookback": node.left_lookback if node.left_lookback is not None else 0,
            "operator": node.operator,
            "rightType": node.right_type.value,
            "rightValue": right_value if right_value is not None else "",
            "rightLookback": node.right_lookback if node.right_lookback is not None else 0,
        }

    children = [serialize(child) for child in (node.children or ())]
    return {
        "type": "group",
        "logic": node.logic.value,
        "children": [c for c in children if c],
    }


def has_any_valid_rule(node: Optional[Node]) -> bool:
    """True if at least one condition in the tree has a left indicator selected.

    The right side, operator and literal parseability are not checked.
    """
    if node is None:
        return False
    if is_condition(node):
        return bool(_operand_key(node.left))
    return any(has_any_valid_rule(child) for child in (node.children or ()))


def count_conditions(node: Optional[Node]) -> int:
    """Number of condition leaves in the tree."""
    if node is None:
        return 0
    if is_condition(node):
        return 1
    return sum(count_conditions(child) for child in node.children)
