"""Plain-text rendering of filter trees for logs and summaries."""

from typing import Optional

from screener.catalog import IndicatorCatalog
from screener.filters.model import IndicatorRef, Node, RightType, is_condition

UNSET = "?"


def describe_indicator(ref: IndicatorRef, catalog: Optional[IndicatorCatalog] = None) -> str:
    """``Label(source, period)`` with ``[n]`` appended for a non-zero offset."""
    if not ref.is_set:
        return UNSET
    label = catalog.label(ref.key) if catalog is not None else ref.key
    text = f"{label}({ref.source}, {ref.period})"
    if ref.offset:
        text += f"[{ref.offset}]"
    return text


def describe(node: Node, catalog: Optional[IndicatorCatalog] = None) -> str:
    """One-line infix description, e.g. ``(RSI(close, 14) < 30 AND ...)``."""
    if is_condition(node):
        left = describe_indicator(node.left, catalog)
        if node.right_type == RightType.INDICATOR:
            right = describe_indicator(node.right_indicator, catalog)
        else:
            right = node.right_value or UNSET
        return f"{left} {node.operator} {right}"

    parts = [describe(child, catalog) for child in node.children]
    if not parts:
        return "()"
    if len(parts) == 1:
        return parts[0]
    return "(" + f" {node.logic.value} ".join(parts) + ")"
