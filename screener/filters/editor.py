"""Path-addressed edits of a filter expression tree.

A path is a tuple of zero-based child indices from the root (the empty
path is the root itself). Every function here takes a root and a path and
returns a new root: nodes on the root-to-target path are rebuilt, all other
subtrees are shared with the input tree unchanged.

Paths are derived from the tree being edited and must not be reused after
the tree is replaced. An out-of-range index raises ``IndexError`` and
descending through a condition raises ``TypeError``; both indicate a stale
or fabricated path and are not caught here.
"""

import logging
from dataclasses import replace
from typing import Callable, Sequence

from screener.filters.model import (
    ConditionNode,
    GroupNode,
    IndicatorRef,
    Logic,
    Node,
    RightType,
    create_condition,
    create_group,
    is_group,
)

logger = logging.getLogger(__name__)

Path = tuple[int, ...]
Updater = Callable[[Node], Node]


def get_node(root: Node, path: Sequence[int]) -> Node:
    """Return the node addressed by *path*."""
    node = root
    for depth, index in enumerate(path):
        node = _child(node, index, path[:depth])
    return node


def update_node(root: Node, path: Sequence[int], updater: Updater) -> Node:
    """Replace the node at *path* with ``updater(node)``.

    Args:
        root: Tree root
        path: Child indices from the root
        updater: Function producing the replacement node

    Returns:
        New root; siblings off the path are shared with *root*
    """
    if not path:
        return updater(root)

    index, rest = path[0], path[1:]
    child = _child(root, index, ())
    new_child = update_node(child, rest, updater)
    children = root.children[:index] + (new_child,) + root.children[index + 1:]
    return replace(root, children=children)


def _child(node: Node, index: int, parent_path: Sequence[int]) -> Node:
    if not is_group(node):
        raise TypeError(f"path {tuple(parent_path)} addresses a condition, which has no children")
    if index < 0 or index >= len(node.children):
        raise IndexError(
            f"child index {index} out of range at path {tuple(parent_path)} "
            f"({len(node.children)} children)"
        )
    return node.children[index]


def _require_group(node: Node, operation: str) -> GroupNode:
    if not is_group(node):
        raise TypeError(f"{operation} requires a group node, got {type(node).__name__}")
    return node


def _require_condition(node: Node, operation: str) -> ConditionNode:
    if is_group(node):
        raise TypeError(f"{operation} requires a condition node, got {type(node).__name__}")
    return node


# ---------------------------------------------------------------------------
# Structural edits
# ---------------------------------------------------------------------------


def add_condition(root: Node, path: Sequence[int]) -> Node:
    """Append an empty condition to the group at *path*."""
    def _append(node: Node) -> Node:
        group = _require_group(node, "add_condition")
        return replace(group, children=group.children + (create_condition(),))

    logger.debug("add_condition at path=%s", tuple(path))
    return update_node(root, path, _append)


def add_group(root: Node, path: Sequence[int]) -> Node:
    """Append an OR group holding one empty condition to the group at *path*."""
    def _append(node: Node) -> Node:
        group = _require_group(node, "add_group")
        nested = create_group(Logic.OR, [create_condition()])
        return replace(group, children=group.children + (nested,))

    logger.debug("add_group at path=%s", tuple(path))
    return update_node(root, path, _append)


def remove_node(root: Node, path: Sequence[int]) -> Node:
    """Remove the node at *path* from its parent.

    The root cannot be removed: an empty path returns *root* unchanged.
    """
    if not path:
        logger.debug("remove_node on the root ignored")
        return root

    parent_path, index = tuple(path[:-1]), path[-1]

    def _drop(node: Node) -> Node:
        group = _require_group(node, "remove_node")
        if index < 0 or index >= len(group.children):
            raise IndexError(
                f"child index {index} out of range at path {parent_path} "
                f"({len(group.children)} children)"
            )
        return replace(group, children=group.children[:index] + group.children[index + 1:])

    logger.debug("remove_node at path=%s", tuple(path))
    return update_node(root, parent_path, _drop)


# ---------------------------------------------------------------------------
# Field edits
# ---------------------------------------------------------------------------


def set_logic(root: Node, path: Sequence[int], logic: Logic | str) -> Node:
    """Change the combinator of the group at *path*."""
    new_logic = logic if isinstance(logic, Logic) else Logic(logic.upper())
    return update_node(
        root, path,
        lambda n: replace(_require_group(n, "set_logic"), logic=new_logic),
    )


def set_operator(root: Node, path: Sequence[int], operator: str) -> Node:
    """Change the comparison operator of the condition at *path*."""
    return update_node(
        root, path,
        lambda n: replace(_require_condition(n, "set_operator"), operator=operator),
    )


def set_left(root: Node, path: Sequence[int], indicator: IndicatorRef) -> Node:
    """Replace the left operand of the condition at *path*."""
    return update_node(
        root, path,
        lambda n: replace(_require_condition(n, "set_left"), left=indicator),
    )


def set_right_type(root: Node, path: Sequence[int], right_type: RightType | str) -> Node:
    """Switch which right operand is active.

    Switching to ``indicator`` always starts from an unset indicator;
    switching to ``value`` keeps the literal typed earlier.
    """
    new_type = RightType(right_type)

    def _switch(node: Node) -> Node:
        cond = _require_condition(node, "set_right_type")
        if new_type == RightType.INDICATOR:
            return replace(cond, right_type=new_type, right_indicator=IndicatorRef())
        return replace(cond, right_type=new_type)

    return update_node(root, path, _switch)


def set_right_value(root: Node, path: Sequence[int], text: str) -> Node:
    """Set the literal right operand text of the condition at *path*."""
    return update_node(
        root, path,
        lambda n: replace(_require_condition(n, "set_right_value"), right_value=text),
    )


def set_right_indicator(root: Node, path: Sequence[int], indicator: IndicatorRef) -> Node:
    """Replace the right indicator operand of the condition at *path*."""
    return update_node(
        root, path,
        lambda n: replace(_require_condition(n, "set_right_indicator"), right_indicator=indicator),
    )


def iter_paths(root: Node, prefix: Path = ()):
    """Yield ``(path, node)`` for every node in depth-first display order."""
    yield prefix, root
    if is_group(root):
        for i, child in enumerate(root.children):
            yield from iter_paths(child, prefix + (i,))
