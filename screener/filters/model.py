"""Filter expression tree domain objects.

Defines the immutable node types a screening strategy is built from:

- IndicatorRef: one operand (indicator key + OHLCV source, period, offset)
- ConditionNode: leaf comparing a left operand with a literal or indicator
- GroupNode: AND/OR combinator over an ordered tuple of child nodes

Nodes are frozen dataclasses. Edits never mutate a node; they build a new
one with ``dataclasses.replace`` (see ``screener.filters.editor``).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

logger = logging.getLogger(__name__)

SOURCES = ("open", "high", "low", "close", "volume")
OPERATORS = (">", "<", "=")

DEFAULT_SOURCE = "close"
DEFAULT_PERIOD = 14
DEFAULT_OFFSET = 0


class Logic(str, Enum):
    """Boolean combinator of a group."""

    AND = "AND"
    OR = "OR"


class RightType(str, Enum):
    """Which right-hand operand of a condition is active."""

    VALUE = "value"
    INDICATOR = "indicator"


@dataclass(frozen=True)
class IndicatorRef:
    """Reference to a named indicator sampled on one OHLCV field.

    Attributes:
        key: Indicator identifier, empty string when nothing is selected
        source: Sampled price/volume field
        period: Lookback window length (>= 1)
        offset: Bar offset, 0 is the current bar
    """

    key: str = ""
    source: str = DEFAULT_SOURCE
    period: int = DEFAULT_PERIOD
    offset: int = DEFAULT_OFFSET

    def __post_init__(self):
        if self.source not in SOURCES:
            raise ValueError(f"source must be one of {SOURCES}, got {self.source!r}")
        if self.period < 1:
            raise ValueError(f"period must be >= 1, got {self.period}")
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0, got {self.offset}")

    @property
    def is_set(self) -> bool:
        """True when an indicator has been selected."""
        return bool(self.key)

    @classmethod
    def select(cls, key: str) -> "IndicatorRef":
        """Fresh reference for a newly picked indicator with default parameters."""
        return cls(key=key)

    def cleared(self) -> "IndicatorRef":
        """Same parameters with the selection removed."""
        return IndicatorRef(key="", source=self.source, period=self.period, offset=self.offset)


@dataclass(frozen=True)
class ConditionNode:
    """Leaf comparison ``left <operator> right``.

    ``right_type`` decides whether ``right_value`` (raw text as typed) or
    ``right_indicator`` is the active right operand. The inactive one is
    kept but ignored when serializing.
    """

    left: IndicatorRef = field(default_factory=IndicatorRef)
    operator: str = ">"
    right_type: RightType = RightType.VALUE
    right_value: str = ""
    right_indicator: IndicatorRef = field(default_factory=IndicatorRef)
    left_lookback: Optional[int] = None
    right_lookback: Optional[int] = None

    type = "rule"

    def __post_init__(self):
        if self.operator not in OPERATORS:
            raise ValueError(f"operator must be one of {OPERATORS}, got {self.operator!r}")
        if isinstance(self.right_type, str) and not isinstance(self.right_type, RightType):
            object.__setattr__(self, "right_type", RightType(self.right_type))

    @property
    def right_key(self) -> str:
        """Key of the right indicator, empty when the literal side is active."""
        if self.right_type == RightType.INDICATOR:
            return self.right_indicator.key
        return ""


@dataclass(frozen=True)
class GroupNode:
    """AND/OR combinator over ordered children.

    An empty group is allowed and contributes no constraint.
    """

    logic: Logic = Logic.AND
    children: tuple["Node", ...] = ()

    type = "group"

    def __post_init__(self):
        if isinstance(self.logic, str) and not isinstance(self.logic, Logic):
            object.__setattr__(self, "logic", Logic(self.logic.upper()))
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))


Node = Union[ConditionNode, GroupNode]


def is_group(node: Node) -> bool:
    """True if *node* is a group."""
    return getattr(node, "type", None) == "group"


def is_condition(node: Node) -> bool:
    """True if *node* is a condition."""
    return getattr(node, "type", None) == "rule"


def create_condition() -> ConditionNode:
    """Empty condition: ``>``, literal right side, both operands unset."""
    return ConditionNode()


def create_group(logic: Logic | str = Logic.AND, children=()) -> GroupNode:
    """Group with the given logic and children."""
    return GroupNode(logic=logic, children=tuple(children))


def default_entry_tree() -> GroupNode:
    """Initial entry root: AND with one empty condition."""
    return create_group(Logic.AND, [create_condition()])


def default_exit_tree() -> GroupNode:
    """Initial exit root: empty OR group."""
    return create_group(Logic.OR, [])
