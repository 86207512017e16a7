"""Shared fixtures for filter tree tests."""

import pytest

from screener.filters.model import (
    ConditionNode,
    GroupNode,
    IndicatorRef,
    Logic,
    RightType,
)


@pytest.fixture
def rsi() -> IndicatorRef:
    return IndicatorRef(key="RSI", source="close", period=14, offset=0)


@pytest.fixture
def sma() -> IndicatorRef:
    return IndicatorRef(key="SMA", source="close", period=50, offset=0)


@pytest.fixture
def nested_tree(rsi, sma) -> GroupNode:
    """AND root with a condition, a nested OR group and a trailing condition.

    Layout::

        AND
        [0] RSI < 30
        [1] OR
            [1,0] SMA > RSI
            [1,1] <unset> > ""
        [2] <unset> = 5
    """
    return GroupNode(
        logic=Logic.AND,
        children=(
            ConditionNode(left=rsi, operator="<", right_value="30"),
            GroupNode(
                logic=Logic.OR,
                children=(
                    ConditionNode(
                        left=sma,
                        operator=">",
                        right_type=RightType.INDICATOR,
                        right_indicator=rsi,
                    ),
                    ConditionNode(),
                ),
            ),
            ConditionNode(operator="=", right_value="5"),
        ),
    )
