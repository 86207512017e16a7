"""Shared fixtures for scan session tests."""

import asyncio

import pytest

from config.settings import ScanConfig
from screener.api.client import ScanRequestError
from screener.filters.model import (
    ConditionNode,
    GroupNode,
    IndicatorRef,
    default_entry_tree,
    default_exit_tree,
)
from screener.scan.request import ScanFilters
from screener.scan.session import ScanCriteria


def make_rows(n: int, start: int = 0) -> list[dict]:
    """Company rows with sequential symbols."""
    return [{"symbol": f"SYM{i}", "industry": "Tech"} for i in range(start, start + n)]


class FakeFiltersClient:
    """Stub for ``ScreenerApiClient.apply_filters``.

    Responses are consumed in order; an exception instance is raised
    instead of returned. When ``gated`` is set, each call waits for
    ``release()`` so tests can observe the in-flight state.
    """

    def __init__(self, responses=None, gated: bool = False):
        self.responses = list(responses or [])
        self.payloads: list[dict] = []
        self.gated = gated
        self.gate = asyncio.Event()

    def release(self) -> None:
        self.gate.set()

    async def apply_filters(self, payload: dict) -> list[dict]:
        self.payloads.append(payload)
        if self.gated:
            await self.gate.wait()
        response = self.responses.pop(0) if self.responses else []
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def scan_config() -> ScanConfig:
    return ScanConfig(page_size=50, scroll_threshold=80)


@pytest.fixture
def valid_criteria() -> ScanCriteria:
    entry = GroupNode(children=(ConditionNode(left=IndicatorRef.select("RSI"), operator="<", right_value="30"),))
    return ScanCriteria(entry=entry, exit=default_exit_tree(), filters=ScanFilters())


@pytest.fixture
def invalid_criteria() -> ScanCriteria:
    return ScanCriteria(entry=default_entry_tree(), exit=default_exit_tree(), filters=ScanFilters())


@pytest.fixture
def backend_error() -> ScanRequestError:
    return ScanRequestError("entry: unknown indicator 'FOO'", status_code=422)


@pytest.fixture
def rows():
    """Factory for company rows: ``rows(n, start=0)``."""
    return make_rows


@pytest.fixture
def fake_client():
    """Factory for ``FakeFiltersClient``."""
    return FakeFiltersClient
