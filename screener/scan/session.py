"""Paginated scan session.

State machine::

    IDLE --submit/load_more--> FETCHING --ok--> IDLE
                                        --error--> ERROR
    ERROR --submit/load_more--> FETCHING

At most one page request is in flight. ``busy`` is set before the first
``await`` of a fetch, so any trigger that arrives while a fetch is
outstanding (a second scroll event, a repeated submit) returns without
sending anything; triggers are never queued.

Every fresh submission and every ``reset()`` bumps ``generation``. A
response whose generation no longer matches was superseded and, when
``ScanConfig.discard_stale_pages`` is set, is dropped instead of being
merged into the new result list.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from config.settings import ScanConfig
from screener.api.client import ScanRequestError
from screener.filters.canonical import has_any_valid_rule, serialize
from screener.filters.model import GroupNode
from screener.scan.request import CompanyMatch, ScanFilters, ScanRequest
from screener.utils.logging import get_scan_logger

logger = logging.getLogger(__name__)
scan_logger = get_scan_logger(__name__)

VALIDATION_MESSAGE = "Add at least one entry condition with an indicator selected."
_FALLBACK_MESSAGE = "Request failed"


class ScanState(str, Enum):
    """Lifecycle state of a scan session."""

    IDLE = "idle"
    FETCHING = "fetching"
    ERROR = "error"


class FiltersClient(Protocol):
    """The part of ``ScreenerApiClient`` a session needs."""

    async def apply_filters(self, payload: dict) -> list[dict]: ...


@dataclass(frozen=True)
class ScanCriteria:
    """Everything a page request is built from, captured at trigger time."""

    entry: GroupNode
    exit: GroupNode
    filters: ScanFilters


class ScanSession:
    """Accumulates paged scan results from the matching backend.

    Attributes:
        results: Accumulated result rows, in arrival order
        offset: Page cursor for the next continuation fetch
        has_more: Continuation flag inferred from the last page size
        busy: True while a page request is in flight
        last_error: Message of the last failure, None when cleared
        state: Current ``ScanState``
        generation: Bumped on fresh submission and reset
        requests_sent: Number of page requests issued
    """

    def __init__(self, client: FiltersClient, config: Optional[ScanConfig] = None):
        self.client = client
        self.config = config or ScanConfig()
        self.results: list[dict] = []
        self.offset = 0
        self.has_more = False
        self.busy = False
        self.last_error: Optional[str] = None
        self.state = ScanState.IDLE
        self.generation = 0
        self.requests_sent = 0

    @property
    def page_size(self) -> int:
        return self.config.page_size

    @property
    def companies(self) -> list[CompanyMatch]:
        """Accumulated rows as ``CompanyMatch`` records (rows without a symbol are skipped)."""
        return [CompanyMatch(**row) for row in self.results if isinstance(row, dict) and row.get("symbol")]

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    async def submit(self, criteria: ScanCriteria) -> bool:
        """Start a fresh scan from offset 0.

        Returns:
            True if a request was sent
        """
        if self.busy:
            logger.debug("submit ignored: fetch already in flight")
            return False
        if not self._admit(criteria):
            return False

        self.results = []
        self.offset = 0
        self.has_more = True
        self.generation += 1
        return await self._fetch(criteria, fresh=True)

    async def load_more(self, criteria: ScanCriteria) -> bool:
        """Fetch the next page at the current cursor without resetting results.

        Returns:
            True if a request was sent
        """
        if self.busy:
            logger.debug("load_more ignored: fetch already in flight")
            return False
        if not self.has_more:
            logger.debug("load_more ignored: no further pages")
            return False
        if not self._admit(criteria):
            return False
        return await self._fetch(criteria, fresh=False)

    def near_bottom(self, scroll_top: float, scroll_height: float, client_height: float) -> bool:
        """True when the results view is scrolled within the threshold of its end."""
        return scroll_height - scroll_top <= client_height + self.config.scroll_threshold

    async def on_scroll(
        self,
        scroll_top: float,
        scroll_height: float,
        client_height: float,
        criteria: ScanCriteria,
    ) -> bool:
        """Continuation trigger driven by the results view scroll position.

        Returns:
            True if a request was sent
        """
        if not (self.near_bottom(scroll_top, scroll_height, client_height) and self.has_more and not self.busy):
            return False
        return await self.load_more(criteria)

    def reset(self) -> None:
        """Clear results and cursor; an in-flight response becomes stale."""
        self.generation += 1
        self.results = []
        self.offset = 0
        self.has_more = False
        self.last_error = None
        if not self.busy:
            self.state = ScanState.IDLE
        logger.info("Scan session reset (generation=%d)", self.generation)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _admit(self, criteria: ScanCriteria) -> bool:
        if has_any_valid_rule(criteria.entry):
            return True
        self.last_error = VALIDATION_MESSAGE
        self.state = ScanState.ERROR
        scan_logger.scan_rejected(VALIDATION_MESSAGE)
        return False

    def _is_stale(self, generation: int) -> bool:
        return self.config.discard_stale_pages and generation != self.generation

    async def _fetch(self, criteria: ScanCriteria, fresh: bool) -> bool:
        offset = 0 if fresh else self.offset
        generation = self.generation
        request = ScanRequest.build(
            criteria.filters,
            entry=serialize(criteria.entry),
            exit=serialize(criteria.exit),
            limit=self.page_size,
            offset=offset,
        )

        self.busy = True
        self.state = ScanState.FETCHING
        self.last_error = None
        self.requests_sent += 1
        scan_logger.scan_submitted(offset=offset, limit=self.page_size, fresh=fresh)

        try:
            rows = await self.client.apply_filters(request.to_payload())
        except ScanRequestError as exc:
            self._apply_failure(generation, offset, exc.message)
            return True
        except Exception as exc:
            logger.exception("Unexpected error fetching scan page at offset=%d", offset)
            self._apply_failure(generation, offset, str(exc))
            return True
        finally:
            self.busy = False

        self._apply_page(generation, offset, rows or [], fresh)
        return True

    def _apply_failure(self, generation: int, offset: int, message: str) -> None:
        if self._is_stale(generation):
            scan_logger.page_discarded(offset, generation, self.generation, error=message)
            self.state = ScanState.IDLE
            return
        self.last_error = message or _FALLBACK_MESSAGE
        self.state = ScanState.ERROR
        scan_logger.scan_failed(offset, self.last_error)

    def _apply_page(self, generation: int, offset: int, rows: list[dict], fresh: bool) -> None:
        if self._is_stale(generation):
            scan_logger.page_discarded(offset, generation, self.generation, rows=len(rows))
            self.state = ScanState.IDLE
            return

        if fresh:
            self.results = list(rows)
        else:
            self.results.extend(rows)
        self.has_more = len(rows) >= self.page_size
        if self.has_more:
            self.offset += self.page_size
        self.last_error = None
        self.state = ScanState.IDLE
        scan_logger.page_received(offset, len(rows), len(self.results), self.has_more)
