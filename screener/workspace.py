"""Strategy workspace: the top-level state behind the screener page.

Owns the entry and exit trees, the shared filter fields, the indicator
catalog and the scan session, and exposes the operations the page
performs. Trees are replaced wholesale on every edit; paths passed in are
expected to come from the tree as currently rendered.
"""

import logging
from typing import Literal, Optional, Sequence

from config.settings import Settings, get_settings
from screener.api.client import ScanRequestError, ScreenerApiClient
from screener.catalog import IndicatorCatalog
from screener.filters import editor
from screener.filters.canonical import count_conditions
from screener.filters.draft import OperandDraft
from screener.filters.model import (
    GroupNode,
    IndicatorRef,
    Node,
    RightType,
    default_entry_tree,
    default_exit_tree,
    is_condition,
)
from screener.filters.render import describe
from screener.scan.request import ScanFilters
from screener.scan.session import ScanCriteria, ScanSession
from screener.utils.logging import setup_logging_from_settings

logger = logging.getLogger(__name__)

TreeName = Literal["entry", "exit"]
Side = Literal["left", "right"]


class StrategyWorkspace:
    """Editing and scanning state for one strategy."""

    def __init__(
        self,
        client: ScreenerApiClient,
        settings: Optional[Settings] = None,
        catalog: Optional[IndicatorCatalog] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client
        self.catalog = catalog or IndicatorCatalog()
        self.strategy_name = ""
        self.filters = ScanFilters(timeframe=self.settings.scan.default_timeframe)
        self.session = ScanSession(client, self.settings.scan)
        self._trees: dict[str, GroupNode] = {
            "entry": default_entry_tree(),
            "exit": default_exit_tree(),
        }
        # Bumped on structural edits; an open operand draft is bound to it
        self._structure_version = {"entry": 0, "exit": 0}

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, transport=None) -> "StrategyWorkspace":
        """Application startup: configure logging and build a workspace.

        Args:
            settings: Configuration (defaults to ``get_settings()``)
            transport: Optional httpx transport for the API client

        Returns:
            Workspace with a fresh ``ScreenerApiClient``; call
            ``load_catalog()`` next
        """
        settings = settings or get_settings()
        setup_logging_from_settings(settings)
        client = ScreenerApiClient(settings.api, transport=transport)
        logger.info("Workspace started: api=%s edit_mode=%s", settings.api.base_url, settings.scan.edit_mode)
        return cls(client, settings=settings)

    @property
    def entry(self) -> GroupNode:
        return self._trees["entry"]

    @property
    def exit(self) -> GroupNode:
        return self._trees["exit"]

    def tree(self, name: TreeName) -> GroupNode:
        if name not in self._trees:
            raise KeyError(f"unknown tree {name!r}, expected 'entry' or 'exit'")
        return self._trees[name]

    def replace_tree(self, name: TreeName, root: GroupNode) -> None:
        """Install a new root for *name*."""
        self.tree(name)
        self._trees[name] = root

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def load_catalog(self) -> IndicatorCatalog:
        """Fetch the indicator catalog once; a failure leaves it empty."""
        try:
            rows = await self.client.get_indicators()
        except ScanRequestError as exc:
            logger.warning("Indicator catalog unavailable: %s", exc.message)
            self.catalog = IndicatorCatalog()
            return self.catalog
        self.catalog = IndicatorCatalog.from_payload({"indicators": rows})
        logger.info("Loaded %d indicators", len(self.catalog))
        return self.catalog

    # ------------------------------------------------------------------
    # Tree edits
    # ------------------------------------------------------------------

    def _edit(self, name: TreeName, new_root: Node, structural: bool = False) -> GroupNode:
        self.replace_tree(name, new_root)
        if structural:
            self._structure_version[name] += 1
        return new_root

    def add_condition(self, name: TreeName, path: Sequence[int] = ()) -> GroupNode:
        return self._edit(name, editor.add_condition(self.tree(name), path), structural=True)

    def add_group(self, name: TreeName, path: Sequence[int] = ()) -> GroupNode:
        return self._edit(name, editor.add_group(self.tree(name), path), structural=True)

    def remove_node(self, name: TreeName, path: Sequence[int]) -> GroupNode:
        if not path:
            return self.tree(name)
        return self._edit(name, editor.remove_node(self.tree(name), path), structural=True)

    def set_logic(self, name: TreeName, path: Sequence[int], logic: str) -> GroupNode:
        return self._edit(name, editor.set_logic(self.tree(name), path, logic))

    def set_operator(self, name: TreeName, path: Sequence[int], operator: str) -> GroupNode:
        return self._edit(name, editor.set_operator(self.tree(name), path, operator))

    def set_right_type(self, name: TreeName, path: Sequence[int], right_type: RightType | str) -> GroupNode:
        return self._edit(name, editor.set_right_type(self.tree(name), path, right_type))

    def set_right_value(self, name: TreeName, path: Sequence[int], text: str) -> GroupNode:
        return self._edit(name, editor.set_right_value(self.tree(name), path, text))

    def set_operand(self, name: TreeName, path: Sequence[int], side: Side, indicator: IndicatorRef) -> GroupNode:
        """Replace the left or right indicator operand of a condition."""
        if side == "left":
            return self._edit(name, editor.set_left(self.tree(name), path, indicator))
        if side == "right":
            return self._edit(name, editor.set_right_indicator(self.tree(name), path, indicator))
        raise ValueError(f"side must be 'left' or 'right', got {side!r}")

    def select_indicator(self, name: TreeName, path: Sequence[int], side: Side, key: str) -> GroupNode:
        """Pick an indicator from the selection list (default parameters)."""
        return self.set_operand(name, path, side, IndicatorRef.select(key))

    def clear_indicator(self, name: TreeName, path: Sequence[int], side: Side) -> GroupNode:
        """Remove the selection of an operand, keeping its parameters."""
        return self.set_operand(name, path, side, self._operand(name, path, side).cleared())

    def _operand(self, name: TreeName, path: Sequence[int], side: Side) -> IndicatorRef:
        node = editor.get_node(self.tree(name), path)
        if not is_condition(node):
            raise TypeError(f"path {tuple(path)} in {name} tree is not a condition")
        return node.left if side == "left" else node.right_indicator

    def open_operand(self, name: TreeName, path: Sequence[int], side: Side) -> OperandDraft:
        """Open the parameter panel for one operand.

        The draft is bound to *path* as it is now. Applying it after a
        structural edit of the same tree raises ``RuntimeError``.
        """
        path = tuple(path)
        version = self._structure_version[name]

        def _apply(indicator: IndicatorRef) -> None:
            if self._structure_version[name] != version:
                raise RuntimeError(f"{name} tree changed shape since the operand panel was opened")
            self.set_operand(name, path, side, indicator)

        return OperandDraft(self._operand(name, path, side), _apply, mode=self.settings.scan.edit_mode)

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def update_filters(self, **changes) -> ScanFilters:
        """Replace filter fields, validating the result."""
        self.filters = ScanFilters(**{**self.filters.model_dump(), **changes})
        return self.filters

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def criteria(self) -> ScanCriteria:
        """Snapshot of the trees and filters as they are now."""
        return ScanCriteria(entry=self.entry, exit=self.exit, filters=self.filters)

    async def scan(self) -> bool:
        """Fresh submission (the Scan button)."""
        logger.info(
            "Scan requested: entry=%s exit=%s (%d/%d conditions)",
            describe(self.entry, self.catalog), describe(self.exit, self.catalog),
            count_conditions(self.entry), count_conditions(self.exit),
        )
        return await self.session.submit(self.criteria())

    async def on_results_scroll(self, scroll_top: float, scroll_height: float, client_height: float) -> bool:
        """Continuation trigger from the results view."""
        return await self.session.on_scroll(scroll_top, scroll_height, client_height, self.criteria())

    def summary(self) -> dict:
        """Human-readable state snapshot."""
        return {
            "strategy_name": self.strategy_name,
            "entry": describe(self.entry, self.catalog),
            "exit": describe(self.exit, self.catalog),
            "results": len(self.session.results),
            "has_more": self.session.has_more,
            "state": self.session.state.value,
            "error": self.session.last_error,
        }
