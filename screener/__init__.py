"""Strategy Screener - compose entry/exit indicator filters and scan a company universe.

Core Modules:
- filters: Expression tree model, path editor, wire serialization
- scan: Request models and the paginated scan session
- workspace: Top-level editing and scanning state

Supporting Modules:
- api: Async HTTP client for the screener backend
- catalog: Indicator metadata lookup
- utils: Logging setup

Startup::

    workspace = StrategyWorkspace.from_settings()
    await workspace.load_catalog()
"""

from screener.catalog import IndicatorCatalog, IndicatorMeta
from screener.api.client import ScanRequestError, ScreenerApiClient
from screener.scan.request import CompanyMatch, ScanFilters, ScanRequest
from screener.scan.session import ScanCriteria, ScanSession, ScanState
from screener.workspace import StrategyWorkspace

__all__ = [
    "IndicatorCatalog",
    "IndicatorMeta",
    "ScanRequestError",
    "ScreenerApiClient",
    "CompanyMatch",
    "ScanFilters",
    "ScanRequest",
    "ScanCriteria",
    "ScanSession",
    "ScanState",
    "StrategyWorkspace",
]
