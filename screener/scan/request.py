"""Request and response models for the filter matching endpoint."""

import logging
import math
import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

MARKET_CAP_CATEGORIES = ("SmallCap", "MidCap", "LargeCap")
ALL_MARKET_CAPS = "all"

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_percent(text) -> Optional[float]:
    """Parse a percentage typed as text.

    Blank input gives None. Otherwise the leading number is used
    (``"5"`` -> 5.0, ``"2.5%"`` -> 2.5); text with no leading number,
    or a value that overflows to infinity, gives None.
    """
    if text is None:
        return None
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        value = float(text)
    else:
        match = _LEADING_NUMBER.match(str(text))
        if not match:
            return None
        value = float(match.group(1))
    # JSON has no representation for inf/nan
    return value if math.isfinite(value) else None


class ScanFilters(BaseModel):
    """Filter fields shared by every page request of a scan.

    Values are kept as the user entered them; ``to_payload`` produces
    the wire values.
    """

    timeframe: Literal["1D", "1W"] = "1D"
    market_cap: str = ALL_MARKET_CAPS
    start_date: str = ""
    end_date: str = ""
    target_pct: str = ""
    sl_pct: str = ""

    @field_validator("market_cap")
    @classmethod
    def validate_market_cap(cls, v: str) -> str:
        if v != ALL_MARKET_CAPS and v not in MARKET_CAP_CATEGORIES:
            raise ValueError(
                f"market_cap must be '{ALL_MARKET_CAPS}' or one of {MARKET_CAP_CATEGORIES}"
            )
        return v

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_date(cls, v: Optional[str]) -> str:
        v = (v or "").strip()
        if v and not re.fullmatch(r"\d{4}-\d{2}-\d{2}", v):
            raise ValueError(f"date must be YYYY-MM-DD, got {v!r}")
        return v

    @field_validator("target_pct", "sl_pct", mode="before")
    @classmethod
    def coerce_text(cls, v) -> str:
        if v is None:
            return ""
        return str(v)

    def to_payload(self) -> dict:
        """Wire values of the shared filter fields."""
        return {
            "timeframe": self.timeframe,
            "marketCapCategory": None if self.market_cap == ALL_MARKET_CAPS else self.market_cap,
            "startDate": self.start_date or None,
            "endDate": self.end_date or None,
            "targetPct": parse_percent(self.target_pct) if self.target_pct else None,
            "slPct": parse_percent(self.sl_pct) if self.sl_pct else None,
        }


class ScanRequest(BaseModel):
    """Body of ``POST /filters/apply``."""

    model_config = ConfigDict(populate_by_name=True)

    timeframe: Literal["1D", "1W"]
    market_cap_category: Optional[str] = Field(default=None, alias="marketCapCategory")
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    entry: dict
    exit: dict
    target_pct: Optional[float] = Field(default=None, alias="targetPct")
    sl_pct: Optional[float] = Field(default=None, alias="slPct")
    limit: int = Field(default=50, ge=1)
    offset: int = Field(default=0, ge=0)

    @classmethod
    def build(cls, filters: ScanFilters, entry: dict, exit: dict, limit: int, offset: int) -> "ScanRequest":
        """Combine filter fields and serialized trees into one request."""
        return cls(**filters.to_payload(), entry=entry, exit=exit, limit=limit, offset=offset)

    def to_payload(self) -> dict:
        """JSON body with the backend's camelCase field names."""
        return self.model_dump(by_alias=True)


class CompanyMatch(BaseModel):
    """One result row.

    Field types are not fixed by the backend; scalar values (e.g. a numeric
    exchange code as ``symbol``) are kept as text.
    """

    model_config = ConfigDict(extra="allow")

    symbol: str
    market_cap_category: Optional[str] = None
    industry: Optional[str] = None
    date: Optional[str] = None

    @field_validator("symbol", "market_cap_category", "industry", "date", mode="before")
    @classmethod
    def coerce_scalars(cls, v):
        return None if v is None else str(v)

    @property
    def display_date(self) -> str:
        """Date part of ``date`` (text before the first space), or an em dash."""
        if not self.date:
            return "—"
        return self.date.split(" ")[0]
