"""Edit buffer behind the indicator parameter panel.

The panel edits source, period and offset of one operand. Two behaviours
are supported, selected by ``ScanConfig.edit_mode``:

- ``commit``: edits go to a scratch copy; ``save()`` applies it once and
  ``cancel()`` discards it.
- ``immediate``: every field edit is applied as soon as it is made;
  ``save()`` and ``cancel()`` only close the panel.

The draft starts from the operand value at open time. Because nodes are
immutable, that snapshot stays intact whatever else happens to the tree.
"""

import logging
from dataclasses import replace
from typing import Callable, Literal

from screener.filters.model import IndicatorRef

logger = logging.getLogger(__name__)

EditMode = Literal["immediate", "commit"]
ApplyFn = Callable[[IndicatorRef], None]


class OperandDraft:
    """Scratch copy of an IndicatorRef being edited in the panel."""

    def __init__(self, indicator: IndicatorRef, on_apply: ApplyFn, mode: EditMode = "commit"):
        """Open a draft.

        Args:
            indicator: Operand value when the panel was opened
            on_apply: Called with the new operand value whenever it is applied
            mode: 'immediate' or 'commit'
        """
        if mode not in ("immediate", "commit"):
            raise ValueError(f"mode must be 'immediate' or 'commit', got {mode!r}")
        self.original = indicator
        self.value = indicator
        self.mode = mode
        self._on_apply = on_apply
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def is_dirty(self) -> bool:
        """True when the draft differs from the value at open time."""
        return self.value != self.original

    def _edit(self, **changes) -> IndicatorRef:
        if not self._open:
            raise RuntimeError("operand draft is closed")
        value = replace(self.value, **changes)
        if self.mode == "immediate":
            # value only changes once the tree accepted it
            self._on_apply(value)
        self.value = value
        return self.value

    def set_source(self, source: str) -> IndicatorRef:
        return self._edit(source=source)

    def set_period(self, period: int | str) -> IndicatorRef:
        return self._edit(period=int(period))

    def set_offset(self, offset: int | str) -> IndicatorRef:
        return self._edit(offset=int(offset))

    def save(self) -> IndicatorRef:
        """Apply the draft (commit mode) and close the panel."""
        if not self._open:
            raise RuntimeError("operand draft is closed")
        if self.mode == "commit":
            self._on_apply(self.value)
        self._open = False
        logger.debug("Operand draft saved: %s", self.value)
        return self.value

    def cancel(self) -> IndicatorRef:
        """Close the panel; in commit mode the scratch edits are dropped."""
        if self.mode == "commit":
            self.value = self.original
        self._open = False
        logger.debug("Operand draft cancelled (mode=%s)", self.mode)
        return self.value
