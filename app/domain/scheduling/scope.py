"""
Edit/delete scope for recurring series

An admin acting on one occurrence of a recurring schedule or booking picks
how far the action reaches: this occurrence only, this and later ones, or
the whole series. A non-recurring ("single") series only ever has the first
option.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional, TypeVar, Union

from ...errors import ValidationError

logger = logging.getLogger(__name__)

OccurrenceId = TypeVar("OccurrenceId")


class ScopeMode(str, Enum):
    SINGLE = "single"
    FUTURE = "future"
    ALL = "all"


ALL_MODES = (ScopeMode.SINGLE, ScopeMode.FUTURE, ScopeMode.ALL)
EDIT_MODES = (ScopeMode.SINGLE, ScopeMode.FUTURE)


@dataclass(frozen=True)
class SeriesInfo:
    recurrence_type: str
    occurrence_date: date

    @property
    def is_recurring(self) -> bool:
        return self.recurrence_type != "single"


def available_modes(series: SeriesInfo, modes: tuple[ScopeMode, ...] = ALL_MODES) -> list[ScopeMode]:
    """Modes an admin may pick for this series"""
    if not series.is_recurring:
        return [ScopeMode.SINGLE]
    return list(modes)


@dataclass(frozen=True)
class ScopeSelection:
    """A scope bound to its series; future/all cannot exist for a single series"""

    series: SeriesInfo
    mode: ScopeMode

    def __post_init__(self):
        mode = ScopeMode(self.mode)
        if mode is not ScopeMode.SINGLE and not self.series.is_recurring:
            raise ValidationError(
                f"Scope '{mode.value}' is not available for a non-recurring series"
            )
        object.__setattr__(self, "mode", mode)

    def includes(self, occurrence_date: date) -> bool:
        if self.mode is ScopeMode.ALL:
            return True
        if self.mode is ScopeMode.FUTURE:
            return occurrence_date >= self.series.occurrence_date
        return occurrence_date == self.series.occurrence_date


def resolve_scope(series: SeriesInfo, requested: Union[ScopeMode, str, None]) -> ScopeSelection:
    """
    Effective scope for a requested mode.

    Requests a series cannot honour (future/all on a single series, unknown
    or missing modes) fall back to "single".
    """
    try:
        mode = ScopeMode(requested) if requested is not None else ScopeMode.SINGLE
    except ValueError:
        logger.warning(f"Unknown scope {requested!r}, falling back to single")
        mode = ScopeMode.SINGLE

    if mode not in available_modes(series):
        logger.warning(
            f"Scope {mode.value} unavailable for {series.recurrence_type} series, falling back to single"
        )
        mode = ScopeMode.SINGLE

    return ScopeSelection(series=series, mode=mode)


class ScopeDialog:
    """
    Scope picker state: opens on "single", changes only on user selection,
    and ends with confirm (commit the selection) or cancel (discard).
    """

    def __init__(self, series: SeriesInfo, modes: tuple[ScopeMode, ...] = ALL_MODES):
        self.series = series
        self.modes = available_modes(series, modes)
        self.mode = ScopeMode.SINGLE
        self.is_open = True

    def select(self, requested: Union[ScopeMode, str]) -> ScopeMode:
        self._ensure_open()
        selection = resolve_scope(self.series, requested)
        self.mode = selection.mode if selection.mode in self.modes else ScopeMode.SINGLE
        return self.mode

    def confirm(self) -> ScopeSelection:
        self._ensure_open()
        self.is_open = False
        return ScopeSelection(series=self.series, mode=self.mode)

    def cancel(self) -> None:
        self._ensure_open()
        self.is_open = False

    def _ensure_open(self):
        if not self.is_open:
            raise ValidationError("Scope dialog is already closed")


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def select_occurrences(
    occurrences: Iterable[tuple[OccurrenceId, Union[date, datetime]]],
    selection: Optional[ScopeSelection],
) -> list[OccurrenceId]:
    """Ids of the (id, date) occurrences the selection reaches, in input order"""
    if selection is None:
        return []
    return [occurrence_id for occurrence_id, when in occurrences if selection.includes(_as_date(when))]
