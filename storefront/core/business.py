# storefront/core/business.py
"""
Store availability rules.

A weekly schedule (one entry per weekday, 0=Sunday .. 6=Saturday) plus an
optional closure override decide whether the store is open at a given local
instant, and what to tell customers about the next opening.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Dict, Optional, Sequence

DAYS_IN_WEEK = 7

DAY_NAMES = {
    "en": ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"),
    "id": ("Minggu", "Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu"),
}

LABELS = {
    "en": {
        "today": "today at {time}",
        "day": "{day} at {time}",
        "unknown": "to be announced",
    },
    "id": {
        "today": "Hari ini pukul {time}",
        "day": "{day} pukul {time}",
        "unknown": "akan diumumkan",
    },
}

DEFAULT_LANGUAGE = "en"


@dataclass(frozen=True)
class DayHours:
    day_index: int  # 0=Sun .. 6=Sat
    is_open: bool
    open_time: time
    close_time: time

    @property
    def open_minutes(self) -> int:
        return to_minutes(self.open_time)

    @property
    def close_minutes(self) -> int:
        return to_minutes(self.close_time)


# Exactly one DayHours per weekday index
WeeklyHours = Sequence[DayHours]


@dataclass(frozen=True)
class ClosureOverride:
    """Manually declared closed date range. Takes precedence over WeeklyHours.

    ``start_date=None`` means the closure is already in effect and
    ``end_date=None`` means it runs until further notice. ``reopen_date`` is
    the first day open again (exclusive bound), as announced by the backend.
    """
    is_active: bool
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: str = ""
    reopen_date: Optional[date] = None

    def covers(self, day: date) -> bool:
        if not self.is_active:
            return False
        if self.start_date is not None and day < self.start_date:
            return False
        if self.end_date is not None and day > self.end_date:
            return False
        if self.reopen_date is not None and day >= self.reopen_date:
            return False
        return True

    @property
    def reopen_label_date(self) -> Optional[date]:
        return self.reopen_date or self.end_date


@dataclass(frozen=True)
class EvaluationResult:
    is_open: bool
    next_open_label: str = ""
    reason: Optional[str] = None
    closed_by_override: bool = False


def _day(index: int, open_hhmm: tuple[int, int], close_hhmm: tuple[int, int]) -> DayHours:
    return DayHours(index, True, time(*open_hhmm), time(*close_hhmm))


# Mon-Fri 07:00-21:00, Sat-Sun 08:00-22:00
DEFAULT_WEEKLY_HOURS: tuple[DayHours, ...] = (
    _day(0, (8, 0), (22, 0)),   # Sun
    _day(1, (7, 0), (21, 0)),   # Mon
    _day(2, (7, 0), (21, 0)),   # Tue
    _day(3, (7, 0), (21, 0)),   # Wed
    _day(4, (7, 0), (21, 0)),   # Thu
    _day(5, (7, 0), (21, 0)),   # Fri
    _day(6, (8, 0), (22, 0)),   # Sat
)


def to_minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def format_hhmm(t: time) -> str:
    return f"{t.hour:02d}:{t.minute:02d}"


def weekday_index(dt: datetime | date) -> int:
    """Python counts Monday=0; the schedule counts Sunday=0."""
    return (dt.weekday() + 1) % DAYS_IN_WEEK


def index_schedule(hours: Optional[WeeklyHours]) -> Optional[Dict[int, DayHours]]:
    """
    Index a schedule by weekday, or return None when it breaks the
    one-entry-per-weekday / open-before-close invariant.
    """
    if not hours:
        return None

    by_day: Dict[int, DayHours] = {}
    for entry in hours:
        if not isinstance(entry, DayHours):
            return None
        if not 0 <= entry.day_index < DAYS_IN_WEEK or entry.day_index in by_day:
            return None
        if entry.is_open and entry.open_minutes >= entry.close_minutes:
            return None
        by_day[entry.day_index] = entry

    if len(by_day) != DAYS_IN_WEEK:
        return None
    return by_day


def _labels(language: str) -> tuple[dict, tuple[str, ...]]:
    lang = language if language in LABELS else DEFAULT_LANGUAGE
    return LABELS[lang], DAY_NAMES[lang]


def _next_open_day_label(schedule: Dict[int, DayHours], today: int, language: str) -> str:
    labels, day_names = _labels(language)
    # Start tomorrow; offset 7 is today next week
    for offset in range(1, DAYS_IN_WEEK + 1):
        idx = (today + offset) % DAYS_IN_WEEK
        entry = schedule[idx]
        if entry.is_open:
            return labels["day"].format(day=day_names[idx], time=format_hhmm(entry.open_time))
    return labels["unknown"]


def format_reopen_date(day: Optional[date], language: str = DEFAULT_LANGUAGE) -> str:
    if day is None:
        labels, _ = _labels(language)
        return labels["unknown"]
    return day.strftime("%d/%m/%Y")


def evaluate(
    now: datetime,
    hours: Optional[WeeklyHours],
    override: Optional[ClosureOverride] = None,
    language: str = DEFAULT_LANGUAGE,
) -> EvaluationResult:
    """
    Decide whether the store is open at the local instant ``now``.

    Malformed or incomplete ``hours`` fall back to DEFAULT_WEEKLY_HOURS.
    Pure: identical inputs give identical results.
    """
    if override is not None and override.covers(now.date()):
        return EvaluationResult(
            is_open=False,
            next_open_label=format_reopen_date(override.reopen_label_date, language),
            reason=override.reason or None,
            closed_by_override=True,
        )

    schedule = index_schedule(hours) or index_schedule(DEFAULT_WEEKLY_HOURS)
    today = weekday_index(now)
    entry = schedule[today]

    if not entry.is_open:
        return EvaluationResult(False, _next_open_day_label(schedule, today, language))

    current = now.hour * 60 + now.minute
    if current < entry.open_minutes:
        labels, _ = _labels(language)
        return EvaluationResult(False, labels["today"].format(time=format_hhmm(entry.open_time)))
    if current < entry.close_minutes:
        return EvaluationResult(True)

    # close_time is exclusive
    return EvaluationResult(False, _next_open_day_label(schedule, today, language))
