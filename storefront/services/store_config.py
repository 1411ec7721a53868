# storefront/services/store_config.py
"""
Read the weekly schedule and closure override out of the backend config
(`GET /config`) and the locally persisted `storeClosure` record.

Nothing here raises on bad data: unreadable pieces come back empty and the
evaluator falls back to the default schedule.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, tzinfo
from typing import Any, Dict, List, Optional

from storefront.core.business import ClosureOverride, DayHours
from storefront.core.errors import BackendError
from storefront.core.logging import get_logger
from storefront.services.backend_client import BackendClient, unwrap_data

logger = get_logger(__name__)

STORE_CLOSURE_KEY = "storeClosure"

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")
_TRUE_STRINGS = {"1", "true", "yes", "y", "on"}


# ---------- Snapshot ----------

@dataclass(frozen=True)
class StoreSnapshot:
    """Read-only view of the store config used for one or more evaluations."""
    config: Dict[str, Any] = field(default_factory=dict)
    hours: tuple[DayHours, ...] = ()
    backend_override: Optional[ClosureOverride] = None
    order_cutoff: Optional[time] = None
    source: str = "default"  # backend | local | default


def snapshot_from_config(config: Dict[str, Any], source: str = "backend",
                         tz: Optional[tzinfo] = None) -> StoreSnapshot:
    return StoreSnapshot(
        config=dict(config),
        hours=tuple(parse_operating_hours(config.get("operating_hours"))),
        backend_override=closure_from_config(config, tz),
        order_cutoff=order_cutoff_from_config(config),
        source=source,
    )


# ---------- Field parsers ----------

def parse_time(value: Any) -> Optional[time]:
    """'07:00' / '07:00:00' / time -> time; anything else -> None."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        return None
    m = _TIME_RE.match(value)
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def _parse_instant(value: str) -> Optional[datetime]:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_date(value: Any, tz: Optional[tzinfo] = None) -> Optional[date]:
    """
    ISO date or datetime string -> date.

    An aware instant is moved to ``tz`` first, so "2024-12-26T17:00:00Z"
    is the 27th in Asia/Jakarta. Naive values keep their own date.
    """
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        instant = _parse_instant(text) if "T" in text else None
        if instant is None:
            try:
                return date.fromisoformat(text.split("T")[0])
            except ValueError:
                return None
        value = instant
    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    if isinstance(value, date):
        return value
    return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def decode_operating_hours(raw: Any) -> List[Any]:
    """The backend may send operating_hours as a list or as a JSON string of one."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("operating_hours_invalid_json")
            return []
    if not isinstance(raw, list):
        logger.warning("operating_hours_unexpected_type", type=type(raw).__name__)
        return []
    return raw


def _parse_day(entry: Any) -> Optional[DayHours]:
    if not isinstance(entry, dict):
        return None
    try:
        day_index = int(entry.get("day_index"))
    except (TypeError, ValueError):
        return None

    is_open = _as_bool(entry.get("is_open", False))
    open_time = parse_time(entry.get("open_time"))
    close_time = parse_time(entry.get("close_time"))
    if open_time is None or close_time is None:
        if is_open:
            return None
        # Closed days may omit their times
        open_time = close_time = time(0, 0)

    return DayHours(day_index=day_index, is_open=is_open, open_time=open_time, close_time=close_time)


def parse_operating_hours(raw: Any) -> List[DayHours]:
    days: List[DayHours] = []
    for entry in decode_operating_hours(raw):
        day = _parse_day(entry)
        if day is None:
            logger.debug("operating_hours_entry_dropped", entry=str(entry))
            continue
        days.append(day)
    return days


def order_cutoff_from_config(config: Dict[str, Any]) -> Optional[time]:
    return parse_time(config.get("limit_jam_order"))


# ---------- Closure override ----------

def closure_from_config(config: Dict[str, Any], tz: Optional[tzinfo] = None) -> Optional[ClosureOverride]:
    """
    Backend closure: `is_tutup` closes the store now; `tgl_buka` is the
    reopening instant, so the store is open again from that (local) day on.
    """
    if not _as_bool(config.get("is_tutup", False)):
        return None
    return ClosureOverride(
        is_active=True,
        reason=str(config.get("pesan") or ""),
        reopen_date=parse_date(config.get("tgl_buka"), tz),
    )


def closure_from_local(record: Any) -> Optional[ClosureOverride]:
    """`storeClosure` record {isActive, startDate, endDate, reason} -> override."""
    if not isinstance(record, dict):
        return None

    is_active = _as_bool(record.get("isActive", False))
    start = parse_date(record.get("startDate"))
    end = parse_date(record.get("endDate"))

    if is_active and (start is None or end is None):
        logger.warning("local_closure_missing_dates", record=str(record))
        return None
    if is_active and start > end:
        logger.warning("local_closure_inverted_range", start=str(start), end=str(end))
        return None

    return ClosureOverride(
        is_active=is_active,
        start_date=start,
        end_date=end,
        reason=str(record.get("reason") or ""),
    )


def closure_to_local(override: ClosureOverride) -> Dict[str, Any]:
    return {
        "isActive": override.is_active,
        "startDate": override.start_date.isoformat() if override.start_date else "",
        "endDate": override.end_date.isoformat() if override.end_date else "",
        "reason": override.reason,
    }


# ---------- Backend access ----------

def normalize_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Config as served to the storefront: operating_hours always a list."""
    out = dict(config)
    out["operating_hours"] = decode_operating_hours(config.get("operating_hours"))
    return out


async def fetch_store_config(backend: BackendClient) -> Dict[str, Any]:
    config = unwrap_data(await backend.get("/config"))
    if not isinstance(config, dict):
        raise BackendError(502, "Backend returned an unexpected config payload")
    return config
