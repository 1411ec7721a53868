# storefront/services/store_status.py
"""
Keeps the store open/closed status current.

The monitor owns the latest config snapshot, refreshes it from the backend on
a fixed interval, and re-evaluates whenever the schedule or a closure changes.
Snapshots are immutable and swapped by single assignment.
"""
from __future__ import annotations

import asyncio
from contextlib import suppress
from dataclasses import asdict, dataclass
from datetime import datetime, time
from typing import Any, Callable, Dict, Optional
from zoneinfo import ZoneInfo

from fastapi import Request

from storefront.core.business import ClosureOverride, evaluate, format_hhmm, to_minutes
from storefront.core.errors import BackendError
from storefront.core.logging import get_logger
from storefront.services.backend_client import BackendClient
from storefront.services.local_state import LocalStateStore
from storefront.services.store_config import (
    STORE_CLOSURE_KEY,
    StoreSnapshot,
    closure_from_local,
    closure_to_local,
    fetch_store_config,
    snapshot_from_config,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoreStatus:
    is_open: bool
    accepting_orders: bool
    next_open_label: str
    reason: Optional[str]
    closed_by_override: bool
    order_cutoff: Optional[str]
    evaluated_at: datetime
    source: str

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["evaluated_at"] = self.evaluated_at.isoformat()
        return result


def _before_cutoff(now: datetime, cutoff: Optional[time]) -> bool:
    if cutoff is None:
        return True
    return now.hour * 60 + now.minute < to_minutes(cutoff)


class StoreStatusMonitor:
    def __init__(
        self,
        backend: BackendClient,
        local_state: LocalStateStore,
        *,
        timezone: str = "Asia/Jakarta",
        language: str = "en",
        interval: float = 60.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.backend = backend
        self.local_state = local_state
        self.tz = ZoneInfo(timezone)
        self.language = language
        self.interval = interval
        self._clock = clock or (lambda: datetime.now(self.tz))

        self._snapshot = StoreSnapshot()
        self._local_override = closure_from_local(local_state.get(STORE_CLOSURE_KEY))
        self._status: Optional[StoreStatus] = None
        self._task: Optional[asyncio.Task] = None

    # ---------- State ----------

    @property
    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    @property
    def local_override(self) -> Optional[ClosureOverride]:
        return self._local_override

    @property
    def status(self) -> StoreStatus:
        """Last evaluated status (evaluates once if nothing has run yet)."""
        return self._status or self.evaluate()

    def now(self) -> datetime:
        return self._clock().astimezone(self.tz)

    def active_override(self) -> tuple[Optional[ClosureOverride], str]:
        if self._local_override is not None and self._local_override.is_active:
            return self._local_override, "local"
        return self._snapshot.backend_override, self._snapshot.source

    # ---------- Updates ----------

    def apply_config(self, config: Dict[str, Any], source: str = "backend") -> StoreStatus:
        self._snapshot = snapshot_from_config(config, source=source, tz=self.tz)
        return self.evaluate()

    def set_local_closure(self, override: ClosureOverride) -> StoreStatus:
        self.local_state.set(STORE_CLOSURE_KEY, closure_to_local(override))
        self._local_override = override
        logger.info(
            "local_closure_updated",
            is_active=override.is_active,
            start_date=str(override.start_date),
            end_date=str(override.end_date),
        )
        return self.evaluate()

    async def refresh(self) -> StoreSnapshot:
        """Pull the config from the backend; keep the last snapshot on failure."""
        try:
            config = await fetch_store_config(self.backend)
        except BackendError as e:
            logger.warning(
                "config_refresh_failed",
                status_code=e.status_code,
                error=e.message,
                keeping=self._snapshot.source,
            )
            return self._snapshot

        self._snapshot = snapshot_from_config(config, tz=self.tz)
        return self._snapshot

    # ---------- Evaluation ----------

    def evaluate(self, now: Optional[datetime] = None) -> StoreStatus:
        # Naive datetimes are taken as store-local time
        if now is None:
            now = self.now()
        elif now.tzinfo is not None:
            now = now.astimezone(self.tz)
        override, source = self.active_override()
        snapshot = self._snapshot

        result = evaluate(now, snapshot.hours, override, self.language)
        status = StoreStatus(
            is_open=result.is_open,
            accepting_orders=result.is_open and _before_cutoff(now, snapshot.order_cutoff),
            next_open_label=result.next_open_label,
            reason=result.reason,
            closed_by_override=result.closed_by_override,
            order_cutoff=format_hhmm(snapshot.order_cutoff) if snapshot.order_cutoff else None,
            evaluated_at=now,
            source=source,
        )

        previous = self._status
        if previous is None or previous.is_open != status.is_open:
            logger.info(
                "store_status_changed",
                is_open=status.is_open,
                next_open=status.next_open_label,
                source=source,
            )
        self._status = status
        return status

    # ---------- Ticker ----------

    async def tick(self) -> StoreStatus:
        await self.refresh()
        return self.evaluate()

    async def run(self) -> None:
        logger.info("store_status_monitor_started", interval=self.interval)
        while True:
            try:
                await self.tick()
            except Exception:
                # One bad tick must not stop the ticker
                logger.exception("store_status_tick_failed")
            await asyncio.sleep(self.interval)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="store-status-monitor")
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        logger.info("store_status_monitor_stopped")


def get_monitor(request: Request) -> StoreStatusMonitor:
    """FastAPI dependency: the application-wide status monitor."""
    return request.app.state.monitor
