#!/usr/bin/env python3
"""
Tests for the store status monitor: snapshot refresh, override precedence,
the ordering gate and the background ticker.
"""

import asyncio
from datetime import date, datetime
from unittest.mock import AsyncMock, patch
from zoneinfo import ZoneInfo

import httpx
import pytest

from conftest import MONDAY_10AM, STORE_TZ, backend_config
from storefront.core.business import ClosureOverride
from storefront.services.local_state import LocalStateStore
from storefront.services.store_config import STORE_CLOSURE_KEY
from storefront.services.store_status import StoreStatusMonitor


@pytest.fixture
def local_state(tmp_path):
    return LocalStateStore(tmp_path / "state.json")


@pytest.fixture
def monitor(backend_client, local_state, clock):
    return StoreStatusMonitor(backend_client, local_state, timezone="Asia/Jakarta", interval=3600, clock=clock)


@pytest.mark.unit
class TestSnapshot:
    async def test_refresh_loads_backend_config(self, monitor, fake_backend):
        fake_backend.add("GET", "/config", json=backend_config())
        snap = await monitor.refresh()
        assert snap.source == "backend"
        assert len(snap.hours) == 7
        assert fake_backend.requests[0].url.path == "/config"

    async def test_refresh_failure_keeps_last_snapshot(self, monitor, fake_backend):
        fake_backend.add("GET", "/config", json=backend_config(limit_jam_order="12:00"))
        await monitor.refresh()

        fake_backend.add("GET", "/config", status=500, json={"message": "db down"})
        snap = await monitor.refresh()
        assert snap.source == "backend"
        assert monitor.evaluate().order_cutoff == "12:00"

    async def test_unreachable_backend_uses_default_schedule(self, monitor, fake_backend):
        fake_backend.add("GET", "/config", error=httpx.ConnectError("refused"))
        await monitor.refresh()
        status = monitor.evaluate()
        assert status.source == "default"
        assert status.is_open is True

    def test_malformed_hours_fall_back_to_defaults(self, monitor, clock):
        monitor.apply_config(backend_config(operating_hours="[{broken")["data"])
        clock.now = datetime(2024, 1, 7, 23, 0, tzinfo=STORE_TZ)  # Sunday
        status = monitor.evaluate()
        assert status.is_open is False
        assert status.next_open_label == "Monday at 07:00"


@pytest.mark.unit
class TestOverrides:
    def test_backend_closure(self, monitor):
        status = monitor.apply_config(backend_config(is_tutup=True, tgl_buka="2024-01-10", pesan="Renovasi")["data"])
        assert status.is_open is False
        assert status.closed_by_override is True
        assert status.reason == "Renovasi"
        assert status.next_open_label == "10/01/2024"

    def test_backend_closure_ends_on_reopen_day(self, monitor, clock):
        monitor.apply_config(backend_config(is_tutup=True, tgl_buka="2024-01-10")["data"])

        clock.now = datetime(2024, 1, 9, 20, 0, tzinfo=STORE_TZ)
        assert monitor.evaluate().is_open is False

        clock.now = datetime(2024, 1, 10, 10, 0, tzinfo=STORE_TZ)
        status = monitor.evaluate()
        assert status.is_open is True
        assert status.accepting_orders is True
        assert status.closed_by_override is False

    def test_backend_reopen_instant_read_in_store_time(self, monitor, clock):
        # midnight Jakarta on the 10th, sent as UTC
        monitor.apply_config(backend_config(is_tutup=True, tgl_buka="2024-01-09T17:00:00.000Z")["data"])
        assert monitor.evaluate().next_open_label == "10/01/2024"

        clock.now = datetime(2024, 1, 10, 10, 0, tzinfo=STORE_TZ)
        assert monitor.evaluate().is_open is True

    def test_expired_backend_closure_is_ignored(self, monitor):
        status = monitor.apply_config(backend_config(is_tutup=True, tgl_buka="2024-01-01")["data"])
        assert status.is_open is True

    def test_local_closure_is_persisted_and_wins(self, monitor, local_state):
        monitor.apply_config(backend_config()["data"])
        status = monitor.set_local_closure(ClosureOverride(True, date(2024, 1, 8), date(2024, 1, 9), "Stock opname"))

        assert status.is_open is False
        assert status.source == "local"
        assert status.next_open_label == "09/01/2024"
        assert local_state.get(STORE_CLOSURE_KEY)["isActive"] is True

    def test_local_closure_loaded_on_startup(self, backend_client, local_state, clock):
        local_state.set(STORE_CLOSURE_KEY, {
            "isActive": True, "startDate": "2024-01-08", "endDate": "2024-01-08", "reason": "",
        })
        monitor = StoreStatusMonitor(backend_client, local_state, clock=clock)
        assert monitor.evaluate().is_open is False

    def test_inactive_local_closure_defers_to_backend(self, monitor):
        monitor.apply_config(backend_config(is_tutup=True)["data"])
        status = monitor.set_local_closure(ClosureOverride(False))
        assert status.is_open is False
        assert status.source == "backend"
        assert status.next_open_label == "to be announced"


@pytest.mark.unit
class TestOrderingGate:
    def test_accepting_before_cutoff(self, monitor):
        status = monitor.apply_config(backend_config(limit_jam_order="15:00:00")["data"])
        assert status.is_open and status.accepting_orders
        assert status.order_cutoff == "15:00"

    def test_open_but_past_cutoff(self, monitor, clock):
        monitor.apply_config(backend_config(limit_jam_order="15:00:00")["data"])
        clock.now = MONDAY_10AM.replace(hour=15)
        status = monitor.evaluate()
        assert status.is_open is True
        assert status.accepting_orders is False

    def test_no_cutoff(self, monitor, clock):
        monitor.apply_config(backend_config(limit_jam_order=None)["data"])
        clock.now = MONDAY_10AM.replace(hour=20, minute=59)
        assert monitor.evaluate().accepting_orders is True

    def test_evaluate_converts_to_store_timezone(self, monitor):
        monitor.apply_config(backend_config(limit_jam_order=None)["data"])
        # 00:30 UTC Monday is 07:30 in Jakarta
        status = monitor.evaluate(datetime(2024, 1, 8, 0, 30))
        assert status.is_open is False
        status = monitor.evaluate(datetime(2024, 1, 8, 0, 30, tzinfo=ZoneInfo("UTC")))
        assert status.is_open is True


@pytest.mark.integration
class TestTicker:
    async def test_start_refreshes_and_stop_cancels(self, monitor, fake_backend):
        fake_backend.add("GET", "/config", json=backend_config())
        task = monitor.start()
        assert monitor.start() is task

        for _ in range(100):
            if monitor.snapshot.source == "backend":
                break
            await asyncio.sleep(0.01)
        assert monitor.snapshot.source == "backend"

        await monitor.stop()
        assert task.cancelled()

    async def test_stop_without_start(self, monitor):
        await monitor.stop()

    async def test_tick_survives_backend_errors(self, monitor, fake_backend):
        fake_backend.add("GET", "/config", error=httpx.ReadTimeout("slow"))
        status = await monitor.tick()
        assert status.source == "default"

    async def test_run_keeps_going_after_a_failed_tick(self, backend_client, local_state, clock):
        monitor = StoreStatusMonitor(backend_client, local_state, interval=0, clock=clock)

        def flaky():
            if tick.await_count == 1:
                raise RuntimeError("boom")

        tick = AsyncMock(side_effect=flaky)

        with patch.object(monitor, "tick", tick):
            monitor.start()
            for _ in range(100):
                if tick.await_count >= 2:
                    break
                await asyncio.sleep(0.01)
            await monitor.stop()

        assert tick.await_count >= 2
