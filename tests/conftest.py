"""
Shared pytest fixtures: a scripted fake of the external backend, a fixed
store clock and an app wired to both.
"""

import json
import os
import sys
from datetime import datetime
from unittest.mock import patch
from zoneinfo import ZoneInfo

import httpx
import pytest
from fastapi.testclient import TestClient

# Add the project root to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from storefront.core.config import Settings
from storefront.services.backend_client import BackendClient

STORE_TZ = ZoneInfo("Asia/Jakarta")
ADMIN_KEY = "test_admin_key"

# 2024-01-08 is a Monday
MONDAY_10AM = datetime(2024, 1, 8, 10, 0, tzinfo=STORE_TZ)


def default_operating_hours():
    """Backend-shaped schedule matching the built-in default hours."""
    names = ["Minggu", "Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu"]
    hours = []
    for idx, name in enumerate(names):
        weekend = idx in (0, 6)
        hours.append({
            "day_index": idx,
            "day_name": name,
            "is_open": True,
            "open_time": "08:00:00" if weekend else "07:00:00",
            "close_time": "22:00:00" if weekend else "21:00:00",
        })
    return hours


def backend_config(**overrides):
    data = {
        "id": 1,
        "is_tutup": False,
        "pesan": "",
        "tgl_buka": "",
        "limit_pesanan_harian": 20,
        "limit_jam_order": "15:00:00",
        "latitude": "-7.566139",
        "longitude": "110.82303",
        "whatsapp_number": "6212345678",
        "operating_hours": json.dumps(default_operating_hours()),
    }
    data.update(overrides)
    return {"message": "Config fetched", "data": data}


class FakeBackend:
    """Scripted stand-in for the external REST backend (httpx.MockTransport handler)."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, status=200, json=None, error=None):
        self.routes[(method.upper(), path)] = (status, json, error)

    def json_body(self, index=-1):
        return json.loads(self.requests[index].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"message": f"no route {key}"})
        status, payload, error = self.routes[key]
        if error is not None:
            raise error
        return httpx.Response(status, json=payload)


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Keep tests independent from any developer .env"""
    test_env = {
        'APP_ENV': 'testing',
        'ADMIN_API_KEY': ADMIN_KEY,
        'BACKEND_URL': 'http://backend.test',
        'STORE_TIMEZONE': 'Asia/Jakarta',
        'STORE_LANGUAGE': 'en',
    }
    with patch.dict(os.environ, test_env):
        yield


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def backend_client(fake_backend):
    return BackendClient("http://backend.test", transport=httpx.MockTransport(fake_backend))


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        APP_ENV="testing",
        ADMIN_API_KEY=ADMIN_KEY,
        BACKEND_URL="http://backend.test",
        LOCAL_STATE_PATH=str(tmp_path / "state.json"),
    )


@pytest.fixture
def clock():
    """Mutable store clock; set clock.now to move time."""
    class _Clock:
        now = MONDAY_10AM

        def __call__(self):
            return self.now

    return _Clock()


@pytest.fixture
def app(test_settings, backend_client, clock):
    from storefront.main import create_app
    return create_app(test_settings, backend=backend_client, run_monitor=False, clock=clock)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_headers():
    return {"X-API-Key": ADMIN_KEY}


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Pure unit tests with no external dependencies")
    config.addinivalue_line("markers", "integration: Tests that exercise the HTTP app against a mocked backend")
