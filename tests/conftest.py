from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from airboard.core.config import Settings
from airboard.core.security import get_password_hash
from airboard.factory import create_app
from airboard.services.admin import MemoryPinAuthority
from airboard.services.dashboard import Dashboard
from tests.fakes import (
    FakeHistoryStore,
    RecordingChartSink,
    RecordingPinDelivery,
    StaticBoardFeed,
    history_root,
    hourly,
)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        debug=True,
        docs_enabled=False,
        log_level="WARNING",
        secret_key="test_secret_key_must_be_32_chars_minimum",
        admin_username="admin",
        admin_password_hash=get_password_hash("password"),
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        store_backend="rtdb",
        store_url="http://store.example.com",
        realtime_window=25,
        refresh_enabled=False,
        refresh_interval_seconds=60.0,
        root_wait_timeout_seconds=0.05,
        store_wait_timeout_seconds=0.5,
        stale_response_policy="last_request",
    )


@pytest.fixture()
def store() -> FakeHistoryStore:
    return FakeHistoryStore(
        {
            history_root("esp32-1"): hourly(
                "2024-01-01",
                30,
                temp=[20 + i * 0.5 for i in range(30)],
                hum=[50.0] * 30,
                co2=[800 + i * 30 for i in range(30)],
            ),
        },
        boards=["esp32-1", "esp32-2"],
        history_keys=["esp32-1"],
    )


@pytest.fixture()
def sink() -> RecordingChartSink:
    return RecordingChartSink()


@pytest.fixture()
def dashboard(settings: Settings, store: FakeHistoryStore, sink: RecordingChartSink) -> Dashboard:
    return Dashboard(settings=settings, store=store, sink=sink, feed=StaticBoardFeed())


@pytest.fixture()
def pin_delivery() -> RecordingPinDelivery:
    return RecordingPinDelivery()


@pytest.fixture()
def client(
    settings: Settings, store: FakeHistoryStore, pin_delivery: RecordingPinDelivery
) -> TestClient:
    pins = MemoryPinAuthority(deliver=pin_delivery)
    app = create_app(settings, store=store, feed=StaticBoardFeed(), pins=pins)
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def token(client: TestClient) -> str:
    resp = client.post(
        "/api/v1/auth/token",
        data={"username": "admin", "password": "password"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


@pytest.fixture()
def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
