from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from airboard.core.config import Settings
from airboard.core.errors import NotAuthenticated
from airboard.core.security import create_access_token
from airboard.services.admin import AdminService, AdminUser, MemoryPinAuthority, PinRejected
from airboard.services.dashboard import Dashboard
from tests.fakes import (
    FakeAuth,
    FakePins,
    FakeProvisioner,
    RecordingPinDelivery,
    history_root,
)

ADMIN = AdminUser(uid="u-1", email="admin@example.com")


def _service(dashboard: Dashboard, *, user=ADMIN, reason=None):
    auth = FakeAuth(user)
    pins = FakePins(reason=reason)
    provisioner = FakeProvisioner()
    service = AdminService(
        auth=auth, pins=pins, provisioner=provisioner, registry=dashboard.registry
    )
    return service, auth, pins, provisioner


async def test_add_board_registers_and_selects(dashboard: Dashboard) -> None:
    service, auth, pins, provisioner = _service(dashboard)

    root = await service.add_board(" esp32-7 ", "123456")

    assert root == history_root("esp32-7")
    assert provisioner.registered == ["esp32-7"]
    assert pins.checked == [(ADMIN, "123456")]
    assert dashboard.registry.active == "esp32-7"
    assert auth.settle_calls == 1


@pytest.mark.parametrize(
    ("board_id", "pin"),
    [("", "123456"), ("esp 32", "123456"), ("esp32-1", "12345"), ("esp32-1", "abcdef")],
)
async def test_add_board_validates_input(dashboard: Dashboard, board_id: str, pin: str) -> None:
    service, _, pins, provisioner = _service(dashboard)
    with pytest.raises(ValueError):
        await service.add_board(board_id, pin)
    assert pins.checked == []
    assert provisioner.registered == []


async def test_rejected_pin(dashboard: Dashboard) -> None:
    service, _, _, provisioner = _service(dashboard, reason="PIN expired")
    with pytest.raises(PinRejected, match="PIN expired"):
        await service.add_board("esp32-7", "123456")
    assert provisioner.registered == []
    assert dashboard.registry.active is None


async def test_anonymous_users_are_refused(dashboard: Dashboard) -> None:
    service, auth, pins, _ = _service(dashboard, user=None)
    with pytest.raises(NotAuthenticated):
        await service.request_pin()
    assert auth.settle_calls == 1
    assert pins.issued == []


async def test_request_pin(dashboard: Dashboard) -> None:
    service, _, pins, _ = _service(dashboard)
    await service.request_pin()
    assert pins.issued == [ADMIN]


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now


async def test_issued_pins_are_single_use() -> None:
    delivery = RecordingPinDelivery()
    pins = MemoryPinAuthority(deliver=delivery)

    assert await pins.validate(ADMIN, "123456") == "Request a PIN first"
    await pins.issue(ADMIN)
    code = delivery.last_code

    assert len(code) == 6 and code.isdigit()
    wrong = "000000" if code != "000000" else "111111"
    assert await pins.validate(ADMIN, wrong) == "Incorrect PIN"
    assert await pins.validate(ADMIN, code) is None
    assert await pins.validate(ADMIN, code) == "PIN already used"


async def test_issued_pins_expire() -> None:
    clock = FakeClock()
    delivery = RecordingPinDelivery()
    pins = MemoryPinAuthority(ttl_seconds=300, deliver=delivery, clock=clock)
    await pins.issue(ADMIN)

    clock.now += 301
    assert await pins.validate(ADMIN, delivery.last_code) == "PIN expired"


async def test_registered_boards_become_selectable(dashboard: Dashboard) -> None:
    await dashboard.registry.register("esp32-7")
    await dashboard.registry.register("esp32-7")
    assert dashboard.registry.boards == ["esp32-7"]


def _admin_post(client: TestClient, path: str, headers: dict[str, str], **json):
    return client.post(f"/api/v1/admin/{path}", headers=headers, json=json or None)


def test_board_registration_over_http(
    client: TestClient, auth_headers: dict[str, str], pin_delivery: RecordingPinDelivery
) -> None:
    resp = _admin_post(client, "pin", auth_headers)
    assert resp.status_code == 202, resp.text
    assert resp.json() == {"status": "sent", "expires_in": 300}
    (user, code), = pin_delivery.sent
    assert user.uid == "admin"

    resp = _admin_post(client, "boards", auth_headers, board_id="esp32-7", pin=code)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["active"] == "esp32-7"
    assert "esp32-7" in body["boards"]

    resp = _admin_post(client, "boards", auth_headers, board_id="esp32-8", pin=code)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "PIN already used"


def test_board_registration_rejects_bad_input(
    client: TestClient, auth_headers: dict[str, str]
) -> None:
    resp = _admin_post(client, "boards", auth_headers, board_id="esp 32", pin="123456")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid board id"

    resp = _admin_post(client, "boards", auth_headers, board_id="esp32-7", pin="123456")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Request a PIN first"


def test_only_the_operator_may_provision(client: TestClient, settings: Settings) -> None:
    token = create_access_token(
        subject="viewer", scopes=["dashboard:read", "dashboard:write"], settings=settings
    )
    resp = _admin_post(client, "pin", {"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Not authenticated"

    token = create_access_token(subject="admin", scopes=["dashboard:read"], settings=settings)
    resp = _admin_post(client, "pin", {"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403
