"""Display sync tests: interval polling, the order board and the HTTP client."""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from menu_portal.client.api_client import PortalClient
from menu_portal.client.order_board import OrderBoard
from menu_portal.client.polling import (
    MENU_POLL_INTERVAL,
    ORDER_POLL_INTERVAL,
    PORTAL_REFRESH_INTERVAL,
    PollSource,
)
from menu_portal.core.errors import AuthenticationError

PLACED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _order(order_id: str, status: str = "New", minutes: int = 0) -> dict:
    return {"id": order_id, "status": status, "placedAt": (PLACED + timedelta(minutes=minutes)).isoformat()}


def test_poll_intervals() -> None:
    assert ORDER_POLL_INTERVAL == 5
    assert MENU_POLL_INTERVAL == 30
    assert PORTAL_REFRESH_INTERVAL == 60


def test_poll_keeps_last_value_on_transient_error() -> None:
    responses = [["a"], httpx.ConnectError("connection refused"), ["b"]]

    def fetch():
        value = responses.pop(0)
        if isinstance(value, Exception):
            raise value
        return value

    updates = []
    source = PollSource(fetch, interval=5, on_update=updates.append, name="orders")

    first = source.poll_once()
    assert first.data == ["a"]
    assert not first.is_stale

    second = source.poll_once()
    assert second.data == ["a"]
    assert second.error == "connection refused"
    assert second.is_stale

    third = source.poll_once()
    assert third.data == ["b"]
    assert third.error is None
    assert third.polls == 3
    assert updates == [["a"], ["b"]]


def test_poll_propagates_authentication_errors() -> None:
    def fetch():
        raise AuthenticationError("Invalid or expired token")

    source = PollSource(fetch, interval=5)

    with pytest.raises(AuthenticationError):
        source.poll_once()


def test_hidden_source_skips_fetch_unless_forced() -> None:
    calls = []
    visible = {"value": False}
    source = PollSource(lambda: calls.append(1) or len(calls), interval=5, is_visible=lambda: visible["value"])

    assert source.poll_once().data is None
    assert calls == []
    assert source.poll_once(force=True).data == 1
    visible["value"] = True
    assert source.poll_once().data == 2


def test_refresh_if_due_respects_interval() -> None:
    clock = FakeClock()
    calls = []
    source = PollSource(lambda: calls.append(clock.now) or clock.now, interval=60, clock=clock)

    assert source.due()
    source.refresh_if_due()
    clock.now += 30
    source.refresh_if_due()
    clock.now += 30
    source.refresh_if_due()

    assert calls == [100.0, 160.0]
    assert source.state.last_success_at == 160.0


def test_soft_refresh_waits_for_interval_and_visibility() -> None:
    clock = FakeClock()
    visible = {"value": True}
    calls = []
    source = PollSource(
        lambda: calls.append(clock.now) or clock.now,
        interval=PORTAL_REFRESH_INTERVAL,
        is_visible=lambda: visible["value"],
        clock=clock,
    )

    source.refresh_if_due()
    assert not source.refresh_wanted()

    clock.now += PORTAL_REFRESH_INTERVAL
    visible["value"] = False
    assert source.due()
    assert not source.refresh_wanted()
    source.refresh_if_due()
    assert calls == [100.0]

    visible["value"] = True
    assert source.refresh_wanted()
    source.refresh_if_due()
    assert calls == [100.0, 160.0]
    assert not source.refresh_wanted()


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PollSource(lambda: None, interval=0)


def test_run_loop_polls_until_stopped() -> None:
    calls = []

    async def scenario() -> PollSource:
        source = PollSource(lambda: calls.append(1) or len(calls), interval=0.01)
        async with source:
            assert source.running
            await asyncio.sleep(0.05)
        assert not source.running
        await source.stop()
        return source

    source = asyncio.run(scenario())

    assert len(calls) >= 2
    assert source.state.data == len(calls)


def test_run_loop_surfaces_authentication_error_on_stop() -> None:
    def fetch():
        raise AuthenticationError("No token provided")

    async def scenario() -> None:
        source = PollSource(fetch, interval=0.01)
        source.start()
        await asyncio.sleep(0.02)
        await source.stop()

    with pytest.raises(AuthenticationError):
        asyncio.run(scenario())


def test_board_first_merge_primes_without_alerts() -> None:
    board = OrderBoard()

    assert board.merge([_order("o1"), _order("o2", "Preparing")]) == []
    arrived = board.merge([_order("o1"), _order("o2", "Preparing"), _order("o4", minutes=3), _order("o3", minutes=2)])

    assert [order["id"] for order in arrived] == ["o3", "o4"]
    assert board.merge([_order("o1"), _order("o3", minutes=2), _order("o4", minutes=3)]) == []


def test_board_columns_and_events() -> None:
    board = OrderBoard()
    board.merge([_order("o1", minutes=1), _order("o2", "Preparing"), _order("o3", "Ready")])

    columns = board.columns()
    assert [order["id"] for order in columns["New"]] == ["o1"]
    assert [order["id"] for order in columns["Preparing"]] == ["o2"]
    assert [order["id"] for order in columns["Ready"]] == ["o3"]

    assert board.apply_event({"type": "order_updated", "data": {"orderId": "o1", "status": "Preparing"}})
    assert board.apply_event({"type": "order_updated", "data": {"orderId": "o3", "status": "Completed"}})
    assert not board.apply_event({"type": "order_created", "data": {"orderId": "o9", "status": "New"}})
    assert not board.apply_event({"type": "order_updated", "data": {"orderId": "missing", "status": "Ready"}})

    columns = board.columns()
    assert columns["New"] == []
    assert [order["id"] for order in columns["Preparing"]] == ["o2", "o1"]
    assert columns["Ready"] == []


def test_board_highlights_recent_new_orders() -> None:
    board = OrderBoard()
    order = _order("o1")

    assert board.is_new(order, now=PLACED + timedelta(seconds=30))
    assert not board.is_new(order, now=PLACED + timedelta(seconds=90))
    assert not board.is_new(_order("o2", "Ready"), now=PLACED)


def test_client_unwraps_envelope_and_sends_token() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/api/auth/login":
            return httpx.Response(200, json={"success": True, "data": {"token": "t-1", "user": {"email": "a@b.c"}}})
        return httpx.Response(200, json={"success": True, "data": [{"id": "o1"}]})

    with PortalClient("http://portal/api", token="", transport=httpx.MockTransport(handler)) as client:
        user = client.login("a@b.c", "secret123")
        orders = client.get_orders("r1", "New")

    assert user == {"email": "a@b.c"}
    assert orders == [{"id": "o1"}]
    assert "authorization" not in seen[0].headers
    assert seen[1].headers["authorization"] == "Bearer t-1"
    assert seen[1].url.params["restaurantId"] == "r1"
    assert seen[1].url.params["status"] == "New"


def test_client_maps_auth_failures() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/orders"):
            return httpx.Response(401, json={"success": False, "message": "Invalid or expired token"})
        return httpx.Response(500, json={"success": False, "message": "Internal server error"})

    with PortalClient("http://portal/api", token="stale", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(AuthenticationError) as exc_info:
            client.get_orders()
        with pytest.raises(httpx.HTTPStatusError):
            client.get_restaurants()

    assert exc_info.value.message == "Invalid or expired token"


def test_client_service_request_calls() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, dict(request.url.params)))
        if request.method == "GET":
            return httpx.Response(200, json={"success": True, "data": [{"id": "s1", "status": "pending"}]})
        return httpx.Response(200, json={"success": True, "data": {"id": "s1", "status": "acknowledged"}})

    with PortalClient("http://portal/api", token="t-1", transport=httpx.MockTransport(handler)) as client:
        calls = client.get_service_requests("r1")
        acknowledged = client.acknowledge_service_request("s1")
        client.complete_service_request("s1")

    assert calls == [{"id": "s1", "status": "pending"}]
    assert acknowledged["status"] == "acknowledged"
    assert seen == [
        ("GET", "/api/service-requests", {"restaurantId": "r1"}),
        ("PATCH", "/api/service-requests/s1/acknowledge", {}),
        ("PATCH", "/api/service-requests/s1/complete", {}),
    ]
