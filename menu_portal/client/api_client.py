"""Thin HTTP client used by the display apps (order board, digital menu)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from menu_portal.core.config import settings
from menu_portal.core.errors import AuthenticationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class PortalClient:
    """Synchronous client for the portal API envelope.

    401 and 403 responses raise ``AuthenticationError`` so callers can force a
    re-login; any other failure surfaces as an ``httpx.HTTPError``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.portal_api_url).rstrip("/")
        self.token = token if token is not None else (settings.portal_api_token or None)
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> PortalClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._client.request(method, path, headers=self._headers(), **kwargs)
        if response.status_code in (401, 403):
            message = _envelope_message(response) or "Not authorized"
            logger.warning("[CLIENT] %s %s rejected: %s", method, path, message)
            raise AuthenticationError(message)
        response.raise_for_status()
        return response.json().get("data")

    def login(self, email: str, password: str) -> dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data["user"]

    def get_orders(self, restaurant_id: str | None = None, status: str | None = None) -> list[dict[str, Any]]:
        params = {key: value for key, value in (("restaurantId", restaurant_id), ("status", status)) if value}
        return self._request("GET", "/orders", params=params) or []

    def update_order_status(self, order_id: str, status: str) -> dict[str, Any]:
        return self._request("PATCH", f"/orders/{order_id}/status", json={"status": status})

    def get_service_requests(self, restaurant_id: str | None = None, status: str | None = None) -> list[dict[str, Any]]:
        params = {key: value for key, value in (("restaurantId", restaurant_id), ("status", status)) if value}
        return self._request("GET", "/service-requests", params=params) or []

    def acknowledge_service_request(self, request_id: str) -> dict[str, Any]:
        return self._request("PATCH", f"/service-requests/{request_id}/acknowledge")

    def complete_service_request(self, request_id: str) -> dict[str, Any]:
        return self._request("PATCH", f"/service-requests/{request_id}/complete")

    def get_public_menu(self, restaurant_id: str) -> dict[str, Any]:
        return self._request("GET", f"/public/menu/{restaurant_id}")

    def get_restaurants(self) -> list[dict[str, Any]]:
        return self._request("GET", "/restaurants") or []


def _envelope_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message")
    return None
