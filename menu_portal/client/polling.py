"""Interval polling with stale-while-revalidate state.

A ``PollSource`` wraps one fetch function. Each poll keeps the last good
value, so a transient failure only sets ``error`` and the display keeps
showing the previous data. An ``AuthenticationError`` is never absorbed:
it propagates so the caller can send the user back to login.

Usage:
    orders = PollSource(lambda: client.get_orders(rid), interval=ORDER_POLL_INTERVAL)
    async with orders:
        ...
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

import httpx

from menu_portal.core.errors import AuthenticationError, PortalError

logger = logging.getLogger(__name__)

ORDER_POLL_INTERVAL = 5.0
MENU_POLL_INTERVAL = 30.0
PORTAL_REFRESH_INTERVAL = 60.0

T = TypeVar("T")


@dataclass
class PollState(Generic[T]):
    data: T | None = None
    error: str | None = None
    last_success_at: float | None = None
    polls: int = 0

    @property
    def is_stale(self) -> bool:
        return self.error is not None and self.data is not None


class PollSource(Generic[T]):
    def __init__(
        self,
        fetch: Callable[[], T],
        *,
        interval: float,
        is_visible: Callable[[], bool] | None = None,
        on_update: Callable[[T], None] | None = None,
        name: str = "poll",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.fetch = fetch
        self.interval = interval
        self.is_visible = is_visible or (lambda: True)
        self.on_update = on_update
        self.name = name
        self.clock = clock
        self.state: PollState[T] = PollState()
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def poll_once(self, *, force: bool = False) -> PollState[T]:
        """Fetch once unless hidden; keeps the previous value on transient errors."""
        if not force and not self.is_visible():
            return self.state
        self.state.polls += 1
        try:
            value = self.fetch()
        except AuthenticationError:
            raise
        except (httpx.HTTPError, PortalError) as exc:
            self.state.error = str(exc) or exc.__class__.__name__
            logger.warning("[POLL] %s failed; keeping last value: %s", self.name, self.state.error)
            return self.state
        self.state.data = value
        self.state.error = None
        self.state.last_success_at = self.clock()
        if self.on_update is not None:
            self.on_update(value)
        return self.state

    def due(self) -> bool:
        if self.state.last_success_at is None:
            return True
        return self.clock() - self.state.last_success_at >= self.interval

    def refresh_wanted(self) -> bool:
        """True once the interval has elapsed while the display is visible."""
        return self.is_visible() and self.due()

    def refresh_if_due(self) -> PollState[T]:
        """Soft refresh for rerun-driven callers: polls only once the interval has elapsed."""
        if not self.due():
            return self.state
        return self.poll_once()

    async def run(self) -> None:
        """Poll until ``stop()``; the first poll happens immediately."""
        while not self._stop_event.is_set():
            await asyncio.to_thread(self.poll_once)
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                continue

    def start(self) -> asyncio.Task:
        if not self.running:
            self._stop_event.clear()
            self._task = asyncio.create_task(self.run(), name=f"poll-{self.name}")
        return self._task

    async def stop(self) -> None:
        """Stop the loop; safe to call more than once."""
        self._stop_event.set()
        task, self._task = self._task, None
        if task is None:
            return
        (outcome,) = await asyncio.gather(task, return_exceptions=True)
        if isinstance(outcome, Exception):
            raise outcome

    async def __aenter__(self) -> PollSource[T]:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
