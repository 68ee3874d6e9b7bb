# src/provider_resolver/model_management/fetch.py
"""
Request-level fetch functions for provider clients.

A *fetch* is an async callable ``fetch(request, *, signal=None)`` returning
an ``httpx.Response``. ``signal`` is an optional ``asyncio.Event`` owned by
the caller; setting it aborts the request. Clients are pointed at a fetch
through ``FetchTransport``, which lets a per-provider timeout be layered on
top of whatever cancellation the caller already uses.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Literal, Optional, Protocol, Union

import httpx

logger = logging.getLogger(__name__)


class Fetch(Protocol):
    def __call__(
        self, request: httpx.Request, *, signal: Optional[asyncio.Event] = None
    ) -> Awaitable[httpx.Response]:
        ...


class TransportFetch:
    """Fetch that sends through an httpx transport."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.transport = transport or httpx.AsyncHTTPTransport()

    async def __call__(
        self, request: httpx.Request, *, signal: Optional[asyncio.Event] = None
    ) -> httpx.Response:
        send = self.transport.handle_async_request(request)
        if signal is None:
            return await send
        return await _until_aborted(send, signal, request)

    async def aclose(self) -> None:
        await self.transport.aclose()


async def _until_aborted(
    send: Awaitable[httpx.Response], signal: asyncio.Event, request: httpx.Request
) -> httpx.Response:
    """Run ``send`` unless ``signal`` fires first."""
    send_task = asyncio.ensure_future(send)
    abort_task = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait(
            {send_task, abort_task}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        abort_task.cancel()

    if send_task in done:
        return send_task.result()

    send_task.cancel()
    raise httpx.RequestError("Request aborted by caller", request=request)


def with_timeout(
    timeout: Union[int, Literal[False]],
    fetch: Fetch | None = None,
) -> TimeoutFetch:
    """
    Wrap ``fetch`` with a per-request deadline.

    Args:
        timeout: Deadline in milliseconds, or False for no deadline
        fetch: Fetch to wrap (a fresh ``TransportFetch`` if omitted)

    The caller's ``signal`` is forwarded untouched; whichever of the deadline
    and the signal fires first ends the request.
    """
    return TimeoutFetch(timeout, fetch)


class TimeoutFetch:
    """Fetch with a deadline; closes the transport fetch it created itself."""

    def __init__(
        self, timeout: Union[int, Literal[False]], fetch: Fetch | None = None
    ) -> None:
        self.timeout = timeout
        self._owns_inner = fetch is None
        self.inner = fetch or TransportFetch()

    async def __call__(
        self, request: httpx.Request, *, signal: Optional[asyncio.Event] = None
    ) -> httpx.Response:
        call = self.inner(request, signal=signal)
        if self.timeout is False:
            return await call
        try:
            return await asyncio.wait_for(call, self.timeout / 1000)
        except asyncio.TimeoutError as e:
            logger.debug(f"Request to {request.url} timed out after {self.timeout}ms")
            raise httpx.TimeoutException(
                f"Request timed out after {self.timeout}ms", request=request
            ) from e

    async def aclose(self) -> None:
        # A caller-supplied fetch is left open; its owner closes it
        if self._owns_inner and isinstance(self.inner, TransportFetch):
            await self.inner.aclose()


class FetchTransport(httpx.AsyncBaseTransport):
    """httpx transport that delegates every request to a fetch function."""

    def __init__(self, fetch: Fetch) -> None:
        self.fetch = fetch

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        signal = request.extensions.get("signal")
        return await self.fetch(request, signal=signal)

    async def aclose(self) -> None:
        if isinstance(self.fetch, TimeoutFetch):
            await self.fetch.aclose()
