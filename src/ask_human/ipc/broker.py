"""
Single-slot request/answer correlation for the UI process.

A BrokerState holds at most one pending request. A second request replaces
the first and drops its resolver, so the first connection answers with a
"response channel closed" failure instead of hanging.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ask_human.errors import CancellationError, MismatchError, NothingPendingError
from ask_human.ipc.protocol import IpcRequest

logger = logging.getLogger(__name__)

NOTIFY_CHANNEL_SIZE = 32


class Resolver:
    """One-shot, write-once handle that delivers a human's answer."""

    _future: "asyncio.Future[str]"

    def __init__(self) -> None:
        self._future = asyncio.get_running_loop().create_future()

    @property
    def done(self) -> bool:
        return self._future.done()

    def fulfill(self, answer: str) -> bool:
        """Deliver the answer; returns False if the resolver was already used."""
        if self._future.done():
            return False
        self._future.set_result(answer)
        return True

    def drop(self) -> None:
        """Abandon the resolver; the waiter observes a CancellationError."""
        if not self._future.done():
            self._future.set_exception(CancellationError("response channel closed"))

    async def wait(self) -> str:
        """Suspend until fulfilled; raises CancellationError if dropped."""
        return await self._future


@dataclass
class PendingRequest:
    """The request currently waiting for a human answer."""

    request: IpcRequest
    resolver: Resolver


class BrokerState:
    """Holds the pending slot and the channel that announces new requests."""

    _pending: Optional[PendingRequest]
    _lock: asyncio.Lock
    _requests: "asyncio.Queue[IpcRequest]"

    def __init__(self, channel_size: int = NOTIFY_CHANNEL_SIZE) -> None:
        self._pending = None
        self._lock = asyncio.Lock()
        self._requests = asyncio.Queue(maxsize=channel_size)

    @property
    def pending_request(self) -> Optional[IpcRequest]:
        return self._pending.request if self._pending else None

    async def set_pending(self, request: IpcRequest, resolver: Resolver) -> None:
        """Make request the pending one, replacing whatever was there."""
        async with self._lock:
            previous = self._pending
            self._pending = PendingRequest(request=request, resolver=resolver)
        if previous is not None:
            logger.warning(
                f"Request {request.id} replaced unanswered request {previous.request.id}"
            )
            previous.resolver.drop()

    async def resolve(self, request_id: str, answer: str) -> None:
        """
        Deliver answer to the pending request.

        Raises:
            NothingPendingError: If no request is pending.
            MismatchError: If the pending request has another id; the pending
                request is left in place.
        """
        async with self._lock:
            pending = self._pending
            if pending is None:
                raise NothingPendingError("No request is waiting for a response")
            if pending.request.id != request_id:
                raise MismatchError(pending.request.id, request_id)
            self._pending = None
        pending.resolver.fulfill(answer)

    async def drop_pending(self) -> None:
        """Abandon the pending request, if any."""
        async with self._lock:
            pending = self._pending
            self._pending = None
        if pending is not None:
            pending.resolver.drop()

    def notify_channel(self) -> "asyncio.Queue[IpcRequest]":
        """Queue new requests are published to for the UI to pick up."""
        return self._requests
