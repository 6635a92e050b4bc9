"""
In-process event bus the IPC server publishes new requests on.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, DefaultDict, Dict, List

logger = logging.getLogger(__name__)


class RequestEventBus:
    """Fan-out of named channels to subscriber queues."""

    def __init__(self) -> None:
        self._subscribers: DefaultDict[str, List["asyncio.Queue[Dict[str, Any]]"]] = (
            defaultdict(list)
        )

    def subscribe(self, channel: str) -> "asyncio.Queue[Dict[str, Any]]":
        """Return a queue that receives every payload emitted on channel."""
        queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()
        self._subscribers[channel].append(queue)
        return queue

    async def emit(self, channel: str, payload: Dict[str, Any]) -> None:
        subscribers = self._subscribers.get(channel)
        if not subscribers:
            logger.debug(f"No listener on '{channel}', event dropped")
            return
        for queue in subscribers:
            await queue.put(payload)
