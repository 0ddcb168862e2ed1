"""Realtime change feeds used purely as cache-invalidation signals.

A subscription never carries data to the caller beyond the raw payload; the
listener decides what to re-fetch. Reconnects are left to the realtime client.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, List, Optional

from supabase import AsyncClient

logger = logging.getLogger(__name__)


class Subscription:
    def __init__(self, client: AsyncClient, channel: Any, name: str):
        self._client = client
        self.channel = channel
        self.name = name
        self.closed = False

    async def unsubscribe(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self._client.remove_channel(self.channel)
            logger.debug(f"Unsubscribed from {self.name}")
        except Exception as e:
            logger.warning(f"Error unsubscribing from {self.name}: {e}")


class ChangeFeed:
    """Registers postgres_changes listeners on an async Supabase client."""

    def __init__(self, client: AsyncClient):
        self.client = client
        self._subscriptions: List[Subscription] = []

    async def subscribe(
        self,
        name: str,
        table: str,
        callback: Callable[[Dict[str, Any]], None],
        filter: Optional[str] = None,
        event: str = "*",
        schema: str = "public",
    ) -> Subscription:
        def _on_change(payload: Dict[str, Any]) -> None:
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Change handler for {name} failed: {e}")

        channel = self.client.channel(name)
        channel.on_postgres_changes(event, callback=_on_change, table=table, schema=schema, filter=filter)
        await channel.subscribe()
        logger.debug(f"Subscribed to {name} ({table}, filter={filter})")
        subscription = Subscription(self.client, channel, name)
        self._subscriptions.append(subscription)
        return subscription

    @asynccontextmanager
    async def listen(self, name: str, table: str, callback: Callable[[Dict[str, Any]], None], **kwargs):
        subscription = await self.subscribe(name, table, callback, **kwargs)
        try:
            yield subscription
        finally:
            await subscription.unsubscribe()

    async def close(self) -> None:
        for subscription in self._subscriptions:
            await subscription.unsubscribe()
        self._subscriptions.clear()


class InvalidationQueue:
    """Collects change signals from feed callbacks for a single consumer loop."""

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()

    def signal(self, name: str) -> Callable[[Dict[str, Any]], None]:
        def _handler(payload: Dict[str, Any]) -> None:
            self._queue.put_nowait((name, payload))
        return _handler

    async def get(self):
        return await self._queue.get()

    def empty(self) -> bool:
        return self._queue.empty()
