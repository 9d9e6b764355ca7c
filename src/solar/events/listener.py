"""Publish loop: Redis events channel -> local broadcast registry.

One listener runs per process, independent of any request. It subscribes
to the events channel and hands every received PlanetMessage to the
Broadcaster as a "Planet created" frame.

Example:
    listener = PlanetEventListener(redis_client, broadcaster)
    await listener.start()
    ...
    await listener.stop()
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from redis.exceptions import RedisError

from solar.core.errors import CacheStoreUnavailableError
from solar.events.broadcaster import Broadcaster
from solar.events.frames import decode_payload, planet_created_frame
from solar.events.notifier import NEW_PLANETS_CHANNEL

if TYPE_CHECKING:
    from redis.asyncio import Redis
    from redis.asyncio.client import PubSub

logger = logging.getLogger(__name__)


class PlanetEventListener:
    """Background subscriber feeding the broadcaster."""

    def __init__(
        self,
        client: Redis,
        broadcaster: Broadcaster,
        channel: str = NEW_PLANETS_CHANNEL,
    ):
        self.client = client
        self.broadcaster = broadcaster
        self.channel = channel
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._pubsub: PubSub | None = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Subscribe to the events channel and start the publish loop.

        Raises:
            CacheStoreUnavailableError: If the subscription cannot be opened.
        """
        if self._running:
            return

        self._pubsub = self.client.pubsub()
        try:
            await self._pubsub.subscribe(self.channel)
        except RedisError as exc:
            await self._pubsub.aclose()
            self._pubsub = None
            raise CacheStoreUnavailableError(
                f"Can't subscribe to channel {self.channel}: {exc}"
            ) from exc

        self._running = True
        self._task = asyncio.create_task(self._listen_loop())
        logger.info(f"Started planet event listener on channel {self.channel}")

    async def stop(self) -> None:
        """Stop the publish loop and close the subscription."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._pubsub:
            try:
                await self._pubsub.unsubscribe(self.channel)
            except RedisError as e:
                logger.warning(f"Failed to unsubscribe from {self.channel}: {e}")
            await self._pubsub.aclose()
            self._pubsub = None

        logger.info("Stopped planet event listener")

    async def _listen_loop(self) -> None:
        """Main loop for receiving creation events."""
        while self._running and self._pubsub:
            try:
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=1.0,
                )

                if message is None:
                    continue

                if message["type"] == "message":
                    await self._handle_message(message["data"])

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in planet event listener: {e}")
                await asyncio.sleep(1)

    async def _handle_message(self, data: bytes | str) -> None:
        payload = decode_payload(data)
        delivered = await self.broadcaster.send(planet_created_frame(payload))
        logger.debug(f"Delivered planet event to {delivered} clients")
