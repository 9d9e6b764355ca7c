"""Broadcast registry for live planet events.

Holds the streaming clients of this process and fans every delivered frame
out to them. The registry cannot observe a dropped HTTP connection directly;
a heartbeat sweep probes every client and prunes the ones whose queue no
longer accepts frames (closed by the transport, or saturated).

Client lifecycle:
    CONNECTING -> CONNECTED   greeting frame enqueued on subscribe
    CONNECTED  -> STALE       first failed heartbeat enqueue; removed in the
                              same sweep, never comes back
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from enum import Enum
from typing import TYPE_CHECKING
from uuid import uuid4

from solar.events.frames import CONNECTED_FRAME, PING_FRAME

if TYPE_CHECKING:
    from solar.observability.metrics import MetricsRegistry

logger = logging.getLogger(__name__)

DEFAULT_HEARTBEAT_INTERVAL = 10.0
DEFAULT_QUEUE_SIZE = 100


class ClientState(str, Enum):
    """Lifecycle state of a streaming client."""

    CONNECTING = "connecting"
    CONNECTED = "connected"
    STALE = "stale"


class BroadcastClient:
    """A single streaming client: a bounded frame queue plus its state.

    Enqueueing never blocks. A full or closed queue rejects the frame and the
    caller decides what that means.
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self.id = uuid4().hex[:8]
        self.state = ClientState.CONNECTING
        self.queue_size = queue_size
        # Unbounded queue, capacity enforced in offer() so the end-of-stream
        # marker always fits.
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def offer(self, frame: str) -> bool:
        """Try to enqueue a frame; False if the client is closed or saturated."""
        if self._closed or self._queue.qsize() >= self.queue_size:
            return False
        self._queue.put_nowait(frame)
        return True

    def close(self) -> None:
        """Mark the transport as gone; later offers fail."""
        self._closed = True

    def detach(self) -> None:
        """End the frame stream after the frames already queued."""
        self.state = ClientState.STALE
        self._closed = True
        self._queue.put_nowait(None)

    def pending_frames(self) -> list[str]:
        """Drain queued frames without waiting."""
        frames: list[str] = []
        while not self._queue.empty():
            frame = self._queue.get_nowait()
            if frame is not None:
                frames.append(frame)
        return frames

    async def frames(self) -> AsyncIterator[str]:
        """Yield frames until the client is detached or the consumer stops."""
        try:
            while True:
                frame = await self._queue.get()
                if frame is None:
                    return
                yield frame
        finally:
            self.close()


class Broadcaster:
    """Registry of streaming clients with heartbeat-based pruning.

    The lock guards the client set only across in-memory mutation and
    non-blocking enqueues, never across network I/O.
    """

    def __init__(
        self,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self.heartbeat_interval = heartbeat_interval
        self.queue_size = queue_size
        self.metrics = metrics
        self._clients: list[BroadcastClient] = []
        self._lock = asyncio.Lock()
        self._running = False
        self._task: asyncio.Task[None] | None = None

    @property
    def client_count(self) -> int:
        """Get current number of registered clients."""
        return len(self._clients)

    def is_registered(self, client: BroadcastClient) -> bool:
        return client in self._clients

    async def subscribe(self) -> BroadcastClient:
        """Register a new client and greet it."""
        client = BroadcastClient(queue_size=self.queue_size)
        if client.offer(CONNECTED_FRAME):
            client.state = ClientState.CONNECTED

        async with self._lock:
            self._clients.append(client)
            count = len(self._clients)

        self._record_client_count(count)
        logger.info(f"Event stream client {client.id} connected (total: {count})")
        return client

    async def send(self, frame: str) -> int:
        """Enqueue a frame to every registered client.

        A rejected enqueue does not stop the fan-out; that client is pruned
        by the next heartbeat sweep.

        Returns the number of clients that accepted the frame.
        """
        delivered = 0
        async with self._lock:
            for client in self._clients:
                if client.offer(frame):
                    delivered += 1
                else:
                    logger.debug(f"Client {client.id} rejected a frame")
        return delivered

    async def remove_stale_clients(self) -> int:
        """Ping every client and drop the ones that cannot take the ping.

        Returns the number of clients removed.
        """
        async with self._lock:
            alive: list[BroadcastClient] = []
            stale: list[BroadcastClient] = []
            for client in self._clients:
                if client.offer(PING_FRAME):
                    alive.append(client)
                else:
                    client.detach()
                    stale.append(client)
            self._clients = alive
            count = len(alive)

        self._record_client_count(count)
        if stale:
            logger.info(f"Removed {len(stale)} stale event stream clients (remaining: {count})")
        return len(stale)

    async def start(self) -> None:
        """Start the heartbeat sweep."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._heartbeat_loop())
        logger.info(f"Started broadcaster heartbeat every {self.heartbeat_interval}s")

    async def stop(self) -> None:
        """Stop the heartbeat sweep and end every client stream."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        async with self._lock:
            for client in self._clients:
                client.detach()
            self._clients = []

        self._record_client_count(0)
        logger.info("Stopped broadcaster")

    async def _heartbeat_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.heartbeat_interval)
                await self.remove_stale_clients()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in broadcaster heartbeat: {e}")

    def _record_client_count(self, count: int) -> None:
        if self.metrics is not None:
            self.metrics.connected_sse_clients.set(count)
