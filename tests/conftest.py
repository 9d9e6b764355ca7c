"""Global pytest configuration and fixtures.

Provides in-memory stand-ins for Redis and the primary store so service,
event and API tests run without external processes.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import Any, AsyncIterator

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from solar.cache.redis import RedisCache
from solar.core.errors import NotFoundError
from solar.core.ids import generate_object_id, is_valid_object_id
from solar.core.model import Planet, PlanetType, Satellite
from solar.events.notifier import ChangeNotifier
from solar.services.planets import PlanetService
from solar.storage.images import LocalImageStorage


class FakePipeline:
    """MULTI/EXEC pipeline that applies its queued commands on execute()."""

    def __init__(self, redis: FakeRedis) -> None:
        self._redis = redis
        self._commands: list[tuple[str, tuple[Any, ...]]] = []

    async def __aenter__(self) -> FakePipeline:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self._commands.clear()

    def set(self, key: str, value: bytes) -> FakePipeline:
        self._commands.append(("set", (key, value)))
        return self

    def expire(self, key: str, ttl: int) -> FakePipeline:
        self._commands.append(("expire", (key, ttl)))
        return self

    def incr(self, key: str, amount: int = 1) -> FakePipeline:
        self._commands.append(("incr", (key, amount)))
        return self

    async def execute(self) -> list[Any]:
        self._redis.check_available()
        self._redis.transactions += 1
        results = [await getattr(self._redis, name)(*args) for name, args in self._commands]
        self._commands.clear()
        return results


class FakePubSub:
    """Pub/sub connection fed by FakeRedis.publish()."""

    def __init__(self, redis: FakeRedis) -> None:
        self._redis = redis
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self.channels: set[str] = set()
        self.closed = False

    async def subscribe(self, *channels: str) -> None:
        self._redis.check_available()
        for channel in channels:
            self.channels.add(channel)
            self._redis.subscribers[channel].append(self)

    async def unsubscribe(self, *channels: str) -> None:
        for channel in channels or tuple(self.channels):
            self.channels.discard(channel)
            if self in self._redis.subscribers[channel]:
                self._redis.subscribers[channel].remove(self)

    async def get_message(
        self, ignore_subscribe_messages: bool = False, timeout: float = 0.0
    ) -> dict[str, Any] | None:
        try:
            return await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None

    async def listen(self) -> AsyncIterator[dict[str, Any]]:
        while not self.closed:
            yield await self._queue.get()

    async def aclose(self) -> None:
        await self.unsubscribe()
        self.closed = True

    def deliver(self, channel: str, data: bytes) -> None:
        self._queue.put_nowait({"type": "message", "channel": channel.encode(), "data": data})


class FakeRedis:
    """Single-process Redis double with an outage switch.

    Values are bytes, as with ``decode_responses=False``.
    """

    def __init__(self) -> None:
        self.store: dict[str, bytes] = {}
        self.ttls: dict[str, int] = {}
        self.published: list[tuple[str, bytes]] = []
        self.subscribers: defaultdict[str, list[FakePubSub]] = defaultdict(list)
        self.transactions = 0
        self.available = True

    def check_available(self) -> None:
        if not self.available:
            raise RedisConnectionError("Connection refused")

    async def get(self, key: str) -> bytes | None:
        self.check_available()
        return self.store.get(key)

    async def set(self, key: str, value: bytes) -> bool:
        self.check_available()
        self.store[key] = value
        self.ttls.pop(key, None)
        return True

    async def expire(self, key: str, ttl: int) -> bool:
        self.check_available()
        if key not in self.store:
            return False
        self.ttls[key] = ttl
        return True

    async def incr(self, key: str, amount: int = 1) -> int:
        self.check_available()
        value = int(self.store.get(key, b"0")) + amount
        self.store[key] = str(value).encode()
        return value

    async def delete(self, *keys: str) -> int:
        self.check_available()
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def publish(self, channel: str, message: str | bytes) -> int:
        self.check_available()
        data = message.encode() if isinstance(message, str) else message
        self.published.append((channel, data))
        receivers = list(self.subscribers[channel])
        for pubsub in receivers:
            pubsub.deliver(channel, data)
        return len(receivers)

    async def ping(self) -> bool:
        self.check_available()
        return True

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    def pubsub(self) -> FakePubSub:
        return FakePubSub(self)

    async def aclose(self) -> None:
        pass


class InMemoryPlanetRepository:
    """Primary store double with the same error contract as PlanetRepository."""

    def __init__(self) -> None:
        self.planets: dict[str, Planet] = {}
        self.get_calls = 0

    async def list_all(self, planet_type: PlanetType | None = None) -> list[Planet]:
        return [p for p in self.planets.values() if planet_type is None or p.type == planet_type]

    async def create(self, planet: Planet) -> Planet:
        created = planet.model_copy(update={"id": generate_object_id()})
        self.planets[created.id] = created  # type: ignore[index]
        return created

    async def get(self, planet_id: str) -> Planet:
        self.get_calls += 1
        if not is_valid_object_id(planet_id) or planet_id not in self.planets:
            raise NotFoundError(f"Can't find a planet by id: {planet_id}")
        return self.planets[planet_id]

    async def update(self, planet_id: str, planet: Planet) -> Planet:
        if planet_id not in self.planets:
            raise NotFoundError(f"Can't find an updated planet by id: {planet_id}")
        updated = planet.model_copy(update={"id": planet_id})
        self.planets[planet_id] = updated
        return updated

    async def delete(self, planet_id: str) -> None:
        if self.planets.pop(planet_id, None) is None:
            raise NotFoundError(f"Can't delete a planet by id: {planet_id}")


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis: FakeRedis) -> RedisCache:
    return RedisCache(fake_redis)  # type: ignore[arg-type]


@pytest.fixture
def repository() -> InMemoryPlanetRepository:
    return InMemoryPlanetRepository()


@pytest.fixture
def images(tmp_path: Path) -> LocalImageStorage:
    (tmp_path / "ceres.jpg").write_bytes(b"\xff\xd8ceres\xff\xd9")
    (tmp_path / "earth.jpg").write_bytes(b"\xff\xd8earth\xff\xd9")
    return LocalImageStorage(tmp_path)


@pytest.fixture
def notifier(cache: RedisCache) -> ChangeNotifier:
    return ChangeNotifier(cache)


@pytest.fixture
def planet_service(
    repository: InMemoryPlanetRepository,
    images: LocalImageStorage,
    cache: RedisCache,
    notifier: ChangeNotifier,
) -> PlanetService:
    return PlanetService(
        repository=repository,  # type: ignore[arg-type]
        images=images,
        cache=cache,
        notifier=notifier,
    )


@pytest.fixture
def ceres() -> Planet:
    return Planet(name="Ceres", type=PlanetType.DWARF_PLANET, mean_radius=469.73)


@pytest.fixture
def earth() -> Planet:
    return Planet(
        name="Earth",
        type=PlanetType.TERRESTRIAL_PLANET,
        mean_radius=6371.0,
        satellites=[Satellite(name="Moon", first_spacecraft_landing_date=date(1959, 9, 13))],
    )
