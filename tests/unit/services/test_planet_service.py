"""Tests for the cache-aside planet service."""

from __future__ import annotations

import orjson
import pytest

from solar.cache.keys import CacheKeys
from solar.core.errors import CacheStoreUnavailableError, NotFoundError
from solar.core.model import Planet, PlanetType
from solar.observability.metrics import MetricsRegistry
from solar.services.planets import PlanetService
from solar.storage.images import LocalImageStorage


class TestGetPlanet:
    """Test cache-aside reads."""

    @pytest.mark.asyncio
    async def test_miss_populates_cache(
        self, planet_service: PlanetService, repository, fake_redis, ceres: Planet
    ) -> None:
        """A miss loads from the store and caches with a 60s TTL."""
        created = await repository.create(ceres)
        key = CacheKeys.planet(created.id)

        planet = await planet_service.get_planet(created.id)

        assert planet == created
        assert Planet.from_bytes(fake_redis.store[key]) == created
        assert fake_redis.ttls[key] == 60

    @pytest.mark.asyncio
    async def test_hit_skips_store(
        self, planet_service: PlanetService, repository, ceres: Planet
    ) -> None:
        """A second read within the TTL does not touch the store."""
        created = await repository.create(ceres)

        first = await planet_service.get_planet(created.id)
        second = await planet_service.get_planet(created.id)

        assert first == second
        assert repository.get_calls == 1

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_cached(
        self, planet_service: PlanetService, fake_redis
    ) -> None:
        """Misses that end in NotFound leave nothing in the cache."""
        with pytest.raises(NotFoundError, match="by id: 000000000000000000000000"):
            await planet_service.get_planet("000000000000000000000000")

        assert fake_redis.store == {}

    @pytest.mark.asyncio
    async def test_cache_outage_on_lookup_fails_read(
        self, planet_service: PlanetService, repository, fake_redis, ceres: Planet
    ) -> None:
        created = await repository.create(ceres)
        fake_redis.available = False

        with pytest.raises(CacheStoreUnavailableError):
            await planet_service.get_planet(created.id)

    @pytest.mark.asyncio
    async def test_populate_failure_is_absorbed(
        self, planet_service: PlanetService, repository, fake_redis, ceres: Planet, monkeypatch
    ) -> None:
        """A failed cache write still returns the loaded planet."""
        created = await repository.create(ceres)

        async def broken_set_with_ttl(key, value, ttl=None) -> None:
            raise CacheStoreUnavailableError(f"Redis SET {key} failed")

        monkeypatch.setattr(planet_service.cache, "set_with_ttl", broken_set_with_ttl)

        assert await planet_service.get_planet(created.id) == created
        assert fake_redis.store == {}


class TestWriteInvalidation:
    """Test that writes invalidate instead of refreshing."""

    @pytest.mark.asyncio
    async def test_update_then_read_is_fresh(
        self, planet_service: PlanetService, repository, fake_redis, ceres: Planet
    ) -> None:
        """A read after an update never sees the pre-update cached value."""
        created = await repository.create(ceres)
        await planet_service.get_planet(created.id)
        assert CacheKeys.planet(created.id) in fake_redis.store

        renamed = ceres.model_copy(update={"mean_radius": 470.0})
        await planet_service.update_planet(created.id, renamed)

        assert CacheKeys.planet(created.id) not in fake_redis.store
        planet = await planet_service.get_planet(created.id)
        assert planet.mean_radius == 470.0

    @pytest.mark.asyncio
    async def test_update_invalidates_image(
        self, planet_service: PlanetService, repository, fake_redis, earth: Planet
    ) -> None:
        created = await repository.create(earth)
        await planet_service.get_planet_image(created.id)
        assert CacheKeys.planet_image(created.id) in fake_redis.store

        await planet_service.update_planet(created.id, earth)

        assert CacheKeys.planet_image(created.id) not in fake_redis.store

    @pytest.mark.asyncio
    async def test_delete_then_read_is_not_found(
        self, planet_service: PlanetService, repository, fake_redis, ceres: Planet
    ) -> None:
        """A deleted planet is not served from a stale cache entry."""
        created = await repository.create(ceres)
        await planet_service.get_planet(created.id)

        await planet_service.delete_planet(created.id)

        assert fake_redis.store == {}
        with pytest.raises(NotFoundError):
            await planet_service.get_planet(created.id)

    @pytest.mark.asyncio
    async def test_update_missing_leaves_cache_alone(
        self, planet_service: PlanetService, fake_redis, ceres: Planet
    ) -> None:
        with pytest.raises(NotFoundError):
            await planet_service.update_planet("000000000000000000000000", ceres)
        assert fake_redis.store == {}


class TestCreatePlanet:
    """Test creation and its live event."""

    @pytest.mark.asyncio
    async def test_create_publishes_message(
        self, planet_service: PlanetService, fake_redis, ceres: Planet
    ) -> None:
        """Ceres is stored and announced on the events channel."""
        created = await planet_service.create_planet(ceres)

        assert created.id is not None
        assert created.type == PlanetType.DWARF_PLANET
        channel, data = fake_redis.published[0]
        assert channel == "new_planets"
        assert orjson.loads(data) == {"id": created.id, "name": "Ceres", "type": "DwarfPlanet"}

    @pytest.mark.asyncio
    async def test_client_id_is_ignored(
        self, planet_service: PlanetService, ceres: Planet
    ) -> None:
        """The store assigns the id; a client-supplied one is discarded."""
        with_id = ceres.model_copy(update={"id": "ffffffffffffffffffffffff"})
        created = await planet_service.create_planet(with_id)
        assert created.id != "ffffffffffffffffffffffff"

    @pytest.mark.asyncio
    async def test_publish_failure_propagates(
        self, planet_service: PlanetService, repository, fake_redis, ceres: Planet, monkeypatch
    ) -> None:
        """Under the default policy the call fails but the planet stays stored."""

        async def broken_publish(channel, message) -> int:
            raise CacheStoreUnavailableError("Redis PUBLISH new_planets failed")

        monkeypatch.setattr(planet_service.cache, "publish", broken_publish)

        with pytest.raises(CacheStoreUnavailableError):
            await planet_service.create_planet(ceres)
        assert [p.name for p in repository.planets.values()] == ["Ceres"]

    @pytest.mark.asyncio
    async def test_publish_failure_logged(
        self, planet_service: PlanetService, ceres: Planet, monkeypatch, caplog
    ) -> None:
        """Under the log policy the created planet is still returned."""
        planet_service.publish_failure_policy = "log"

        async def broken_publish(channel, message) -> int:
            raise CacheStoreUnavailableError("Redis PUBLISH new_planets failed")

        monkeypatch.setattr(planet_service.cache, "publish", broken_publish)

        created = await planet_service.create_planet(ceres)

        assert created.id is not None
        assert "creation event dropped" in caplog.text


class TestPlanetImage:
    """Test cache-aside image reads."""

    @pytest.mark.asyncio
    async def test_image_cached_after_first_read(
        self, planet_service: PlanetService, repository, fake_redis, earth: Planet
    ) -> None:
        created = await repository.create(earth)

        first = await planet_service.get_planet_image(created.id)
        second = await planet_service.get_planet_image(created.id)

        assert first == second == b"\xff\xd8earth\xff\xd9"
        assert fake_redis.store[CacheKeys.planet_image(created.id)] == first
        assert repository.get_calls == 1

    @pytest.mark.asyncio
    async def test_missing_image(
        self, planet_service: PlanetService, repository, fake_redis
    ) -> None:
        created = await repository.create(
            Planet(name="Haumea", type=PlanetType.DWARF_PLANET, mean_radius=816.0)
        )

        with pytest.raises(NotFoundError, match="Can't find an image of planet: Haumea"):
            await planet_service.get_planet_image(created.id)
        assert fake_redis.store == {}

    @pytest.mark.asyncio
    async def test_name_outside_image_directory(
        self, repository, cache, notifier, fake_redis, tmp_path
    ) -> None:
        """A planet named like a relative path cannot read files beside the images."""
        (tmp_path / "images").mkdir()
        (tmp_path / "secret.jpg").write_bytes(b"OUTSIDE")
        service = PlanetService(
            repository=repository,
            images=LocalImageStorage(tmp_path / "images"),
            cache=cache,
            notifier=notifier,
        )
        created = await repository.create(
            Planet(name="../secret", type=PlanetType.DWARF_PLANET, mean_radius=1.0)
        )

        with pytest.raises(NotFoundError, match=r"Can't find an image of planet: \.\./secret"):
            await service.get_planet_image(created.id)
        assert CacheKeys.planet_image(created.id) not in fake_redis.store


class TestCacheMetrics:
    @pytest.mark.asyncio
    async def test_hits_and_misses_recorded(
        self, planet_service: PlanetService, repository, ceres: Planet
    ) -> None:
        metrics = MetricsRegistry()
        planet_service.metrics = metrics
        created = await repository.create(ceres)

        await planet_service.get_planet(created.id)
        await planet_service.get_planet(created.id)

        registry = metrics.registry
        assert registry.get_sample_value("cache_misses_total", {"cache_type": "planet"}) == 1.0
        assert registry.get_sample_value("cache_hits_total", {"cache_type": "planet"}) == 1.0
