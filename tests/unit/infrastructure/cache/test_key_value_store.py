import pytest

from agrohub.infrastructure.cache.key_value_store import DiskKeyValueStore, InMemoryKeyValueStore


@pytest.fixture
def disk_store(tmp_path):
    store = DiskKeyValueStore(tmp_path / "cache")
    yield store
    store.close()


@pytest.mark.asyncio
async def test_memory_store_basic_operations():
    store = InMemoryKeyValueStore({"a": "1"})

    assert await store.get("a") == "1"
    assert await store.get("missing") is None

    await store.set("b", "2")
    await store.delete("a")
    await store.delete("a")  # deleting twice is fine

    assert await store.get("a") is None
    assert len(store) == 1
    assert await store.clear() == 1
    assert len(store) == 0


@pytest.mark.asyncio
async def test_disk_store_creates_directory(tmp_path):
    target = tmp_path / "nested" / "cache"
    store = DiskKeyValueStore(target)
    try:
        assert target.is_dir()
    finally:
        store.close()


@pytest.mark.asyncio
async def test_disk_store_round_trip_and_delete(disk_store):
    await disk_store.set("loc_1_2", '{"country": "Kenya"}')

    assert await disk_store.get("loc_1_2") == '{"country": "Kenya"}'

    await disk_store.delete("loc_1_2")
    assert await disk_store.get("loc_1_2") is None


@pytest.mark.asyncio
async def test_disk_store_persists_across_instances(tmp_path):
    first = DiskKeyValueStore(tmp_path)
    await first.set("k", "v")
    first.close()

    second = DiskKeyValueStore(tmp_path)
    try:
        assert await second.get("k") == "v"
    finally:
        second.close()


@pytest.mark.asyncio
async def test_disk_store_returns_text_for_foreign_values(disk_store):
    disk_store._cache.set("k", 42)
    assert await disk_store.get("k") == "42"


@pytest.mark.asyncio
async def test_disk_store_clear_returns_count(disk_store):
    await disk_store.set("a", "1")
    await disk_store.set("b", "2")

    assert await disk_store.clear() == 2
    assert await disk_store.get("a") is None
