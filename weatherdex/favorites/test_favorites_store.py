import fakeredis
import pytest

from weatherdex.favorites.store import FavoritesStore, FavoritesWriteError
from weatherdex.models.city import City

BERLIN = City(name="Berlin", country="DE", latitude=52.52, longitude=13.4, population=3645000)
PARIS = City(name="Paris", country="FR", latitude=48.85341, longitude=2.3488)


@pytest.fixture
def fake_redis():
    client = fakeredis.FakeRedis(decode_responses=True)
    client.flushall()
    return client


@pytest.fixture
def disconnected_redis():
    server = fakeredis.FakeServer()
    server.connected = False
    return fakeredis.FakeRedis(server=server, decode_responses=True)


def test_empty_store_lists_nothing(fake_redis):
    assert FavoritesStore(fake_redis).list() == []


def test_add_and_list_preserves_favoriting_order(fake_redis):
    store = FavoritesStore(fake_redis)
    assert store.add(PARIS) is True
    assert store.add(BERLIN) is True
    assert store.list() == [PARIS, BERLIN]


def test_add_is_idempotent(fake_redis):
    store = FavoritesStore(fake_redis)
    store.add(BERLIN)
    store.add(PARIS)
    assert store.add(BERLIN) is False
    assert store.list() == [BERLIN, PARIS]


def test_identity_ignores_country(fake_redis):
    store = FavoritesStore(fake_redis)
    store.add(BERLIN)
    store.add(BERLIN.model_copy(update={"country": "Germany"}))
    assert len(store.list()) == 1


def test_remove(fake_redis):
    store = FavoritesStore(fake_redis)
    store.add(BERLIN)
    store.add(PARIS)
    assert store.remove(BERLIN) is True
    assert store.remove(BERLIN) is False
    assert store.list() == [PARIS]
    assert not store.contains(BERLIN)
    assert store.contains(PARIS)


def test_favorites_survive_a_new_store_instance(fake_redis):
    FavoritesStore(fake_redis).add(BERLIN)
    assert FavoritesStore(fake_redis).list() == [BERLIN]


def test_key_prefix_separates_stores(fake_redis):
    FavoritesStore(fake_redis, key_prefix="alice").add(BERLIN)
    assert FavoritesStore(fake_redis, key_prefix="bob").list() == []


def test_unknown_population_round_trips(fake_redis):
    store = FavoritesStore(fake_redis)
    store.add(PARIS)
    assert store.list()[0].population is None


def test_corrupt_entry_is_skipped(fake_redis):
    store = FavoritesStore(fake_redis)
    store.add(BERLIN)
    store.add(PARIS)
    fake_redis.hset(store.cities_key, PARIS.identity_key, "{not json")
    assert store.list() == [BERLIN]


def test_read_failure_is_empty(disconnected_redis):
    store = FavoritesStore(disconnected_redis)
    assert store.list() == []
    assert store.contains(BERLIN) is False


def test_write_failure_raises(disconnected_redis):
    store = FavoritesStore(disconnected_redis)
    with pytest.raises(FavoritesWriteError):
        store.add(BERLIN)
    with pytest.raises(FavoritesWriteError):
        store.remove(BERLIN)
