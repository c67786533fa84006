import pytest

from movie_catalog.clients.omdb import MetadataResult
from movie_catalog.errors import Conflict, InvalidInput, NotFound
from movie_catalog.services.catalog import (
    DEFAULT_DESCRIPTION, GENRE_POSTERS, CatalogService, mark_as_watched, resolve_slug,
)
from movie_catalog.store import MemoryKeyValueStore
from movie_catalog.store.base import TOWATCH_NAMESPACE


@pytest.fixture
def movies(store):
    return CatalogService(store)


@pytest.fixture
def towatch(store):
    return CatalogService(store, TOWATCH_NAMESPACE)


async def test_upsert_and_get(movies):
    await movies.upsert({"id": 1, "title": "Heat"})
    assert await movies.get(1) == {"id": 1, "title": "Heat"}


async def test_get_missing_raises_not_found(movies):
    with pytest.raises(NotFound):
        await movies.get(42)


async def test_upsert_rejects_new_entry_with_same_slug(movies):
    await movies.upsert({"id": 1, "title": "Movie: Part 2"})
    with pytest.raises(Conflict):
        await movies.upsert({"id": 2, "title": "Movie Part 2"})


async def test_upsert_allows_rewriting_an_existing_id(movies):
    await movies.upsert({"id": 1, "title": "Heat"})
    await movies.upsert({"id": 1, "title": "Heat", "year": 1995})
    assert (await movies.get(1))["year"] == 1995


async def test_same_title_allowed_in_other_namespace(movies, towatch):
    await movies.upsert({"id": 1, "title": "Heat"})
    await towatch.upsert({"id": 1, "title": "Heat"})
    assert len(await towatch.list_entries()) == 1


async def test_overwrite_with_colliding_title_is_rejected(movies):
    await movies.upsert({"id": 1, "title": "Heat"})
    await movies.upsert({"id": 2, "title": "Alien"})
    with pytest.raises(Conflict):
        await movies.upsert({"id": 2, "title": "HEAT"})
    assert (await movies.get(2))["title"] == "Alien"


async def test_merge_rename_checks_slug(movies):
    await movies.upsert({"id": 1, "title": "Heat"})
    await movies.upsert({"id": 2, "title": "Alien"})
    with pytest.raises(Conflict):
        await movies.merge(2, {"title": "Heat!"})
    renamed = await movies.merge(2, {"title": "Aliens"})
    assert renamed["title"] == "Aliens"


async def test_merge_cannot_blank_the_title(movies):
    await movies.upsert({"id": 1, "title": "Heat"})
    with pytest.raises(InvalidInput):
        await movies.merge(1, {"title": None})


async def test_merge_keeps_other_fields_and_id(movies):
    await movies.upsert({"id": 1, "title": "Heat", "year": 1995})
    merged = await movies.merge(1, {"id": 99, "image": "poster.jpg"})
    assert merged == {"id": 1, "title": "Heat", "year": 1995, "image": "poster.jpg"}


async def test_next_id_is_max_plus_one(movies):
    assert await movies.next_id() == 1
    await movies.upsert({"id": 7, "title": "A"})
    await movies.upsert({"id": 3, "title": "B"})
    assert await movies.next_id() == 8


async def test_create_from_metadata_fills_defaults(movies):
    await movies.upsert({"id": 4, "title": "Heat"})
    entry = await movies.create_from_metadata(MetadataResult(title="Alien", imdb_id="tt0078748", year=1979))
    assert entry["id"] == 5
    assert entry["genre"] == "Drama"
    assert entry["rating"] == 7.0
    assert entry["image"] == GENRE_POSTERS["Drama"]
    assert entry["description"] == DEFAULT_DESCRIPTION
    assert entry["imdbId"] == "tt0078748"
    assert "dateAdded" in entry
    assert "imdbRating" not in entry


async def test_create_from_metadata_rejects_duplicate_title(movies):
    await movies.upsert({"id": 4, "title": "Alien"})
    with pytest.raises(Conflict, match="ID: #4"):
        await movies.create_from_metadata(MetadataResult(title="ALIEN", imdb_id="tt0078748"))


async def test_migrate_date_added_only_touches_missing(movies):
    await movies.upsert({"id": 1, "title": "A", "dateAdded": 123})
    await movies.upsert({"id": 2, "title": "B"})
    assert await movies.migrate_date_added() == 1
    assert (await movies.get(1))["dateAdded"] == 123
    assert (await movies.get(2))["dateAdded"] > 0


async def test_mark_as_watched_moves_entry(store, movies, towatch):
    await movies.upsert({"id": 3, "title": "Heat"})
    await towatch.upsert({"id": 1, "title": "Dark", "tags": ["time"]})
    watched = await mark_as_watched(store, 1)
    assert watched["id"] == 4
    assert watched["tags"] == ["time"]
    assert await towatch.list_entries() == []
    assert (await movies.get(4))["title"] == "Dark"


async def test_mark_as_watched_missing_entry(store):
    with pytest.raises(NotFound):
        await mark_as_watched(store, 1)


async def test_resolve_slug_prefers_collection_then_lowest_id():
    store = MemoryKeyValueStore({
        "towatch:1": {"id": 1, "title": "The Room"},
        "movie:9": {"id": 9, "title": "Se7en!"},
        "movie:2": {"id": 2, "title": "Se7en"},
    })
    assert (await resolve_slug(store, "se7en"))["id"] == 2
    assert (await resolve_slug(store, "the-room"))["title"] == "The Room"
    assert await resolve_slug(store, "missing") is None
