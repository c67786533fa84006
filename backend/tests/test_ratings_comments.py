import pytest

from movie_catalog.errors import Forbidden, InvalidInput, NotFound
from movie_catalog.services.comments import CommentService
from movie_catalog.services.ratings import RatingService, summarize


def test_summarize_rounds_to_one_decimal():
    assert summarize([{"rating": 4}, {"rating": 4}, {"rating": 5}]) == {"average": 4.3, "count": 3}
    assert summarize([]) == {"average": 0, "count": 0}


async def test_rating_overwrites_per_identifier(store):
    ratings = RatingService(store)
    await ratings.submit(7, 2, "anon_123")
    await ratings.submit(7, 5, "anon_123")
    result = await ratings.for_movie(7)
    assert result["count"] == 1
    assert result["average"] == 5
    assert await ratings.for_user("anon_123") == {"7": 5}


async def test_average_over_identifiers(store):
    ratings = RatingService(store)
    await ratings.submit(7, 2, "anon_123")
    await ratings.submit(7, 4, "alice")
    await ratings.submit(8, 1, "alice")
    assert (await ratings.averages())["7"] == {"average": 3.0, "count": 2}
    assert await ratings.for_user("alice") == {"7": 4, "8": 1}


@pytest.mark.parametrize("value", [0, 6, -1])
async def test_rating_out_of_range(store, value):
    with pytest.raises(InvalidInput):
        await RatingService(store).submit(7, value, "anon_123")


async def test_unrated_movie(store):
    assert await RatingService(store).for_movie(1) == {"ratings": [], "average": 0, "count": 0}


async def test_comments_are_scoped_to_movie(store):
    comments = CommentService(store)
    first = await comments.add(1, "alice", "Great")
    await comments.add(2, "bob", "Meh")
    assert [c["id"] for c in await comments.for_movie(1)] == [first["id"]]
    assert len(await comments.list_all()) == 2


async def test_comment_keeps_client_supplied_id(store):
    comment = await CommentService(store).add(1, "alice", "Hi", comment_id="c1", timestamp=5)
    assert comment["id"] == "c1"
    assert comment["timestamp"] == 5


async def test_only_author_deletes_comment(store):
    comments = CommentService(store)
    comment = await comments.add(1, "alice", "Great")
    with pytest.raises(Forbidden):
        await comments.delete(1, comment["id"], "bob")
    await comments.delete(1, comment["id"], "ALICE")
    assert await comments.for_movie(1) == []


async def test_delete_missing_comment(store):
    with pytest.raises(NotFound):
        await CommentService(store).delete(1, "nope", "alice")
