import random

import pytest

from movie_catalog.services.catalog_query import (
    CatalogFilters,
    CatalogView,
    PAGE_SIZE_NARROW,
    RuntimeFilter,
    SortKey,
    all_tags,
    attach_ratings,
    available_years,
    effective_rating,
    filter_entries,
    matches_runtime,
    paginate,
    query_catalog,
    recent_entries,
    similar_entries,
    sort_entries,
)

ENTRIES = [
    {"id": 1, "title": "Heat", "year": 1995, "genre": "Crime, Drama", "imdbRating": 8.3,
     "runtime": "170 min", "tags": ["heist"], "description": "A cop hunts a thief."},
    {"id": 2, "title": "Amélie", "year": 2001, "genre": "Comedy, Romance", "rating": 8.0,
     "runtime": "122 min", "tags": ["paris"]},
    {"id": 3, "title": "alien", "year": 1979, "genre": "Horror, Sci-Fi", "imdbRating": 8.5,
     "runtime": "117 min", "userRating": 5, "communityRating": 4.5},
    {"id": 4, "title": "Dark", "year": 2017, "genre": "Drama, Mystery", "imdbRating": 8.7,
     "runtime": "3 Seasons", "tags": ["heist", "time"]},
    {"id": 5, "title": "Chernobyl", "year": 2019, "genre": "Drama", "imdbRating": 9.3,
     "runtime": "1 Season", "communityRating": 3.0},
    {"id": 6, "title": "Short Film", "year": 2001, "genre": "Animation", "imdbRating": 0,
     "rating": 6.1, "runtime": "12 min"},
    {"id": 7, "title": "Broken", "year": "n/a", "genre": None, "imdbRating": "garbage"},
]


def ids(entries):
    return [e["id"] for e in entries]


# ── Field helpers ────────────────────────────────────────────────

def test_effective_rating_prefers_positive_imdb_rating():
    assert effective_rating(ENTRIES[0]) == 8.3
    assert effective_rating(ENTRIES[1]) == 8.0
    assert effective_rating(ENTRIES[5]) == 6.1
    assert effective_rating(ENTRIES[6]) == 0
    assert effective_rating({"imdbRating": -1, "rating": 6.5}) == 6.5


@pytest.mark.parametrize("runtime,bucket,expected", [
    ("90 min", RuntimeFilter.SHORT, True),
    ("91 min", RuntimeFilter.SHORT, False),
    ("91 min", RuntimeFilter.MEDIUM, True),
    ("150 min", RuntimeFilter.MEDIUM, True),
    ("151 min", RuntimeFilter.LONG, True),
    ("1 Season", RuntimeFilter.ONE_SEASON, True),
    ("1 Seasons", RuntimeFilter.ONE_SEASON, True),
    ("11 Seasons", RuntimeFilter.ONE_SEASON, False),
    ("11 Seasons", RuntimeFilter.MULTI_SEASON, True),
    ("1 Season", RuntimeFilter.MULTI_SEASON, False),
    ("2 Seasons", RuntimeFilter.LONG, False),
    ("", RuntimeFilter.SHORT, False),
    ("unknown", RuntimeFilter.SHORT, False),
    ("", RuntimeFilter.ALL, True),
])
def test_runtime_buckets(runtime, bucket, expected):
    assert matches_runtime(runtime, bucket) is expected


# ── Filter ───────────────────────────────────────────────────────

def test_default_filters_keep_everything():
    assert ids(filter_entries(ENTRIES, CatalogFilters())) == [1, 2, 3, 4, 5, 6, 7]


def test_genre_filter_matches_any_selected_genre():
    result = filter_entries(ENTRIES, CatalogFilters(genres={"Drama"}))
    assert ids(result) == [1, 4, 5]
    result = filter_entries(ENTRIES, CatalogFilters(genres={"Drama", "Comedy"}))
    assert ids(result) == [1, 2, 4, 5]


def test_year_filter():
    assert ids(filter_entries(ENTRIES, CatalogFilters(years={2001}))) == [2, 6]


def test_search_matches_title_or_description_case_insensitively():
    assert ids(filter_entries(ENTRIES, CatalogFilters(search="ALIEN"))) == [3]
    assert ids(filter_entries(ENTRIES, CatalogFilters(search="thief"))) == [1]


def test_rating_range_uses_effective_rating():
    result = filter_entries(ENTRIES, CatalogFilters(rating_range=(8.4, 9.0)))
    assert ids(result) == [3, 4]


def test_tag_filter():
    assert ids(filter_entries(ENTRIES, CatalogFilters(tags={"heist"}))) == [1, 4]


def test_runtime_filter_separates_films_and_series():
    assert ids(filter_entries(ENTRIES, CatalogFilters(runtime=RuntimeFilter.ONE_SEASON))) == [5]
    assert ids(filter_entries(ENTRIES, CatalogFilters(runtime=RuntimeFilter.MULTI_SEASON))) == [4]
    assert ids(filter_entries(ENTRIES, CatalogFilters(runtime=RuntimeFilter.LONG))) == [1]


def test_adding_a_predicate_never_grows_the_result():
    base = CatalogFilters(genres={"Drama"})
    narrower = CatalogFilters(genres={"Drama"}, search="dark")
    assert set(ids(filter_entries(ENTRIES, narrower))) <= set(ids(filter_entries(ENTRIES, base)))


def test_filters_report_whether_active():
    assert not CatalogFilters().is_active
    assert CatalogFilters(search="x").is_active
    assert CatalogFilters(rating_range=(5, 10)).is_active


# ── Sort ─────────────────────────────────────────────────────────

def test_sort_by_date_added_is_descending_id():
    assert ids(sort_entries(ENTRIES, SortKey.DATE_ADDED)) == [7, 6, 5, 4, 3, 2, 1]
    assert ids(sort_entries(ENTRIES, "dateAddedLatest")) == [1, 2, 3, 4, 5, 6, 7]


def test_sort_by_title_folds_case_and_accents():
    assert ids(sort_entries(ENTRIES, SortKey.TITLE)) == [3, 2, 7, 5, 4, 1, 6]


def test_sort_by_year_treats_garbage_as_zero():
    assert ids(sort_entries(ENTRIES, SortKey.YEAR)) == [5, 4, 2, 6, 1, 3, 7]


def test_sort_by_imdb_rating_uses_effective_rating():
    assert ids(sort_entries(ENTRIES, SortKey.IMDB_RATING)) == [5, 4, 3, 1, 2, 6, 7]


def test_rating_sorts_are_stable_for_missing_values():
    assert ids(sort_entries(ENTRIES, SortKey.USER_RATING)) == [3, 1, 2, 4, 5, 6, 7]
    assert ids(sort_entries(ENTRIES, SortKey.COMMUNITY_RATING)) == [3, 5, 1, 2, 4, 6, 7]


def test_unknown_sort_key_raises():
    with pytest.raises(ValueError):
        sort_entries(ENTRIES, "popularity")


# ── Paginate ─────────────────────────────────────────────────────

def test_pages_concatenate_to_the_full_list():
    entries = [{"id": i, "title": f"Film {i}"} for i in range(1, 30)]
    first = paginate(entries, 1, PAGE_SIZE_NARROW)
    assert first.total_pages == 3
    pages = [paginate(entries, p, PAGE_SIZE_NARROW).entries for p in range(1, first.total_pages + 1)]
    assert [e for page in pages for e in page] == entries


def test_page_past_the_end_is_empty():
    page = paginate(ENTRIES, 5, 24)
    assert page.entries == []
    assert page.total_count == 7
    assert page.total_pages == 1


def test_empty_input_has_zero_pages():
    page = paginate([], 1, 24)
    assert page.total_pages == 0
    assert page.is_empty


@pytest.mark.parametrize("page,size", [(0, 12), (1, 0), (-1, 24)])
def test_invalid_page_arguments(page, size):
    with pytest.raises(ValueError):
        paginate(ENTRIES, page, size)


def test_query_catalog_filters_sorts_then_paginates():
    page = query_catalog(ENTRIES, CatalogFilters(genres={"Drama"}), SortKey.IMDB_RATING, page=1, page_size=2)
    assert ids(page.entries) == [5, 4]
    assert page.total_count == 3
    assert page.total_pages == 2


# ── View state ───────────────────────────────────────────────────

def test_filter_changes_reset_the_page():
    view = CatalogView(page_size=2)
    for change in (
        lambda: view.toggle_genre("Drama"),
        lambda: view.toggle_year(2001),
        lambda: view.toggle_tag("heist"),
        lambda: view.set_search("a"),
        lambda: view.set_rating_range(1, 9),
        lambda: view.set_runtime_filter("long"),
        view.clear_filters,
    ):
        view.go_to_page(3)
        change()
        assert view.page == 1


def test_sort_change_keeps_the_page():
    view = CatalogView(page_size=2)
    view.go_to_page(2)
    view.set_sort(SortKey.TITLE)
    assert view.page == 2
    assert ids(view.render(ENTRIES).entries) == [7, 5]


def test_toggling_twice_removes_the_filter():
    view = CatalogView()
    view.toggle_genre("Drama")
    view.toggle_genre("Drama")
    assert not view.filters.is_active


# ── Derived lists ────────────────────────────────────────────────

def test_similar_entries_share_primary_genre_and_exclude_self():
    entries = [{"id": i, "title": f"Film {i}", "genre": "Drama, Crime"} for i in range(1, 10)]
    entries.append({"id": 99, "title": "Other", "genre": "Comedy"})
    picked = similar_entries(entries[0], entries, rng=random.Random(7))
    assert len(picked) == 5
    assert {e["id"] for e in picked} <= set(range(2, 10))


def test_similar_entries_matches_any_genre_token_case_insensitively():
    ref = {"id": 1, "title": "A", "genre": "Drama"}
    other = {"id": 2, "title": "B", "genre": "Mystery, drama"}
    assert similar_entries(ref, [ref, other], rng=random.Random(0)) == [other]


def test_similar_entries_without_genre():
    assert similar_entries({"id": 1, "title": "A"}, ENTRIES) == []


def test_recent_entries_are_newest_ids_first():
    assert ids(recent_entries(ENTRIES, limit=3)) == [7, 6, 5]


def test_available_years_and_tags():
    assert available_years(ENTRIES) == [2019, 2017, 2001, 1995, 1979]
    assert all_tags(ENTRIES) == ["heist", "paris", "time"]


def test_attach_ratings_overrides_community_and_user_ratings():
    entries = [{"id": 3, "title": "alien", "communityRating": 4.5}, {"id": 5, "title": "Chernobyl"}]
    result = attach_ratings(entries, {"5": {"average": 3.0, "count": 2}}, {"5": 4})
    assert "communityRating" not in result[0]
    assert result[1]["communityRating"] == 3.0
    assert result[1]["ratingCount"] == 2
    assert result[1]["userRating"] == 4
    assert entries[0]["communityRating"] == 4.5


def test_drama_sorted_by_imdb_rating():
    se7en = {"id": 5, "title": "Se7en", "genre": "Crime, Drama", "imdbRating": 8.6}
    the_room = {"id": 7, "title": "The Room", "genre": "Drama", "imdbRating": 3.7}
    page = query_catalog([the_room, se7en], CatalogFilters(genres={"Drama"}), SortKey.IMDB_RATING)
    assert page.entries == [se7en, the_room]
    assert page.total_pages == 1
