from datetime import timedelta

import pytest

from repostats.db.database import store_session
from repostats.db.repositories import repository_records
from repostats.services import aggregate_evaluator, list_evaluator
from repostats.services.backend_selector import BackendMode, BackendSelector
from repostats.services.query_contract import ListQuery

from tests.factories import make_record, make_row, seeded_rows


def _list(url, **kwargs):
    with store_session(url) as db:
        return repository_records.list_repositories(db, ListQuery(**kwargs))


def test_soft_deleted_rows_are_hidden(seeded_store):
    page = _list(seeded_store, limit=100)
    assert page.pagination.total_count == 6
    assert 7 not in [r.id for r in page.repositories]


def test_default_order_is_id_descending(seeded_store):
    page = _list(seeded_store)
    assert [r.id for r in page.repositories] == [6, 5, 4, 3, 2, 1]
    assert page.sorting.sort_by == "id"
    assert page.sorting.sort_order == "desc"


def test_stars_sort_breaks_ties_by_id(seeded_store):
    asc = _list(seeded_store, sort_by="stars", sort_order="asc")
    desc = _list(seeded_store, sort_by="stars", sort_order="desc")
    assert [r.id for r in asc.repositories] == [6, 3, 1, 5, 2, 4]
    assert [r.id for r in desc.repositories] == [2, 4, 5, 1, 3, 6]


def test_unknown_sort_field_is_treated_as_id(seeded_store):
    assert _list(seeded_store, sort_by="dangerous_column") == _list(seeded_store, sort_by="id")


def test_search_is_case_insensitive_over_three_columns(seeded_store):
    page = _list(seeded_store, search="ALPHA", sort_order="asc")
    assert [r.id for r in page.repositories] == [1, 2, 4, 6]
    assert page.search == "ALPHA"


def test_search_wildcards_are_matched_literally(seeded_store):
    assert _list(seeded_store, search="%").pagination.total_count == 0
    assert _list(seeded_store, search="_").pagination.total_count == 0


def test_pagination_window(seeded_store):
    page = _list(seeded_store, page=2, limit=4)
    assert [r.id for r in page.repositories] == [2, 1]
    assert page.pagination.total_pages == 2
    assert page.pagination.has_next is False
    assert page.pagination.has_prev is True


def test_non_positive_page_does_not_produce_negative_offset(seeded_store):
    page = _list(seeded_store, page=0, limit=2)
    assert [r.id for r in page.repositories] == [6, 5]
    assert page.pagination.current_page == 0


def test_out_of_range_page_is_empty(seeded_store):
    page = _list(seeded_store, page=10, limit=4)
    assert page.repositories == []
    assert page.pagination.total_count == 6


def test_records_round_trip_from_store(seeded_store, fixed_now):
    page = _list(seeded_store, search="vault")
    (record,) = page.repositories
    assert record.homepage == "https://vault.app"
    assert record.source == ["github"]
    assert record.saved_at == fixed_now - timedelta(days=1)
    assert record.created_at.tzinfo is not None


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"sort_by": "stars", "sort_order": "asc"},
        {"sort_by": "stars", "sort_order": "desc"},
        {"sort_by": "created_at", "sort_order": "asc"},
        {"sort_by": "owner", "sort_order": "asc"},
        {"search": "alpha", "limit": 2, "page": 2},
        {"search": "nothing-here"},
    ],
)
def test_store_and_in_memory_paths_agree(seeded_store, fixed_now, kwargs):
    in_memory = list_evaluator.evaluate(seeded_rows(fixed_now, factory=make_record), ListQuery(**kwargs))
    assert _list(seeded_store, **kwargs) == in_memory


def test_store_stats(seeded_store, fixed_now):
    with store_session(seeded_store) as db:
        stats = repository_records.get_repository_stats(db, now=fixed_now)
    expected = aggregate_evaluator.aggregate(seeded_rows(fixed_now, factory=make_record), now=fixed_now)
    assert stats == expected
    assert stats.total_repos == 6
    assert stats.deleted_repos == 1
    assert [(s.source, s.count) for s in stats.source_stats] == [("github", 5), ("npm", 2)]


def test_store_stats_on_empty_table(sqlite_store, fixed_now):
    with store_session(sqlite_store) as db:
        stats = repository_records.get_repository_stats(db, now=fixed_now)
    assert stats == aggregate_evaluator.aggregate([], now=fixed_now)


def test_owner_ties_follow_first_appearance(seed_store, fixed_now):
    url = seed_store(
        [
            make_row(1, "zeta", "a", 1, fixed_now),
            make_row(2, "eta", "b", 1, fixed_now),
            make_row(3, "eta", "c", 1, fixed_now),
            make_row(4, "theta", "d", 1, fixed_now),
            make_row(5, "zeta", "e", 1, fixed_now),
        ]
    )
    with store_session(url) as db:
        stats = repository_records.get_repository_stats(db, now=fixed_now)
    assert [(o.owner, o.repo_count) for o in stats.top_owners] == [("zeta", 2), ("eta", 2), ("theta", 1)]


def test_selector_uses_store_when_reachable(seeded_store, fixed_now):
    selector = BackendSelector(store_url=seeded_store)
    page = selector.resolve_list(ListQuery())
    assert page.pagination.total_count == 6
    assert selector.mode is BackendMode.store
    stats = selector.resolve_stats(now=fixed_now)
    assert stats.total_repos == 6
    assert selector.mode is BackendMode.store


def test_selector_falls_back_when_table_is_missing(sqlite_store):
    from repostats.db import models
    from repostats.db.database import get_engine

    models.Base.metadata.drop_all(bind=get_engine(sqlite_store))
    selector = BackendSelector(store_url=sqlite_store)
    page = selector.resolve_list(ListQuery())
    assert page.pagination.total_count == 150
    assert selector.mode is BackendMode.fallback


def test_huge_page_is_empty_without_leaving_the_store(seeded_store):
    selector = BackendSelector(store_url=seeded_store)
    page = selector.resolve_list(ListQuery(page=10**30, limit=30))
    assert selector.mode is BackendMode.store
    assert page.repositories == []
    assert page.pagination.total_count == 6
    assert page.pagination.has_next is False
