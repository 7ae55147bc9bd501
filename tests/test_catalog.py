from __future__ import annotations

from datetime import datetime

import pytest

from conftest import add_review, make_app


def test_ratings_for_aggregates_per_app(store):
    db, models = store.session, store.models
    rated = make_app(models, db, title="Rated")
    unrated = make_app(models, db, title="Unrated")
    for rating in (5, 4, 3, 4, 5):
        add_review(models, db, rated, rating)

    ratings = store.catalog.ratings_for(db, [rated.id, unrated.id])
    assert ratings[rated.id] == pytest.approx(4.2)
    assert ratings[unrated.id] == 0.0
    assert store.catalog.ratings_for(db, []) == {}


def test_search_matches_title_description_publisher_and_category(store):
    db, models = store.session, store.models
    make_app(models, db, title="Chess Master", category="games", publisher="Board Inc", download_count=5)
    make_app(models, db, title="Notes", description="Fast offline notes", category="productivity", download_count=50)
    make_app(models, db, title="Weather", publisher="Skyline Labs", category="tools")

    assert [a.title for a in store.catalog.search_apps(db, "chess")] == ["Chess Master"]
    assert [a.title for a in store.catalog.search_apps(db, "OFFLINE")] == ["Notes"]
    assert [a.title for a in store.catalog.search_apps(db, "skyline")] == ["Weather"]
    assert [a.title for a in store.catalog.search_apps(db, "game")] == ["Chess Master"]

    # ordered by download count, most downloaded first
    assert [a.title for a in store.catalog.search_apps(db, "o")][:2] == ["Notes", "Chess Master"]


def test_search_edge_cases(store):
    db, models = store.session, store.models
    make_app(models, db, title="100% Free")
    make_app(models, db, title="Other")

    assert store.catalog.search_apps(db, "   ") == []
    assert store.catalog.search_apps(db, "zzz-no-match") == []
    assert [a.title for a in store.catalog.search_apps(db, "0%")] == ["100% Free"]


def test_listing_queries(store):
    db, models = store.session, store.models
    old = make_app(models, db, title="Old", category="games", download_count=300, created_at=datetime(2025, 1, 1))
    mid = make_app(models, db, title="Mid", category="tools", download_count=10, created_at=datetime(2025, 6, 1))
    new = make_app(models, db, title="New", category="games", download_count=20, created_at=datetime(2026, 1, 1))

    assert [a.id for a in store.catalog.popular_apps(db)] == [old.id, new.id, mid.id]
    assert [a.id for a in store.catalog.new_apps(db)] == [new.id, mid.id, old.id]
    assert [a.id for a in store.catalog.featured_apps(db, limit=2)] == [old.id, mid.id]
    assert [a.id for a in store.catalog.apps_in_category(db, "games")] == [old.id, new.id]
    assert store.catalog.apps_in_category(db, "social") == []
    assert store.catalog.list_categories(db) == ["games", "tools"]

    add_review(models, db, mid, 5)
    add_review(models, db, old, 2)
    ratings = store.catalog.ratings_for(db, [old.id, mid.id, new.id])
    top = store.catalog.top_rated([old, mid, new], ratings, limit=2)
    assert [a.id for a in top] == [mid.id, old.id]


def test_admin_filter(store):
    db, models = store.session, store.models
    make_app(models, db, title="Chess", category="games", publisher="Board Inc")
    make_app(models, db, title="Notes", category="productivity", publisher="Paper Co")

    assert [a.title for a in store.catalog.filter_apps(db, "board", "all")] == ["Chess"]
    assert [a.title for a in store.catalog.filter_apps(db, "", "productivity")] == ["Notes"]
    assert store.catalog.filter_apps(db, "chess", "productivity") == []
    assert len(store.catalog.filter_apps(db)) == 2


def test_record_view_increments_without_touching_updated_at(store):
    db, models = store.session, store.models
    app = make_app(models, db, download_count=7, updated_at=datetime(2026, 1, 2, 3, 4, 5))

    store.catalog.record_view(db, app)
    store.catalog.record_view(db, app)

    assert app.download_count == 9
    assert app.updated_at == datetime(2026, 1, 2, 3, 4, 5)


def test_delete_app_removes_its_reviews(store):
    db, models = store.session, store.models
    doomed = make_app(models, db, title="Doomed")
    kept = make_app(models, db, title="Kept")
    add_review(models, db, doomed, 4)
    add_review(models, db, doomed, 1)
    add_review(models, db, kept, 5)

    removed = store.catalog.delete_app(db, doomed)

    assert removed == 2
    assert db.query(models.App).count() == 1
    remaining = db.query(models.Review).all()
    assert [r.app_id for r in remaining] == [kept.id]


def test_require_app_raises_for_unknown_id(store):
    with pytest.raises(store.errors.NotFoundError):
        store.catalog.require_app(store.session, "missing")
