from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from .errors import NotFoundError
from .models import App, Review


logger = logging.getLogger(__name__)

FEATURED_LIMIT = 3
POPULAR_LIMIT = 8
NEW_LIMIT = 8
TOP_RATED_LIMIT = 4
HOME_CATEGORY_LIMIT = 6


def average_rating(ratings: Iterable[int]) -> float:
    values = list(ratings)
    if not values:
        return 0.0
    return sum(values) / len(values)


def rounded_stars(avg: float) -> int:
    """Whole stars to light for an average; halves round up."""
    return max(0, min(5, int(math.floor(avg + 0.5))))


def ratings_for(db: Session, app_ids: Iterable[str]) -> dict[str, float]:
    ids = list(dict.fromkeys(app_ids))
    if not ids:
        return {}

    rows = (
        db.query(Review.app_id, func.avg(Review.rating))
        .filter(Review.app_id.in_(ids))
        .group_by(Review.app_id)
        .all()
    )
    ratings = {app_id: 0.0 for app_id in ids}
    for app_id, avg in rows:
        ratings[app_id] = float(avg or 0)
    return ratings


def list_categories(db: Session) -> list[str]:
    rows = db.query(App.category).distinct().order_by(App.category.asc()).all()
    return [row[0] for row in rows if row[0]]


def featured_apps(db: Session, limit: int = FEATURED_LIMIT) -> list[App]:
    # No curation flag exists; the first rows stand in for a featured shelf.
    return db.query(App).order_by(App.created_at.asc(), App.id.asc()).limit(limit).all()


def popular_apps(db: Session, limit: int = POPULAR_LIMIT) -> list[App]:
    return db.query(App).order_by(App.download_count.desc(), App.created_at.desc()).limit(limit).all()


def new_apps(db: Session, limit: int = NEW_LIMIT) -> list[App]:
    return db.query(App).order_by(App.created_at.desc()).limit(limit).all()


def top_rated(apps: Sequence[App], ratings: dict[str, float], limit: int = TOP_RATED_LIMIT) -> list[App]:
    return sorted(apps, key=lambda app: ratings.get(app.id, 0.0), reverse=True)[:limit]


def apps_in_category(db: Session, category: str) -> list[App]:
    return (
        db.query(App)
        .filter(App.category == category)
        .order_by(App.download_count.desc())
        .all()
    )


def search_apps(db: Session, query: str) -> list[App]:
    term = query.strip()
    if not term:
        return []

    return (
        db.query(App)
        .filter(
            or_(
                App.title.icontains(term, autoescape=True),
                App.description.icontains(term, autoescape=True),
                App.publisher.icontains(term, autoescape=True),
                App.category.icontains(term, autoescape=True),
            )
        )
        .order_by(App.download_count.desc())
        .all()
    )


def filter_apps(db: Session, query: str = "", category: str = "all") -> list[App]:
    q = db.query(App)
    term = query.strip()
    if term:
        q = q.filter(
            or_(
                App.title.icontains(term, autoescape=True),
                App.publisher.icontains(term, autoescape=True),
                App.description.icontains(term, autoescape=True),
            )
        )
    if category and category != "all":
        q = q.filter(App.category == category)
    return q.order_by(App.created_at.desc()).all()


def get_app(db: Session, app_id: str) -> App | None:
    return db.query(App).filter(App.id == app_id).first()


def require_app(db: Session, app_id: str) -> App:
    app = get_app(db, app_id)
    if not app:
        raise NotFoundError("App not found")
    return app


def record_view(db: Session, app: App) -> None:
    """Bump the counter in SQL so concurrent views are all counted."""
    db.query(App).filter(App.id == app.id).update(
        {
            App.download_count: App.download_count + 1,
            App.updated_at: App.updated_at,
        },
        synchronize_session=False,
    )
    db.commit()
    db.refresh(app)


def create_app(db: Session, record: dict) -> App:
    app = App(**record)
    db.add(app)
    db.commit()
    logger.info("Created app %s (%s)", app.id, app.title)
    return app


def update_app(db: Session, app: App, record: dict) -> App:
    for key, value in record.items():
        setattr(app, key, value)
    db.commit()
    logger.info("Updated app %s", app.id)
    return app


def delete_app(db: Session, app: App) -> int:
    """Delete an app together with its reviews; returns the review count removed."""
    review_count = len(app.reviews)
    app_id = app.id
    db.delete(app)
    db.commit()

    orphans = db.query(func.count(Review.id)).filter(Review.app_id == app_id).scalar() or 0
    if orphans:
        logger.warning("App %s deleted but %d reviews remain", app_id, orphans)
    logger.info("Deleted app %s and %d reviews", app_id, review_count)
    return review_count
