"""
Back-office dashboard figures.

Every number here is read from the catalog tables. Week-over-week
comparisons use created_at windows; download counts carry no history, so
downloads are reported as a plain total.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from .models import App, Profile, Review


WEEK = timedelta(days=7)
TREND_DAYS = 7
TOP_LIMIT = 5
ACTIVITY_LIMIT = 10
LOW_RATING_THRESHOLD = 3.0


@dataclass
class Comparison:
    value: int = 0
    percentage: float = 0.0
    is_positive: bool = True


@dataclass
class Activity:
    kind: str
    title: str
    date: datetime
    target_id: str
    details: str | None = None


@dataclass
class RatedApp:
    app: App
    rating: float
    review_count: int


@dataclass
class DashboardStats:
    total_apps: int = 0
    total_downloads: int = 0
    total_reviews: int = 0
    total_users: int = 0
    new_apps_this_week: int = 0
    new_reviews_this_week: int = 0
    average_rating: float = 0.0
    top_categories: list[tuple[str, int]] = field(default_factory=list)
    low_rated_apps: list[RatedApp] = field(default_factory=list)
    top_rated_apps: list[RatedApp] = field(default_factory=list)
    top_downloaded_apps: list[App] = field(default_factory=list)
    recent_apps: list[App] = field(default_factory=list)
    recent_reviews: list[Review] = field(default_factory=list)
    recent_activity: list[Activity] = field(default_factory=list)
    reviews_trend: list[tuple[date, int]] = field(default_factory=list)
    apps_trend: list[tuple[date, int]] = field(default_factory=list)
    users_trend: list[tuple[date, int]] = field(default_factory=list)
    comparisons: dict[str, Comparison] = field(default_factory=dict)


def compare(current: int, previous: int) -> Comparison:
    diff = current - previous
    if previous:
        percentage = diff / previous * 100
    elif current:
        percentage = 100.0
    else:
        percentage = 0.0
    return Comparison(value=diff, percentage=round(percentage, 1), is_positive=diff >= 0)


def _count_between(db: Session, model, start: datetime, end: datetime) -> int:
    return (
        db.query(func.count())
        .select_from(model)
        .filter(model.created_at >= start, model.created_at < end)
        .scalar()
        or 0
    )


def daily_trend(created: list[datetime], today: date, days: int = TREND_DAYS) -> list[tuple[date, int]]:
    """Counts per calendar day for the last ``days`` days, oldest first."""
    buckets = {today - timedelta(days=offset): 0 for offset in range(days - 1, -1, -1)}
    for stamp in created:
        day = stamp.date()
        if day in buckets:
            buckets[day] += 1
    return list(buckets.items())


def _created_since(db: Session, column, start: datetime) -> list[datetime]:
    return [row[0] for row in db.query(column).filter(column >= start).all()]


def _rated_apps(db: Session) -> list[RatedApp]:
    rows = (
        db.query(App, func.avg(Review.rating), func.count(Review.id))
        .join(Review, Review.app_id == App.id)
        .group_by(App.id)
        .all()
    )
    return [RatedApp(app=app, rating=float(avg), review_count=count) for app, avg, count in rows]


def build_dashboard(db: Session, now: datetime | None = None) -> DashboardStats:
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    week_ago = now - WEEK
    two_weeks_ago = now - 2 * WEEK

    stats = DashboardStats(
        total_apps=db.query(func.count(App.id)).scalar() or 0,
        total_downloads=db.query(func.coalesce(func.sum(App.download_count), 0)).scalar() or 0,
        total_reviews=db.query(func.count(Review.id)).scalar() or 0,
        total_users=db.query(func.count(Profile.id)).scalar() or 0,
    )

    stats.new_apps_this_week = _count_between(db, App, week_ago, now)
    stats.new_reviews_this_week = _count_between(db, Review, week_ago, now)
    new_users_this_week = _count_between(db, Profile, week_ago, now)

    stats.comparisons = {
        "reviews": compare(stats.new_reviews_this_week, _count_between(db, Review, two_weeks_ago, week_ago)),
        "apps": compare(stats.new_apps_this_week, _count_between(db, App, two_weeks_ago, week_ago)),
        "users": compare(new_users_this_week, _count_between(db, Profile, two_weeks_ago, week_ago)),
    }

    avg = db.query(func.avg(Review.rating)).scalar()
    stats.average_rating = float(avg) if avg is not None else 0.0

    category_count = func.count(App.id)
    stats.top_categories = [
        (category, count)
        for category, count in (
            db.query(App.category, category_count)
            .group_by(App.category)
            .order_by(category_count.desc(), App.category.asc())
            .limit(TOP_LIMIT)
            .all()
        )
    ]

    rated = _rated_apps(db)
    stats.low_rated_apps = sorted(
        (item for item in rated if item.rating < LOW_RATING_THRESHOLD),
        key=lambda item: item.rating,
    )[:TOP_LIMIT]
    stats.top_rated_apps = sorted(rated, key=lambda item: item.rating, reverse=True)[:TOP_LIMIT]

    stats.top_downloaded_apps = (
        db.query(App).order_by(App.download_count.desc()).limit(TOP_LIMIT).all()
    )
    stats.recent_apps = db.query(App).order_by(App.created_at.desc()).limit(TOP_LIMIT).all()
    stats.recent_reviews = (
        db.query(Review)
        .options(joinedload(Review.app))
        .order_by(Review.created_at.desc())
        .limit(TOP_LIMIT)
        .all()
    )
    recent_users = db.query(Profile).order_by(Profile.created_at.desc()).limit(TOP_LIMIT).all()

    activity = [Activity("app", app.title, app.created_at, app.id, app.category) for app in stats.recent_apps]
    activity += [
        Activity("review", review.app.title, review.created_at, review.id, f"{review.rating}/5 by {review.user_name}")
        for review in stats.recent_reviews
    ]
    activity += [Activity("user", user.username, user.created_at, user.id, user.email) for user in recent_users]
    activity.sort(key=lambda item: item.date, reverse=True)
    stats.recent_activity = activity[:ACTIVITY_LIMIT]

    trend_start = datetime.combine(now.date() - timedelta(days=TREND_DAYS - 1), datetime.min.time())
    stats.reviews_trend = daily_trend(_created_since(db, Review.created_at, trend_start), now.date())
    stats.apps_trend = daily_trend(_created_since(db, App.created_at, trend_start), now.date())
    stats.users_trend = daily_trend(_created_since(db, Profile.created_at, trend_start), now.date())

    return stats
