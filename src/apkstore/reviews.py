from __future__ import annotations

import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from .errors import ValidationFailed
from .models import App, Review


logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def parse_rating(value: str | int | None) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def validate_review(rating: int, user_name: str, comment: str) -> str | None:
    if not MIN_RATING <= rating <= MAX_RATING:
        return "Please select a rating"
    if not user_name.strip():
        return "Please enter your name"
    if not comment.strip():
        return "Please enter a comment"
    return None


def list_reviews(db: Session, app_id: str) -> list[Review]:
    return (
        db.query(Review)
        .filter(Review.app_id == app_id)
        .order_by(Review.created_at.desc())
        .all()
    )


def submit_review(
    db: Session,
    app_id: str,
    *,
    rating: int,
    user_name: str,
    comment: str,
    user_id: str | None = None,
) -> Review:
    error = validate_review(rating, user_name, comment)
    if error:
        raise ValidationFailed({"review": error}, message=error)

    review = Review(
        app_id=app_id,
        user_name=user_name.strip(),
        rating=rating,
        comment=comment.strip(),
        user_id=user_id,
    )
    db.add(review)
    db.commit()
    logger.info("Review %s added to app %s (rating %d)", review.id, app_id, rating)
    return review


def filter_reviews(db: Session, query: str = "", rating: int | None = None) -> list[Review]:
    q = db.query(Review).join(Review.app).options(joinedload(Review.app))
    term = query.strip()
    if term:
        q = q.filter(
            or_(
                Review.user_name.icontains(term, autoescape=True),
                Review.comment.icontains(term, autoescape=True),
                App.title.icontains(term, autoescape=True),
            )
        )
    if rating is not None:
        q = q.filter(Review.rating == rating)
    return q.order_by(Review.created_at.desc()).all()


def delete_review(db: Session, review_id: str) -> bool:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        return False
    db.delete(review)
    db.commit()
    logger.info("Deleted review %s", review_id)
    return True
