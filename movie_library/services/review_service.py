from __future__ import annotations

from datetime import UTC, datetime
import logging

from fastapi import status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from movie_library.core.errors import APIError, not_found
from movie_library.models import Movie, Review, User
from movie_library.schemas.reviews import ReviewResponse, ReviewUpsertRequest

logger = logging.getLogger(__name__)


def serialize_review(review: Review) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        movie_id=review.movie_id,
        rating=review.rating,
        comment=review.comment,
        user_id=review.user_id,
        user_email=review.user.email if review.user is not None else "",
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


def upsert_review(
    db: Session,
    *,
    movie_id: int,
    user: User,
    payload: ReviewUpsertRequest,
) -> tuple[ReviewResponse, bool]:
    """Create the caller's review of a movie or overwrite the existing one.

    Returns the review and whether it was newly created.
    """
    if db.get(Movie, movie_id) is None:
        raise not_found("movie_not_found", "Movie not found")

    review = db.scalar(select(Review).where(Review.movie_id == movie_id, Review.user_id == user.id))
    created = review is None
    if review is None:
        review = Review(movie_id=movie_id, user_id=user.id, rating=payload.rating, comment=payload.comment)
        db.add(review)
    else:
        review.rating = payload.rating
        review.comment = payload.comment
        review.updated_at = datetime.now(UTC)

    db.commit()
    db.refresh(review)
    logger.info("Review %s review_id=%s movie_id=%s user_id=%s", "created" if created else "updated", review.id, movie_id, user.id)
    return serialize_review(review), created


def list_reviews(db: Session, movie_id: int) -> list[ReviewResponse]:
    if db.get(Movie, movie_id) is None:
        raise not_found("movie_not_found", "Movie not found")
    rows = db.scalars(
        select(Review)
        .where(Review.movie_id == movie_id)
        .options(selectinload(Review.user))
        .order_by(Review.created_at.desc(), Review.id.desc())
    ).all()
    return [serialize_review(review) for review in rows]


def delete_review(db: Session, *, movie_id: int, review_id: int, user: User) -> None:
    review = db.get(Review, review_id)
    if review is None or review.movie_id != movie_id:
        raise not_found("review_not_found", "Review not found")
    if review.user_id != user.id:
        logger.warning("Review delete denied review_id=%s user_id=%s", review_id, user.id)
        raise APIError(status_code=status.HTTP_403_FORBIDDEN, code="forbidden", message="You cannot delete this review")
    db.delete(review)
    db.commit()
    logger.info("Review deleted review_id=%s", review_id)
