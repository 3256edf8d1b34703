from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from movie_library.api.deps import get_current_user
from movie_library.core.errors import success_response
from movie_library.db.session import get_db
from movie_library.models import User
from movie_library.schemas.reviews import ReviewUpsertRequest
from movie_library.services import review_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/movies/{movie_id}/reviews", tags=["reviews"])


@router.post("")
def upsert_review(
    movie_id: int,
    payload: ReviewUpsertRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    logger.info("Upsert review endpoint hit movie_id=%s user_id=%s", movie_id, current_user.id)
    review, created = review_service.upsert_review(db, movie_id=movie_id, user=current_user, payload=payload)
    status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return success_response(review.model_dump(mode="json"), status_code=status_code)


@router.get("")
def list_reviews(movie_id: int, db: Session = Depends(get_db)):
    reviews = review_service.list_reviews(db, movie_id)
    return success_response([review.model_dump(mode="json") for review in reviews])


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    movie_id: int,
    review_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    logger.info("Delete review endpoint hit review_id=%s user_id=%s", review_id, current_user.id)
    review_service.delete_review(db, movie_id=movie_id, review_id=review_id, user=current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
