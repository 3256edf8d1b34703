from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.orm import Session

from movie_library.api.deps import get_current_user
from movie_library.core.errors import success_response
from movie_library.db.session import get_db
from movie_library.schemas.movies import MovieWriteRequest, SortOrder
from movie_library.services import movie_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/movies", tags=["movies"], dependencies=[Depends(get_current_user)])

MovieId = Annotated[int, Path(gt=0)]


@router.post("")
def create_movie(payload: MovieWriteRequest, db: Session = Depends(get_db)):
    logger.info("Create movie endpoint hit title=%s", payload.title)
    movie = movie_service.create_movie(db, payload)
    return success_response(movie.model_dump(mode="json"), status_code=status.HTTP_201_CREATED)


@router.get("")
def list_movies(
    language_id: int | None = Query(default=None, gt=0),
    genre_id: int | None = Query(default=None, gt=0),
    sort_order: SortOrder = Query(default="desc"),
    db: Session = Depends(get_db),
):
    movies = movie_service.list_movies(db, language_id=language_id, genre_id=genre_id, sort_order=sort_order)
    return success_response([movie.model_dump(mode="json") for movie in movies])


@router.get("/{movie_id}")
def get_movie(movie_id: MovieId, db: Session = Depends(get_db)):
    return success_response(movie_service.get_movie(db, movie_id).model_dump(mode="json"))


@router.put("/{movie_id}")
def update_movie(payload: MovieWriteRequest, movie_id: MovieId, db: Session = Depends(get_db)):
    logger.info("Update movie endpoint hit movie_id=%s", movie_id)
    movie = movie_service.update_movie(db, movie_id, payload)
    return success_response(movie.model_dump(mode="json"))


@router.delete("/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_movie(movie_id: MovieId, db: Session = Depends(get_db)):
    logger.info("Delete movie endpoint hit movie_id=%s", movie_id)
    movie_service.delete_movie(db, movie_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
