from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from movie_library.api.deps import get_current_user
from movie_library.core.errors import success_response
from movie_library.db.session import get_db
from movie_library.models import Actor, Country, Genre, Language
from movie_library.schemas.catalog import NamedEntityCreateRequest
from movie_library.services import catalog_service

router = APIRouter(tags=["catalog"])


@router.get("/genres")
def list_genres(db: Session = Depends(get_db)):
    return success_response([row.model_dump() for row in catalog_service.list_named(db, Genre)])


@router.post("/genres", dependencies=[Depends(get_current_user)])
def create_genre(payload: NamedEntityCreateRequest, db: Session = Depends(get_db)):
    genre = catalog_service.create_named(db, Genre, payload.name)
    return success_response(genre.model_dump(), status_code=status.HTTP_201_CREATED)


@router.get("/languages")
def list_languages(db: Session = Depends(get_db)):
    return success_response([row.model_dump() for row in catalog_service.list_named(db, Language)])


@router.get("/countries")
def list_countries(db: Session = Depends(get_db)):
    return success_response([row.model_dump() for row in catalog_service.list_named(db, Country)])


@router.get("/actors")
def list_actors(db: Session = Depends(get_db)):
    return success_response([row.model_dump() for row in catalog_service.list_named(db, Actor)])


@router.post("/actors", dependencies=[Depends(get_current_user)])
def create_actor(payload: NamedEntityCreateRequest, db: Session = Depends(get_db)):
    actor = catalog_service.create_named(db, Actor, payload.name)
    return success_response(actor.model_dump(), status_code=status.HTTP_201_CREATED)
