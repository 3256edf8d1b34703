from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from movie_library.schemas.catalog import NamedEntity
from movie_library.schemas.reviews import ReviewResponse

SortOrder = Literal["asc", "desc"]


class MovieActorRequest(BaseModel):
    actor_id: int = Field(gt=0)
    character_name: str = Field(min_length=1, max_length=128)

    @field_validator("character_name")
    @classmethod
    def require_character_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("character name is required for all actors")
        return value


class MovieWriteRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    release_date: date
    duration_minutes: int = Field(gt=0)
    language_id: int = Field(gt=0)
    country_id: int = Field(gt=0)
    genre_ids: list[int] = Field(min_length=1)
    actors: list[MovieActorRequest] = Field(min_length=1)

    @field_validator("title", "description")
    @classmethod
    def require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("genre_ids")
    @classmethod
    def dedupe_genres(cls, value: list[int]) -> list[int]:
        return list(dict.fromkeys(value))

    @field_validator("actors")
    @classmethod
    def reject_duplicate_actors(cls, value: list[MovieActorRequest]) -> list[MovieActorRequest]:
        actor_ids = [actor.actor_id for actor in value]
        if len(actor_ids) != len(set(actor_ids)):
            raise ValueError("each actor may appear only once")
        return value


class ActorWithCharacter(BaseModel):
    id: int
    name: str
    character_name: str


class MovieListItem(BaseModel):
    id: int
    title: str
    release_date: date
    duration_minutes: int
    language_id: int
    country_id: int
    genre_ids: list[int]


class MovieDetail(BaseModel):
    id: int
    title: str
    description: str
    release_date: date
    duration_minutes: int
    language: NamedEntity
    country: NamedEntity
    genres: list[NamedEntity]
    actors: list[ActorWithCharacter]
    total_reviews: int
    average_rating: float
    reviews: list[ReviewResponse]
