from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from movie_library.core.errors import bad_request, not_found
from movie_library.models import Actor, Country, Genre, Language, Movie, MovieActor, MovieGenre, Review
from movie_library.schemas.catalog import NamedEntity
from movie_library.schemas.movies import ActorWithCharacter, MovieDetail, MovieListItem, MovieWriteRequest, SortOrder
from movie_library.services.review_service import serialize_review

logger = logging.getLogger(__name__)


def _missing_ids(db: Session, model, ids: list[int]) -> list[int]:
    if not ids:
        return []
    found = set(db.scalars(select(model.id).where(model.id.in_(ids))).all())
    return [item for item in ids if item not in found]


def _validate_references(db: Session, payload: MovieWriteRequest) -> None:
    if db.get(Language, payload.language_id) is None:
        raise bad_request("invalid_reference", f"Language with ID {payload.language_id} does not exist")
    if db.get(Country, payload.country_id) is None:
        raise bad_request("invalid_reference", f"Country with ID {payload.country_id} does not exist")

    missing_genres = _missing_ids(db, Genre, payload.genre_ids)
    if missing_genres:
        raise bad_request("invalid_reference", "Unknown genre IDs", details={"genre_ids": missing_genres})

    missing_actors = _missing_ids(db, Actor, [actor.actor_id for actor in payload.actors])
    if missing_actors:
        raise bad_request("invalid_reference", "Unknown actor IDs", details={"actor_ids": missing_actors})


def _apply_payload(movie: Movie, payload: MovieWriteRequest) -> None:
    movie.title = payload.title
    movie.description = payload.description
    movie.release_date = payload.release_date
    movie.duration_minutes = payload.duration_minutes
    movie.language_id = payload.language_id
    movie.country_id = payload.country_id
    movie.movie_genres = [MovieGenre(genre_id=genre_id) for genre_id in payload.genre_ids]
    movie.movie_actors = [
        MovieActor(actor_id=actor.actor_id, character_name=actor.character_name) for actor in payload.actors
    ]


def _load_movie(db: Session, movie_id: int) -> Movie | None:
    return db.scalar(
        select(Movie)
        .where(Movie.id == movie_id)
        .options(
            selectinload(Movie.language),
            selectinload(Movie.country),
            selectinload(Movie.movie_genres).selectinload(MovieGenre.genre),
            selectinload(Movie.movie_actors).selectinload(MovieActor.actor),
            selectinload(Movie.reviews).selectinload(Review.user),
        )
    )


def _build_detail(movie: Movie) -> MovieDetail:
    reviews = list(movie.reviews)
    total_reviews = len(reviews)
    average_rating = sum(review.rating for review in reviews) / total_reviews if total_reviews else 0.0
    return MovieDetail(
        id=movie.id,
        title=movie.title,
        description=movie.description,
        release_date=movie.release_date,
        duration_minutes=movie.duration_minutes,
        language=NamedEntity.model_validate(movie.language),
        country=NamedEntity.model_validate(movie.country),
        genres=[NamedEntity.model_validate(link.genre) for link in movie.movie_genres],
        actors=[
            ActorWithCharacter(id=link.actor.id, name=link.actor.name, character_name=link.character_name)
            for link in movie.movie_actors
        ],
        total_reviews=total_reviews,
        average_rating=round(average_rating, 2),
        reviews=[serialize_review(review) for review in reviews],
    )


def get_movie(db: Session, movie_id: int) -> MovieDetail:
    movie = _load_movie(db, movie_id)
    if movie is None:
        raise not_found("movie_not_found", "Movie not found")
    return _build_detail(movie)


def list_movies(
    db: Session,
    *,
    language_id: int | None = None,
    genre_id: int | None = None,
    sort_order: SortOrder = "desc",
) -> list[MovieListItem]:
    stmt = select(Movie).options(selectinload(Movie.movie_genres))
    if language_id is not None:
        stmt = stmt.where(Movie.language_id == language_id)
    if genre_id is not None:
        stmt = stmt.where(Movie.movie_genres.any(MovieGenre.genre_id == genre_id))

    if sort_order == "asc":
        stmt = stmt.order_by(Movie.release_date.asc(), Movie.id.asc())
    else:
        stmt = stmt.order_by(Movie.release_date.desc(), Movie.id.desc())

    rows = db.scalars(stmt).all()
    logger.debug(
        "Listed %s movies language_id=%s genre_id=%s sort_order=%s",
        len(rows),
        language_id,
        genre_id,
        sort_order,
    )
    return [
        MovieListItem(
            id=movie.id,
            title=movie.title,
            release_date=movie.release_date,
            duration_minutes=movie.duration_minutes,
            language_id=movie.language_id,
            country_id=movie.country_id,
            genre_ids=[link.genre_id for link in movie.movie_genres],
        )
        for movie in rows
    ]


def create_movie(db: Session, payload: MovieWriteRequest) -> MovieDetail:
    _validate_references(db, payload)
    movie = Movie()
    _apply_payload(movie, payload)
    db.add(movie)
    db.commit()
    logger.info("Movie created movie_id=%s", movie.id)
    return get_movie(db, movie.id)


def update_movie(db: Session, movie_id: int, payload: MovieWriteRequest) -> MovieDetail:
    movie = _load_movie(db, movie_id)
    if movie is None:
        raise not_found("movie_not_found", "Movie not found")
    _validate_references(db, payload)
    _apply_payload(movie, payload)
    db.commit()
    logger.info("Movie updated movie_id=%s", movie_id)
    return get_movie(db, movie_id)


def delete_movie(db: Session, movie_id: int) -> None:
    movie = db.get(Movie, movie_id)
    if movie is None:
        raise not_found("movie_not_found", "Movie not found")
    db.delete(movie)
    db.commit()
    logger.info("Movie deleted movie_id=%s", movie_id)
