from movie_library.models.catalog import Actor, Country, Genre, Language, Movie, MovieActor, MovieGenre
from movie_library.models.refresh_token import RefreshToken
from movie_library.models.review import Review
from movie_library.models.user import User

__all__ = [
    "Actor",
    "Country",
    "Genre",
    "Language",
    "Movie",
    "MovieActor",
    "MovieGenre",
    "RefreshToken",
    "Review",
    "User",
]
