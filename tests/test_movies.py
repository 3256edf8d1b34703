from __future__ import annotations


def _auth_headers(client, email: str = "alice@example.com") -> dict[str, str]:
    client.post("/api/auth/register", json={"email": email, "password": "password123"})
    response = client.post("/api/auth/login", json={"email": email, "password": "password123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['data']['access_token']}"}


def _ids_by_name(client, resource: str) -> dict[str, int]:
    return {row["name"]: row["id"] for row in client.get(f"/api/{resource}").json()["data"]}


def _movie_payload(client, **overrides) -> dict[str, object]:
    genres = _ids_by_name(client, "genres")
    actors = _ids_by_name(client, "actors")
    payload = {
        "title": "Inception",
        "description": "A thief who steals corporate secrets through dreams.",
        "release_date": "2010-07-16",
        "duration_minutes": 148,
        "language_id": _ids_by_name(client, "languages")["English"],
        "country_id": _ids_by_name(client, "countries")["USA"],
        "genre_ids": [genres["Action"], genres["Sci-Fi"]],
        "actors": [
            {"actor_id": actors["Leonardo DiCaprio"], "character_name": "Cobb"},
            {"actor_id": actors["Tom Hardy"], "character_name": "Eames"},
        ],
    }
    payload.update(overrides)
    return payload


def test_movies_require_authentication(client):
    assert client.get("/api/movies").status_code == 401
    assert client.post("/api/movies", json=_movie_payload(client)).status_code == 401


def test_create_and_get_movie(client):
    headers = _auth_headers(client)

    created = client.post("/api/movies", json=_movie_payload(client), headers=headers)
    assert created.status_code == 201
    movie = created.json()["data"]
    assert movie["title"] == "Inception"
    assert movie["language"]["name"] == "English"
    assert movie["country"]["name"] == "USA"
    assert {genre["name"] for genre in movie["genres"]} == {"Action", "Sci-Fi"}
    assert {actor["character_name"] for actor in movie["actors"]} == {"Cobb", "Eames"}
    assert movie["total_reviews"] == 0
    assert movie["average_rating"] == 0

    fetched = client.get(f"/api/movies/{movie['id']}", headers=headers)
    assert fetched.status_code == 200
    assert fetched.json()["data"] == movie


def test_create_movie_validation(client):
    headers = _auth_headers(client)

    blank_title = client.post("/api/movies", json=_movie_payload(client, title="   "), headers=headers)
    assert blank_title.status_code == 422
    assert blank_title.json()["error"]["code"] == "validation_error"

    no_genres = client.post("/api/movies", json=_movie_payload(client, genre_ids=[]), headers=headers)
    assert no_genres.status_code == 422

    zero_duration = client.post("/api/movies", json=_movie_payload(client, duration_minutes=0), headers=headers)
    assert zero_duration.status_code == 422

    unknown_genre = client.post("/api/movies", json=_movie_payload(client, genre_ids=[999]), headers=headers)
    assert unknown_genre.status_code == 400
    assert unknown_genre.json()["error"]["code"] == "invalid_reference"
    assert unknown_genre.json()["error"]["details"] == {"genre_ids": [999]}

    unknown_language = client.post("/api/movies", json=_movie_payload(client, language_id=999), headers=headers)
    assert unknown_language.status_code == 400


def test_list_movies_filters_and_sorts(client):
    headers = _auth_headers(client)
    genres = _ids_by_name(client, "genres")
    hindi = _ids_by_name(client, "languages")["Hindi"]

    client.post("/api/movies", json=_movie_payload(client), headers=headers)
    client.post(
        "/api/movies",
        json=_movie_payload(client, title="Dunkirk", release_date="2017-07-21", genre_ids=[genres["Drama"]]),
        headers=headers,
    )
    client.post(
        "/api/movies",
        json=_movie_payload(client, title="Lagaan", release_date="2001-06-15", language_id=hindi),
        headers=headers,
    )

    newest_first = client.get("/api/movies", headers=headers).json()["data"]
    assert [movie["title"] for movie in newest_first] == ["Dunkirk", "Inception", "Lagaan"]

    oldest_first = client.get("/api/movies", params={"sort_order": "asc"}, headers=headers).json()["data"]
    assert [movie["title"] for movie in oldest_first] == ["Lagaan", "Inception", "Dunkirk"]

    drama = client.get("/api/movies", params={"genre_id": genres["Drama"]}, headers=headers).json()["data"]
    assert [movie["title"] for movie in drama] == ["Dunkirk"]
    assert drama[0]["genre_ids"] == [genres["Drama"]]

    in_hindi = client.get("/api/movies", params={"language_id": hindi}, headers=headers).json()["data"]
    assert [movie["title"] for movie in in_hindi] == ["Lagaan"]

    bad_sort = client.get("/api/movies", params={"sort_order": "sideways"}, headers=headers)
    assert bad_sort.status_code == 422


def test_update_movie_replaces_genres_and_actors(client):
    headers = _auth_headers(client)
    genres = _ids_by_name(client, "genres")
    actors = _ids_by_name(client, "actors")
    movie_id = client.post("/api/movies", json=_movie_payload(client), headers=headers).json()["data"]["id"]

    updated = client.put(
        f"/api/movies/{movie_id}",
        json=_movie_payload(
            client,
            title="Inception (Remastered)",
            genre_ids=[genres["Action"], genres["Drama"]],
            actors=[{"actor_id": actors["Christian Bale"], "character_name": "Cobb"}],
        ),
        headers=headers,
    )
    assert updated.status_code == 200
    movie = updated.json()["data"]
    assert movie["title"] == "Inception (Remastered)"
    assert {genre["name"] for genre in movie["genres"]} == {"Action", "Drama"}
    assert [actor["name"] for actor in movie["actors"]] == ["Christian Bale"]

    missing = client.put("/api/movies/999", json=_movie_payload(client), headers=headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "movie_not_found"


def test_delete_movie(client):
    headers = _auth_headers(client)
    movie_id = client.post("/api/movies", json=_movie_payload(client), headers=headers).json()["data"]["id"]

    deleted = client.delete(f"/api/movies/{movie_id}", headers=headers)
    assert deleted.status_code == 204

    assert client.get(f"/api/movies/{movie_id}", headers=headers).status_code == 404
    assert client.delete(f"/api/movies/{movie_id}", headers=headers).status_code == 404
