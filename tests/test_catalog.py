from __future__ import annotations


def _auth_headers(client, email: str = "curator@example.com") -> dict[str, str]:
    client.post("/api/auth/register", json={"email": email, "password": "password123"})
    response = client.post("/api/auth/login", json={"email": email, "password": "password123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['data']['access_token']}"}


def test_reference_data_is_seeded(client):
    genres = client.get("/api/genres").json()["data"]
    languages = client.get("/api/languages").json()["data"]
    countries = client.get("/api/countries").json()["data"]
    actors = client.get("/api/actors").json()["data"]

    assert [genre["name"] for genre in genres] == ["Action", "Comedy", "Drama", "Sci-Fi"]
    assert {language["name"] for language in languages} == {"English", "Hindi", "Spanish"}
    assert {country["name"] for country in countries} == {"USA", "India", "UK"}
    assert "Tom Hardy" in {actor["name"] for actor in actors}


def test_create_genre_requires_auth_and_unique_name(client):
    anonymous = client.post("/api/genres", json={"name": "Horror"})
    assert anonymous.status_code == 401

    headers = _auth_headers(client)
    created = client.post("/api/genres", json={"name": "  Horror "}, headers=headers)
    assert created.status_code == 201
    assert created.json()["data"]["name"] == "Horror"

    duplicate = client.post("/api/genres", json={"name": "horror"}, headers=headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "duplicate_name"


def test_create_actor(client):
    headers = _auth_headers(client)

    response = client.post("/api/actors", json={"name": "Cillian Murphy"}, headers=headers)
    assert response.status_code == 201

    names = {actor["name"] for actor in client.get("/api/actors").json()["data"]}
    assert "Cillian Murphy" in names
