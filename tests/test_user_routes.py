import pytest


@pytest.fixture
def author(client, sign_in):
    sign_in(client, "author@example.com")
    return client


def test_profile_requires_sign_in(client):
    assert client.get("/user").status_code == 401
    assert client.get("/dashboard").status_code == 401


def test_update_profile(author):
    res = author.put("/user", json={"name": "Sari", "bio": "Writes sea stories.", "email": " Sari@Example.com "})

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["name"] == "Sari"
    assert body["bio"] == "Writes sea stories."
    assert body["email"] == "sari@example.com"


def test_profile_validation(author, make_client, sign_in):
    sign_in(make_client(), "taken@example.com")

    res = author.put("/user", json={"email": "taken@example.com", "name": ""})

    assert res.status_code == 422
    errors = res.json()["errors"]
    assert errors["email"] == ["has already been taken"]
    assert errors["name"] == ["can't be blank"]
    assert author.get("/user").json()["email"] == "author@example.com"


def test_dashboard_counts(author):
    author.post("/stories", json={"title": "One", "category": "Drama"})
    author.post("/stories", json={"title": "Two", "category": "Drama", "status": "published"})
    author.post("/stories", json={"title": "Three", "category": "Drama", "status": "published"})

    res = author.get("/dashboard")

    assert res.status_code == 200
    body = res.json()
    assert body["user"]["email"] == "author@example.com"
    assert (body["total_stories"], body["published_stories"], body["draft_stories"]) == (3, 2, 1)
    assert len(body["stories"]) == 3
