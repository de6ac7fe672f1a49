"""Tests for the /api/books endpoints."""

import pytest
from fastapi.testclient import TestClient
from library.config import default_config
from library.database import init_db, make_engine
from library.app import app

BOOK_API = "/api/books"


@pytest.fixture
def test_db(tmp_path, monkeypatch):
    """Create a test database."""
    db_file = tmp_path / "test.db"
    engine = make_engine(db_file)
    monkeypatch.setattr("library.database.engine", engine, raising=True)

    init_db()
    return engine


@pytest.fixture
def client(test_db, monkeypatch):
    monkeypatch.setattr("api.dependencies.get_config", default_config)
    return TestClient(app)


def _book_payload(**overrides):
    payload = {"title": "As Aventuras", "author": "Marcos", "isbn": "001"}
    payload.update(overrides)
    return payload


def _create_book(client, **overrides) -> dict:
    response = client.post(BOOK_API, json=_book_payload(**overrides))
    assert response.status_code == 201
    return response.json()


def test_create_book(client):
    response = client.post(BOOK_API, json=_book_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["id"]
    assert body["title"] == "As Aventuras"
    assert body["author"] == "Marcos"
    assert body["isbn"] == "001"


def test_create_invalid_book_lists_every_field(client):
    response = client.post(BOOK_API, json={})

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert len(errors) == 3
    assert any(e.startswith("title") for e in errors)


def test_create_book_with_blank_title(client):
    response = client.post(BOOK_API, json=_book_payload(title=""))

    assert response.status_code == 400
    assert len(response.json()["errors"]) == 1


def test_create_book_with_duplicated_isbn(client):
    _create_book(client)

    response = client.post(BOOK_API, json=_book_payload(title="Outro"))

    assert response.status_code == 400
    assert response.json() == {"errors": ["Isbn already registered"]}


def test_get_book(client):
    created = _create_book(client)

    response = client.get(f"{BOOK_API}/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_missing_book_returns_404(client):
    response = client.get(f"{BOOK_API}/999")

    assert response.status_code == 404
    assert response.content == b""


def test_delete_book(client):
    created = _create_book(client)

    response = client.delete(f"{BOOK_API}/{created['id']}")

    assert response.status_code == 204
    assert client.get(f"{BOOK_API}/{created['id']}").status_code == 404


def test_delete_missing_book_returns_404(client):
    assert client.delete(f"{BOOK_API}/999").status_code == 404


def test_delete_book_with_loans_is_refused(client):
    created = _create_book(client)
    client.post("/api/loans", json={"isbn": "001", "customer": "Fulano"})

    response = client.delete(f"{BOOK_API}/{created['id']}")

    assert response.status_code == 400
    assert response.json() == {"errors": ["Book has loans and cannot be deleted"]}
    assert client.get(f"{BOOK_API}/{created['id']}").status_code == 200


def test_update_book(client):
    created = _create_book(client)

    response = client.put(
        f"{BOOK_API}/{created['id']}",
        json=_book_payload(title="Novo", author="Outro", isbn="002"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == created["id"]
    assert body["title"] == "Novo"
    assert body["author"] == "Outro"
    assert body["isbn"] == "002"


def test_update_book_to_taken_isbn_is_refused(client):
    _create_book(client)
    second = _create_book(client, title="Dom Casmurro", isbn="002")

    response = client.put(f"{BOOK_API}/{second['id']}", json=_book_payload(isbn="001"))

    assert response.status_code == 400
    assert response.json() == {"errors": ["Isbn already registered"]}
    assert client.get(f"{BOOK_API}/{second['id']}").json()["isbn"] == "002"


def test_update_book_keeping_its_isbn(client):
    created = _create_book(client)

    response = client.put(f"{BOOK_API}/{created['id']}", json=_book_payload(title="Novo"))

    assert response.status_code == 200
    assert response.json()["isbn"] == "001"


def test_update_missing_book_returns_404(client):
    response = client.put(f"{BOOK_API}/999", json=_book_payload())
    assert response.status_code == 404


def test_find_books(client):
    _create_book(client)
    _create_book(client, title="Dom Casmurro", author="Machado", isbn="002")

    response = client.get(f"{BOOK_API}?title=aventuras&author=Marcos&page=0&size=100")

    assert response.status_code == 200
    body = response.json()
    assert len(body["content"]) == 1
    assert body["content"][0]["isbn"] == "001"
    assert body["total_elements"] == 1
    assert body["pageable"] == {"page_number": 0, "page_size": 100}


def test_find_books_rejects_bad_page_size(client):
    response = client.get(f"{BOOK_API}?size=0")

    assert response.status_code == 400
    assert len(response.json()["errors"]) == 1


def test_book_loans(client):
    created = _create_book(client)
    client.post("/api/loans", json={"isbn": "001", "customer": "Fulano"})

    response = client.get(f"{BOOK_API}/{created['id']}/loans")

    assert response.status_code == 200
    body = response.json()
    assert body["total_elements"] == 1
    assert body["content"][0]["customer"] == "Fulano"
    assert body["content"][0]["book"]["id"] == created["id"]


def test_book_loans_for_missing_book_returns_404(client):
    assert client.get(f"{BOOK_API}/999/loans").status_code == 404
