from datetime import datetime

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
import main
from schemas import Article, UserData


@pytest.fixture
def db(monkeypatch):
    mock = mongomock.MongoClient().db
    monkeypatch.setattr(database, "db", mock)
    return mock


@pytest.fixture
def client(db):
    return TestClient(main.app)


@pytest.fixture
def make_article():
    counter = {"n": 0}

    def build(**overrides) -> Article:
        counter["n"] += 1
        data = {
            "id": f"a{counter['n']}",
            "author_name": "lily",
            "title": f"Post {counter['n']}",
            "excerpt": "A short excerpt",
            "tags": [],
            "published": True,
            "created_at": datetime(2024, 3, counter["n"]),
        }
        data.update(overrides)
        return Article(**data)

    return build


@pytest.fixture
def make_user():
    def build(**overrides) -> UserData:
        data = {"username": "lily", "email": "lily@minispace.dev"}
        data.update(overrides)
        return UserData(**data)

    return build
