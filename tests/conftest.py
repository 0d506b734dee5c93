import mongomock
import pytest

from api_movies.app import create_app


@pytest.fixture
def mongo_client():
    """In-memory MongoDB client, fresh for each test."""
    return mongomock.MongoClient()


@pytest.fixture
def app(mongo_client):
    """Application bound to the in-memory database."""
    app = create_app({"TESTING": True, "MONGO_DB_NAME": "api_movies_test"}, client=mongo_client)
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def db(app):
    """Database handle the application writes to."""
    return app.extensions["mongo_db"]


@pytest.fixture
def movie_payload():
    """Build a valid movie body, overridable per test."""

    def _build(**overrides):
        payload = {
            "name": "Inception",
            "description": "A thief who steals secrets through the use of dream-sharing technology",
            "releaseDate": "2010-07-16",
            "rating": 5,
        }
        payload.update(overrides)
        return payload

    return _build
