import mongomock
import pytest
from fastapi.testclient import TestClient

from database import USERS, DocumentStore, ensure_indexes
from dependencies import get_media_client, get_store
from main import create_app
from media import InMemoryMediaClient
from schemas import UserDocument
from security import create_access_token, hash_password
from settings import Settings, get_settings

ADMIN_EMAIL = "owner@gmail.com"
ADMIN_PASSWORD = "s3cret-pass"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def settings():
    return Settings(_env_file=None, jwt_secret="test-secret", mongodb_uri="mongodb://test")


@pytest.fixture
def store():
    store = DocumentStore(mongomock.MongoClient()["portfolio_test"])
    ensure_indexes(store)
    return store


@pytest.fixture
def media():
    return InMemoryMediaClient()


@pytest.fixture
def app(settings, store, media):
    app = create_app(settings)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_media_client] = lambda: media
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin(store):
    user = UserDocument(
        name="Site Owner",
        email=ADMIN_EMAIL,
        password_hash=hash_password(ADMIN_PASSWORD),
        bio="Mobile developer",
    )
    return store.create(USERS, user.model_dump())


@pytest.fixture
def auth_headers(admin, settings):
    token = create_access_token({"sub": str(admin["_id"])}, settings)
    return {"Authorization": f"Bearer {token}"}


def png(name="image.png"):
    return (name, PNG_BYTES, "image/png")
