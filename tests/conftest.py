import os
import tempfile

# Point the app at an in-memory database and a throwaway upload dir
# before anything imports config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="mekarpad-uploads-")
os.environ["MAIL_BACKEND"] = "console"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["DRAFT_VISIBILITY"] = "public"

import pytest
from fastapi.testclient import TestClient

import models
from db import Base, SessionLocal, engine
from main import app
from repositories import story_repository, user_repository
from utils.mailer import Mailer, get_mailer


class RecordingMailer(Mailer):
    """Keeps every (address, code) instead of sending it."""

    def __init__(self):
        self.sent = []

    def send_otp(self, address: str, code: str) -> None:
        self.sent.append((address, code))

    def last_code(self, address: str) -> str:
        codes = [code for to, code in self.sent if to == address]
        assert codes, f"no code sent to {address}"
        return codes[-1]


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def outbox():
    mailer = RecordingMailer()
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield mailer
    app.dependency_overrides.pop(get_mailer, None)


@pytest.fixture
def make_client(outbox):
    """Each client keeps its own cookie jar, i.e. its own session."""
    def _make() -> TestClient:
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def sign_in(outbox):
    def _sign_in(client: TestClient, email: str) -> dict:
        res = client.post("/session", json={"email": email})
        assert res.status_code == 200, res.text
        res = client.post("/session/validate_otp", json={"otp_code": outbox.last_code(email)})
        assert res.status_code == 200, res.text
        res = client.get("/user")
        assert res.status_code == 200, res.text
        return res.json()
    return _sign_in


@pytest.fixture
def make_user(db):
    def _make(email: str = "author@example.com", name: str = None) -> models.User:
        return user_repository.create_user(db, email=email, name=name)
    return _make


@pytest.fixture
def make_story(db):
    def _make(user: models.User, title: str = "The Long Road", category: str = "Fantasy",
              status: str = "draft", language: str = "en") -> models.Story:
        return story_repository.create_story(
            db, user_id=user.id, title=title, category=category, status=status, language=language
        )
    return _make
