import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from hirevision.config import settings
from hirevision.database import get_db, init_db
from hirevision.main import app
from hirevision.services.auth_service import auth_service
from hirevision.services.llm_service import llm_service


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    path = tmp_path / "hirevision"
    (path / "storage").mkdir(parents=True)
    monkeypatch.setattr(settings, "data_dir", path)
    # AI, SSO and TTS stay off unless a test turns them on
    monkeypatch.setattr(settings, "gemini_api_key", None)
    monkeypatch.setattr(settings, "workos_api_key", None)
    monkeypatch.setattr(settings, "workos_client_id", None)
    monkeypatch.setattr(settings, "elevenlabs_api_key", None)
    monkeypatch.setattr(settings, "storage_backend", "local")
    return path


@pytest.fixture
def test_db(data_dir):
    db_path = settings.db_path
    init_db(db_path)
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def fresh_auth_service():
    """Reset in-memory sessions for each test."""
    auth_service.clear()
    yield auth_service
    auth_service.clear()


@pytest.fixture
def client(test_db, fresh_auth_service):
    return TestClient(app)


class FakeLLM:
    """Stands in for the Gemini client.

    Queued replies are returned in order; an Exception instance in the queue
    is raised instead. An empty queue answers with an empty string.
    """

    def __init__(self):
        self.replies = []
        self.calls = []
        self.safety = {"ratings": [], "block_reason": None}

    def queue(self, *replies):
        self.replies.extend(replies)

    async def generate(self, prompt, **kwargs):
        self.calls.append({"prompt": prompt, **kwargs})
        if not self.replies:
            return ""
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def safety_ratings(self, text):
        if isinstance(self.safety, Exception):
            raise self.safety
        return self.safety


@pytest.fixture
def fake_llm(data_dir, monkeypatch):
    fake = FakeLLM()
    monkeypatch.setattr(settings, "gemini_api_key", "test-key")
    monkeypatch.setattr(llm_service, "generate", fake.generate)
    monkeypatch.setattr(llm_service, "safety_ratings", fake.safety_ratings)
    llm_service.reset()
    return fake
