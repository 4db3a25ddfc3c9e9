import os

# Settings are read at import time; provide everything before the app is imported.
os.environ.update({
    "DATABASE_URL": "sqlite://",
    "S3_STORAGE_ENDPOINT": "https://storage.test",
    "S3_STORAGE_REGION": "us-east-1",
    "S3_STORAGE_ACCESS_KEY_ID": "test-key",
    "S3_STORAGE_SECRET_ACCESS_KEY": "test-secret",
    "S3_STORAGE_BUCKET_NAME": "pickups",
    "S3_STORAGE_BUCKET_ENDPOINT": "https://cdn.storage.test/pickups",
    "MAIL_HOST": "localhost",
    "MAIL_PORT": "1025",
    "MAIL_USER": "",
    "MAIL_PASSWORD": "",
    "COMPANY_TOKEN": "TEST-COMPANY-TOKEN",
    "PUBLIC_API_URL": "http://api.test",
})

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.services import payment_service  # noqa: E402
from tests.factories import FakeDpo  # noqa: E402

engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fake_dpo(monkeypatch):
    """No test talks to the real gateway."""
    fake = FakeDpo()
    monkeypatch.setattr(payment_service, "_dpo_client", lambda: fake)
    return fake
