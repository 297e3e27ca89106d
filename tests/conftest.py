import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure predictable environment variables for tests before importing the app.
BASE_DIR = Path(__file__).resolve().parents[1]
TEST_DB_PATH = BASE_DIR / "test.db"

if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SPACES_REGION", "us-east-1")
os.environ.setdefault("SPACES_NAME", "test-bucket")
os.environ.setdefault("SPACES_CDN_URL", "https://cdn.test")
os.environ.pop("SMTP_HOST", None)

import road_survey.main as main  # noqa: E402  (import after env vars are set)
from road_survey.database import Base  # noqa: E402
from road_survey.services.email_services import get_mailer  # noqa: E402
from road_survey.services.storage_service import BlobRef, get_blob_storage  # noqa: E402
from road_survey.utils.exceptions import UploadFailed, UpstreamFailure  # noqa: E402


class FakeBlobStorage:
    def __init__(self):
        self.blobs = {}
        self.deleted = []
        self.fail_upload = False
        self.fail_delete = False

    def upload(self, payload, folder, filename, content_type=None):
        if self.fail_upload:
            raise UploadFailed("provider down")
        key = f"{folder}/{filename}"
        self.blobs[key] = payload
        return BlobRef(id=key, url=f"https://cdn.test/{key}")

    def delete(self, blob_id):
        if self.fail_delete:
            raise UpstreamFailure("provider down")
        self.deleted.append(blob_id)
        self.blobs.pop(blob_id, None)


class FakeMailer:
    def __init__(self):
        self.sent = []

    def send(self, to_email, subject, text):
        self.sent.append((to_email, subject, text))


@pytest.fixture()
def storage():
    return FakeBlobStorage()


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest.fixture()
def db_session(client):
    session = main.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(storage, mailer):
    """Provide a TestClient on empty tables with external collaborators faked."""
    engine = main.app.state.engine
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    main.app.dependency_overrides[get_blob_storage] = lambda: storage
    main.app.dependency_overrides[get_mailer] = lambda: mailer

    with TestClient(main.app) as test_client:
        yield test_client

    main.app.dependency_overrides.clear()


@pytest.fixture()
def register(client):
    def _register(surveyor_id="S1", email="a@x.com", fullname="A", password="p", confirm=None):
        return client.post(
            "/register",
            json={
                "fullname": fullname,
                "email": email,
                "surveyorId": surveyor_id,
                "password": password,
                "confirmPassword": password if confirm is None else confirm,
            },
        )

    return _register
