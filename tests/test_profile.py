from sqlalchemy.exc import SQLAlchemyError

from road_survey.models.photo import Photo
from road_survey.models.surveyor import Surveyor
from road_survey.services import photo_store, surveyor_store

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"


def _seed_photos(session, surveyor_id, count):
    for index in range(count):
        photo_store.insert(
            session,
            surveyor_id=surveyor_id,
            image_id=f"road_damage/{surveyor_id}_{index}.jpg",
            photo_url=f"https://cdn.test/road_damage/{surveyor_id}_{index}.jpg",
            damage_class="crack",
        )


def test_delete_account_cascades_to_photos(register, client, db_session):
    register()
    register(surveyor_id="S2", email="b@x.com")
    _seed_photos(db_session, "S1", 3)
    _seed_photos(db_session, "S2", 1)

    response = client.request("DELETE", "/delete-account", json={"surveyorId": "S1"})

    assert response.status_code == 200
    assert response.json()["message"] == "Account and photos deleted successfully"
    assert response.json()["data"]["photosDeleted"] == 3
    db_session.expire_all()
    assert db_session.query(Surveyor).filter(Surveyor.surveyor_id == "S1").count() == 0
    assert db_session.query(Photo).filter(Photo.surveyor_id == "S1").count() == 0
    assert db_session.query(Photo).filter(Photo.surveyor_id == "S2").count() == 1


def test_delete_account_requires_id(client):
    response = client.request("DELETE", "/delete-account", json={})

    assert response.status_code == 400
    assert response.json()["message"] == "Surveyor ID is required"


def test_upload_profile_photo_updates_account(register, client, storage):
    register()

    response = client.post(
        "/upload-profile-photo",
        data={"surveyorId": "S1"},
        files={"profilePhoto": ("me.png", JPEG_BYTES, "image/png")},
    )

    assert response.status_code == 200
    url = response.json()["data"]["url"]
    assert url.startswith("https://cdn.test/profile_photos/S1_")
    assert url.endswith(".png")
    assert list(storage.blobs.values()) == [JPEG_BYTES]

    fetched = client.get("/get-profile-photo", params={"surveyorId": "S1"})
    assert fetched.status_code == 200
    assert fetched.json()["data"]["url"] == url

    login = client.post("/login", json={"surveyorId": "S1", "password": "p"})
    assert login.json()["data"]["profilePhotoUrl"] == url


def test_upload_profile_photo_requires_file_and_id(client):
    missing_file = client.post("/upload-profile-photo", data={"surveyorId": "S1"})
    missing_id = client.post(
        "/upload-profile-photo",
        files={"profilePhoto": ("me.jpg", JPEG_BYTES, "image/jpeg")},
    )

    assert missing_file.status_code == 400
    assert missing_id.status_code == 400
    assert missing_file.json()["message"] == missing_id.json()["message"] == "Missing file or ID"


def test_upload_profile_photo_reports_storage_failure(register, client, storage):
    register()
    storage.fail_upload = True

    response = client.post(
        "/upload-profile-photo",
        data={"surveyorId": "S1"},
        files={"profilePhoto": ("me.jpg", JPEG_BYTES, "image/jpeg")},
    )

    assert response.status_code == 500
    assert response.json()["message"] == "Server error uploading profile photo"


def test_get_profile_photo_defaults_to_empty_url(register, client):
    register()

    response = client.get("/get-profile-photo", params={"surveyorId": "S1"})

    assert response.status_code == 200
    assert response.json()["data"]["url"] == ""


def test_get_profile_photo_unknown_surveyor(client):
    response = client.get("/get-profile-photo", params={"surveyorId": "nobody"})

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


def test_upload_profile_photo_rejects_empty_file(register, client, storage):
    register()

    response = client.post(
        "/upload-profile-photo",
        data={"surveyorId": "S1"},
        files={"profilePhoto": ("me.jpg", b"", "image/jpeg")},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Empty file upload"
    assert storage.blobs == {}


def test_upload_profile_photo_builds_safe_object_key(register, client, storage):
    register(surveyor_id="team/S1")

    response = client.post(
        "/upload-profile-photo",
        data={"surveyorId": "team/S1"},
        files={"profilePhoto": ("payload.exe", JPEG_BYTES, "image/png")},
    )

    assert response.status_code == 200
    assert response.json()["url"] == response.json()["data"]["url"]
    (key,) = storage.blobs
    folder, name = key.split("/")
    assert folder == "profile_photos"
    assert name.startswith("team_S1_")
    assert name.endswith(".png")


def test_delete_account_store_error_is_500(client, monkeypatch):
    def _db_down(*args, **kwargs):
        raise SQLAlchemyError("database unavailable")

    monkeypatch.setattr(surveyor_store, "delete", _db_down)

    response = client.request("DELETE", "/delete-account", json={"surveyorId": "S1"})

    assert response.status_code == 500
    assert response.json()["message"] == "Error deleting account"


def test_get_profile_photo_exposes_url_at_top_level(register, client):
    register()

    payload = client.get("/get-profile-photo", params={"surveyorId": "S1"}).json()

    assert payload["url"] == ""
