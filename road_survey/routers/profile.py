import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from road_survey.database import get_db
from road_survey.schemas.surveyor import DeleteAccountRequest
from road_survey.services import surveyor_store
from road_survey.services.storage_service import PROFILE_FOLDER, BlobStorage, get_blob_storage, profile_filename
from road_survey.utils.exceptions import NotFound, ValidationError
from road_survey.utils.response import create_response, handle_exception

router = APIRouter(tags=["Profile"])
logger = logging.getLogger(__name__)


@router.delete("/delete-account")
def delete_account(body: DeleteAccountRequest, db: Session = Depends(get_db)):
    try:
        if not body.surveyor_id:
            raise ValidationError("Surveyor ID is required")

        removed = surveyor_store.delete(db, body.surveyor_id)
        return create_response(
            message="Account and photos deleted successfully",
            data={"surveyorId": body.surveyor_id, "photosDeleted": removed},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Error deleting account")


@router.post("/upload-profile-photo")
def upload_profile_photo(
    profile_photo: UploadFile | None = File(None, alias="profilePhoto"),
    surveyor_id: str | None = Form(None, alias="surveyorId"),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    try:
        if profile_photo is None or not surveyor_id:
            raise ValidationError("Missing file or ID")

        contents = profile_photo.file.read()
        if not contents:
            raise ValidationError("Empty file upload")

        filename = profile_filename(surveyor_id, profile_photo.filename, profile_photo.content_type)
        blob = storage.upload(contents, PROFILE_FOLDER, filename, content_type=profile_photo.content_type)

        surveyor_store.update_profile_photo(db, surveyor_id, blob.url)
        logger.info("Profile photo for %s stored at %s", surveyor_id, blob.id)
        return create_response(
            message="Profile photo uploaded",
            data={"url": blob.url},
            expose_data=True,
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error uploading profile photo")


@router.get("/get-profile-photo")
def get_profile_photo(
    surveyor_id: str | None = Query(None, alias="surveyorId"),
    db: Session = Depends(get_db),
):
    try:
        if not surveyor_id:
            raise ValidationError("Surveyor ID is required")

        surveyor = surveyor_store.find_by_surveyor_id(db, surveyor_id)
        if not surveyor:
            raise NotFound("User not found")

        return create_response(
            message="Profile photo fetched",
            data={"url": surveyor.profile_photo_url or ""},
            expose_data=True,
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Error retrieving profile photo")
