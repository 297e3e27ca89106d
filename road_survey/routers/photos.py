import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from road_survey.config import settings
from road_survey.database import get_db
from road_survey.schemas.photo import PhotoResponse, PhotoUpload
from road_survey.services import photo_store
from road_survey.services.storage_service import (
    CAPTURE_FOLDER,
    BlobStorage,
    capture_filename,
    decode_image_data,
    get_blob_storage,
)
from road_survey.utils.exceptions import NotFound, UpstreamFailure, ValidationError
from road_survey.utils.response import create_response, handle_exception

router = APIRouter(tags=["Photos"])
logger = logging.getLogger(__name__)


def parse_query_datetime(value: str | None) -> datetime | None:
    """Parse an ISO date or datetime query value into naive UTC."""
    if not value:
        return None
    try:
        normalized = value.replace("Z", "+00:00") if value.endswith("Z") else value
        parsed = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValidationError("Invalid date format") from exc
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


@router.post("/upload-photo")
def upload_photo(
    body: PhotoUpload,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    try:
        if not body.image_data:
            raise ValidationError("Missing image data")

        payload, content_type = decode_image_data(body.image_data, max_bytes=settings.MAX_IMAGE_BYTES)
        blob = storage.upload(payload, CAPTURE_FOLDER, capture_filename(content_type), content_type=content_type)

        # A failed insert leaves the uploaded blob orphaned
        photo = photo_store.insert(
            db,
            surveyor_id=body.surveyor_id,
            fullname=body.fullname,
            email=body.email,
            image_id=blob.id,
            photo_url=blob.url,
            location=body.location.model_dump() if body.location else None,
            road_name=body.road_name,
            damage_class=body.damage_class,
            comment=body.comment,
            local_time=body.local_time,
        )
        logger.info(
            "Surveyor %s uploaded photo id=%s class=%s",
            photo.surveyor_id,
            photo.id,
            photo.damage_class,
        )
        return create_response(
            message="Photo uploaded successfully",
            data={"url": blob.url, "id": photo.id},
            status_code=status.HTTP_200_OK,
            expose_data=True,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error during photo upload")


@router.delete("/delete-photo/{photo_id}")
def delete_photo(
    photo_id: str,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    try:
        photo = photo_store.find_by_id(db, photo_id)
        if not photo:
            raise NotFound("Photo not found")

        # The row is gone after commit; read what we need first
        record_id, image_id = photo.id, photo.image_id

        # Blob goes first: an orphaned blob beats a record pointing at nothing
        if image_id:
            try:
                storage.delete(image_id)
            except UpstreamFailure as exc:
                logger.warning("Blob delete failed for photo id=%s: %s", record_id, exc.message)

        photo_store.delete_by_id(db, record_id)
        logger.info("Deleted photo id=%s", record_id)
        return create_response(
            message="Photo deleted successfully",
            data={"id": record_id},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to delete photo")


@router.get("/get-all-photos")
def get_all_photos(
    damage_class: str | None = Query(None, alias="damageClass"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    try:
        photos = photo_store.list_filtered(
            db,
            damage_class=damage_class,
            start_date=parse_query_datetime(start_date),
            end_date=parse_query_datetime(end_date),
        )
        payload = [PhotoResponse.model_validate(photo).model_dump(by_alias=True) for photo in photos]
        return create_response(
            message="Photos fetched",
            data={"photos": payload, "count": len(payload)},
            status_code=status.HTTP_200_OK,
            expose_data=True,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch photos")
