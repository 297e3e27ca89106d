import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from road_survey.models.surveyor import Surveyor
from road_survey.services import photo_store
from road_survey.utils.exceptions import DuplicateKey

logger = logging.getLogger(__name__)

DUPLICATE_SURVEYOR_ID_MESSAGE = "Surveyor ID already exists. Please use a different ID."
DUPLICATE_EMAIL_MESSAGE = "Email already registered."


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_by_surveyor_id(db: Session, surveyor_id: str) -> Surveyor | None:
    return db.query(Surveyor).filter(Surveyor.surveyor_id == surveyor_id).first()


def find_by_email(db: Session, email: str) -> Surveyor | None:
    return db.query(Surveyor).filter(Surveyor.email == normalize_email(email)).first()


def insert(db: Session, fullname: str, email: str, surveyor_id: str, password_hash: str) -> Surveyor:
    """Create an account, relying on the unique indexes to reject duplicates."""
    surveyor = Surveyor(
        fullname=fullname.strip(),
        email=normalize_email(email),
        surveyor_id=surveyor_id.strip(),
        password_hash=password_hash,
    )
    db.add(surveyor)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if find_by_surveyor_id(db, surveyor.surveyor_id):
            raise DuplicateKey(DUPLICATE_SURVEYOR_ID_MESSAGE) from exc
        if find_by_email(db, surveyor.email):
            raise DuplicateKey(DUPLICATE_EMAIL_MESSAGE) from exc
        raise
    db.refresh(surveyor)
    logger.info("Registered surveyor %s", surveyor.surveyor_id)
    return surveyor


def update_profile_photo(db: Session, surveyor_id: str, url: str) -> None:
    # No-op when the account does not exist
    db.query(Surveyor).filter(Surveyor.surveyor_id == surveyor_id).update(
        {Surveyor.profile_photo_url: url}, synchronize_session=False
    )
    db.commit()


def delete(db: Session, surveyor_id: str) -> int:
    """Delete an account and every photo record it owns. Returns the photo count removed."""
    db.query(Surveyor).filter(Surveyor.surveyor_id == surveyor_id).delete(synchronize_session=False)
    removed = photo_store.delete_all_by_surveyor_id(db, surveyor_id, commit=False)
    db.commit()
    logger.info("Deleted surveyor %s and %s photos", surveyor_id, removed)
    return removed
