from datetime import datetime

from sqlalchemy.orm import Session

from road_survey.models.photo import Photo

MIN_ID = -(2 ** 63)
MAX_ID = 2 ** 63 - 1


def insert(db: Session, **fields) -> Photo:
    photo = Photo(**fields)
    db.add(photo)
    db.commit()
    db.refresh(photo)
    return photo


def find_by_id(db: Session, photo_id) -> Photo | None:
    try:
        key = int(photo_id)
    except (TypeError, ValueError):
        return None
    # Integer primary keys are signed 64-bit
    if not MIN_ID <= key <= MAX_ID:
        return None
    return db.query(Photo).filter(Photo.id == key).first()


def delete_by_id(db: Session, photo_id: int) -> bool:
    removed = db.query(Photo).filter(Photo.id == photo_id).delete(synchronize_session=False)
    db.commit()
    return removed > 0


def delete_all_by_surveyor_id(db: Session, surveyor_id: str, commit: bool = True) -> int:
    removed = db.query(Photo).filter(Photo.surveyor_id == surveyor_id).delete(synchronize_session=False)
    if commit:
        db.commit()
    return removed


def list_filtered(
    db: Session,
    damage_class: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> list[Photo]:
    """Photos matching every supplied filter, newest first. Date bounds are inclusive."""
    query = db.query(Photo)
    if damage_class:
        query = query.filter(Photo.damage_class == damage_class)
    if start_date is not None:
        query = query.filter(Photo.date_created >= start_date)
    if end_date is not None:
        query = query.filter(Photo.date_created <= end_date)
    return query.order_by(Photo.date_created.desc(), Photo.id.desc()).all()
