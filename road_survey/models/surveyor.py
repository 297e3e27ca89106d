from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from road_survey.database import Base


class Surveyor(Base):
    __tablename__ = "surveyors"

    id = Column(Integer, primary_key=True, index=True)

    fullname = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)        # lowercased
    surveyor_id = Column(String, unique=True, index=True, nullable=False)  # login identifier
    password_hash = Column(String, nullable=False)

    profile_photo_url = Column(String, nullable=True)
    date_created = Column(DateTime, default=datetime.utcnow, nullable=False)
