from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from road_survey.database import Base


class Photo(Base):
    __tablename__ = "photos"

    id = Column(Integer, primary_key=True, index=True)

    # Copy of the uploader's identity at upload time, not a foreign key
    surveyor_id = Column(String, nullable=True, index=True)
    fullname = Column(String, nullable=True)
    email = Column(String, nullable=True)

    image_id = Column(String, unique=True, nullable=False)
    photo_url = Column(String, nullable=False)

    location = Column(JSON, nullable=True)
    road_name = Column(String, nullable=True)
    damage_class = Column(String, nullable=True, index=True)
    comment = Column(Text, nullable=True)
    local_time = Column(String, nullable=True)

    date_created = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
