from datetime import datetime

from road_survey.schemas.surveyor import CamelModel


class Location(CamelModel):
    street: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class PhotoUpload(CamelModel):
    surveyor_id: str | None = None
    fullname: str | None = None
    email: str | None = None
    image_data: str | None = None
    location: Location | None = None
    road_name: str | None = None
    damage_class: str | None = None
    comment: str | None = None
    local_time: str | None = None


class PhotoResponse(CamelModel):
    id: int
    surveyor_id: str | None
    fullname: str | None
    email: str | None
    image_id: str
    photo_url: str
    location: Location | None
    road_name: str | None
    damage_class: str | None
    comment: str | None
    local_time: str | None
    date_created: datetime
