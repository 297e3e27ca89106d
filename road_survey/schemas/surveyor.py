from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Request fields are optional so missing values surface as 400 validation messages
class RegisterRequest(CamelModel):
    fullname: str | None = None
    email: EmailStr | None = None
    surveyor_id: str | None = None
    password: str | None = None
    confirm_password: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value


class LoginRequest(CamelModel):
    surveyor_id: str | None = None
    password: str | None = None


class DeleteAccountRequest(CamelModel):
    surveyor_id: str | None = None


class SurveyorProfile(CamelModel):
    fullname: str
    email: str
    surveyor_id: str
    profile_photo_url: str | None = None


class LoginResponse(SurveyorProfile):
    token: str
