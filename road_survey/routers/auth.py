import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from road_survey.database import get_db
from road_survey.schemas.surveyor import LoginRequest, LoginResponse, RegisterRequest
from road_survey.services import surveyor_store
from road_survey.services.auth_service import create_access_token, hash_password, verify_password
from road_survey.services.email_services import Mailer, get_mailer, send_welcome_email
from road_survey.utils.exceptions import ValidationError
from road_survey.utils.response import create_response, handle_exception

router = APIRouter(tags=["Auth"])
logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid Surveyor ID or password"


@router.post("/register")
def register(
    body: RegisterRequest,
    db: Session = Depends(get_db),
    mailer: Mailer | None = Depends(get_mailer),
):
    try:
        fullname = (body.fullname or "").strip()
        surveyor_id = (body.surveyor_id or "").strip()
        if not (fullname and body.email and surveyor_id and body.password and body.confirm_password):
            raise ValidationError("All fields are required.")
        if body.password != body.confirm_password:
            raise ValidationError("Passwords do not match.")

        surveyor = surveyor_store.insert(
            db,
            fullname=fullname,
            email=body.email,
            surveyor_id=surveyor_id,
            password_hash=hash_password(body.password),
        )

        # The account is committed; mail problems must not turn this into a 500
        if mailer is not None:
            try:
                send_welcome_email(mailer, surveyor.email, surveyor.fullname, surveyor.surveyor_id)
            except Exception as exc:
                logger.warning("Welcome email to %s failed: %r", surveyor.email, exc)

        return create_response(
            message="Registration successful. You can now login.",
            data={"surveyorId": surveyor.surveyor_id},
            status_code=status.HTTP_201_CREATED,
        )
    except Exception as exc:
        return handle_exception(exc, "Internal server error. Please try again later.")


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    try:
        if not body.surveyor_id or not body.password:
            raise ValidationError("Surveyor ID and password required")

        # Unknown id and wrong password share one message
        surveyor = surveyor_store.find_by_surveyor_id(db, body.surveyor_id.strip())
        if not surveyor or not verify_password(body.password, surveyor.password_hash):
            raise ValidationError(INVALID_CREDENTIALS)

        payload = LoginResponse(
            token=create_access_token(surveyor.surveyor_id),
            fullname=surveyor.fullname,
            email=surveyor.email,
            surveyor_id=surveyor.surveyor_id,
            profile_photo_url=surveyor.profile_photo_url or "",
        )
        logger.info("Surveyor %s logged in", surveyor.surveyor_id)
        return create_response(
            message="Login successful",
            data=payload.model_dump(by_alias=True),
            expose_data=True,
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Server error")
