import logging

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from road_survey.utils.exceptions import SurveyAppError

logger = logging.getLogger(__name__)

ENVELOPE_KEYS = ("message", "data", "status", "status_code")


def create_response(
    message: str,
    data=None,
    status_code: int = status.HTTP_200_OK,
    status_text: str | None = None,
    expose_data: bool = False,
) -> JSONResponse:
    """Return a consistent API response payload and status code.

    With ``expose_data`` the keys of a dict payload are also copied to the top
    level, so mobile clients can read ``token``/``url``/``photos`` directly.
    """
    payload_status = status_text or ("success" if status_code < 400 else "error")
    encoded_data = jsonable_encoder(data)
    content = {}
    if expose_data and isinstance(encoded_data, dict):
        content.update({key: value for key, value in encoded_data.items() if key not in ENVELOPE_KEYS})
    content.update({
        "message": message,
        "data": encoded_data,
        "status": payload_status,
        "status_code": status_code,
    })
    return JSONResponse(status_code=status_code, content=content)


def handle_exception(error: Exception, fallback_message: str = "Internal server error") -> JSONResponse:
    """Coerce raised errors into the shared response structure."""
    if isinstance(error, SurveyAppError):
        if error.status_code >= 500:
            logger.error("%s: %s", type(error).__name__, error.message)
            return create_response(fallback_message, None, error.status_code, status_text="error")
        return create_response(error.message, None, error.status_code, status_text="error")

    logger.exception("Unhandled error: %s", error)
    return create_response(fallback_message, None, status.HTTP_500_INTERNAL_SERVER_ERROR, status_text="error")
