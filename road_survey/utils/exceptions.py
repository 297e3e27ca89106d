"""Application error taxonomy.

Each error carries the client-facing message and the HTTP status it maps to;
``handle_exception`` renders them into the shared response envelope.
"""


class SurveyAppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SurveyAppError):
    """Missing, malformed or mismatched request fields."""

    status_code = 400
    default_message = "Invalid request"


class DuplicateKey(ValidationError):
    """A unique surveyor field is already taken."""

    default_message = "Record already exists"


class NotFound(SurveyAppError):
    status_code = 404
    default_message = "Not found"


class UpstreamFailure(SurveyAppError):
    """The blob store, mail server or database failed."""

    default_message = "Upstream service failure"


class UploadFailed(UpstreamFailure):
    default_message = "Image upload failed"


class InvalidToken(SurveyAppError):
    status_code = 401
    default_message = "Invalid or expired token"
