from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from road_survey.config import settings
from road_survey.utils.exceptions import InvalidToken

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against its stored hash; a malformed hash never matches."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def create_access_token(surveyor_id: str, issued_at: datetime | None = None) -> str:
    issued_at = issued_at or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)
    claims = {
        "surveyorId": surveyor_id,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the surveyor id carried by a valid, unexpired token."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise InvalidToken() from exc

    surveyor_id = payload.get("surveyorId")
    if not surveyor_id:
        raise InvalidToken("Invalid token payload")
    return surveyor_id
