import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent  # -> project root

# Load .env explicitly from project root
load_dotenv(BASE_DIR / ".env")


class Settings:
    PROJECT_NAME = "Road Survey Backend"

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./road_survey.db")

    JWT_SECRET = os.getenv("JWT_SECRET")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_HOURS = int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", 12))
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 10))

    SPACES_REGION = os.getenv("SPACES_REGION")
    SPACES_ENDPOINT = os.getenv("SPACES_ENDPOINT")
    SPACES_KEY = os.getenv("SPACES_KEY")
    SPACES_SECRET = os.getenv("SPACES_SECRET")
    SPACES_NAME = os.getenv("SPACES_NAME")
    SPACES_CDN_URL = (os.getenv("SPACES_CDN_URL") or "").rstrip("/")
    SPACES_BASE_PATH = (os.getenv("SPACES_BASE_PATH") or "road_survey").strip("/")
    MAX_IMAGE_BYTES = int(os.getenv("MAX_IMAGE_BYTES", 10 * 1024 * 1024))

    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", 465))
    SMTP_USER = os.getenv("SMTP_USER")
    SMTP_PASS = os.getenv("SMTP_PASS")
    SMTP_USE_SSL = os.getenv("SMTP_USE_SSL", "true").lower() == "true"
    FROM_EMAIL = os.getenv("FROM_EMAIL") or os.getenv("SMTP_USER")

    STATIC_DIR = os.getenv("STATIC_DIR", str(BASE_DIR / "public"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 3000))

    cors_origins = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]


settings = Settings()
