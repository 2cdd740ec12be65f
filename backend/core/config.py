import os
from urllib.parse import urlparse

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL")

CORS_ORIGINS = _get_list(os.getenv("CORS_ORIGINS"), ["http://localhost:5173"])

ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "change-me")
REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "change-me")
ACCESS_TOKEN_EXPIRES_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRES_MINUTES", "1440"))
REFRESH_TOKEN_EXPIRES_MINUTES = int(os.getenv("REFRESH_TOKEN_EXPIRES_MINUTES", "14400"))
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

COOKIE_SECURE = _get_bool(os.getenv("COOKIE_SECURE"), default=True)

AVATAR_UPLOAD_DIR = os.getenv("AVATAR_UPLOAD_DIR", "uploads/avatars")
MEDIA_BASE_URL = os.getenv("MEDIA_BASE_URL", "http://localhost:8000/media")
MEDIA_MOUNT_PATH = urlparse(MEDIA_BASE_URL).path.rstrip("/") or "/media"
MAX_AVATAR_BYTES = int(os.getenv("MAX_AVATAR_BYTES", str(5 * 1024 * 1024)))

def validate_runtime_config() -> None:
    if APP_ENV.lower() != "production":
        return
    if ACCESS_TOKEN_SECRET == "change-me" or REFRESH_TOKEN_SECRET == "change-me":
        raise RuntimeError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be set in production.")
    if ACCESS_TOKEN_SECRET == REFRESH_TOKEN_SECRET:
        raise RuntimeError("Access and refresh tokens must be signed with different secrets.")
