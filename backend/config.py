# backend/config.py
import logging
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

APP_ENV = os.getenv("APP_ENV", "production").lower()
DEV_MODE = APP_ENV == "development"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL is not set in .env file")

GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET", "")
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
GOOGLE_METADATA_URL = "https://accounts.google.com/.well-known/openid-configuration"
# Code obtained by a client-side popup flow is redeemed with this redirect URI.
GOOGLE_REDIRECT_URI = "postmessage"

FRONTEND_URL = os.getenv("FRONTEND_URL")
CALENDAR_TIMEZONE = os.getenv("CALENDAR_TIMEZONE", "Asia/Kolkata")

SESSION_COOKIE_NAME = "sessionToken"
SESSION_TTL_MINUTES = 30

JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    if not DEV_MODE:
        raise ValueError("JWT_SECRET is not set in .env file!")
    logger.warning("JWT_SECRET is not set; using the development signing key")
    JWT_SECRET = "dev-secret"


def allowed_origins() -> list[str]:
    origins = ["http://localhost:5173"]
    if FRONTEND_URL:
        origins.insert(0, FRONTEND_URL)
    return origins


def allowed_origin_regex() -> Optional[str]:
    # Any origin is accepted while developing locally.
    return ".*" if DEV_MODE else None


def configure_logging() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
