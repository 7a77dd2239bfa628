# youtube_optimizer/config.py
import os
from dotenv import load_dotenv

load_dotenv()

BASE_URL = os.getenv("BASE_URL", "http://localhost:3000").rstrip("/")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5500")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./youtube_optimizer.db")

STATE_SECRET = os.getenv("STATE_SECRET")
if not STATE_SECRET:
    raise ValueError("STATE_SECRET is not set in .env file!")
OAUTH_STATE_TTL_SECONDS = int(os.getenv("OAUTH_STATE_TTL_SECONDS", "600"))
# Only honoured when set explicitly; callbacks without state are rejected otherwise.
OAUTH_FALLBACK_USER_ID = os.getenv("OAUTH_FALLBACK_USER_ID") or None

CALLBACK_URL = f"{BASE_URL}/api/auth/callback"

DEFAULT_GEMINI_API_KEY = os.getenv("DEFAULT_GEMINI_API_KEY", "")
DEFAULT_YOUTUBE_API_KEY = os.getenv("DEFAULT_YOUTUBE_API_KEY", "")
DEFAULT_GOOGLE_CLIENT_ID = os.getenv("DEFAULT_GOOGLE_CLIENT_ID", "")
DEFAULT_GOOGLE_CLIENT_SECRET = os.getenv("DEFAULT_GOOGLE_CLIENT_SECRET", "")

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "3000"))
VERSION = "1.0.0"
