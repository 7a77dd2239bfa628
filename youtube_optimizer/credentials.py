# youtube_optimizer/credentials.py
import logging
from datetime import datetime, timezone
from typing import Optional
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ApiKey

logger = logging.getLogger(__name__)


def is_configured(gemini_api_key: str, google_client_id: str, google_client_secret: str) -> bool:
    return bool(gemini_api_key and google_client_id and google_client_secret)


async def get_api_key(session: AsyncSession, user_id: str) -> Optional[ApiKey]:
    statement = select(ApiKey).where(ApiKey.userId == user_id)
    result = await session.execute(statement)
    return result.scalar_one_or_none()


async def save_api_key(
    session: AsyncSession, user_id: str, *, gemini_api_key: str = "", youtube_api_key: str = "",
    google_client_id: str = "", google_client_secret: str = "",
) -> ApiKey:
    """Create or fully overwrite the credential record for ``user_id``."""
    record = await get_api_key(session, user_id)
    if record is None:
        record = ApiKey(userId=user_id)
    record.geminiApiKey = gemini_api_key
    record.youtubeApiKey = youtube_api_key
    record.googleClientId = google_client_id
    record.googleClientSecret = google_client_secret
    record.isConfigured = is_configured(gemini_api_key, google_client_id, google_client_secret)
    record.updatedAt = datetime.now(timezone.utc)

    session.add(record)
    await session.commit()
    await session.refresh(record)
    logger.info("Saved API keys for user %s (configured=%s)", user_id, record.isConfigured)
    return record


def key_status(record: Optional[ApiKey]) -> dict:
    if record is None:
        return {"isConfigured": False, "hasGeminiKey": False, "hasYouTubeKey": False, "hasGoogleOAuth": False}
    return {
        "isConfigured": record.isConfigured,
        "hasGeminiKey": bool(record.geminiApiKey),
        "hasYouTubeKey": bool(record.youtubeApiKey),
        "hasGoogleOAuth": record.hasGoogleOAuth,
    }
