# youtube_optimizer/services/gemini_service.py
import asyncio
import logging
from typing import Optional, Tuple
import google.auth.exceptions
import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

logger = logging.getLogger(__name__)

MODEL_NAME = 'gemini-2.0-flash'

# genai.configure() is process-global, so key checks run one at a time.
_configure_lock = asyncio.Lock()


async def check_api_key(api_key: str) -> Tuple[bool, Optional[str]]:
    """Sends a one-word prompt with ``api_key``. Returns (ok, error message)."""
    async with _configure_lock:
        try:
            genai.configure(api_key=api_key) # type: ignore
            model = genai.GenerativeModel(MODEL_NAME) # type: ignore
            response = await model.generate_content_async("Hello")
            ok = bool(response.candidates)
        except (google_exceptions.GoogleAPIError, google.auth.exceptions.GoogleAuthError, ValueError, OSError) as e:
            logger.warning("Gemini API key check failed: %r", e)
            message = getattr(e, 'message', None) or str(e) or type(e).__name__
            return False, message
    if not ok:
        return False, "Gemini returned an empty response"
    return True, None
