# youtube_optimizer/services/youtube_service.py
import asyncio
import logging
from typing import Any, Dict, Optional, Tuple
import google.auth.exceptions
import httplib2
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..errors import NoChannelError, UpstreamError

logger = logging.getLogger(__name__)

TOKEN_URI = 'https://oauth2.googleapis.com/token'

# API errors plus the transport failures googleapiclient lets through (DNS, refresh, socket).
GOOGLE_CALL_ERRORS = (HttpError, httplib2.HttpLib2Error, google.auth.exceptions.GoogleAuthError, OSError)


def get_youtube_service(tokens: Dict[str, Any], client_id: str, client_secret: str):
    """Builds and returns a YouTube Data API v3 service authorized with fresh OAuth tokens."""
    creds = Credentials(
        token=tokens.get('access_token'),
        refresh_token=tokens.get('refresh_token'),
        token_uri=TOKEN_URI,
        client_id=client_id,
        client_secret=client_secret,
    )
    return build('youtube', 'v3', credentials=creds, cache_discovery=False)


async def fetch_own_channel(service) -> Dict[str, Any]:
    """Returns the first channel owned by the authorized account."""
    request = service.channels().list(part='snippet,statistics', mine=True, maxResults=1)
    try:
        response = await asyncio.to_thread(request.execute)
    except GOOGLE_CALL_ERRORS as error:
        logger.error("YouTube channels.list failed: %r", error)
        raise UpstreamError() from error

    items = response.get('items') or []
    if not items:
        raise NoChannelError()
    return items[0]


def _search_with_key(api_key: str) -> Dict[str, Any]:
    service = build('youtube', 'v3', developerKey=api_key, cache_discovery=False)
    return service.search().list(part='snippet', q='test', maxResults=1).execute()


async def check_api_key(api_key: str) -> Tuple[bool, Optional[str]]:
    """Runs a one-result search with a plain API key. Returns (ok, error message)."""
    try:
        response = await asyncio.to_thread(_search_with_key, api_key)
    except GOOGLE_CALL_ERRORS as error:
        reason = getattr(error, 'reason', None) or str(error) or type(error).__name__
        logger.warning("YouTube API key check failed: %s", reason)
        return False, reason
    if 'items' not in response:
        return False, 'YouTube returned an unexpected response'
    return True, None
