# youtube_optimizer/auth.py
import asyncio
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from fastapi import Request
from authlib.integrations.httpx_client import AsyncOAuth2Client, OAuthError
from jose import JWTError, jwt
import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from . import config
from .credentials import get_api_key
from .errors import ConfigurationError, InvalidStateError, MissingCodeError, UpstreamError
from .models import SessionEntry
from .sessions import SessionStore
from .services import youtube_service

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
SCOPES = [
    "https://www.googleapis.com/auth/youtube.readonly",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/userinfo.email",
]
ALGORITHM = "HS256"


class OAuthStateSigner:
    """Issues signed, single-use ``state`` values that map back to a userId."""

    def __init__(self, secret: str, ttl_seconds: int = 600):
        self._secret = secret
        self._ttl = timedelta(seconds=ttl_seconds)
        self._pending: Dict[str, datetime] = {}

    def issue(self, user_id: str) -> str:
        now = datetime.now(timezone.utc)
        self._prune(now)
        nonce = secrets.token_urlsafe(16)
        expire = now + self._ttl
        self._pending[nonce] = expire
        return jwt.encode({"sub": user_id, "jti": nonce, "exp": expire}, self._secret, algorithm=ALGORITHM)

    def consume(self, state: str) -> str:
        try:
            payload = jwt.decode(state, self._secret, algorithms=[ALGORITHM])
        except JWTError:
            raise InvalidStateError()
        user_id, nonce = payload.get("sub"), payload.get("jti")
        if not user_id or not nonce or self._pending.pop(nonce, None) is None:
            raise InvalidStateError()
        return user_id

    def _prune(self, now: datetime) -> None:
        expired = [nonce for nonce, expire in self._pending.items() if expire <= now]
        for nonce in expired:
            del self._pending[nonce]


def get_state_signer(request: Request) -> OAuthStateSigner:
    return request.app.state.state_signer


async def create_oauth_client(session: AsyncSession, user_id: str) -> AsyncOAuth2Client:
    api_key = await get_api_key(session, user_id)
    if not api_key or not api_key.googleClientId or not api_key.googleClientSecret:
        raise ConfigurationError()
    return AsyncOAuth2Client(
        client_id=api_key.googleClientId, client_secret=api_key.googleClientSecret,
        redirect_uri=config.CALLBACK_URL, scope=" ".join(SCOPES),
    )


async def build_authorization_url(session: AsyncSession, signer: OAuthStateSigner, user_id: str) -> str:
    async with await create_oauth_client(session, user_id) as client:
        # prompt=consent makes Google issue a refresh token on repeat grants too
        url, _ = client.create_authorization_url(
            GOOGLE_AUTHORIZE_URL, state=signer.issue(user_id), access_type="offline", prompt="consent"
        )
    return url


def resolve_user_id(signer: OAuthStateSigner, state: Optional[str], fallback_user_id: Optional[str] = None) -> str:
    if state:
        return signer.consume(state)
    if fallback_user_id:
        logger.warning("OAuth callback without state, using configured fallback user %s", fallback_user_id)
        return fallback_user_id
    raise InvalidStateError()


async def exchange_code(client: AsyncOAuth2Client, code: str) -> Dict[str, Any]:
    try:
        token = await client.fetch_token(GOOGLE_TOKEN_URL, code=code)
    except (OAuthError, httpx.HTTPError, ValueError) as e:
        logger.error("Token exchange failed: %r", e)
        raise UpstreamError() from e
    if not token.get("access_token"):
        raise UpstreamError()
    return dict(token)


async def fetch_user_info(client: AsyncOAuth2Client) -> Dict[str, Any]:
    try:
        response = await client.get(GOOGLE_USERINFO_URL)
        response.raise_for_status()
        return response.json()
    except (OAuthError, httpx.HTTPError, ValueError) as e:
        logger.error("Userinfo request failed: %r", e)
        raise UpstreamError() from e


async def fetch_channel(tokens: Dict[str, Any], client_id: str, client_secret: str) -> Dict[str, Any]:
    service = await asyncio.to_thread(youtube_service.get_youtube_service, tokens, client_id, client_secret)
    return await youtube_service.fetch_own_channel(service)


async def complete_authorization(
    session: AsyncSession, store: SessionStore, signer: OAuthStateSigner,
    code: Optional[str], state: Optional[str], fallback_user_id: Optional[str] = None,
) -> str:
    """Runs the callback half of the flow and returns the userId that was bound.

    Nothing is written to ``store`` unless every step succeeds.
    """
    if not code:
        raise MissingCodeError()
    user_id = resolve_user_id(signer, state, fallback_user_id)

    async with await create_oauth_client(session, user_id) as client:
        tokens = await exchange_code(client, code)
        user_info = await fetch_user_info(client)
        channel_info = await fetch_channel(tokens, client.client_id, client.client_secret)

    store.set(user_id, SessionEntry(tokens=tokens, userInfo=user_info, channelInfo=channel_info))
    return user_id
