# youtube_optimizer/main.py
import logging
import time
from datetime import datetime, timezone
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import quote
import uvicorn
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from . import config
from .auth import OAuthStateSigner, build_authorization_url, complete_authorization, get_state_signer
from .credentials import get_api_key, key_status, save_api_key
from .database import close_db, create_db_and_tables, get_session
from .errors import AuthFlowError, UnauthenticatedError
from .sessions import SessionStore, get_session_store
from .services import gemini_service, youtube_service

logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s:     %(name)s - %(message)s")
logger = logging.getLogger(__name__)


STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up and creating database tables...")
    await create_db_and_tables()
    logger.info("Startup complete. OAuth callback URL: %s", config.CALLBACK_URL)
    yield
    await close_db()


app = FastAPI(title="YouTube Optimizer", version=config.VERSION, lifespan=lifespan)
app.state.session_store = SessionStore()
app.state.state_signer = OAuthStateSigner(config.STATE_SECRET, config.OAUTH_STATE_TTL_SECONDS)

app.add_middleware(
    CORSMiddleware, allow_origins=[config.CORS_ORIGIN], allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


# --- Error handlers ---
@app.exception_handler(AuthFlowError)
async def auth_flow_error_handler(request: Request, exc: AuthFlowError):
    logger.warning("%s %s failed: %s", request.method, request.url.path, type(exc).__name__)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [error.get("msg") for error in exc.errors()]
    return JSONResponse(status_code=400, content={"success": False, "error": "Validation Error", "details": details})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={
            "success": False, "error": "Route not found",
            "message": "The requested resource was not found on this server",
        })
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    content = {"success": False, "error": "Internal Server Error"}
    if config.ENVIRONMENT == "development":
        content["details"] = type(exc).__name__
    return JSONResponse(status_code=500, content=content)


# --- Pydantic Models ---
class ApiKeyUpdateRequest(BaseModel):
    geminiApiKey: str = ""
    youtubeApiKey: str = ""
    googleClientId: str = ""
    googleClientSecret: str = ""


class ApiKeyTestRequest(BaseModel):
    geminiApiKey: Optional[str] = None
    youtubeApiKey: Optional[str] = None


# --- Auth Routes ---
@app.get("/api/auth/url/{user_id}")
async def get_auth_url(
    user_id: str,
    session: AsyncSession = Depends(get_session),
    signer: OAuthStateSigner = Depends(get_state_signer),
):
    auth_url = await build_authorization_url(session, signer, user_id)
    return {"success": True, "data": {"authUrl": auth_url}}


@app.get("/api/auth/callback", name="auth_callback")
async def auth_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
    store: SessionStore = Depends(get_session_store),
    signer: OAuthStateSigner = Depends(get_state_signer),
):
    try:
        user_id = await complete_authorization(
            session, store, signer, code, state, fallback_user_id=config.OAUTH_FALLBACK_USER_ID
        )
    except AuthFlowError as e:
        logger.warning("OAuth callback failed: %s", type(e).__name__)
        return _auth_error_redirect(e.message)
    except Exception:
        logger.exception("Unexpected error during OAuth callback")
        return _auth_error_redirect(AuthFlowError.message)
    return RedirectResponse(url=f"{config.FRONTEND_URL}/auth-success?userId={quote(user_id, safe='')}", status_code=302)


def _auth_error_redirect(message: str) -> RedirectResponse:
    return RedirectResponse(url=f"{config.FRONTEND_URL}/auth-error?error={quote(message, safe='')}", status_code=302)


@app.get("/api/auth/user/{user_id}")
async def get_auth_user(user_id: str, store: SessionStore = Depends(get_session_store)):
    entry = store.get(user_id)
    if entry is None:
        raise UnauthenticatedError()
    return {"success": True, "data": entry.public_view()}


@app.post("/api/auth/logout/{user_id}")
async def logout(user_id: str, store: SessionStore = Depends(get_session_store)):
    store.delete(user_id)
    return {"success": True, "message": "Logged out successfully."}


# --- API Key Routes ---
@app.get("/api/keys/default")
async def get_default_keys():
    return {"success": True, "data": {
        "isConfigured": bool(config.DEFAULT_GEMINI_API_KEY and config.DEFAULT_YOUTUBE_API_KEY),
        "hasGeminiKey": bool(config.DEFAULT_GEMINI_API_KEY),
        "hasYouTubeKey": bool(config.DEFAULT_YOUTUBE_API_KEY),
        "hasGoogleOAuth": bool(config.DEFAULT_GOOGLE_CLIENT_ID and config.DEFAULT_GOOGLE_CLIENT_SECRET),
    }}


@app.get("/api/keys/{user_id}")
async def get_keys(user_id: str, session: AsyncSession = Depends(get_session)):
    record = await get_api_key(session, user_id)
    return {"success": True, "data": key_status(record)}


@app.post("/api/keys/{user_id}")
async def save_keys(user_id: str, request: ApiKeyUpdateRequest, session: AsyncSession = Depends(get_session)):
    record = await save_api_key(
        session, user_id,
        gemini_api_key=request.geminiApiKey.strip(), youtube_api_key=request.youtubeApiKey.strip(),
        google_client_id=request.googleClientId.strip(), google_client_secret=request.googleClientSecret.strip(),
    )
    return {"success": True, "data": {"isConfigured": record.isConfigured, "message": "API keys saved successfully."}}


@app.post("/api/keys/{user_id}/test")
async def check_keys(user_id: str, request: ApiKeyTestRequest):
    results = {"gemini": False, "youtube": False, "messages": []}
    if request.geminiApiKey:
        ok, error = await gemini_service.check_api_key(request.geminiApiKey)
        results["gemini"] = ok
        results["messages"].append("Gemini API connection succeeded" if ok else f"Gemini API connection failed: {error}")
    if request.youtubeApiKey:
        ok, error = await youtube_service.check_api_key(request.youtubeApiKey)
        results["youtube"] = ok
        results["messages"].append("YouTube API connection succeeded" if ok else f"YouTube API connection failed: {error}")
    return {"success": True, "data": results}


# --- Health ---
@app.get("/api/health")
async def health():
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "environment": config.ENVIRONMENT,
        "version": config.VERSION,
    }


@app.get("/")
async def read_root():
    return {"message": "YouTube Optimizer backend is running!"}


def run():
    uvicorn.run("youtube_optimizer.main:app", host="0.0.0.0", port=config.PORT)

if __name__ == "__main__":
    run()
