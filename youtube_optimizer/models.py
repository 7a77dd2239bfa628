# youtube_optimizer/models.py
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from pydantic import BaseModel
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiKey(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    userId: str = Field(unique=True, index=True)
    geminiApiKey: str = Field(default="")
    youtubeApiKey: str = Field(default="")
    googleClientId: str = Field(default="")
    googleClientSecret: str = Field(default="", max_length=512)
    isConfigured: bool = Field(default=False)
    createdAt: datetime = Field(default_factory=_utcnow)
    updatedAt: datetime = Field(default_factory=_utcnow)

    @property
    def hasGoogleOAuth(self) -> bool:
        return bool(self.googleClientId and self.googleClientSecret)


class SessionEntry(BaseModel):
    """Authenticated Google context bound to one application user."""
    tokens: Dict[str, Any]
    userInfo: Dict[str, Any]
    channelInfo: Dict[str, Any]

    def public_view(self) -> Dict[str, Any]:
        # tokens stay server-side
        return {"userInfo": self.userInfo, "channelInfo": self.channelInfo}
