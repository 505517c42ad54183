# stardust/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt
from stardust.config import settings


def create_access_token(user_id: str, guild_id: str, role: str = "moderator", expires_minutes: Optional[int] = None) -> str:
    """Mint a token for a bot collaborator or dashboard user acting in one guild."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "guild_id": str(guild_id), "role": role, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
