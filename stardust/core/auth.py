# stardust/core/auth.py
from dataclasses import dataclass
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from stardust.config import settings

reusable_oauth2 = HTTPBearer()


@dataclass(frozen=True)
class Principal:
    user_id: str
    guild_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


async def get_current_user(
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2)
) -> Principal:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(
            token.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        raise credentials_exception

    user_id = payload.get("sub")
    guild_id = payload.get("guild_id")
    if user_id is None or guild_id is None:
        raise credentials_exception
    return Principal(user_id=str(user_id), guild_id=str(guild_id), role=payload.get("role", "moderator"))


async def get_current_admin(
    current_user: Principal = Depends(get_current_user)
) -> Principal:
    if not current_user.is_admin:
        raise HTTPException(403, "Admin access required")
    return current_user
