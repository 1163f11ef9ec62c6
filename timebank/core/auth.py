from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from timebank.database import get_db
from timebank.models.profile import Profile
from timebank.core.security import decode_token

reusable_oauth2 = HTTPBearer(auto_error=False)


async def load_profile_from_token(db: AsyncSession, token: str, token_type: str) -> Profile:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token, token_type)
        user_id: str = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    result = await db.execute(select(Profile).where(Profile.id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise credentials_exception
    # Signed out since the token was issued
    if payload.get("ver") != profile.session_version:
        raise credentials_exception
    return profile


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: Optional[HTTPAuthorizationCredentials] = Depends(reusable_oauth2)
) -> Profile:
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    profile = await load_profile_from_token(db, token.credentials, "access")
    # Invite gating: deactivated profiles keep their rows but lose access
    if not profile.active:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "not_invited")
    return profile


async def get_current_admin(
    current_user: Profile = Depends(get_current_user)
) -> Profile:
    if current_user.role != "admin":
        raise HTTPException(403, "Admin access required")
    return current_user


def is_owner_or_admin(user: Profile, owner_id: str) -> bool:
    return user.id == owner_id or user.role == "admin"
