# feedback360/core/auth.py
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.config import settings
from feedback360.database import get_db
from feedback360.models.profile import Profile, ROLE_ADMIN, ROLE_SUPERVISOR
from feedback360.services.roles import get_user_role

reusable_oauth2 = HTTPBearer(auto_error=False)


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: Optional[HTTPAuthorizationCredentials] = Depends(reusable_oauth2),
) -> Profile:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if token is None:
        raise credentials_exception
    try:
        payload = jwt.decode(token.credentials, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        user_id: str = payload.get("sub")
        if user_id is None or payload.get("type", "access") != "access":
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    user = await db.get(Profile, user_id)
    if user is None:
        raise credentials_exception
    return user


async def get_current_role(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
) -> str:
    return await get_user_role(db, current_user.id)


async def get_current_admin(
    current_user: Profile = Depends(get_current_user),
    role: str = Depends(get_current_role),
) -> Profile:
    if role != ROLE_ADMIN:
        raise HTTPException(403, "Admin access required")
    return current_user


async def get_admin_or_supervisor(
    current_user: Profile = Depends(get_current_user),
    role: str = Depends(get_current_role),
) -> Profile:
    if role not in (ROLE_ADMIN, ROLE_SUPERVISOR):
        raise HTTPException(403, "Admin or supervisor access required")
    return current_user
