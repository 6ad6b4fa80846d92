# feedback360/routers/auth.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.auth import get_current_user, get_current_role
from feedback360.core.security import create_access_token, create_refresh_token
from feedback360.database import get_db
from feedback360.models.profile import Profile
from feedback360.schemas.common import DataResponse, SuccessResponse
from feedback360.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    ProfileResponse,
    ProfileUpdate,
    Token,
)
from feedback360.services import users as user_service
from feedback360.services.roles import get_user_role

router = APIRouter(prefix="/auth", tags=["auth"])


def _me(user: Profile, role: str) -> MeResponse:
    return MeResponse(**ProfileResponse.model_validate(user).model_dump(), role=role)


@router.post("/login", response_model=Token)
async def login(credentials: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.authenticate(db, credentials.email, credentials.password)
    role = await get_user_role(db, user.id)

    return Token(
        access_token=create_access_token({"sub": user.id}),
        refresh_token=create_refresh_token({"sub": user.id}),
        token_type="bearer",
        user=_me(user, role),
    )


@router.get("/me", response_model=DataResponse[MeResponse])
async def read_me(
    current_user: Profile = Depends(get_current_user),
    role: str = Depends(get_current_role),
):
    return {"data": _me(current_user, role)}


@router.patch("/me", response_model=DataResponse[MeResponse])
async def update_me(
    payload: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
    role: str = Depends(get_current_role),
):
    user = await user_service.update_own_profile(db, current_user, payload.model_dump(exclude_unset=True))
    return {"data": _me(user, role)}


@router.post("/change-password", response_model=SuccessResponse)
async def change_password(
    payload: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    await user_service.change_password(db, current_user, payload.current_password, payload.new_password)
    return SuccessResponse(message="Password updated")
