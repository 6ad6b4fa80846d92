# feedback360/services/roles.py
from typing import NamedTuple, Set
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from feedback360.config import settings
from feedback360.core.errors import BadRequestError, NotFoundError
from feedback360.models.profile import Profile, UserRole, ROLES, ROLE_ADMIN, ROLE_SUPERVISOR, ROLE_USER


class RoleIds(NamedTuple):
    admin_ids: Set[str]
    supervisor_ids: Set[str]

    @property
    def restricted_ids(self) -> Set[str]:
        return self.admin_ids | self.supervisor_ids


async def get_role_user_ids(db: AsyncSession) -> RoleIds:
    """Admin and supervisor IDs from the user_roles table plus env overrides.

    Recomputed on every call. Database errors are not caught here.
    """
    admin_ids = set(settings.admin_id_overrides)
    supervisor_ids = set(settings.supervisor_id_overrides)

    result = await db.execute(select(UserRole.user_id, UserRole.role))
    for user_id, role in result.all():
        if not user_id:
            continue
        if role == ROLE_ADMIN:
            admin_ids.add(user_id)
        elif role == ROLE_SUPERVISOR:
            supervisor_ids.add(user_id)

    return RoleIds(admin_ids=admin_ids, supervisor_ids=supervisor_ids)


async def get_user_role(db: AsyncSession, user_id: str) -> str:
    roles = await get_role_user_ids(db)
    if user_id in roles.admin_ids:
        return ROLE_ADMIN
    if user_id in roles.supervisor_ids:
        return ROLE_SUPERVISOR
    return ROLE_USER


async def set_user_role(db: AsyncSession, user_id: str, role: str) -> UserRole:
    if role not in ROLES:
        raise BadRequestError(f"Invalid role: {role}")
    profile = await db.get(Profile, user_id)
    if not profile:
        raise NotFoundError("User not found")

    result = await db.execute(select(UserRole).where(UserRole.user_id == user_id))
    row = result.scalar_one_or_none()
    if row:
        row.role = role
    else:
        row = UserRole(user_id=user_id, role=role)
        db.add(row)
    await db.commit()
    await db.refresh(row)
    return row
