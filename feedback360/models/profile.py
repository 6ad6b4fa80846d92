import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, func
from feedback360.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


ROLE_USER = "user"
ROLE_SUPERVISOR = "supervisor"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_SUPERVISOR, ROLE_ADMIN)


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    username = Column(String, nullable=True)
    full_name = Column(String, nullable=False, default="")
    position = Column(String, nullable=True)
    department = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    allow_public_view = Column(Boolean, nullable=False, default=True)
    hashed_password = Column(String, nullable=True)  # NULL = cannot log in with a password
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("profiles.id"), unique=True, nullable=False)
    role = Column(String, nullable=False, default=ROLE_USER)  # user, supervisor, admin
    created_at = Column(DateTime(timezone=True), server_default=func.now())
