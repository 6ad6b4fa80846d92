# feedback360/config.py
from pydantic_settings import BaseSettings
from typing import Optional, Set
from pydantic import Field


def parse_id_list(raw: Optional[str]) -> Set[str]:
    if not raw:
        return set()
    return {item.strip() for item in raw.split(",") if item.strip()}


class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7)

    DATABASE_URL: str
    SQL_ECHO: bool = Field(False)
    LOG_LEVEL: str = Field("INFO")

    # Role overrides: comma-separated profile IDs, merged with the user_roles table.
    # Used to bootstrap admins/supervisors before the table is populated.
    ADMIN_IDS: Optional[str] = None
    SUPERVISOR_IDS: Optional[str] = None

    PIN_WEEKLY_LIMIT: int = Field(4)
    ASSIGNMENTS_PER_ASSESSOR: int = Field(5)

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def async_database_url(self) -> str:
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def admin_id_overrides(self) -> Set[str]:
        return parse_id_list(self.ADMIN_IDS)

    @property
    def supervisor_id_overrides(self) -> Set[str]:
        return parse_id_list(self.SUPERVISOR_IDS)


settings = Settings()
