# feedback360/main.py
import logging

from fastapi import FastAPI
from sqlalchemy import exc as sa_exc

from feedback360.core.errors import register_error_handlers
from feedback360.core.logging import configure_logging
from feedback360.database import engine, Base
from feedback360 import models  # noqa: F401  registers tables on Base.metadata
from feedback360.routers import (
    admin,
    admin_triwulan,
    assessment,
    auth,
    dashboard,
    notifications,
    pins,
    results,
    supervisor,
    team,
    triwulan,
)

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Feedback360 - 360 Feedback & Recognition Portal", version="1.0")
register_error_handlers(app)

# Include Routers
app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(assessment.router)
app.include_router(results.router)
app.include_router(supervisor.router)
app.include_router(team.router)
app.include_router(pins.router)
app.include_router(admin_triwulan.router)
app.include_router(triwulan.router)
app.include_router(admin.router)
app.include_router(notifications.router)


# Create DB Tables (for demo deployments; Alembic owns the schema in prod)
@app.on_event("startup")
async def startup_event():
    # ignore duplicate-object errors when several workers start at once
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except (sa_exc.IntegrityError, sa_exc.ProgrammingError) as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logger.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise


@app.get("/")
def read_root():
    return {"message": "Welcome to Feedback360 Backend"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("feedback360.main:app", host="0.0.0.0", port=8000, reload=True)
