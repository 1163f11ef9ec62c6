# timebank/main.py
import logging

from fastapi import FastAPI
from sqlalchemy import select
from sqlalchemy import exc as sa_exc

from timebank.config import settings
from timebank.constants import EVALUATION_AXES
from timebank.core.errors import register_exception_handlers
from timebank.core.logging import setup_logging
from timebank.database import AsyncSessionLocal, Base, engine
from timebank.models.entry import Entry, EntryHistory, EntryRecipient
from timebank.models.evaluation import DetailedEvaluation, EvaluationAxis
from timebank.models.performance import MonthlyValueScore
from timebank.models.profile import Guild, LoginCode, Profile
from timebank.models.quarterly import QuarterlyAction, QuarterlyReflection
from timebank.models.task import Task, TaskApplication
from timebank.routers import auth, dashboard, entries, exports, integrations, profiles, quarterly, task

setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)
logger = logging.getLogger(__name__)

app = FastAPI(title="Time Bank", version="1.0", debug=settings.DEBUG)
register_exception_handlers(app)

# Include Routers
app.include_router(auth.router)
app.include_router(entries.router)
app.include_router(task.router)
app.include_router(dashboard.router)
app.include_router(profiles.router)
app.include_router(quarterly.router)
app.include_router(exports.router)
app.include_router(integrations.router)


async def seed_evaluation_axes() -> None:
    async with AsyncSessionLocal() as session:
        existing = await session.execute(select(EvaluationAxis.id).limit(1))
        if existing.scalar_one_or_none() is not None:
            return
        session.add_all([
            EvaluationAxis(axis_key=key, axis_label=label, display_order=order)
            for order, (key, label) in enumerate(EVALUATION_AXES, start=1)
        ])
        await session.commit()
        logger.info("Seeded %d evaluation axes", len(EVALUATION_AXES))


# Create DB Tables (Alembic owns the schema in production)
@app.on_event("startup")
async def startup_event():
    # ignore duplicate-object errors from previous partial runs
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logger.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise
    await seed_evaluation_axes()
    if not settings.asana_configured:
        logger.info("Asana integration disabled (missing %s)", ", ".join(settings.missing_asana_settings))
    if not settings.smtp_configured:
        logger.warning(
            "Email delivery not configured (missing %s): login codes cannot be sent",
            ", ".join(settings.missing_smtp_settings),
        )


@app.get("/")
def read_root():
    return {"message": "Welcome to Time Bank"}


@app.get("/health")
async def health_check():
    """Return health status of the API."""
    return {"status": "healthy", "version": app.version}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("timebank.main:app", host="0.0.0.0", port=8000, reload=True)
