import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobtracker.config import settings
from jobtracker.database import init_db
from jobtracker.routers import auth, jobs, stats, calendar

logger = logging.getLogger("jobtracker")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create or migrate the database
    try:
        init_db()
        logger.info("Database ready at %s", settings.db_path)
    except Exception as exc:
        logger.error("Could not initialise database at %s: %s", settings.db_path, exc)
    yield
    # Shutdown: end all sessions, dropping guest jobs with them
    from jobtracker.services.session_service import session_service
    session_service.clear()


app = FastAPI(
    title="Job Tracker",
    description="Personal job application tracker with pipeline statistics",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(jobs.router, prefix=settings.api_prefix)
app.include_router(calendar.router, prefix=settings.api_prefix)
app.include_router(stats.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
