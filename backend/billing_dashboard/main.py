import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from billing_dashboard.core.config import settings
from billing_dashboard.database_init import ensure_database, ensure_schema
from billing_dashboard.deps import get_db
from billing_dashboard.routes import projects, overview, reports


# --- logging ---
def _env_log_level(default: str = "INFO") -> int:
    lvl = str(settings.LOG_LEVEL or default).strip()
    if lvl.isdigit():
        return int(lvl)
    return getattr(logging, lvl.upper(), logging.INFO)


logging.basicConfig(
    level=_env_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("billing_dashboard")


# --- ensure database + tables exist (opt-in, the dashboard is read-only) ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.INIT_DATABASE:
        ensure_database()
        ensure_schema()
    yield


app = FastAPI(title="Billing Dashboard API", lifespan=lifespan)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# --- Routes ---
app.include_router(projects.router)
app.include_router(overview.router)
app.include_router(reports.router)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    log.error("Query failed on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Data source unavailable"})


# --- Root route ---
@app.get("/")
def root():
    return {"message": "Billing Dashboard API is running"}


@app.get("/health")
def health(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    return {"status": "ok"}
