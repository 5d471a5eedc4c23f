import logging
import subprocess
import sys
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

import click
import uvicorn
from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.database import SessionLocal, engine
from app.core.decorator import DBException
from app.core.exceptions import QuizEngineError
from app.core.init import seed_demo_quiz
from app.core.limiter import custom_rate_limit_exceeded_handler, limiter
from app.core.security import jwt_manager
from app.models import *
from app.routers import routes

BASE_DIR = Path(__file__).parent
LOG_FILE = BASE_DIR / settings.log_file


# ============================================================================
# Logging
# ============================================================================
def setup_logging() -> logging.Logger:
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    level = (
        logging.DEBUG
        if settings.debug
        else getattr(logging, settings.log_level.upper(), logging.INFO)
    )

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(LOG_FILE, encoding="utf-8"),
        ],
        force=True,
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return logging.getLogger(__name__)


logger = setup_logging()


# ============================================================================
# Application
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema is owned by Alembic (`main.py prod` / `main.py migrate`)
    logger.info(f"{settings.app_name} {settings.app_version} on {engine.dialect.name}")
    yield
    engine.dispose()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
    docs_url="/docs" if settings.debug else None,
    redoc_url=None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    logger.debug(
        f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} ({elapsed:.3f}s)"
    )
    return response


# ============================================================================
# Error responses: {"error", "type", "retryable"}
# ============================================================================
def error_response(status_code: int, message: str, error_type: str, retryable: bool = False, **extra):
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "type": error_type, "retryable": retryable, **extra},
    )


@app.exception_handler(QuizEngineError)
async def quiz_engine_error_handler(request: Request, exc: QuizEngineError):
    logger.warning(f"{exc.type} on {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.message, exc.type)


@app.exception_handler(DBException)
async def db_exception_handler(request: Request, exc: DBException):
    return error_response(exc.status_code, exc.message, "database_error", exc.retryable)


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Unhandled database error on {request.url.path}", exc_info=exc)
    return error_response(500, "Database error occurred", "database_error")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # ctx may hold exception objects that are not JSON serializable
    details = [{k: v for k, v in error.items() if k != "ctx"} for error in exc.errors()]
    return error_response(422, "Validation error", "validation_error", details=details)


app.add_exception_handler(RateLimitExceeded, custom_rate_limit_exceeded_handler)


# ============================================================================
# Health
# ============================================================================
@app.get("/")
async def root():
    return {"app_name": settings.app_name, "version": settings.app_version}


@app.get("/health")
@limiter.limit("10/minute")
async def health_check(request: Request):
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        database = "unhealthy"
    finally:
        db.close()

    return {
        "status": "healthy" if database == "healthy" else "degraded",
        "database": database,
        "timestamp": time.time(),
    }


for router in routes:
    app.include_router(router)


# ============================================================================
# CLI
# ============================================================================
def run_migrations():
    command.upgrade(Config(str(BASE_DIR / "alembic.ini")), "head")
    logger.info("Database schema is at head")


@click.group()
def cli():
    """Quiz engine management CLI."""


@cli.command()
def migrate():
    """Apply Alembic migrations."""
    run_migrations()


@cli.command()
@click.option("--host", default="127.0.0.1")
@click.option("--port", default=8000)
@click.option("--reload", is_flag=True, help="Restart on code changes")
@click.option("--migrate/--no-migrate", "migrate_first", default=True)
def dev(host: str, port: int, reload: bool, migrate_first: bool):
    """Run the development server with Uvicorn."""
    if migrate_first:
        run_migrations()
    uvicorn.run("main:app", host=host, port=port, reload=reload, log_level="debug")


@cli.command()
@click.option("--host", default="0.0.0.0")
@click.option("--port", default=8000)
@click.option("--workers", default=4)
def prod(host: str, port: int, workers: int):
    """Apply migrations, then serve with Gunicorn and Uvicorn workers."""
    try:
        run_migrations()
    except Exception as e:
        raise click.ClickException(f"Migration failed: {e}")

    cmd = [
        "gunicorn", "main:app",
        "--worker-class", "uvicorn.workers.UvicornWorker",
        "--workers", str(workers),
        "--bind", f"{host}:{port}",
        "--access-logfile", "-",
        "--timeout", "60",
    ]
    logger.info(f"Starting Gunicorn with {workers} workers on {host}:{port}")
    try:
        subprocess.run(cmd, check=True)
    except FileNotFoundError:
        raise click.ClickException("Gunicorn not installed")
    except subprocess.CalledProcessError as e:
        raise click.ClickException(f"Gunicorn exited with status {e.returncode}")


@cli.command()
@click.option("--contributor", default="demo-contributor", help="Owner of the demo quiz")
def seed(contributor: str):
    """Insert an approved demo quiz."""
    run_migrations()
    db = SessionLocal()
    try:
        quiz = seed_demo_quiz(db, contributor)
        click.echo(f"Demo quiz created: id={quiz.id}, questions={len(quiz.questions)}")
    finally:
        db.close()


@cli.command()
@click.argument("user_id")
def token(user_id: str):
    """Mint a development access token for USER_ID."""
    click.echo(jwt_manager.create_access_token(user_id))


@cli.command()
def info():
    """Show the active configuration."""
    click.echo(f"{settings.app_name} {settings.app_version}")
    click.echo(f"Database: {engine.dialect.name} ({settings.db_database})")
    click.echo(f"Rate limiting: {'on' if settings.rate_limit_enabled else 'off'} ({settings.rate_limit_storage_uri})")
    click.echo(f"Log file: {LOG_FILE}")


if __name__ == "__main__":
    cli()
