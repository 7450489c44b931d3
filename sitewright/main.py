import logging
import os
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

from sitewright.core.config import cors_origins, settings, validate_config
from sitewright.core.database import create_all_tables
from sitewright.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from sitewright.core.logging import configure_logging
from sitewright.core.middleware.request_id import RequestIdMiddleware
from sitewright.core.validation import validate_env
from sitewright.api import admin, ai, auth, health, sites, templates, websites
from sitewright.features.templates.seed import seed_templates

configure_logging(settings.ENV)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("sitewright")
    logger.info("Starting sitewright backend...")
    app.state.startup_time = time.time()
    try:
        create_all_tables()
        if settings.SEED_TEMPLATES:
            seed_templates()
    except (SQLAlchemyError, AppError, ValueError) as e:
        # /readyz reports the database as unavailable until this is fixed
        logger.error(f"Startup database initialization failed: {e}")
    try:
        yield
    finally:
        logger.info("Stopping sitewright backend...")


app = FastAPI(title="Sitewright - Backend", lifespan=lifespan)

app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(templates.router)
app.include_router(websites.router)
app.include_router(ai.router)
app.include_router(sites.router)
app.include_router(admin.router)
