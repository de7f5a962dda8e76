"""
FormAI API application: dashboard routes, the public embed API and
the error handler shared by both.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from formai import __version__
from formai.config import settings
from formai.database import init_db
from formai.core.exceptions import FormAIException
from formai.core.logging import configure_logging
from formai.schemas.common import HealthResponse
from formai.api import (
    auth, forums, questions, answers, personas, ai, interlinks, keywords, competitors,
    lead_forms, gated_content, analytics, privacy, embed, dashboard
)

logger = logging.getLogger(__name__)

ROUTERS = (
    auth, forums, questions, answers, personas, ai, interlinks, keywords, competitors,
    lead_forms, gated_content, analytics, privacy, dashboard,
    embed,  # public, keyed by forumId and X-API-Key
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await init_db()
    logger.info(f"FormAI API {__version__} ready on {settings.BASE_DOMAIN}")
    yield


app = FastAPI(
    title="FormAI API",
    description="SEO forums with AI personas, lead capture and embeddable widgets",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FormAIException)
async def formai_exception_handler(request: Request, exc: FormAIException):
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed upstream: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=exc.headers)


for module in ROUTERS:
    app.include_router(module.router)


@app.get("/")
async def root():
    return {
        "message": "FormAI API is running",
        "version": __version__,
        "docs": "/docs"
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="healthy", version=__version__)
