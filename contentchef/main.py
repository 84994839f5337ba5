"""ContentChef — FastAPI application entry point."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import content, export, generate, lint
from .services import content_repository, openai_client

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup checks
    if await openai_client.check_health():
        logger.info("Chat completions API is reachable")
    else:
        logger.warning("Chat completions API not reachable at startup — lesson generation will fail")

    repo = content_repository.get_repository()
    logger.info(
        f"Content cache: {len(repo.lesson_ids())} lessons, {len(repo.module_ids())} modules"
    )

    yield


app = FastAPI(
    title="ContentChef",
    description="Lesson content parsing, publishing and generation service",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS — allow the local web preview
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(content.router)
app.include_router(lint.router)
app.include_router(generate.router)
app.include_router(export.router)


@app.get("/health")
async def health() -> dict:
    repo = content_repository.get_repository()
    metadata = repo.metadata()
    return {
        "status": "ok",
        "openai": await openai_client.check_health(),
        "lessons": len(repo.lesson_ids()),
        "modules": len(repo.module_ids()),
        "last_updated": metadata.last_updated_timestamp if metadata else None,
    }


@app.get("/")
async def root() -> dict:
    return {"message": "ContentChef API", "docs": "/docs"}
