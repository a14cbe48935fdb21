"""FastAPI service for tax document upload, extraction and name review.

Users keep a tax return profile (taxpayer and spouse names), upload W-2 style
documents against it, run them through Google Document AI or a remote LLM
extractor, and confirm that the names on each document belong to the return.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import get_settings
from backend.db import init_db
from backend.routers import auth as auth_router
from backend.routers import documents as documents_router
from backend.routers import tax_returns as tax_returns_router
from backend.seed import seed_demo_data

settings = get_settings()

logger = logging.getLogger("taxdocs-api")
logging.basicConfig(level=settings["log_level"])

app = FastAPI(
    title="TaxDocs Review API",
    description="Upload tax documents, extract their fields, and reconcile names against the filer profile.",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings["allowed_origins"] or ["*"],
    allow_origin_regex=settings["allow_origin_regex"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(tax_returns_router.router)
app.include_router(documents_router.router)


@app.on_event("startup")
async def startup_event() -> None:
    init_db()
    if settings["auth_bypass"]:
        seed_demo_data()


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/")
async def root() -> Dict[str, str]:
    return {"service": "taxdocs-backend", "status": "ok"}


@app.exception_handler(HTTPException)
async def http_error_handler(_, exc: HTTPException):  # type: ignore[override]
    return fastapi_response(exc.status_code, {"detail": exc.detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(_, exc: Exception):  # type: ignore[override]
    logger.exception("Unhandled error: %s", exc)
    return fastapi_response(500, {"detail": "Internal server error"})


def fastapi_response(status_code: int, payload: Dict[str, Any], headers: Dict[str, str] | None = None):
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.app:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=True)
