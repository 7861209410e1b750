"""Photolens — FastAPI Application.

This module is the single entry point for the web service.  It defines the
FastAPI ``app`` instance, all routes, and the ``main()`` CLI function that
launches the uvicorn server.

Architecture
------------
- **Access control** runs first on every gated route: the Origin header is
  checked by :mod:`photolens.core.access` before the request method or body
  is looked at, so a disallowed origin always gets 403, preflight included.
- **Analysis** is delegated to :class:`~photolens.core.pipeline.AnalysisPipeline`.
- **Errors** raised anywhere below are :class:`~photolens.core.errors.PhotolensError`
  subclasses; one exception handler turns them into ``{error, details}``
  bodies with the matching status code.
- **CORS headers** are computed per request from the access decision and
  attached to every gated response, errors included.

Endpoints
---------
=============  ==================  =====================================
Method         Path                Purpose
=============  ==================  =====================================
GET            ``/health``         Liveness probe (not gated)
OPTIONS, POST  ``/api/analyze``    Analyse a portrait photo
OPTIONS, POST  ``/api/upload``     Relay a photo to the media store
OPTIONS, GET   ``/api/models``     List available Gemini models
=============  ==================  =====================================

Any other method on a gated path returns 405.

Usage
-----
CLI (installed entry point)::

    photolens

Direct invocation::

    python -m photolens.api.main
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from photolens import __version__
from photolens.api.models import AnalyzeRequest, HealthResponse, ModelsResponse, UploadRequest
from photolens.core.access import cors_headers, enforce
from photolens.core.config import PhotolensConfig, config, get_config
from photolens.core.errors import (
    InvalidInput,
    MethodNotAllowed,
    PhotolensError,
    classify,
    error_body,
)
from photolens.core.generation import (
    RECOMMENDED_MODELS,
    GenerationClientBase,
    create_generation_client,
)
from photolens.core.pipeline import AnalysisPipeline
from photolens.core.uploads import client_ip, relay_upload

logger = logging.getLogger(__name__)

# Every standard method is routed to the gated handlers so the origin check
# always runs first; anything not in the per-route allowed set is answered
# with 405 by the handler itself.
_ROUTED_METHODS = ["OPTIONS", "HEAD", "GET", "POST", "PUT", "PATCH", "DELETE", "TRACE", "CONNECT"]

ANALYZE_METHODS = "OPTIONS,POST"
UPLOAD_METHODS = "OPTIONS,POST"
MODELS_METHODS = "OPTIONS,GET"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the generation client once and share it across requests."""
    app.state.generation_client = create_generation_client(config)
    logger.info(f"Generation backend: {config.generation_backend}")
    yield


app = FastAPI(
    title="Photolens",
    description="Portrait photo analysis with schema-constrained Gemini output.",
    version=__version__,
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Dependencies.
# ---------------------------------------------------------------------------


def get_generation_client(request: Request) -> GenerationClientBase:
    return request.app.state.generation_client


def get_pipeline(
    client: GenerationClientBase = Depends(get_generation_client),
    settings: PhotolensConfig = Depends(get_config),
) -> AnalysisPipeline:
    return AnalysisPipeline(client, settings)


def get_upload_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for the upload relay; ``None`` means the httpx default."""
    return None


# ---------------------------------------------------------------------------
# Exception handlers.
# ---------------------------------------------------------------------------


@app.exception_handler(PhotolensError)
async def handle_photolens_error(request: Request, exc: PhotolensError) -> JSONResponse:
    """Translate a taxonomy error into its HTTP response."""
    if exc.status_code >= 500:
        logger.error(
            f"{exc.kind} on {request.method} {request.url.path}: {exc.details}", exc_info=exc
        )
    else:
        logger.warning(f"{exc.kind} on {request.method} {request.url.path}: {exc.details}")
    headers = getattr(request.state, "cors_headers", None)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc), headers=headers)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Give framework errors (unknown path, etc.) the same body shape."""
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Render any exception that escaped the routes as an InternalError."""
    return await handle_photolens_error(request, classify(exc))


# ---------------------------------------------------------------------------
# Request helpers.
# ---------------------------------------------------------------------------


def _gate(request: Request, settings: PhotolensConfig, methods: str) -> None:
    """Run the access gate and record the CORS headers for the response."""
    request.state.cors_headers = cors_headers(None, methods)
    decision = enforce(request.headers.get("origin"), settings)
    request.state.cors_headers = cors_headers(decision, methods)


def _check_method(request: Request, allowed: str) -> None:
    if request.method not in allowed.split(","):
        raise MethodNotAllowed(f"{request.method} is not supported on {request.url.path}")


def _preflight(request: Request) -> Response:
    return Response(status_code=200, headers=request.state.cors_headers)


async def _read_json(request: Request) -> dict[str, Any]:
    body = await request.body()
    if not body:
        return {}
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidInput(f"Request body is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidInput("Request body must be a JSON object")
    return payload


def _validation_details(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


@app.api_route("/api/analyze", methods=_ROUTED_METHODS)
async def analyze(
    request: Request,
    settings: PhotolensConfig = Depends(get_config),
    pipeline: AnalysisPipeline = Depends(get_pipeline),
) -> Response:
    """Analyse a portrait photo.

    Order of checks: origin (403), preflight (200), method (405), body
    (400), then the pipeline.

    Returns:
        The validated analysis report, with ``tokenUsage`` when the model
        reported usage.

    Raises:
        PhotolensError: Any failure; rendered by the exception handler.
    """
    _gate(request, settings, ANALYZE_METHODS)
    if request.method == "OPTIONS":
        return _preflight(request)
    _check_method(request, ANALYZE_METHODS)

    payload = await _read_json(request)
    try:
        body = AnalyzeRequest.model_validate(payload)
    except ValidationError as exc:
        raise InvalidInput(_validation_details(exc)) from exc

    try:
        report = await pipeline.run(body.to_analysis_request())
    except PhotolensError:
        raise
    except Exception as exc:
        logger.error(f"Unexpected analysis failure: {exc}", exc_info=True)
        raise classify(exc) from exc

    return JSONResponse(status_code=200, content=report, headers=request.state.cors_headers)


@app.api_route("/api/upload", methods=_ROUTED_METHODS)
async def upload(
    request: Request,
    settings: PhotolensConfig = Depends(get_config),
    transport: httpx.AsyncBaseTransport | None = Depends(get_upload_transport),
) -> Response:
    """Relay a photo to the media store, tagging it with the caller IP."""
    _gate(request, settings, UPLOAD_METHODS)
    if request.method == "OPTIONS":
        return _preflight(request)
    _check_method(request, UPLOAD_METHODS)

    payload = await _read_json(request)
    try:
        body = UploadRequest.model_validate(payload)
    except ValidationError as exc:
        raise InvalidInput(_validation_details(exc)) from exc
    if not body.file:
        raise InvalidInput("No file provided")

    ip = client_ip(request.headers.get("x-forwarded-for"))
    try:
        asset = await relay_upload(
            body.file,
            body.tags,
            body.context,
            ip,
            settings,
            transport=transport,
        )
    except PhotolensError:
        raise
    except Exception as exc:
        logger.error(f"Unexpected upload failure: {exc}", exc_info=True)
        raise classify(exc) from exc

    return JSONResponse(status_code=200, content=asset, headers=request.state.cors_headers)


@app.api_route("/api/models", methods=_ROUTED_METHODS)
async def list_models(
    request: Request,
    settings: PhotolensConfig = Depends(get_config),
    client: GenerationClientBase = Depends(get_generation_client),
) -> Response:
    """List models available to the configured generation client."""
    _gate(request, settings, MODELS_METHODS)
    if request.method == "OPTIONS":
        return _preflight(request)
    _check_method(request, MODELS_METHODS)

    models = await client.list_models()
    body = ModelsResponse(
        models=models,
        count=len(models),
        recommended=list(RECOMMENDED_MODELS),
    )
    return JSONResponse(
        status_code=200,
        content=body.model_dump(),
        headers=request.state.cors_headers,
    )


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~photolens.core.config.config`
    (``PHOTOLENS_SERVER_HOST``, ``PHOTOLENS_SERVER_PORT``,
    ``PHOTOLENS_LOG_LEVEL``).  Defaults to ``0.0.0.0:8000``.

    This function is registered as the ``photolens`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(
        "photolens.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
