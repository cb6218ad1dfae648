"""
Server entry point: FastAPI app setup and route configuration.
Sets up the FastAPI server with CORS and the scan endpoint.
"""

from __future__ import annotations

import contextlib
import json
import os
from collections.abc import AsyncGenerator

import dotenv
import fastapi
import pydantic
import uvicorn
from fastapi.middleware import cors
from starlette import responses

from cookiecare.agents import config
from cookiecare.models import scan as scan_models
from cookiecare.pipeline import scan
from cookiecare.utils import errors, logger

dotenv.load_dotenv()

log = logger.create_logger("Server")

IS_PRODUCTION = os.environ.get("ENVIRONMENT", "development") == "production"

URL_REQUIRED = "URL is required"

MALFORMED_JSON_MESSAGE = (
    "An AI analysis step failed due to invalid data format. "
    "This can happen with complex sites. Please try again."
)


@contextlib.asynccontextmanager
async def lifespan(_app: fastapi.FastAPI) -> AsyncGenerator[None]:
    """Log server start and warn when no LLM backend is configured."""
    log.section("Cookie Care Server Started")
    log.info("Environment", {"env": "production" if IS_PRODUCTION else "development"})
    config_error = config.validate_llm_config()
    if config_error:
        log.warn(config_error)
    yield


app = fastapi.FastAPI(title="Cookie Care Scanner", lifespan=lifespan)

# ============================================================================
# Middleware
# ============================================================================

app.add_middleware(
    cors.CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Helpers
# ============================================================================


def _error_response(status_code: int, message: str) -> responses.JSONResponse:
    return responses.JSONResponse(status_code=status_code, content={"error": message})


def describe_scan_failure(url: str, error: Exception) -> str:
    """User-facing message for a failed scan of *url*."""
    message = errors.get_error_message(error)
    if errors.is_malformed_json_error(error):
        return f"{MALFORMED_JSON_MESSAGE} Details: {message}"
    return f"Failed to scan {url}. {message}"


async def _read_scan_request(request: fastapi.Request) -> scan_models.ScanRequest | None:
    """Parse the request body, or ``None`` when it is not a usable object."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(body, dict):
        return None
    try:
        return scan_models.ScanRequest.model_validate(body)
    except pydantic.ValidationError:
        return None


# ============================================================================
# API Routes
# ============================================================================


@app.post("/scan")
@app.post("/api/scan")
async def scan_endpoint(request: fastapi.Request) -> responses.JSONResponse:
    """Run a tri-state consent scan of the posted URL."""
    scan_request = await _read_scan_request(request)
    url = (scan_request.url or "").strip() if scan_request else ""
    if not url:
        return _error_response(400, URL_REQUIRED)

    log.info("Incoming scan request", {"url": url})
    try:
        result = await scan.run_scan(url)
    except Exception as error:
        return _error_response(500, describe_scan_failure(url, error))

    return responses.JSONResponse(content=result.to_json_dict())


def main() -> None:
    """Run the server with uvicorn."""
    uvicorn.run(
        "cookiecare.app:app",
        host=os.environ.get("UVICORN_HOST", "0.0.0.0"),
        port=int(os.environ.get("UVICORN_PORT", "3001")),
        reload=not IS_PRODUCTION,
    )


if __name__ == "__main__":
    main()
