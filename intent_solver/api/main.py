"""FastAPI application for the intent solver."""

import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from intent_solver import __version__
from intent_solver.api.endpoints import router
from intent_solver.logging_config import configure_logging

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("INTENT_SOLVER_HOST", "0.0.0.0")
PORT = int(os.environ.get("INTENT_SOLVER_PORT", "8000"))
DEBUG = os.environ.get("INTENT_SOLVER_DEBUG", "false").lower() in ("true", "1", "yes")
JSON_LOGS = os.environ.get("INTENT_SOLVER_JSON_LOGS", "false").lower() in ("true", "1", "yes")

# Maximum request body size (10 MB)
MAX_REQUEST_SIZE = 10 * 1024 * 1024

app = FastAPI(
    title="Intent Batch Solver",
    description="Batch solver matching swap intents directly and through CFMM venues",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the solver API server.

    Configuration via environment variables:
    - INTENT_SOLVER_HOST: Host to bind to (default: 0.0.0.0)
    - INTENT_SOLVER_PORT: Port to bind to (default: 8000)
    - INTENT_SOLVER_DEBUG: Enable debug logging and reload mode (default: false)
    - INTENT_SOLVER_JSON_LOGS: Render logs as JSON lines (default: false)
    """
    configure_logging(debug=DEBUG, json=JSON_LOGS)
    uvicorn.run(
        "intent_solver.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
