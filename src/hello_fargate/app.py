"""FastAPI application served by the deployed container."""

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from hello_fargate.core.settings import AppSettings

logger = logging.getLogger(__name__)

GREETING = "Hello, World!"

app = FastAPI(title="hello-fargate", version="0.1.0")


@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Return the greeting."""
    return GREETING


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for liveness/readiness probes."""
    return {"status": "ok"}


def serve(port: int | None = None) -> None:
    """Run the application with uvicorn."""
    listen_port = port if port is not None else AppSettings().port
    logger.info("Example app listening on port %s", listen_port)
    uvicorn.run(app, host="0.0.0.0", port=listen_port)  # nosec B104
