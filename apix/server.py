"""FastAPI server for apix.

Launched by editor and desktop front-ends via: apix-server --port {port}
"""

from __future__ import annotations

import argparse
import asyncio
import os
import signal

import uvicorn
from fastapi import FastAPI

from apix import __version__
from apix.config import load_settings, setup_logging
from apix.routes.health import router as health_router
from apix.routes.integrate import router as integrate_router
from apix.routes.intent import router as intent_router
from apix.routes.plan import router as plan_router
from apix.routes.project import router as project_router
from apix.routes.recommend import router as recommend_router

app = FastAPI(
    title="apix-sidecar",
    version=__version__,
    description="HTTP interface to the apix integration pipeline",
)

# Register route modules.
app.include_router(project_router, prefix="/api")
app.include_router(recommend_router, prefix="/api")
app.include_router(plan_router, prefix="/api")
app.include_router(integrate_router, prefix="/api")
app.include_router(health_router, prefix="/api")
app.include_router(intent_router, prefix="/api")


@app.get("/api/health")
async def health():
    """Liveness endpoint."""
    return {"status": "ok", "version": __version__}


@app.post("/api/shutdown")
async def shutdown():
    """Graceful shutdown endpoint."""
    # Schedule shutdown after responding.
    asyncio.get_running_loop().call_later(0.5, lambda: os.kill(os.getpid(), signal.SIGTERM))
    return {"status": "shutting_down"}


def main():
    parser = argparse.ArgumentParser(description="apix sidecar server")
    parser.add_argument("--port", type=int, required=True, help="Port to listen on")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")
    args = parser.parse_args()

    settings = load_settings()
    setup_logging(settings.log_level)

    # Ready signal for the launching process.
    print(f"APIX_READY port={args.port}", flush=True)

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
