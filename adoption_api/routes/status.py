"""Health check and status endpoints."""

import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from adoption_api.config import settings

# Module-level variable to track application start time
_app_start_time = time.time()

router = APIRouter(tags=["Health"])


@router.get("/status")
async def get_status(request: Request) -> JSONResponse:
    """
    Health check endpoint for monitoring and load balancers.

    Public (GET). Reports the storage backend the pipeline stores run on.

    Returns:
        JSONResponse with status, version, storage backend and uptime_seconds
    """
    uptime_seconds = int(time.time() - _app_start_time)

    return JSONResponse(
        status_code=200,
        content={
            "status": "ok",
            "version": request.app.version,
            "storage_backend": getattr(
                request.app.state, "storage_backend", settings.storage_backend
            ),
            "uptime_seconds": uptime_seconds,
        },
    )
