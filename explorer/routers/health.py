"""Health check endpoint.

Returns service status including document store connectivity and scheduler
state.  Responds 503 when the store cannot be reached.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter
from starlette.responses import JSONResponse

from explorer.core.config import settings
from explorer.db.supabase import get_supabase
from explorer.scheduler.jobs import is_scheduler_running

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check() -> Any:
    """Return liveness plus a real round-trip to the posts table."""
    db_status = "disconnected"

    try:
        client = get_supabase()
        result = (
            client.table(settings.SUPABASE_POSTS_TABLE)
            .select("post_id")
            .limit(1)
            .execute()
        )
        if result is not None:
            db_status = "connected"
    except Exception:
        logger.warning("health_check_store_unreachable", exc_info=True)

    payload: dict[str, Any] = {
        "success": db_status == "connected",
        "message": "Server is running",
        "database": db_status,
        "scheduler": "running" if is_scheduler_running() else "stopped",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if db_status != "connected":
        return JSONResponse(status_code=503, content=payload)

    return payload
