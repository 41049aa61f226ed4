from supabase import Client
from app.config import settings
from datetime import datetime, timezone
from typing import Any, Dict, Tuple
import logging
import time

logger = logging.getLogger(__name__)

# probe latency above this is reported as degraded
DEGRADED_LATENCY_MS = 1000


def configured_services() -> Dict[str, str]:
    def state(flag: bool) -> str:
        return "configured" if flag else "missing"

    return {
        "weather": state(bool(settings.openweather_api_key)),
        "supabase": state(bool(settings.supabase_url)),
        "storage": "s3" if settings.s3_configured else "supabase",
        "encryption": state(bool(settings.field_encryption_key)),
    }


def check_database(supabase: Client) -> Dict[str, Any]:
    start = time.monotonic()
    try:
        supabase.table("profiles").select("id").limit(1).execute()
        connected = True
    except Exception as e:
        logger.error(f"Health check database probe failed: {e}")
        connected = False
    latency = int((time.monotonic() - start) * 1000)
    if not connected:
        status = "down"
    elif latency > DEGRADED_LATENCY_MS:
        status = "degraded"
    else:
        status = "operational"
    return {"connected": connected, "latency": latency, "status": status}


def check_health(supabase: Client) -> Tuple[Dict[str, Any], int]:
    """Health document and HTTP status (503 when the database is unreachable)"""
    started = time.monotonic()
    database = check_database(supabase)
    body = {
        "status": "healthy" if database["connected"] else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": database,
        "services": configured_services(),
        "metrics": {
            "response_time": int((time.monotonic() - started) * 1000),
            "version": settings.app_version,
            "environment": settings.environment,
        },
    }
    return body, 200 if database["connected"] else 503
