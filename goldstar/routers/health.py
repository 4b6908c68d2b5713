import logging
from datetime import datetime, timezone
from fastapi import APIRouter

logger = logging.getLogger("goldstar")

router = APIRouter()

@router.get("/test")
def health_check():
    return {"status": "Server is working"}

@router.get("/api/cron")
def cron_ping():
    """Keep-alive endpoint hit by an external scheduler"""
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    logger.info(f"Cron job pinged at: {timestamp}")
    return {
        "status": "success",
        "message": "Cron job executed successfully",
        "timestamp": timestamp
    }
