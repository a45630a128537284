# src/middleware/request_log.py
import json
import logging
from datetime import datetime
from fastapi import Request

logger = logging.getLogger("ott_panel.requests")


async def log_requests(request: Request, call_next):
    """Log request details and timing as one JSON line."""
    start_time = datetime.utcnow()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        duration = (datetime.utcnow() - start_time).total_seconds()
        logger.info(json.dumps({
            "timestamp": start_time.isoformat(),
            "path": request.url.path,
            "method": request.method,
            "status_code": status_code,
            "duration": f"{duration:.3f}s",
            "client_ip": request.client.host if request.client else None,
        }))
