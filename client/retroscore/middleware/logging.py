import json
import logging
import time
import uuid

import httpx

logger = logging.getLogger("retroscore.http")


async def log_request(request: httpx.Request) -> None:
    """httpx request hook: tag the request and remember when it left."""
    request.extensions["retroscore_request_id"] = str(uuid.uuid4())[:8]
    request.extensions["retroscore_started"] = time.monotonic()


async def log_response(response: httpx.Response) -> None:
    """httpx response hook: one JSON line per completed request."""
    request = response.request
    started = request.extensions.get("retroscore_started")
    duration_ms = round((time.monotonic() - started) * 1000, 2) if started else None

    log_data = {
        "request_id": request.extensions.get("retroscore_request_id"),
        "method": request.method,
        "path": request.url.path,  # query may carry user ids
        "status": response.status_code,
        "duration_ms": duration_ms,
        "authenticated": "authorization" in request.headers,
    }

    level = logging.WARNING if response.status_code >= 400 else logging.INFO
    logger.log(level, json.dumps(log_data))


def event_hooks() -> dict[str, list]:
    return {"request": [log_request], "response": [log_response]}


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
