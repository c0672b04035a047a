"""
FastAPI router receiving access-log events.

The route guard posts one event per request here. Events are written to
the ``schoolflow.access`` logger; the endpoint always answers 200 so a
malformed event never causes a retry.
"""

import json
import logging

from fastapi import APIRouter, Request

from common.utils import success_response

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("schoolflow.access")

router = APIRouter(tags=["logger"])


@router.post("/logger")
async def receive_access_event(request: Request):
    """Write an access-log event."""
    try:
        event = await request.json()
    except ValueError as e:
        logger.debug(f"Discarding malformed access event: {e}")
        return success_response()

    if not isinstance(event, dict):
        return success_response()

    details = event.get("request")
    if not isinstance(details, dict):
        details = {}
    access_logger.info(
        "%s %s request_id=%s %s",
        details.get("method", "-"),
        details.get("path", "-"),
        event.get("requestId", "-"),
        json.dumps(details, default=str),
    )
    return success_response()
