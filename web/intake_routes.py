"""
Emergency Leak Service Routes - Proxy API for the Intake Form

The browser never talks to the upstream intake API directly; these
routes hold the API key and shape responses.

Routes:
- POST /api/emergency-leak-service         - Submit a service order request
- POST /api/emergency-leak-service/lookup  - Look up previous service orders
- GET  /api/emergency-leak-service/status  - Processing status by referenceId

Error shape is always {"message": ...}; upstream failures add
upstreamStatus and details.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from upstream import (
    IntakeApiClient,
    UpstreamError,
    UpstreamNotConfiguredError,
    UpstreamTimeoutError,
)
from utils.config import Config

logger = logging.getLogger(__name__)


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(prefix="/api/emergency-leak-service", tags=["emergency-leak-service"])


def get_intake_client(request: Request) -> IntakeApiClient:
    """
    Dependency returning the shared upstream client.

    The client is created on first use and kept on app.state.
    """
    client = getattr(request.app.state, "intake_client", None)
    if client is None:
        client = IntakeApiClient.from_config(Config.load())
        request.app.state.intake_client = client
    return client


# =============================================================================
# Request Models
# =============================================================================


class LookupRequest(BaseModel):
    """Lookup criteria; at least one of JobNo / EmailAddress is required."""

    JobNo: Optional[str] = None
    EmailAddress: Optional[str] = None
    City: Optional[str] = None
    Zip: Optional[str] = None

    def normalised(self) -> dict[str, str]:
        return {
            "JobNo": (self.JobNo or "").strip(),
            "EmailAddress": (self.EmailAddress or "").strip(),
            "City": (self.City or "").strip(),
            "Zip": (self.Zip or "").strip(),
        }


# =============================================================================
# Error Shaping
# =============================================================================


def upstream_error_response(error: UpstreamError, fallback: str) -> JSONResponse:
    """
    Translate an UpstreamError into a JSON response.

    Not configured -> 500, timeout -> 504, no response -> 502,
    upstream 5xx -> 502, upstream 4xx passed through.
    """
    if isinstance(error, UpstreamNotConfiguredError):
        return JSONResponse({"message": error.message}, status_code=500)

    if isinstance(error, UpstreamTimeoutError):
        return JSONResponse(
            {"message": "Upstream API timed out.", "details": error.message},
            status_code=504,
        )

    if error.status is None:
        return JSONResponse(
            {"message": "Unable to connect to upstream API.", "details": error.details},
            status_code=502,
        )

    return JSONResponse(
        {
            "message": fallback,
            "upstreamStatus": error.status,
            "details": error.details,
        },
        status_code=502 if error.status >= 500 else error.status,
    )


# =============================================================================
# Routes
# =============================================================================


async def read_json_object(request: Request) -> dict[str, Any]:
    """
    Parse the request body as a JSON object.

    Raises:
        ValueError: If the body is not JSON or not an object
    """
    try:
        payload: Any = await request.json()
    except ValueError as e:
        raise ValueError("Request body must be JSON.") from e

    if not isinstance(payload, dict):
        raise ValueError("Request body must be a JSON object.")
    return payload


@router.post("")
async def submit_service_order(
    request: Request,
    client: IntakeApiClient = Depends(get_intake_client),
):
    """
    Forward a submission payload to the upstream intake API.

    Transient 503s are retried inside the client, on a worker thread.
    """
    try:
        payload = await read_json_object(request)
    except ValueError as e:
        return JSONResponse({"message": str(e)}, status_code=400)

    try:
        result = await run_in_threadpool(client.submit, payload)
    except UpstreamError as e:
        return upstream_error_response(e, "Submit request to upstream API failed.")

    logger.info("Service order submitted")
    return JSONResponse(result if result is not None else {}, status_code=200)


@router.post("/lookup")
async def lookup_service_orders(
    request: Request,
    client: IntakeApiClient = Depends(get_intake_client),
):
    """Look up previous service orders by job number or email."""
    if not client.is_configured:
        return upstream_error_response(UpstreamNotConfiguredError(), "")

    try:
        data = await read_json_object(request)
    except ValueError as e:
        return JSONResponse({"message": str(e)}, status_code=400)

    try:
        body = LookupRequest.model_validate(data)
    except ValidationError:
        return JSONResponse(
            {"message": "JobNo, EmailAddress, City and Zip must be strings."},
            status_code=400,
        )

    criteria = body.normalised()
    if not criteria["JobNo"] and not criteria["EmailAddress"]:
        return JSONResponse(
            {"message": "Provide at least a service order number or an email address."},
            status_code=400,
        )

    try:
        result = await run_in_threadpool(client.lookup, criteria)
    except UpstreamError as e:
        return upstream_error_response(e, "Lookup request to upstream API failed.")

    return JSONResponse(result, status_code=200)


@router.get("/status")
async def service_order_status(
    referenceId: Optional[str] = Query(None, description="Submission reference id"),
    client: IntakeApiClient = Depends(get_intake_client),
):
    """Proxy the upstream GetServiceOrderStatus endpoint."""
    if not client.is_configured:
        return upstream_error_response(UpstreamNotConfiguredError(), "")

    if not referenceId or not referenceId.strip():
        return JSONResponse(
            {"message": "Missing required query parameter: referenceId"},
            status_code=400,
        )

    try:
        result = await run_in_threadpool(client.status, referenceId.strip())
    except UpstreamError as e:
        return upstream_error_response(e, "Status request to upstream API failed.")

    return JSONResponse(result, status_code=200)
