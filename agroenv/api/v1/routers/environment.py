"""
API router for location analysis endpoints.
"""
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from agroenv.api.dependencies import EnvironmentalServiceDep
from agroenv.api.rate_limit import ANALYSIS_RATE_LIMIT, limiter
from agroenv.api.v1.models.requests import EnvironmentalDataRequest
from agroenv.api.v1.models.responses import ErrorResponse, STREAM_EXAMPLE
from agroenv.domain.models import EnvironmentalRecord
from agroenv.infrastructure.api_constants import APIConstants
from agroenv.infrastructure.external_api_client import (
    ExternalAPIError,
    LocationNotFound,
)
from agroenv.streaming.sse import encode_stream


router = APIRouter(
    prefix="/environmental-data",
    tags=["environmental-data"],
)

RATE_LIMITED_RESPONSE = {429: {"description": "Too many requests"}}


@router.post(
    "",
    response_class=StreamingResponse,
    summary="Stream environmental analysis for a place",
    description="""
    Resolve a place name and stream its environmental metrics as Server-Sent Events.

    Events arrive in this order on success:
    1. `status` (geocoding), `coordinates`
    2. `status` (weather), four `weather` events: temperature, humidity,
       prevRainfall, avgRainfall
    3. `status` (soil), five `soil` events: type, ph, nitrogen, phosphorus, potassium
    4. `complete`

    Any failure ends the stream with a single `error` event
    (`{"error": "...", "kind": "..."}`); events already sent remain valid.
    """,
    responses={
        200: {
            "description": "Event stream",
            "content": {APIConstants.CONTENT_TYPE_EVENT_STREAM: {"example": STREAM_EXAMPLE}},
        },
        422: {"description": "Missing or blank location"},
        **RATE_LIMITED_RESPONSE,
    },
)
@limiter.limit(ANALYSIS_RATE_LIMIT)
async def stream_environmental_data(
    request: Request,
    body: EnvironmentalDataRequest,
    service: EnvironmentalServiceDep,
) -> StreamingResponse:
    """
    Stream the analysis of a location.

    Args:
        request: Incoming request (used by the rate limiter)
        body: Request body with the place name
        service: Environmental data service (injected dependency)

    Returns:
        StreamingResponse of framed events
    """
    return StreamingResponse(
        encode_stream(service.stream_events(body.location)),
        media_type=APIConstants.CONTENT_TYPE_EVENT_STREAM,
        headers=APIConstants.SSE_HEADERS,
    )


@router.post(
    "/snapshot",
    response_model=EnvironmentalRecord,
    response_model_by_alias=True,
    summary="Get the full environmental record for a place",
    description="""
    Run the same pipeline as the streaming endpoint and return the finished
    record in a single JSON response.
    """,
    responses={
        404: {"model": ErrorResponse, "description": "Location not found"},
        502: {"model": ErrorResponse, "description": "Upstream service failure"},
        **RATE_LIMITED_RESPONSE,
    },
)
@limiter.limit(ANALYSIS_RATE_LIMIT)
async def get_environmental_snapshot(
    request: Request,
    body: EnvironmentalDataRequest,
    service: EnvironmentalServiceDep,
) -> EnvironmentalRecord:
    """
    Get the aggregate record for a location.

    Args:
        request: Incoming request (used by the rate limiter)
        body: Request body with the place name
        service: Environmental data service (injected dependency)

    Returns:
        EnvironmentalRecord

    Raises:
        HTTPException: 404 if the location is unknown, 502 on upstream failure
    """
    try:
        return await service.fetch_record(body.location)

    except LocationNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)

    except ExternalAPIError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=f"Failed to fetch environmental data: {e.message}",
        )
