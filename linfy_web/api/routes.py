"""Link routes: shorten, history, metrics, stats and the public redirect."""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from datetime import datetime, timezone

from .schemas import (
    ShortenRequest,
    LinkEnvelope,
    LinkResponse,
    HistoryEnvelope,
    HistoryItem,
    MetricsResponse,
    HealthResponse,
    ErrorResponse,
)
from ..dependencies import client_ip, require_user

router = APIRouter()


@router.post(
    "/shorten",
    response_model=LinkEnvelope,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid URL"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Create short URL",
    description=(
        "Shorten a URL for the authenticated user (bearer token or X-API-Key). "
        "Submitting a URL the user already shortened returns the existing link."
    ),
)
async def shorten_url(
    request: Request,
    body: ShortenRequest,
    user_id: str = Depends(require_user),
):
    """Create a shortened URL."""
    service = request.app.state.link_service

    link, created = await service.shorten(
        original_url=body.original_url,
        owner_id=user_id,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )

    return LinkEnvelope(
        data=LinkResponse(**link.to_dict()),
        message="URL shortened successfully" if created else "URL already exists",
    )


@router.get(
    "/history",
    response_model=HistoryEnvelope,
    responses={401: {"model": ErrorResponse, "description": "Authentication required"}},
    summary="Link history",
    description="List the caller's links, newest first.",
)
async def get_history(request: Request, user_id: str = Depends(require_user)):
    service = request.app.state.link_service

    links = await service.history(user_id)

    return HistoryEnvelope(data=[HistoryItem(**link.to_history_dict()) for link in links])


@router.get(
    "/metrics",
    response_model=MetricsResponse,
    summary="Service metrics",
    description="Total users, total links and total clicks.",
)
async def get_metrics(request: Request):
    service = request.app.state.link_service

    metrics = await service.metrics()

    return MetricsResponse(**metrics)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.link_service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
        uptime=health["uptime"],
    )


@router.get(
    "/stats/{code}",
    response_model=LinkEnvelope,
    responses={404: {"model": ErrorResponse, "description": "Short code not found"}},
    summary="Link statistics",
    description="Get the full record of a short link, including its click count.",
)
async def get_stats(request: Request, code: str):
    service = request.app.state.link_service

    link = await service.stats(code)

    return LinkEnvelope(data=LinkResponse(**link.to_dict()))


# Registered last: matches any single path segment
@router.get(
    "/{code}",
    status_code=status.HTTP_302_FOUND,
    response_class=RedirectResponse,
    responses={404: {"model": ErrorResponse, "description": "Short code not found"}},
    summary="Follow short link",
    description="Count a click and redirect to the original URL.",
)
async def redirect_short_url(request: Request, code: str):
    service = request.app.state.link_service

    link = await service.redirect(code)

    return RedirectResponse(url=link.original_url, status_code=status.HTTP_302_FOUND)
