"""FastAPI dependencies shared by the routers."""

from typing import Optional

from fastapi import Header, Request

from linfy.common.headers import get_client_ip


async def require_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, description="API key (used only without an Authorization header)"),
) -> str:
    """Resolve the caller from a bearer token or, failing that header, an API key."""
    authenticator = request.app.state.authenticator
    return await authenticator.authenticate(authorization, x_api_key)


async def require_session(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> str:
    """Resolve the caller from a bearer token only."""
    authenticator = request.app.state.authenticator
    return authenticator.authenticate_session(authorization)


def client_ip(request: Request) -> str:
    """Client address, honoring X-Forwarded-For only when configured."""
    config = request.app.state.config
    return get_client_ip(
        headers=dict(request.headers),
        peer_host=request.client.host if request.client else None,
        trust_forwarded_for=config.trust_forwarded_for,
    )
