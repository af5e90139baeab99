"""Header parsing utilities for Linfy."""

from typing import Dict, Optional


def extract_forwarded_headers(headers: Dict[str, str]) -> Dict[str, Optional[str]]:
    """Extract X-Forwarded-* headers from request.

    Args:
        headers: Request headers dictionary

    Returns:
        Dictionary with forwarded_proto, forwarded_host, forwarded_for
    """
    # Convert headers to lowercase for case-insensitive lookup
    headers_lower = {k.lower(): v for k, v in headers.items()}

    return {
        "forwarded_proto": headers_lower.get("x-forwarded-proto"),
        "forwarded_host": headers_lower.get("x-forwarded-host"),
        "forwarded_for": headers_lower.get("x-forwarded-for"),
    }


def get_client_ip(
    headers: Dict[str, str],
    peer_host: Optional[str],
    trust_forwarded_for: bool = False,
) -> str:
    """Resolve the client address of a request.

    Priority:
    1. First hop of X-Forwarded-For (only when the proxy is trusted)
    2. Socket peer address
    3. "unknown"

    Args:
        headers: Request headers
        peer_host: Address of the connected peer
        trust_forwarded_for: Whether X-Forwarded-For may be used

    Returns:
        Client address string
    """
    if trust_forwarded_for:
        forwarded_for = extract_forwarded_headers(headers)["forwarded_for"]
        if forwarded_for:
            first_hop = forwarded_for.split(",")[0].strip()
            if first_hop:
                return first_hop

    return peer_host or "unknown"


def is_https(headers: Dict[str, str], request_scheme: Optional[str] = None) -> bool:
    """Whether the request reached us (or the proxy in front of us) over https."""
    forwarded_proto = extract_forwarded_headers(headers)["forwarded_proto"]
    if forwarded_proto:
        return forwarded_proto.split(",")[0].strip().lower() == "https"
    return (request_scheme or "").lower() == "https"
