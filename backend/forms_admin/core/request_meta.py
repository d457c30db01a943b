"""Client metadata captured from incoming requests.

The service runs behind Cloudflare, so the client IP comes from
CF-Connecting-IP when present, then the first X-Forwarded-For hop, then the
socket peer.
"""

from dataclasses import dataclass

from fastapi import Request


@dataclass(frozen=True)
class RequestMeta:
    """Request metadata stored alongside codes, sessions and submissions.

    Attributes:
        ip: Best-effort client IP ("" when unknown).
        user_agent: User-Agent header ("" when absent).
        origin: Origin header ("" when absent).
        referrer: Referer header ("" when absent).
    """

    ip: str = ""
    user_agent: str = ""
    origin: str = ""
    referrer: str = ""


def client_ip(request: Request) -> str:
    """Resolve the client IP recorded with codes, sessions and submissions.

    Header-derived, so only fit for stored metadata; the rate limiter keys
    on the socket peer instead.
    """
    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip.strip()

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    if request.client is not None:
        return request.client.host
    return ""


def get_request_meta(request: Request) -> RequestMeta:
    """Extract RequestMeta from a request (FastAPI dependency)."""
    headers = request.headers
    return RequestMeta(
        ip=client_ip(request),
        user_agent=headers.get("user-agent", ""),
        origin=headers.get("origin", ""),
        referrer=headers.get("referer", ""),
    )
