"""Source address derivation for inbound requests."""

from fastapi import Request

from route53_ddns.config import settings


def get_client_ip(request: Request, trust_forwarded_for: bool | None = None) -> str:
    """
    Derive the trusted source address of a request.

    Uses the first hop of X-Forwarded-For when forwarded headers are
    trusted (API Gateway, CloudFront or a load balancer in front of the
    service), falling back to the peer address reported by the server.

    Args:
        request: The incoming request
        trust_forwarded_for: Override for the trust_forwarded_for setting

    Returns:
        Source address string, or an empty string if none is known
    """
    if trust_forwarded_for is None:
        trust_forwarded_for = settings.trust_forwarded_for

    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    if request.client and request.client.host:
        return request.client.host
    return ""
