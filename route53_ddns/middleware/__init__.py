"""Middleware components for request processing."""

from route53_ddns.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
