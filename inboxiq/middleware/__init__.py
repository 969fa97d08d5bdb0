"""
Middleware components for request processing.
"""

from inboxiq.middleware.request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
