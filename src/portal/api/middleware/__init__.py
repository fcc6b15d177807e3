"""HTTP middleware for the portal API."""

from portal.api.middleware.correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
