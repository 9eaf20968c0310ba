"""Service container and request-time resolution helpers."""
from .container import ServiceContainer
from .resolver import resolve_service

__all__ = ["ServiceContainer", "resolve_service"]
