"""Shared API dependencies."""

from fastapi import Request

from nodecms.services.container import Services


def get_services(request: Request) -> Services:
    """FastAPI dependency that provides the services built at startup."""
    return request.app.state.services
