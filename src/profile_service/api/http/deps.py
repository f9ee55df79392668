"""FastAPI dependency implementations."""

from fastapi import Request

from src.profile_service.api.http.app_data import ApplicationDependencies
from src.profile_service.api.http.metrics import MetricsSink
from src.profile_service.core.services import DbSessionService, ProfileService


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_profile_service(request: Request) -> ProfileService:
    """Get the process-wide profile service."""
    return get_app_dependencies(request).profile_service


def get_database_service(request: Request) -> DbSessionService:
    return get_app_dependencies(request).database_service


def get_metrics(request: Request) -> MetricsSink:
    return get_app_dependencies(request).metrics
