#src.registry.deps.services.py

from fastapi import Request

from src.registry.services.auth import AuthService
from src.registry.services.registry import RegistryService
from src.registry.services.reporting import ReportingService


def get_registry_service(request: Request) -> RegistryService:
    return request.app.state.registry


def get_reporting_service(request: Request) -> ReportingService:
    return request.app.state.reporting


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth
