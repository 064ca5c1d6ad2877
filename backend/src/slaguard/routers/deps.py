"""Request-scoped accessors for components built by the application factory."""

from fastapi import Request

from slaguard.config import Settings
from slaguard.repositories.base import Repository


def get_repository(request: Request) -> Repository:
    return request.app.state.repository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
