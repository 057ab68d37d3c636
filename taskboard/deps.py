"""Dependency injection helpers for FastAPI."""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from .config import Settings
from .services.identity import AuthenticationError, IdentityProvider
from .services.task_service import TaskService


@lru_cache()
def get_settings() -> Settings:
    """Get application settings (cached)."""
    return Settings()


def get_settings_from_app(request: Request) -> Settings:
    """Get the settings the running application was created with."""
    return request.app.state.settings


def get_task_service(request: Request) -> TaskService:
    """Get the task service built during application startup."""
    return request.app.state.task_service


def get_identity_provider(request: Request) -> IdentityProvider:
    """Get the identity provider built during application startup."""
    return request.app.state.identity_provider


def get_current_owner(
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> str:
    """Authenticate the request and return the caller's owner identifier."""
    try:
        return identity.authenticate(authorization)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


CurrentOwner = Annotated[str, Depends(get_current_owner)]
TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]
