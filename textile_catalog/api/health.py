"""Health check and identity endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel

from textile_catalog.api.dependencies import CurrentUser
from textile_catalog.api.schemas import UserResponse

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    from textile_catalog.infrastructure.config import settings

    return HealthResponse(
        status="healthy",
        service="textile-catalog",
        version=settings.api_version,
    )


@router.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Check if service is ready to accept requests.

    Returns:
        Readiness status.
    """
    return {"status": "ready"}


@router.get("/me", response_model=UserResponse, tags=["Users"])
async def current_user(user: CurrentUser) -> UserResponse:
    """Signed-in user with the resolved role."""
    return UserResponse(
        uid=user.uid,
        email=user.email,
        role=user.role,
        is_admin=user.is_admin,
    )
