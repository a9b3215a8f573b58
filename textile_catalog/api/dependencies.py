"""Shared FastAPI dependencies and converters."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, UploadFile, status

from textile_catalog.application.auth_service import AuthService
from textile_catalog.application.images import ImageUpload
from textile_catalog.catalog.filter_state import FilterStateStore
from textile_catalog.catalog.store import CatalogStore, get_catalog_store
from textile_catalog.domain.entities import AppUser
from textile_catalog.infrastructure.backends import get_local_state

# Service result error codes that are not server faults
RESULT_STATUS = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "NO_VARIANTS_SELECTED": status.HTTP_400_BAD_REQUEST,
    "PRODUCT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "TRANSPORT_ERROR": status.HTTP_502_BAD_GATEWAY,
}


def get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def get_current_user(request: Request) -> AppUser:
    """User resolved by the authentication middleware."""
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error_code": "UNAUTHORIZED", "message": "You must be logged in"},
        )
    return user


CurrentUser = Annotated[AppUser, Depends(get_current_user)]


def require_admin(user: CurrentUser) -> AppUser:
    """Admin-only guard.

    Raises:
        PermissionDeniedError: If the user is not an admin.
    """
    AuthService.require_admin(user)
    return user


AdminUser = Annotated[AppUser, Depends(require_admin)]


def get_store() -> CatalogStore:
    return get_catalog_store()


Store = Annotated[CatalogStore, Depends(get_store)]


def get_filter_state(user: CurrentUser) -> FilterStateStore:
    """Persisted listing filters of the signed-in user."""
    return FilterStateStore(get_local_state(user.uid))


def raise_for_result(error_code: str | None, error: str | None, fallback: str) -> None:
    """Raise the HTTPException for a failed service result.

    Args:
        error_code: Result error code.
        error: Result error message.
        fallback: Message used when the result carries none.
    """
    raise HTTPException(
        status_code=RESULT_STATUS.get(
            error_code or "", status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        detail={"error_code": error_code or "ERROR", "message": error or fallback},
    )


async def to_image_upload(file: UploadFile | None) -> ImageUpload | None:
    """Read an uploaded file into an ``ImageUpload``; None when absent."""
    if file is None or not file.filename:
        return None
    return ImageUpload(
        filename=file.filename,
        content_type=file.content_type or "",
        data=await file.read(),
    )
