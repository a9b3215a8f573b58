"""Color variant API endpoints.

Provides:
- POST /products/{id}/variants - add a variant with its image (multipart)
- PATCH /products/{id}/variants/{variant_id} - update, optional new image
- DELETE /products/{id}/variants/{variant_id} - remove a variant
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from starlette.datastructures import FormData

from textile_catalog.api.dependencies import (
    CurrentUser,
    get_request_id,
    raise_for_result,
    to_image_upload,
)
from textile_catalog.api.schemas import ErrorResponse, VariantSaveResponse
from textile_catalog.application.variant_service import (
    VariantForm,
    VariantService,
    get_variant_service,
)

router = APIRouter(prefix="/products/{product_id}/variants", tags=["Variants"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


def get_service(request: Request) -> VariantService:
    """Get variant service with request ID."""
    return get_variant_service(request_id=get_request_id(request))


Service = Annotated[VariantService, Depends(get_service)]


def _sent_text(sent: FormData, name: str, value: str | None) -> str | None:
    """Submitted text, ``""`` for a field sent empty, None when not sent."""
    if name not in sent:
        return None
    return value or ""


@router.post(
    "",
    response_model=VariantSaveResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Add color variant",
)
async def create_variant(
    product_id: str,
    user: CurrentUser,
    service: Service,
    color_name: Annotated[str, Form()] = "",
    variant_sku: Annotated[str, Form()] = "",
    notes: Annotated[str, Form()] = "",
    image: Annotated[UploadFile | None, File()] = None,
) -> VariantSaveResponse:
    """Upload the image and append an active variant.

    Raises:
        HTTPException: If validation fails, the product does not exist,
            or a backend call fails.
    """
    result = await service.create_variant(
        product_id,
        VariantForm(color_name=color_name, variant_sku=variant_sku, notes=notes),
        await to_image_upload(image),
    )
    if not result.success or not result.variant_id:
        raise_for_result(result.error_code, result.error, "Failed to save variant")
    return VariantSaveResponse(variant_id=result.variant_id, image_path=result.image_path)


@router.patch(
    "/{variant_id}",
    response_model=VariantSaveResponse,
    responses=ERROR_RESPONSES,
    summary="Update color variant",
)
async def update_variant(
    product_id: str,
    variant_id: str,
    user: CurrentUser,
    service: Service,
    request: Request,
    color_name: Annotated[str | None, Form()] = None,
    variant_sku: Annotated[str | None, Form()] = None,
    notes: Annotated[str | None, Form()] = None,
    is_active: Annotated[bool | None, Form()] = None,
    image: Annotated[UploadFile | None, File()] = None,
) -> VariantSaveResponse:
    """Update the fields that were sent; the image is replaced only when one is sent.

    Fields left out keep their stored value. Sending ``variant_sku`` or
    ``notes`` empty clears it. An unknown ``variant_id`` changes nothing
    and still succeeds.
    """
    sent = await request.form()
    result = await service.update_variant(
        product_id,
        variant_id,
        VariantForm(
            color_name=_sent_text(sent, "color_name", color_name),
            variant_sku=_sent_text(sent, "variant_sku", variant_sku),
            notes=_sent_text(sent, "notes", notes),
            is_active=is_active,
        ),
        await to_image_upload(image),
    )
    if not result.success:
        raise_for_result(result.error_code, result.error, "Failed to save variant")
    return VariantSaveResponse(variant_id=variant_id, image_path=result.image_path)


@router.delete(
    "/{variant_id}",
    response_model=VariantSaveResponse,
    responses=ERROR_RESPONSES,
    summary="Delete color variant",
)
async def delete_variant(
    product_id: str,
    variant_id: str,
    user: CurrentUser,
    service: Service,
) -> VariantSaveResponse:
    result = await service.delete_variant(product_id, variant_id)
    if not result.success:
        raise_for_result(result.error_code, result.error, "Failed to delete variant")
    return VariantSaveResponse(variant_id=variant_id)
