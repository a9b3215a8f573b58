"""Share API endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from textile_catalog.api.dependencies import CurrentUser, get_request_id, raise_for_result
from textile_catalog.api.schemas import ErrorResponse, ShareRequest, ShareResponse
from textile_catalog.application.product_service import ProductService, get_product_service
from textile_catalog.application.share_service import get_share_service

router = APIRouter(prefix="/products", tags=["Share"])


def get_products(request: Request) -> ProductService:
    return get_product_service(request_id=get_request_id(request))


@router.post(
    "/{product_id}/share",
    response_model=ShareResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Share selected variants",
)
async def share_variants(
    product_id: str,
    body: ShareRequest,
    request: Request,
    user: CurrentUser,
    products: Annotated[ProductService, Depends(get_products)],
) -> ShareResponse:
    """Build the share message and WhatsApp link for the selected variants.

    Inactive variant ids are ignored. Variant image URLs that resolve are
    appended to their lines.

    Raises:
        HTTPException: If the product does not exist or nothing active
            was selected.
    """
    loaded = await products.get_product_detail(product_id)
    if not loaded.success or not loaded.detail:
        raise_for_result(loaded.error_code, loaded.error, "Failed to load product")

    service = get_share_service(request_id=get_request_id(request))
    try:
        result = await service.share_variants(
            loaded.detail.product,
            body.variant_ids,
            loaded.detail.variant_image_urls,
        )
    finally:
        await service.close()

    if not result.success:
        raise_for_result(result.error_code, result.error, "Failed to share")

    return ShareResponse(
        channel=result.channel.value if result.channel else "link",
        message=result.message,
        link=result.link,
        attachments=result.attachments,
        notice=result.notice,
    )
