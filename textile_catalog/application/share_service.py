"""Share selected color variants.

Builds a plain-text message from the product and the selected variants,
then tries a native multi-file share with the variant images attached.
When no attachment could be fetched, the target cannot share files, or
the share is rejected, it falls back to a WhatsApp deep link carrying
the message text.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import quote

import httpx
import structlog

from textile_catalog.domain.entities import ColorVariant, Product
from textile_catalog.domain.exceptions import ShareUnavailableError
from textile_catalog.infrastructure.config import settings

logger = structlog.get_logger()

WHATSAPP_SHARE_URL = "https://wa.me/?text="

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass
class ShareFile:
    """An attachment for a native share."""

    filename: str
    content_type: str
    data: bytes


class ShareTarget(ABC):
    """Native share capability of the client."""

    @abstractmethod
    def can_share(self, files: list[ShareFile]) -> bool:
        """Whether these files can be shared natively."""
        pass

    @abstractmethod
    async def share(self, files: list[ShareFile], text: str) -> None:
        """Share files with accompanying text.

        Raises:
            ShareUnavailableError: If the share is rejected or cancelled.
        """
        pass


class ShareChannel(str, Enum):
    NATIVE = "native"
    LINK = "link"


@dataclass
class ShareResult:
    """Outcome of a share request.

    Attributes:
        channel: NATIVE when the files were handed to the share target,
            LINK when the caller should open ``link``.
        message: The share text.
        link: WhatsApp deep link; set for the LINK channel.
        attachments: Names of the files fetched for the share.
        notice: Why a native share fell back to the link, if it did.
    """

    channel: ShareChannel | None = None
    message: str = ""
    link: str | None = None
    attachments: list[str] = field(default_factory=list)
    notice: str | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None


def select_variants(product: Product, variant_ids: Iterable[str]) -> list[ColorVariant]:
    """Selected active variants in product order.

    Inactive variants are never selectable, so their ids are ignored.
    """
    wanted = set(variant_ids)
    return [v for v in product.color_variants if v.id in wanted and v.is_active]


def build_share_message(
    product: Product,
    variants: list[ColorVariant],
    image_urls: dict[str, str] | None = None,
) -> str:
    """Build the share text.

    Args:
        product: Product being shared.
        variants: Selected variants, in the order to list them.
        image_urls: Variant id to download URL.

    Returns:
        Newline-joined message.
    """
    image_urls = image_urls or {}
    lines = [f"SKU: {product.sku}"]
    if product.description:
        lines.append(product.description)
    lines.append("Selected colors:")
    for variant in variants:
        line = f"- {variant.color_name}"
        if variant.variant_sku:
            line += f" (SKU: {variant.variant_sku})"
        url = image_urls.get(variant.id)
        if url:
            line += f" {url}"
        lines.append(line)
    return "\n".join(lines)


def build_whatsapp_link(message: str) -> str:
    """WhatsApp deep link with the message URI-component encoded."""
    return WHATSAPP_SHARE_URL + quote(message, safe=_URI_COMPONENT_SAFE)


def attachment_name(sku: str, color_name: str, content_type: str | None) -> str:
    """``<sku>-<colorName>.<ext>`` with whitespace runs replaced by ``_``.

    The extension is the content-type subtype, or ``jpg`` when there is none.
    """
    media_type = (content_type or "").split(";", 1)[0].strip()
    parts = media_type.split("/", 1)
    ext = parts[1] if len(parts) == 2 and parts[1] else "jpg"
    return re.sub(r"\s+", "_", f"{sku}-{color_name}.{ext}")


class ShareService:
    """Shares product variants natively or through a deep link.

    Example usage:
        service = ShareService(share_target=target)
        result = await service.share_variants(product, ["v1", "v2"], urls)
        if result.channel == ShareChannel.LINK:
            open(result.link)
    """

    def __init__(
        self,
        share_target: ShareTarget | None = None,
        timeout: float = 30.0,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            share_target: Native share capability; None means link only.
            timeout: Timeout for fetching attachment images.
            request_id: Request ID for correlation.
        """
        self.share_target = share_target
        self.timeout = timeout
        self.request_id = request_id
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_attachments(
        self,
        product: Product,
        variants: list[ColorVariant],
        image_urls: dict[str, str],
    ) -> list[ShareFile]:
        """Download variant images as share attachments.

        A variant without a URL, or whose download fails, is skipped.
        """
        client = await self._get_client()
        files: list[ShareFile] = []
        for variant in variants:
            url = image_urls.get(variant.id)
            if not url:
                continue
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.warning(
                    "Failed to fetch share image",
                    variant_id=variant.id,
                    error=str(e),
                    request_id=self.request_id,
                )
                continue

            content_type = response.headers.get("content-type", "")
            files.append(
                ShareFile(
                    filename=attachment_name(product.sku, variant.color_name, content_type),
                    content_type=content_type.split(";", 1)[0].strip() or "image/jpeg",
                    data=response.content,
                )
            )
        return files

    async def share_variants(
        self,
        product: Product,
        variant_ids: Iterable[str],
        image_urls: dict[str, str] | None = None,
    ) -> ShareResult:
        """Share the selected variants of a product.

        Args:
            product: Product being shared.
            variant_ids: Ids chosen by the user; inactive ones are ignored.
            image_urls: Variant id to download URL.

        Returns:
            ShareResult describing the channel used.
        """
        image_urls = image_urls or {}
        variants = select_variants(product, variant_ids)
        if not variants:
            return ShareResult(
                success=False,
                error="Select at least one color to share",
                error_code="NO_VARIANTS_SELECTED",
            )

        message = build_share_message(product, variants, image_urls)
        link = build_whatsapp_link(message)

        if self.share_target is None:
            return ShareResult(channel=ShareChannel.LINK, message=message, link=link)

        files = await self.fetch_attachments(product, variants, image_urls)
        names = [f.filename for f in files]
        if not files or not self.share_target.can_share(files):
            return ShareResult(
                channel=ShareChannel.LINK, message=message, link=link, attachments=names
            )

        try:
            await self.share_target.share(files, message)
        except ShareUnavailableError as e:
            logger.info(
                "Native share unavailable, falling back to link",
                product_id=product.id,
                error=e.message,
                request_id=self.request_id,
            )
            return ShareResult(
                channel=ShareChannel.LINK,
                message=message,
                link=link,
                attachments=names,
                notice="Sharing failed. Opened WhatsApp with the text instead.",
            )

        logger.info(
            "Variants shared",
            product_id=product.id,
            variant_count=len(variants),
            attachment_count=len(files),
            request_id=self.request_id,
        )
        return ShareResult(channel=ShareChannel.NATIVE, message=message, attachments=names)


def get_share_service(request_id: str | None = None) -> ShareService:
    """Get share service instance.

    Server-side callers have no native share target, so the result is
    always the deep link.
    """
    return ShareService(timeout=settings.http_timeout, request_id=request_id)
