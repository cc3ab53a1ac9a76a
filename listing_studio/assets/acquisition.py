import logging
import random
from typing import Any, Optional
from urllib.parse import quote

from pydantic import ValidationError as PayloadValidationError

from listing_studio.config import settings
from listing_studio.bridge.schemas import UiResult
from listing_studio.bridge.session import BridgeSession
from listing_studio.errors import (
    MissingCredentialError,
    ProtocolError,
    RemoteError,
    SelectionError,
)
from listing_studio.host.base import ConstraintType, ExportSettings, RasterFormat, SceneHost
from listing_studio.storage.credentials import CredentialStore

logger = logging.getLogger("listing.assets")

REMOVE_BG_METHOD = "removeBg"
FETCH_URL_METHOD = "fetchBytesFromUrl"


def build_background_url(prompt: str, size_px: int, seed: Optional[int] = None) -> str:
    """
    Build the text-to-image URL for an AI background.

    Args:
        prompt: Free-text description of the background
        size_px: Width and height of the requested image
        seed: Generator seed (random when omitted)

    Returns:
        URL the UI context can download the image from
    """
    if seed is None:
        seed = random.randrange(1_000_000)
    encoded = quote(prompt, safe="-_.!~*'()")
    return (
        f"{settings.BACKGROUND_IMAGE_URL}{encoded}"
        f"?nologo=1&width={size_px}&height={size_px}&seed={seed}"
    )


class AssetAcquisition:
    """
    Turns the host selection into a product cutout.

    Network work (background removal, background download) is never done
    here: it is requested from the UI context over the bridge.
    """

    def __init__(
        self,
        host: SceneHost,
        bridge: BridgeSession,
        credentials: CredentialStore,
        default_api_key: Optional[str] = settings.DEFAULT_REMOVE_BG_API_KEY,
    ):
        self.host = host
        self.bridge = bridge
        self.credentials = credentials
        self.default_api_key = default_api_key

    async def export_selection(self, scale: Any = 1) -> bytes:
        """
        Rasterize the single selected node as PNG.

        Args:
            scale: Upscaling factor; anything below 1 or non-numeric exports at 1x

        Returns:
            PNG bytes

        Raises:
            SelectionError: Not exactly one node is selected
        """
        selection = self.host.get_selection()
        if len(selection) != 1:
            raise SelectionError("Please select exactly one node containing the product image")

        if isinstance(scale, bool) or not isinstance(scale, (int, float)) or scale <= 0:
            scale = 1
        node = selection[0]
        logger.info(f"Exporting selection {node.id} at {max(1, scale)}x")
        return await self.host.export_async(
            node,
            ExportSettings(format=RasterFormat.PNG, constraint=ConstraintType.SCALE, value=max(1, scale)),
        )

    async def _api_key(self) -> str:
        stored = await self.credentials.load()
        api_key = (stored and str(stored).strip()) or (self.default_api_key and self.default_api_key.strip())
        if not api_key:
            raise MissingCredentialError("Missing remove.bg API key. Save it in the UI first.")
        return api_key

    async def remove_background(self, image_bytes: bytes) -> bytes:
        """Send the image to the UI context for remove.bg and return the cutout."""
        api_key = await self._api_key()
        logger.info(f"Requesting background removal for {len(image_bytes)} bytes")
        data = await self.bridge.call(
            REMOVE_BG_METHOD, {"apiKey": api_key, "imageBytes": list(image_bytes)}
        )
        return _unwrap_bytes(data, REMOVE_BG_METHOD, "remove.bg failed")

    async def fetch_remote_image(self, url: str) -> bytes:
        """Download an image through the UI context. Callers treat failure as "no image"."""
        data = await self.bridge.call(FETCH_URL_METHOD, {"url": url})
        return _unwrap_bytes(data, FETCH_URL_METHOD, "fetch url failed")


def _unwrap_bytes(data: Any, method: str, fallback_error: str) -> bytes:
    if not isinstance(data, dict):
        raise RemoteError(fallback_error)
    try:
        result = UiResult.model_validate(data)
    except PayloadValidationError as e:
        raise ProtocolError(f"Malformed {method} result: {e.error_count()} error(s)") from e
    if not result.ok:
        raise RemoteError(result.error or fallback_error)
    if result.bytes is None:
        raise ProtocolError(f"{method} result carried no bytes")
    try:
        return bytes(result.bytes)
    except ValueError as e:
        raise ProtocolError(f"{method} result bytes out of range") from e
