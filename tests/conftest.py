"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import io
from typing import Callable, Dict, List, Optional

import pytest
from PIL import Image

from listing_studio.host.memory import InMemoryScene
from listing_studio.storage import CredentialStore, InMemoryClientStorage

VALID_KEY = "validkey123"


def make_png(width: int = 40, height: int = 30, color=(200, 30, 30, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buffer, "PNG")
    return buffer.getvalue()


PRODUCT_PNG = make_png(40, 30, (200, 30, 30, 255))
CUTOUT_PNG = make_png(20, 20, (10, 120, 200, 255))
BACKGROUND_PNG = make_png(16, 16, (240, 220, 180, 255))


def bytes_reply(data: bytes) -> Callable[[dict], dict]:
    """UI handler answering with an image."""
    return lambda request_data: {"ok": True, "data": {"ok": True, "bytes": list(data)}}


def service_failure(message: str) -> Callable[[dict], dict]:
    """UI handler whose remote service reports a failure."""
    return lambda request_data: {"ok": True, "data": {"ok": False, "error": message}}


def bridge_failure(message: Optional[str] = None) -> Callable[[dict], dict]:
    """UI handler that fails the bridge call itself."""
    if message is None:
        return lambda request_data: {"ok": False}
    return lambda request_data: {"ok": False, "error": message}


class FakeUi:
    """
    Stands in for the plugin UI on the other end of the channel.

    Bridge requests are answered on the next loop iteration by the handler
    registered for their method; methods without a handler are never
    answered. Everything else sent to the UI is collected in ``messages``.
    """

    def __init__(self, handlers: Optional[Dict[str, Callable[[dict], dict]]] = None):
        self.handlers = handlers or {}
        self.bridge = None
        self.requests: List[dict] = []
        self.messages: List[dict] = []
        self.max_pending = 0

    async def send(self, message: dict) -> None:
        if message["type"] != "bridgeRequest":
            self.messages.append(message)
            return
        request = message["payload"]
        self.requests.append(request)
        self.max_pending = max(self.max_pending, self.bridge.pending_count)
        handler = self.handlers.get(request["method"])
        if handler is not None:
            response = {"id": request["id"], **handler(request["data"])}
            asyncio.get_running_loop().call_soon(self.bridge.resolve, response)

    def of_type(self, message_type: str) -> List[dict]:
        return [m for m in self.messages if m["type"] == message_type]


def default_handlers() -> Dict[str, Callable[[dict], dict]]:
    return {
        "removeBg": bytes_reply(CUTOUT_PNG),
        "fetchBytesFromUrl": bytes_reply(BACKGROUND_PNG),
    }


@pytest.fixture
def scene() -> InMemoryScene:
    """Scene with the product image placed and selected."""
    host = InMemoryScene()
    host.add_product_image(PRODUCT_PNG)
    return host


@pytest.fixture
def credentials() -> CredentialStore:
    return CredentialStore(InMemoryClientStorage({"removeBgApiKey": VALID_KEY}))


@pytest.fixture
def empty_credentials() -> CredentialStore:
    return CredentialStore(InMemoryClientStorage())
