"""Tests for the HTTP endpoints and the plugin WebSocket channel."""

from __future__ import annotations

import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from listing_studio.context import PluginContext, reset_plugin_context, set_plugin_context
from listing_studio.host.memory import InMemoryScene
from listing_studio.main import app
from listing_studio.storage import CredentialStore, InMemoryClientStorage
from tests.conftest import PRODUCT_PNG, VALID_KEY, default_handlers, service_failure

WS_PATH = "/api/v1/plugin/ws"
TERMINAL_TYPES = {
    "saveApiKeyResult",
    "generatedFrameId",
    "generatedFrameList",
    "arranged",
    "exportDone",
    "batchExportDone",
    "error",
}

client = TestClient(app)


@pytest.fixture(autouse=True)
def plugin():
    context = PluginContext(
        host=InMemoryScene(),
        credentials=CredentialStore(InMemoryClientStorage({"removeBgApiKey": VALID_KEY})),
    )
    set_plugin_context(context)
    yield context
    reset_plugin_context()


def _converse(ws, message, handlers=None):
    """Send one command, answer bridge requests, collect messages up to its result."""
    handlers = default_handlers() if handlers is None else handlers
    ws.send_json(message)
    received = []
    while True:
        incoming = ws.receive_json()
        received.append(incoming)
        if incoming["type"] == "bridgeRequest":
            request = incoming["payload"]
            ws.send_json({"type": "bridgeResponse", "payload": {"id": request["id"], **handlers[request["method"]](request["data"])}})
        elif incoming["type"] in TERMINAL_TYPES:
            return received


def test_root():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["service"] == "Listing Studio"


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_api_health_lists_commands():
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "generateSix" in data["commands"]


def test_place_product(plugin):
    response = client.post("/api/v1/scene/product?name=Mug", content=PRODUCT_PNG)

    assert response.status_code == 200
    data = response.json()
    assert (data["width"], data["height"]) == (40, 30)
    selection = plugin.host.get_selection()
    assert [node.id for node in selection] == [data["id"]]
    assert selection[0].name == "Mug"


def test_place_product_rejects_empty_body():
    assert client.post("/api/v1/scene/product", content=b"").status_code == 400


def test_place_product_rejects_non_image():
    assert client.post("/api/v1/scene/product", content=b"plain text").status_code == 415


def test_list_nodes(plugin):
    client.post("/api/v1/scene/product", content=PRODUCT_PNG)

    response = client.get("/api/v1/scene/nodes")

    assert response.status_code == 200
    (node,) = response.json()
    assert node["type"] == "RECTANGLE"
    assert node["children"] == 0


def test_ws_save_api_key(plugin):
    with client.websocket_connect(WS_PATH) as ws:
        received = _converse(ws, {"type": "saveApiKey", "payload": {"key": "newkey12345"}})

    assert received[0] == {"type": "notify", "payload": {"message": "API key saved"}}
    assert received[-1] == {"type": "saveApiKeyResult", "payload": {"ok": True}}


def test_ws_generate_six_round_trip(plugin):
    plugin.host.add_product_image(PRODUCT_PNG)

    with client.websocket_connect(WS_PATH) as ws:
        received = _converse(ws, {"type": "generateSix", "payload": {"sizePx": 400, "bgPrompt": "beach"}})
        arranged = _converse(ws, {"type": "arrangeSix", "payload": {}})

    requests = [m["payload"]["method"] for m in received if m["type"] == "bridgeRequest"]
    assert requests == ["removeBg", "fetchBytesFromUrl", "fetchBytesFromUrl"]
    ids = received[-1]["payload"]["ids"]
    assert len(ids) == 6
    assert plugin.generation_state.last_generated_ids == ids
    parent = plugin.host.get_node(arranged[-1]["payload"]["id"])
    assert [child.id for child in parent.children] == ids


def test_ws_generation_failure(plugin):
    plugin.host.add_product_image(PRODUCT_PNG)

    with client.websocket_connect(WS_PATH) as ws:
        received = _converse(ws, {"type": "generateMainImage", "payload": {}}, {"removeBg": service_failure("402 Payment Required")})

    assert received[-1] == {"type": "error", "payload": {"message": "402 Payment Required"}}
    assert plugin.generation_state.last_generated_ids == []


def test_ws_export_generated(plugin):
    plugin.host.add_product_image(PRODUCT_PNG)

    with client.websocket_connect(WS_PATH) as ws:
        generated = _converse(ws, {"type": "generateMainImage", "payload": {"sizePx": 300}})
        frame_id = generated[-1]["payload"]["id"]
        exported = _converse(ws, {"type": "exportGenerated", "payload": {"id": frame_id, "format": "PNG", "sizePx": 150}})

    done = exported[-1]
    assert done["type"] == "exportDone"
    assert done["payload"]["name"] == "01 Main 300x300.png"
    assert Image.open(io.BytesIO(bytes(done["payload"]["bytes"]))).size == (150, 150)


def test_ws_arrange_before_generate():
    with client.websocket_connect(WS_PATH) as ws:
        received = _converse(ws, {"type": "arrangeSix"})

    assert received[-1] == {"type": "error", "payload": {"message": "Nothing generated yet"}}


def test_ws_malformed_json_keeps_connection_open():
    with client.websocket_connect(WS_PATH) as ws:
        ws.send_text("{not json")
        first = ws.receive_json()
        second = ws.receive_json()
        received = _converse(ws, {"type": "saveApiKey", "payload": {"key": "x"}})

    assert first["type"] == "notify"
    assert second["type"] == "error"
    assert second["payload"]["message"].startswith("Malformed message")
    assert received[-1] == {"type": "saveApiKeyResult", "payload": {"ok": False}}


def test_ws_stray_bridge_response_ignored():
    with client.websocket_connect(WS_PATH) as ws:
        ws.send_json({"type": "bridgeResponse", "payload": {"id": "77", "ok": True}})
        received = _converse(ws, {"type": "saveApiKey", "payload": {"key": VALID_KEY}})

    assert [m["type"] for m in received] == ["notify", "saveApiKeyResult"]


def test_ws_binary_frame_reported_and_connection_kept():
    with client.websocket_connect(WS_PATH) as ws:
        ws.send_bytes(b"\x89PNG")
        first = ws.receive_json()
        second = ws.receive_json()
        received = _converse(ws, {"type": "saveApiKey", "payload": {"key": VALID_KEY}})

    assert first["type"] == "notify"
    assert second == {"type": "error", "payload": {"message": "Malformed message: expected a text frame"}}
    assert received[-1] == {"type": "saveApiKeyResult", "payload": {"ok": True}}
