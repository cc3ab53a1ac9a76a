import io
import sys
import os

from fastapi.testclient import TestClient
from PIL import Image

# Add the project root to sys.path
sys.path.append(os.getcwd())

from listing_studio.main import app


def make_png(width, height, color):
    buffer = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buffer, "PNG")
    return list(buffer.getvalue())


# Mock UI: answers bridge requests the way the plugin UI would
CUTOUT = make_png(200, 200, (10, 120, 200, 255))
BACKGROUND = make_png(64, 64, (240, 220, 180, 255))


def answer(request):
    method = request["method"]
    if method == "removeBg":
        print(f"Mock UI removing background ({len(request['data']['imageBytes'])} bytes)")
        return {"ok": True, "data": {"ok": True, "bytes": CUTOUT}}
    if method == "fetchBytesFromUrl":
        print(f"Mock UI fetching {request['data']['url'][:80]}...")
        return {"ok": True, "data": {"ok": True, "bytes": BACKGROUND}}
    return {"ok": False, "error": f"Unknown method {method}"}


def converse(ws, message):
    ws.send_json(message)
    while True:
        incoming = ws.receive_json()
        if incoming["type"] == "bridgeRequest":
            request = incoming["payload"]
            ws.send_json({"type": "bridgeResponse", "payload": {"id": request["id"], **answer(request)}})
        elif incoming["type"] == "notify":
            print(f"   notify: {incoming['payload']['message']}")
        else:
            return incoming


def main():
    print("\n--- Testing Plugin Bridge ---")
    with TestClient(app) as client:
        res = client.post("/api/v1/scene/product?name=Product", content=bytes(make_png(400, 300, (200, 30, 30, 255))))
        print(f"Placed product: {res.json()}")

        with client.websocket_connect("/api/v1/plugin/ws") as ws:
            print("1. Saving API key...")
            result = converse(ws, {"type": "saveApiKey", "payload": {"key": "verifykey123"}})
            print(f"✅ Result: {result['payload']}")

            print("\n2. Generating six templates...")
            result = converse(ws, {"type": "generateSix", "payload": {"sizePx": 1000, "bgPrompt": "marble countertop"}})
            if result["type"] == "error":
                print(f"❌ ERROR: {result['payload']['message']}")
                return
            ids = result["payload"]["ids"]
            print(f"✅ Frames: {ids}")

            print("\n3. Arranging...")
            result = converse(ws, {"type": "arrangeSix"})
            print(f"✅ Parent frame: {result['payload']}")

            print("\n4. Exporting all as JPG...")
            result = converse(ws, {"type": "exportAllGenerated", "payload": {"ids": ids, "format": "JPG", "sizePx": 500}})
            for entry in result["payload"]["entries"]:
                print(f"✅ {entry['name']}: {len(entry['bytes'])} bytes")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
