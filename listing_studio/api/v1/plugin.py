"""
WebSocket channel to the plugin UI
==================================

/api/v1/plugin/ws
-----------------
Every text frame is a JSON object ``{"type": str, "payload": object}``;
binary frames are answered with an "error" message.

UI sends commands:
- "saveApiKey", "generateMainImage", "generateSix", "arrangeSix",
  "exportGenerated", "exportAllGenerated"
- "bridgeResponse": answer to a bridgeRequest

Server sends:
- "bridgeRequest": network work for the UI ("removeBg", "fetchBytesFromUrl")
- "notify": user-visible notification
- command results ("saveApiKeyResult", "generatedFrameId", ...)
- "error": a command failed
"""

import asyncio
import json
import logging
from typing import Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from listing_studio.bridge.session import BridgeSession
from listing_studio.commands import CommandContext, CommandRouter
from listing_studio.context import get_plugin_context

logger = logging.getLogger("listing.api.plugin")

router = APIRouter()


@router.websocket("/ws")
async def plugin_channel(websocket: WebSocket):
    """
    Serve one plugin UI connection.

    Bridge responses are settled inline; each command runs in its own task
    so responses keep flowing while a generation waits on the bridge.
    """
    await websocket.accept()

    plugin = get_plugin_context()
    bridge = BridgeSession(websocket.send_json, timeout=plugin.settings.BRIDGE_TIMEOUT_SECONDS)
    command_router = CommandRouter(CommandContext.for_connection(plugin, bridge, websocket.send_json))
    tasks: Set[asyncio.Task] = set()

    try:
        while True:
            incoming = await websocket.receive()
            if incoming["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(incoming.get("code", 1000))
            text = incoming.get("text")
            if text is None:
                await command_router.report_error("Malformed message: expected a text frame")
                continue
            try:
                message = json.loads(text)
            except json.JSONDecodeError as e:
                await command_router.report_error(f"Malformed message: {e.msg}")
                continue

            if command_router.is_bridge_response(message):
                command_router.handle_bridge_response(message)
                continue

            task = asyncio.create_task(command_router.dispatch(message))
            tasks.add(task)
            task.add_done_callback(_forget(tasks))

    except WebSocketDisconnect:
        logger.info(f"Plugin UI disconnected with {len(tasks)} command(s) running")
    finally:
        for task in list(tasks):
            task.cancel()
        bridge.close()


def _forget(tasks: Set[asyncio.Task]):
    def done(task: asyncio.Task) -> None:
        tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Command task crashed: {task.exception()}")
    return done
