import logging
from typing import Any, Optional

from listing_studio.commands.base import CommandContext
from listing_studio.commands.registry import CommandRegistry, get_command_registry
from listing_studio.commands.schemas import OutboundMessage

logger = logging.getLogger("listing.router")

BRIDGE_RESPONSE = "bridgeResponse"


class CommandRouter:
    """
    Dispatches inbound UI messages.

    Bridge responses settle pending bridge calls. Every other type goes to
    its registered handler; any failure is reported to the UI as a
    notification plus an ``error`` message and never escapes dispatch().
    """

    def __init__(self, context: CommandContext, registry: Optional[CommandRegistry] = None):
        self.context = context
        self.registry = registry or get_command_registry()

    @staticmethod
    def is_bridge_response(message: Any) -> bool:
        return isinstance(message, dict) and message.get("type") == BRIDGE_RESPONSE

    def handle_bridge_response(self, message: dict) -> bool:
        return self.context.bridge.resolve(message.get("payload") or {})

    async def dispatch(self, message: Any) -> None:
        """
        Serve one inbound message.

        Args:
            message: Decoded ``{"type", "payload"}`` object
        """
        if not isinstance(message, dict) or not isinstance(message.get("type"), str):
            await self.report_error("Malformed message: expected an object with a string 'type'")
            return

        if self.is_bridge_response(message):
            self.handle_bridge_response(message)
            return

        command_type = message["type"]
        handler = self.registry.get(command_type)
        if handler is None:
            logger.warning(f"Ignoring unknown message type: {command_type}")
            return

        try:
            payload = handler.validate_payload(message.get("payload"))
            result = await handler.handle(payload, self.context)
            if result is not None:
                await self.context.post(result.model_dump())
        except Exception as e:
            logger.exception(f"Command {command_type} failed")
            await self.report_error(str(e) or e.__class__.__name__)

    async def report_error(self, message: str) -> None:
        await self.context.notify(message, timeout=self.context.plugin.settings.ERROR_NOTIFY_TIMEOUT_MS)
        await self.context.post(OutboundMessage(type="error", payload={"message": message}).model_dump())
