"""
Base command handler for Listing Studio.

Every inbound message type the UI can send (besides bridge responses) is
served by one CommandHandler subclass.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Type

from pydantic import BaseModel
from pydantic import ValidationError as PayloadValidationError

from listing_studio.assets.acquisition import AssetAcquisition
from listing_studio.bridge.session import BridgeSession
from listing_studio.commands.schemas import CommandPayload, OutboundMessage
from listing_studio.context import PluginContext
from listing_studio.errors import ValidationError
from listing_studio.generation.orchestrator import CompositionOrchestrator
from listing_studio.layout.engine import LayoutEngine

PostMessage = Callable[[dict], Awaitable[None]]


@dataclass
class CommandContext:
    """Everything a handler may use while serving one UI connection."""

    plugin: PluginContext
    bridge: BridgeSession
    post: PostMessage
    assets: AssetAcquisition
    layout: LayoutEngine
    orchestrator: CompositionOrchestrator

    @classmethod
    def for_connection(cls, plugin: PluginContext, bridge: BridgeSession, post: PostMessage) -> "CommandContext":
        """
        Wire the per-connection collaborators around the shared context.

        Args:
            plugin: Process-wide context
            bridge: Bridge session of this connection
            post: Coroutine function sending one message to the UI
        """
        assets = AssetAcquisition(
            plugin.host,
            bridge,
            plugin.credentials,
            default_api_key=plugin.settings.DEFAULT_REMOVE_BG_API_KEY,
        )
        layout = LayoutEngine(plugin.host)
        orchestrator = CompositionOrchestrator(
            assets,
            layout,
            plugin.generation_state,
            export_scale=plugin.settings.SELECTION_EXPORT_SCALE,
        )
        return cls(plugin, bridge, post, assets, layout, orchestrator)

    async def notify(self, message: str, timeout: Optional[int] = None) -> None:
        """Show a user-visible notification in the UI."""
        payload: Dict[str, Any] = {"message": message}
        if timeout is not None:
            payload["timeout"] = timeout
        await self.post(OutboundMessage(type="notify", payload=payload).model_dump())


class CommandHandler(ABC):
    """
    Base class for all command handlers.

    Subclasses set the inbound message type they serve and the schema of
    its payload, and implement handle().

    Example:
        ```python
        class PingCommand(CommandHandler):
            command_type = "ping"
            description = "Answers with pong"
            payload_schema = CommandPayload

            async def handle(self, payload, context):
                return OutboundMessage(type="pong")
        ```
    """

    command_type: str = ""
    description: str = ""
    payload_schema: Type[BaseModel] = CommandPayload

    def validate_payload(self, payload: Any) -> BaseModel:
        """
        Parse the raw payload into payload_schema.

        Raises:
            ValidationError: Payload has the wrong shape
        """
        try:
            return self.payload_schema.model_validate(payload if payload is not None else {})
        except PayloadValidationError as e:
            raise ValidationError(f"Invalid payload for {self.command_type}: {e.error_count()} error(s)") from e

    @abstractmethod
    async def handle(self, payload: Any, context: CommandContext) -> Optional[OutboundMessage]:
        """
        Serve one command.

        Args:
            payload: Validated payload (instance of payload_schema)
            context: Connection context

        Returns:
            Message to post back on success, or None
        """
        pass

    @classmethod
    def get_metadata(cls) -> Dict[str, Any]:
        return {
            "type": cls.command_type,
            "description": cls.description,
            "payload_schema": cls.payload_schema.model_json_schema(by_alias=True),
            "class": cls.__name__,
        }
