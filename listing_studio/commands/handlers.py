import logging
from typing import Optional

from listing_studio.commands.base import CommandContext, CommandHandler
from listing_studio.commands.schemas import (
    ArrangeSixPayload,
    ExportAllGeneratedPayload,
    ExportGeneratedPayload,
    GenerateMainImagePayload,
    GenerateSixPayload,
    OutboundMessage,
    SaveApiKeyPayload,
)
from listing_studio.errors import HostError, NotFoundError
from listing_studio.layout.arrange import (
    arrange_grid,
    export_all,
    export_frame,
    focus_on_canvas,
    resolve_frame,
)

logger = logging.getLogger("listing.commands")


class SaveApiKeyCommand(CommandHandler):
    command_type = "saveApiKey"
    description = "Validate and persist the remove.bg API key"
    payload_schema = SaveApiKeyPayload

    async def handle(self, payload: SaveApiKeyPayload, context: CommandContext) -> Optional[OutboundMessage]:
        result = await context.plugin.credentials.save(payload.key)
        await context.notify("API key saved" if result.ok else "Invalid API key")
        return OutboundMessage(type="saveApiKeyResult", payload=result.model_dump())


class GenerateMainImageCommand(CommandHandler):
    command_type = "generateMainImage"
    description = "Build the white-background main image from the selection"
    payload_schema = GenerateMainImagePayload

    async def handle(self, payload: GenerateMainImagePayload, context: CommandContext) -> Optional[OutboundMessage]:
        await context.notify("Generating main image…")
        run = await context.orchestrator.generate_main(payload.size_px)
        await context.notify("Main image created")
        return OutboundMessage(type="generatedFrameId", payload={"id": run.frame_ids[0]})


class GenerateSixCommand(CommandHandler):
    command_type = "generateSix"
    description = "Build all six listing templates from the selection"
    payload_schema = GenerateSixPayload

    async def handle(self, payload: GenerateSixPayload, context: CommandContext) -> Optional[OutboundMessage]:
        await context.notify("Generating 6 listing images…")
        run = await context.orchestrator.generate_six(payload.size_px, payload.bg_prompt)
        await context.notify("6 images created")
        return OutboundMessage(type="generatedFrameList", payload={"ids": run.frame_ids})


class ArrangeSixCommand(CommandHandler):
    command_type = "arrangeSix"
    description = "Lay the last generated set out in a grid"
    payload_schema = ArrangeSixPayload

    async def handle(self, payload: ArrangeSixPayload, context: CommandContext) -> Optional[OutboundMessage]:
        plugin = context.plugin
        ids = plugin.generation_state.require_generated()
        frames = [frame for frame in (resolve_frame(plugin.host, node_id) for node_id in ids) if frame is not None]
        if not frames:
            raise NotFoundError("Frames not found")

        parent = arrange_grid(
            plugin.host, frames,
            columns=plugin.settings.GRID_COLUMNS,
            gap=plugin.settings.GRID_GAP_PX,
        )
        try:
            focus_on_canvas(plugin.host, parent)
        except HostError as e:
            logger.warning(f"Could not bring {parent.id} into view: {e}")

        await context.notify("Arranged on canvas")
        return OutboundMessage(type="arranged", payload={"id": parent.id})


class ExportGeneratedCommand(CommandHandler):
    command_type = "exportGenerated"
    description = "Rasterize one generated frame"
    payload_schema = ExportGeneratedPayload

    async def handle(self, payload: ExportGeneratedPayload, context: CommandContext) -> Optional[OutboundMessage]:
        frame = resolve_frame(context.plugin.host, payload.id)
        if frame is None:
            raise NotFoundError("Generated frame not found")

        entry = await export_frame(context.plugin.host, frame, payload.format, payload.size_px)
        await context.notify("Export ready")
        return OutboundMessage(type="exportDone", payload={"name": entry.name, "bytes": list(entry.bytes)})


class ExportAllGeneratedCommand(CommandHandler):
    command_type = "exportAllGenerated"
    description = "Rasterize a batch of generated frames, skipping missing ones"
    payload_schema = ExportAllGeneratedPayload

    async def handle(self, payload: ExportAllGeneratedPayload, context: CommandContext) -> Optional[OutboundMessage]:
        entries = await export_all(context.plugin.host, payload.ids, payload.format, payload.size_px)
        await context.notify("All exports ready")
        return OutboundMessage(
            type="batchExportDone",
            payload={"entries": [{"name": e.name, "bytes": list(e.bytes)} for e in entries]},
        )


BUILTIN_COMMANDS = [
    SaveApiKeyCommand,
    GenerateMainImageCommand,
    GenerateSixCommand,
    ArrangeSixCommand,
    ExportGeneratedCommand,
    ExportAllGeneratedCommand,
]
