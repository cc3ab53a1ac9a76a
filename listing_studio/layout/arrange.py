"""
Grid arrangement and raster export of generated frames.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from listing_studio.config import settings
from listing_studio.errors import StateError
from listing_studio.host.base import (
    ConstraintType,
    ExportSettings,
    NodeType,
    RasterFormat,
    SceneHost,
    SceneNode,
    SolidPaint,
    WHITE,
)

logger = logging.getLogger("listing.arrange")

LISTING_SET_NAME = "Amazon Listing Set"


@dataclass
class ExportEntry:
    name: str
    bytes: bytes


def normalize_format(fmt: Any) -> RasterFormat:
    """PNG stays PNG; anything else exports as JPEG."""
    return RasterFormat.PNG if fmt == "PNG" or fmt == RasterFormat.PNG else RasterFormat.JPEG


def resolve_frame(host: SceneHost, node_id: Any) -> Optional[SceneNode]:
    if not isinstance(node_id, str):
        return None
    node = host.get_node(node_id)
    if node is None or node.type != NodeType.FRAME:
        return None
    return node


def arrange_grid(
    host: SceneHost,
    frames: Sequence[SceneNode],
    columns: Any = settings.GRID_COLUMNS,
    gap: Any = settings.GRID_GAP_PX,
) -> SceneNode:
    """
    Move frames into a new parent frame, row-major.

    Cell size comes from the first frame; the set is assumed uniform.

    Args:
        host: Scene host
        frames: Frames to arrange, in order
        columns: Cells per row (3 when not a positive number)
        gap: Spacing between cells in both axes (80 when not a number)

    Returns:
        The parent frame, sized to bound the grid exactly
    """
    if not frames:
        raise StateError("Nothing to arrange")

    cols = columns if isinstance(columns, int) and not isinstance(columns, bool) and columns > 0 else 3
    spacing = gap if isinstance(gap, (int, float)) and not isinstance(gap, bool) else 80
    rows = math.ceil(len(frames) / cols)

    cell_w = frames[0].width
    cell_h = frames[0].height

    parent = host.create_frame()
    parent.name = LISTING_SET_NAME
    parent.fills = [SolidPaint(WHITE)]
    parent.layout_mode = "NONE"
    parent.resize(cols * cell_w + (cols - 1) * spacing, rows * cell_h + (rows - 1) * spacing)
    host.append_to_page(parent)

    for i, frame in enumerate(frames):
        frame.x = (i % cols) * (cell_w + spacing)
        frame.y = (i // cols) * (cell_h + spacing)
        parent.append_child(frame)

    logger.info(f"Arranged {len(frames)} frame(s) in {cols}x{rows} grid as {parent.id}")
    return parent


def focus_on_canvas(host: SceneHost, node: SceneNode) -> None:
    """Center node in the viewport, select it and bring it into view."""
    center_x, center_y = host.viewport_center()
    node.x = center_x - node.width / 2
    node.y = center_y - node.height / 2
    host.set_selection([node])
    host.scroll_and_zoom_into_view([node])


async def export_frame(host: SceneHost, frame: SceneNode, fmt: Any, width_px: int) -> ExportEntry:
    raster_format = normalize_format(fmt)
    data = await host.export_async(
        frame,
        ExportSettings(format=raster_format, constraint=ConstraintType.WIDTH, value=width_px),
    )
    return ExportEntry(name=f"{frame.name}.{raster_format.extension}", bytes=data)


async def export_all(host: SceneHost, ids: Sequence[Any], fmt: Any, width_px: int) -> List[ExportEntry]:
    """
    Export every id that still resolves to a frame; others are skipped.
    """
    entries = []
    for node_id in ids:
        frame = resolve_frame(host, node_id)
        if frame is None:
            logger.info(f"Skipping export of missing frame {node_id}")
            continue
        entries.append(await export_frame(host, frame, fmt, width_px))
    return entries
