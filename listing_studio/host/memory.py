"""
In-memory scene host rendered with Pillow.

Stands in for the design tool: keeps a single page of nodes, a selection
and a viewport, and rasterizes nodes on export. Frames clip their children.
"""

import hashlib
import io
import logging
from functools import lru_cache
from itertools import count
from typing import Dict, List, Optional, Sequence, Set, Tuple

from PIL import Image, ImageDraw, ImageFont, ImageOps, UnidentifiedImageError

from listing_studio.errors import HostError
from listing_studio.host.base import (
    Color,
    ConstraintType,
    ExportSettings,
    FontName,
    ImagePaint,
    NodeType,
    RasterFormat,
    SceneHost,
    SceneNode,
    SolidPaint,
    WHITE,
)

logger = logging.getLogger("listing.host")

# Tried in order; Pillow's bundled font is the last resort
FONT_CANDIDATES = {
    "Regular": ["Inter-Regular.ttf", "Inter.ttf", "DejaVuSans.ttf", "Arial.ttf", "arial.ttf"],
    "Bold": ["Inter-Bold.ttf", "DejaVuSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf"],
}


@lru_cache(maxsize=64)
def find_font(style: str, size: int):
    """Find a TrueType font for the style, falling back to Pillow's default."""
    for font_name in FONT_CANDIDATES.get(style, FONT_CANDIDATES["Regular"]):
        try:
            return ImageFont.truetype(font_name, size)
        except (OSError, IOError):
            continue
    return ImageFont.load_default(size=size)


class InMemoryScene(SceneHost):
    """A one-page document held in memory."""

    def __init__(self, available_fonts: Optional[Set[FontName]] = None):
        """
        Initialize an empty page.

        Args:
            available_fonts: Fonts load_font can load; None means any font
        """
        self._ids = count(1)
        self.page = SceneNode(id="0:1", type=NodeType.PAGE, name="Page 1", width=0, height=0)
        self._nodes: Dict[str, SceneNode] = {}
        self._images: Dict[str, Image.Image] = {}
        self._selection: List[SceneNode] = []
        self._center: Tuple[float, float] = (0.0, 0.0)
        self.available_fonts = available_fonts
        self.loaded_fonts: Set[FontName] = set()
        self.export_count = 0

    # ------------------------------------------------------------------
    # Node creation
    # ------------------------------------------------------------------

    def _create(self, node_type: NodeType, **attrs) -> SceneNode:
        node = SceneNode(id=f"1:{next(self._ids)}", type=node_type, **attrs)
        self._nodes[node.id] = node
        self.page.append_child(node)
        return node

    def create_frame(self) -> SceneNode:
        return self._create(NodeType.FRAME, name="Frame", fills=[SolidPaint(WHITE)])

    def create_rectangle(self) -> SceneNode:
        return self._create(NodeType.RECTANGLE, name="Rectangle", fills=[SolidPaint(Color.gray(0.85))])

    def create_ellipse(self) -> SceneNode:
        return self._create(NodeType.ELLIPSE, name="Ellipse", fills=[SolidPaint(Color.gray(0.85))])

    def create_text(self) -> SceneNode:
        return self._create(NodeType.TEXT, name="Text", width=0, height=0)

    def create_image(self, data: bytes) -> str:
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise HostError(f"Image is in an unsupported format: {e}") from e
        image_hash = hashlib.sha1(data).hexdigest()
        self._images[image_hash] = image.convert("RGBA")
        return image_hash

    def image_size(self, image_hash: str) -> Tuple[int, int]:
        return self._images[image_hash].size

    def add_product_image(self, data: bytes, name: str = "Product") -> SceneNode:
        """Place an image on the page at its pixel size and select it."""
        image_hash = self.create_image(data)
        width, height = self.image_size(image_hash)
        node = self.create_rectangle()
        node.name = name
        node.resize(width, height)
        node.fills = [ImagePaint(image_hash, scale_mode="FIT")]
        self.set_selection([node])
        return node

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    async def load_font(self, font_name: FontName) -> None:
        if self.available_fonts is not None and font_name not in self.available_fonts:
            raise HostError(f"Font not available: {font_name.family} {font_name.style}")
        self.loaded_fonts.add(font_name)

    def set_text(self, node: SceneNode, characters: str, font_name: FontName, font_size: float) -> None:
        if font_name not in self.loaded_fonts:
            raise HostError(f"Font not loaded: {font_name.family} {font_name.style}")
        node.characters = characters
        node.font_name = font_name
        node.font_size = font_size
        font = find_font(font_name.style, max(1, int(round(font_size))))
        left, top, right, bottom = font.getbbox(characters or " ")
        node.width = max(1, right)
        node.height = max(1, bottom)

    # ------------------------------------------------------------------
    # Document queries
    # ------------------------------------------------------------------

    def append_to_page(self, node: SceneNode) -> None:
        self.page.append_child(node)

    def get_node(self, node_id: str) -> Optional[SceneNode]:
        node = self._nodes.get(node_id)
        if node is None or node.removed:
            return None
        return node

    def top_level_nodes(self) -> List[SceneNode]:
        return list(self.page.children)

    def get_selection(self) -> List[SceneNode]:
        return [node for node in self._selection if not node.removed]

    def set_selection(self, nodes: Sequence[SceneNode]) -> None:
        self._selection = list(nodes)

    def viewport_center(self) -> Tuple[float, float]:
        return self._center

    def scroll_and_zoom_into_view(self, nodes: Sequence[SceneNode]) -> None:
        if not nodes:
            return
        left = min(n.x for n in nodes)
        top = min(n.y for n in nodes)
        right = max(n.x + n.width for n in nodes)
        bottom = max(n.y + n.height for n in nodes)
        self._center = ((left + right) / 2, (top + bottom) / 2)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    async def export_async(self, node: SceneNode, export_settings: ExportSettings) -> bytes:
        if node.removed:
            raise HostError(f"Node {node.id} has been removed")
        if export_settings.constraint == ConstraintType.WIDTH:
            scale = export_settings.value / node.width
        else:
            scale = export_settings.value
        if scale <= 0:
            raise HostError(f"Invalid export scale {scale}")

        image = self._render(node, scale)
        buffer = io.BytesIO()
        if export_settings.format == RasterFormat.JPEG:
            flat = Image.new("RGBA", image.size, (255, 255, 255, 255))
            flat.alpha_composite(image)
            flat.convert("RGB").save(buffer, "JPEG", quality=95)
        else:
            image.save(buffer, "PNG")
        self.export_count += 1
        logger.debug(f"Exported {node.id} as {export_settings.format.value} {image.size[0]}x{image.size[1]}")
        return buffer.getvalue()

    def _render(self, node: SceneNode, scale: float) -> Image.Image:
        size = (max(1, int(round(node.width * scale))), max(1, int(round(node.height * scale))))
        canvas = Image.new("RGBA", size, (0, 0, 0, 0))

        for paint in node.fills:
            canvas.alpha_composite(self._paint_layer(paint, size))

        if node.type == NodeType.ELLIPSE:
            mask = Image.new("L", size, 0)
            ImageDraw.Draw(mask).ellipse([0, 0, size[0] - 1, size[1] - 1], fill=255)
            shaped = Image.new("RGBA", size, (0, 0, 0, 0))
            shaped.paste(canvas, (0, 0), mask)
            canvas = shaped

        for child in node.children:
            if child.type == NodeType.TEXT:
                self._draw_text(canvas, child, scale)
            else:
                layer = self._render(child, scale)
                _composite(canvas, layer, int(round(child.x * scale)), int(round(child.y * scale)))
        return canvas

    def _paint_layer(self, paint, size: Tuple[int, int]) -> Image.Image:
        if isinstance(paint, SolidPaint):
            return Image.new("RGBA", size, paint.color.to_rgb255() + (255,))

        image = self._images.get(paint.image_hash)
        layer = Image.new("RGBA", size, (0, 0, 0, 0))
        if image is None:
            logger.warning(f"Missing image {paint.image_hash}, painting nothing")
            return layer
        if paint.scale_mode == "FIT":
            fitted = ImageOps.contain(image, size, Image.LANCZOS)
            offset = ((size[0] - fitted.width) // 2, (size[1] - fitted.height) // 2)
            layer.alpha_composite(fitted, dest=offset)
        else:
            layer.alpha_composite(ImageOps.fit(image, size, Image.LANCZOS))
        return layer

    def _draw_text(self, canvas: Image.Image, node: SceneNode, scale: float) -> None:
        if not node.characters:
            return
        style = node.font_name.style if node.font_name else "Regular"
        font = find_font(style, max(1, int(round(node.font_size * scale))))
        ImageDraw.Draw(canvas).text(
            (node.x * scale, node.y * scale), node.characters, font=font, fill=(0, 0, 0, 255)
        )


def _composite(base: Image.Image, layer: Image.Image, x: int, y: int) -> None:
    """Alpha-composite layer onto base at (x, y), clipped to base."""
    left, top = max(0, -x), max(0, -y)
    if left >= layer.width or top >= layer.height or x >= base.width or y >= base.height:
        return
    base.alpha_composite(layer, dest=(max(0, x), max(0, y)), source=(left, top))
