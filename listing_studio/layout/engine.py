import logging
from typing import Dict, Optional

from listing_studio.errors import HostError
from listing_studio.host.base import (
    Color,
    ImagePaint,
    INTER_BOLD,
    INTER_REGULAR,
    SceneHost,
    SceneNode,
    SolidPaint,
    WHITE,
)
from listing_studio.layout.templates import (
    BACKDROP_COLOR,
    BADGE_COLOR,
    BADGE_SIZE,
    BADGE_TEXT,
    BADGE_TEXT_SIZE,
    BAND_COLOR,
    BAND_HEIGHT,
    BackgroundKind,
    EDGE_MARGIN,
    Layer,
    MAIN_FILL_RATIO,
    RULE_COLOR,
    RULE_OFFSET,
    RULE_THICKNESS,
    RULE_WIDTH_RATIO,
    TemplateSpec,
)

logger = logging.getLogger("listing.layout")


class LayoutEngine:
    """
    Builds template frames on the host page.

    All geometry is derived from the frame size and the template table;
    the engine holds no state besides the host it draws on.
    """

    def __init__(self, host: SceneHost):
        self.host = host

    async def ensure_fonts(self) -> bool:
        """Load the text fonts. Returns False if the host could not load them."""
        try:
            await self.host.load_font(INTER_REGULAR)
            await self.host.load_font(INTER_BOLD)
            return True
        except HostError as e:
            logger.warning(f"Fonts unavailable, text layers will be skipped: {e}")
            return False

    def create_template_frame(self, size_px: int, name: str, color: Color = WHITE) -> SceneNode:
        frame = self.host.create_frame()
        frame.name = f"{name} {size_px}x{size_px}"
        frame.resize(size_px, size_px)
        frame.fills = [SolidPaint(color)]
        frame.layout_mode = "NONE"
        self.host.append_to_page(frame)
        return frame

    def place_image_centered(self, frame: SceneNode, image_bytes: bytes, fill_ratio: float = MAIN_FILL_RATIO) -> SceneNode:
        """
        Add the image as a square, aspect-preserving placement centered in frame.

        Args:
            frame: Parent frame
            image_bytes: Encoded image
            fill_ratio: Side of the placement relative to the frame's shorter side

        Returns:
            The image rectangle
        """
        image_hash = self.host.create_image(image_bytes)
        node = self.host.create_rectangle()
        frame.append_child(node)

        target = min(frame.width, frame.height) * fill_ratio
        node.resize(target, target)
        node.fills = [ImagePaint(image_hash, scale_mode="FIT")]
        node.x = (frame.width - node.width) / 2
        node.y = (frame.height - node.height) / 2
        return node

    def apply_background(self, frame: SceneNode, image_bytes: Optional[bytes], fallback: Optional[Color] = None) -> None:
        if image_bytes:
            try:
                image_hash = self.host.create_image(image_bytes)
            except HostError as e:
                logger.warning(f"Background for {frame.name} is not an image, using fallback: {e}")
            else:
                frame.fills = [ImagePaint(image_hash, scale_mode="FILL")]
                return
        if fallback is not None:
            frame.fills = [SolidPaint(fallback)]

    def _add_text(self, frame: SceneNode, text: str, size: float, bold: bool, x: float, y: float) -> Optional[SceneNode]:
        # Text is decoration: a frame without it is still usable
        node = self.host.create_text()
        frame.append_child(node)
        try:
            self.host.set_text(node, text, INTER_BOLD if bold else INTER_REGULAR, size)
        except HostError as e:
            logger.warning(f"Skipping text '{text}' in {frame.name}: {e}")
            node.remove()
            return None
        node.x = x
        node.y = y
        return node

    def add_heading(self, frame: SceneNode, text: str, size: float) -> Optional[SceneNode]:
        return self._add_text(frame, text, size, True, EDGE_MARGIN, EDGE_MARGIN)

    def add_body_text(self, frame: SceneNode, text: str, size: float, y: float) -> Optional[SceneNode]:
        return self._add_text(frame, text, size, False, EDGE_MARGIN, y)

    def _add_rectangle(self, frame: SceneNode, width: float, height: float, color: Color, x: float, y: float) -> SceneNode:
        node = self.host.create_rectangle()
        frame.append_child(node)
        node.resize(width, height)
        node.fills = [SolidPaint(color)]
        node.x = x
        node.y = y
        return node

    def _add_value_badge(self, frame: SceneNode, size_px: int) -> SceneNode:
        badge_size = BADGE_SIZE.resolve(size_px)
        badge = self.host.create_ellipse()
        frame.append_child(badge)
        badge.resize(badge_size, badge_size)
        badge.fills = [SolidPaint(BADGE_COLOR)]
        badge.x = size_px - badge_size - EDGE_MARGIN
        badge.y = EDGE_MARGIN

        font_size = BADGE_TEXT_SIZE.resolve(size_px)
        self._add_text(
            frame, BADGE_TEXT, font_size, True,
            badge.x + 16, badge.y + badge_size / 2 - font_size / 2,
        )
        return badge

    def build_template(
        self,
        spec: TemplateSpec,
        size_px: int,
        cutout: bytes,
        backgrounds: Optional[Dict[str, Optional[bytes]]] = None,
    ) -> SceneNode:
        """
        Build one template frame.

        Args:
            spec: Template to build
            size_px: Frame side in pixels
            cutout: Background-removed product image
            backgrounds: Fetched remote backgrounds by prompt key; missing or
                None entries fall back to the template's fallback color

        Returns:
            The new frame, appended to the page
        """
        backgrounds = backgrounds or {}
        frame = self.create_template_frame(size_px, spec.name, spec.background.color)
        if spec.background.kind == BackgroundKind.REMOTE:
            self.apply_background(frame, backgrounds.get(spec.background.prompt_key), spec.background.fallback)

        for layer in spec.layers:
            if layer == Layer.CUTOUT:
                self.place_image_centered(frame, cutout, spec.fill_ratio)
            elif layer == Layer.HEADING and spec.heading:
                self.add_heading(frame, spec.heading.text, spec.heading.size.resolve(size_px))
            elif layer == Layer.BODY and spec.body:
                offset = spec.body.y.resolve(size_px)
                y = size_px - offset if spec.body.from_bottom else offset
                self.add_body_text(frame, spec.body.text, spec.body.size.resolve(size_px), y)
            elif layer == Layer.TOP_BAND:
                self._add_rectangle(frame, size_px, BAND_HEIGHT.resolve(size_px), BAND_COLOR, 0, 0)
            elif layer == Layer.VALUE_BADGE:
                self._add_value_badge(frame, size_px)
            elif layer == Layer.BACKDROP:
                self._add_rectangle(frame, size_px, size_px, BACKDROP_COLOR, 0, 0)
            elif layer == Layer.DIMENSION_RULE:
                width = size_px * RULE_WIDTH_RATIO
                self._add_rectangle(
                    frame, width, RULE_THICKNESS.resolve(size_px), RULE_COLOR,
                    (size_px - width) / 2, size_px - RULE_OFFSET.resolve(size_px),
                )
        return frame
