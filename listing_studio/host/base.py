"""
Host scene capability.

Everything the service does to the design document goes through SceneHost:
creating nodes, registering images, querying the selection, and exporting a
node to raster bytes. Nodes are plain dataclasses mirroring the host's scene
graph; the host owns their ids and their lifetime.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union


class NodeType(str, Enum):
    """Node kinds the service creates or reads."""
    PAGE = "PAGE"
    FRAME = "FRAME"
    RECTANGLE = "RECTANGLE"
    ELLIPSE = "ELLIPSE"
    TEXT = "TEXT"


class RasterFormat(str, Enum):
    PNG = "PNG"
    JPEG = "JPEG"

    @property
    def extension(self) -> str:
        return self.value.lower()


class ConstraintType(str, Enum):
    SCALE = "SCALE"
    WIDTH = "WIDTH"


@dataclass(frozen=True)
class Color:
    """RGB color with channels in [0, 1], as the host expects."""
    r: float
    g: float
    b: float

    @classmethod
    def gray(cls, level: float) -> "Color":
        return cls(level, level, level)

    def to_rgb255(self) -> Tuple[int, int, int]:
        return tuple(int(round(max(0.0, min(1.0, c)) * 255)) for c in (self.r, self.g, self.b))


WHITE = Color(1, 1, 1)


@dataclass(frozen=True)
class SolidPaint:
    color: Color
    type: str = "SOLID"


@dataclass(frozen=True)
class ImagePaint:
    image_hash: str
    scale_mode: str = "FILL"  # FILL crops to cover, FIT letterboxes
    type: str = "IMAGE"


Paint = Union[SolidPaint, ImagePaint]


@dataclass(frozen=True)
class FontName:
    family: str
    style: str


INTER_REGULAR = FontName("Inter", "Regular")
INTER_BOLD = FontName("Inter", "Bold")


@dataclass(frozen=True)
class ExportSettings:
    format: RasterFormat = RasterFormat.PNG
    constraint: ConstraintType = ConstraintType.SCALE
    value: float = 1


@dataclass(eq=False)
class SceneNode:
    id: str
    type: NodeType
    name: str = ""
    x: float = 0
    y: float = 0
    width: float = 100
    height: float = 100
    fills: List[Paint] = field(default_factory=list)
    layout_mode: str = "NONE"
    children: List["SceneNode"] = field(default_factory=list, repr=False)
    parent: Optional["SceneNode"] = field(default=None, repr=False)
    removed: bool = False

    # Text nodes only
    characters: str = ""
    font_name: Optional[FontName] = None
    font_size: float = 12

    def resize(self, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Node size must be positive, got {width}x{height}")
        self.width = width
        self.height = height

    def append_child(self, child: "SceneNode") -> None:
        """Move child under this node, on top of its existing children."""
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None
        self.removed = True
        for child in list(self.children):
            child.remove()


class SceneHost(ABC):
    """
    Capability interface onto the host document.

    Nodes created by the create_* methods start on the current page, the
    way the host places them; append_child moves them.
    """

    @abstractmethod
    def create_frame(self) -> SceneNode:
        pass

    @abstractmethod
    def create_rectangle(self) -> SceneNode:
        pass

    @abstractmethod
    def create_ellipse(self) -> SceneNode:
        pass

    @abstractmethod
    def create_text(self) -> SceneNode:
        pass

    @abstractmethod
    def create_image(self, data: bytes) -> str:
        """Register encoded image bytes and return the image hash."""
        pass

    @abstractmethod
    def set_text(self, node: SceneNode, characters: str, font_name: FontName, font_size: float) -> None:
        """Set the content of a text node. The font must be loaded."""
        pass

    @abstractmethod
    async def load_font(self, font_name: FontName) -> None:
        pass

    @abstractmethod
    def append_to_page(self, node: SceneNode) -> None:
        pass

    @abstractmethod
    def get_node(self, node_id: str) -> Optional[SceneNode]:
        pass

    @abstractmethod
    def get_selection(self) -> List[SceneNode]:
        pass

    @abstractmethod
    def set_selection(self, nodes: Sequence[SceneNode]) -> None:
        pass

    @abstractmethod
    async def export_async(self, node: SceneNode, export_settings: ExportSettings) -> bytes:
        pass

    @abstractmethod
    def viewport_center(self) -> Tuple[float, float]:
        pass

    @abstractmethod
    def scroll_and_zoom_into_view(self, nodes: Sequence[SceneNode]) -> None:
        pass
