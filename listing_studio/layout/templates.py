"""
The six listing templates.

Sizes scale with the frame: a Metric resolves to max(floor, size * ratio),
so small frames keep readable text and large frames keep proportions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from listing_studio.host.base import Color, WHITE


@dataclass(frozen=True)
class Metric:
    floor: float
    ratio: float

    def resolve(self, size_px: float) -> float:
        return max(self.floor, size_px * self.ratio)


class BackgroundKind(str, Enum):
    SOLID = "solid"
    REMOTE = "remote"   # AI-generated image fetched through the bridge
    NONE = "none"


@dataclass(frozen=True)
class BackgroundPolicy:
    kind: BackgroundKind
    color: Color = WHITE
    prompt_key: Optional[str] = None
    fallback: Optional[Color] = None  # used when the remote image is unavailable


@dataclass(frozen=True)
class TextOverlay:
    text: str
    size: Metric
    y: Optional[Metric] = None  # body text only
    from_bottom: bool = False


class Layer(str, Enum):
    """Things a template draws, listed bottom to top."""
    CUTOUT = "cutout"
    HEADING = "heading"
    BODY = "body"
    TOP_BAND = "top_band"
    VALUE_BADGE = "value_badge"
    BACKDROP = "backdrop"
    DIMENSION_RULE = "dimension_rule"


@dataclass(frozen=True)
class TemplateSpec:
    index: int
    name: str
    background: BackgroundPolicy
    fill_ratio: float
    layers: Tuple[Layer, ...] = (Layer.CUTOUT,)
    heading: Optional[TextOverlay] = None
    body: Optional[TextOverlay] = None


HEADING_LARGE = Metric(40, 0.032)
HEADING = Metric(36, 0.028)
BODY = Metric(22, 0.014)
BODY_TOP = Metric(120, 0.08)
BODY_BOTTOM = Metric(100, 0.06)

BAND_HEIGHT = Metric(120, 0.08)
BAND_COLOR = Color(0.1, 0.6, 0.95)
BADGE_SIZE = Metric(160, 0.12)
BADGE_COLOR = Color(1, 0.84, 0)
BADGE_TEXT = "BEST VALUE"
BADGE_TEXT_SIZE = Metric(24, 0.02)
BACKDROP_COLOR = Color.gray(0.98)
RULE_WIDTH_RATIO = 0.6
RULE_THICKNESS = Metric(4, 0.003)
RULE_OFFSET = Metric(120, 0.08)
RULE_COLOR = Color.gray(0.2)

# Margin of headings, body text and the badge from the frame edge
EDGE_MARGIN = 48

MAIN_FILL_RATIO = 0.88

BACKGROUND_PROMPTS = {
    "lifestyle": "photo background, {prompt}",
    "context": "interior scene, premium home environment, soft daylight, shallow depth of field",
}


def background_prompt(prompt_key: str, user_prompt: Optional[str] = None) -> str:
    return BACKGROUND_PROMPTS[prompt_key].format(prompt=(user_prompt or "").strip())


TEMPLATES: Tuple[TemplateSpec, ...] = (
    TemplateSpec(
        index=1,
        name="01 Main",
        background=BackgroundPolicy(BackgroundKind.SOLID, WHITE),
        fill_ratio=MAIN_FILL_RATIO,
    ),
    TemplateSpec(
        index=2,
        name="02 Lifestyle",
        background=BackgroundPolicy(BackgroundKind.REMOTE, prompt_key="lifestyle", fallback=Color.gray(0.97)),
        fill_ratio=0.7,
        layers=(Layer.CUTOUT, Layer.HEADING, Layer.BODY),
        heading=TextOverlay("In Your Daily Life", HEADING_LARGE),
        body=TextOverlay("Show the real-world context", BODY, y=BODY_TOP),
    ),
    TemplateSpec(
        index=3,
        name="03 Infographic",
        background=BackgroundPolicy(BackgroundKind.SOLID, WHITE),
        fill_ratio=0.72,
        layers=(Layer.CUTOUT, Layer.HEADING, Layer.BODY),
        heading=TextOverlay("Key Features", HEADING_LARGE),
        body=TextOverlay("• Point A   • Point B   • Point C", BODY, y=BODY_TOP),
    ),
    TemplateSpec(
        index=4,
        name="04 Benefits",
        background=BackgroundPolicy(BackgroundKind.SOLID, WHITE),
        fill_ratio=0.72,
        layers=(Layer.TOP_BAND, Layer.HEADING, Layer.CUTOUT, Layer.VALUE_BADGE),
        heading=TextOverlay("Why Choose This", HEADING),
    ),
    TemplateSpec(
        index=5,
        name="05 Dimensions",
        background=BackgroundPolicy(BackgroundKind.SOLID, WHITE),
        fill_ratio=0.72,
        layers=(Layer.BACKDROP, Layer.CUTOUT, Layer.HEADING, Layer.DIMENSION_RULE, Layer.BODY),
        heading=TextOverlay("Dimensions", HEADING),
        body=TextOverlay("Width ~ XXX mm | Height ~ YYY mm", BODY, y=BODY_BOTTOM, from_bottom=True),
    ),
    TemplateSpec(
        index=6,
        name="06 In-Box",
        background=BackgroundPolicy(BackgroundKind.REMOTE, prompt_key="context"),
        fill_ratio=0.64,
        layers=(Layer.CUTOUT, Layer.HEADING, Layer.BODY),
        heading=TextOverlay("What’s in the Box", HEADING),
        body=TextOverlay("• Item A   • Item B   • Item C", BODY, y=BODY_TOP),
    ),
)

MAIN_TEMPLATE = TEMPLATES[0]


def remote_prompt_keys() -> Tuple[str, ...]:
    """Prompt keys of templates with a remote background, in template order."""
    return tuple(
        t.background.prompt_key for t in TEMPLATES
        if t.background.kind == BackgroundKind.REMOTE
    )
