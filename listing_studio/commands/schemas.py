import math
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from listing_studio.config import settings


def coerce_size(value: Any, default: int = settings.DEFAULT_SIZE_PX) -> int:
    """Pixel size from a loosely typed payload value; falls back to default."""
    try:
        size = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(size) or size < 1:
        return default
    return int(size)


class CommandPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SizedPayload(CommandPayload):
    size_px: int = Field(default=settings.DEFAULT_SIZE_PX, alias="sizePx")

    @field_validator("size_px", mode="before")
    @classmethod
    def _coerce_size(cls, value: Any) -> int:
        return coerce_size(value)


class SaveApiKeyPayload(CommandPayload):
    key: Any = ""


class GenerateMainImagePayload(SizedPayload):
    pass


class GenerateSixPayload(SizedPayload):
    bg_prompt: str = Field(default="", alias="bgPrompt")

    @field_validator("bg_prompt", mode="before")
    @classmethod
    def _coerce_prompt(cls, value: Any) -> str:
        return str(value or "").strip()


class ArrangeSixPayload(CommandPayload):
    pass


class ExportPayload(SizedPayload):
    format: Any = "PNG"

    @field_validator("format", mode="before")
    @classmethod
    def _default_format(cls, value: Any) -> Any:
        return value or "PNG"


class ExportGeneratedPayload(ExportPayload):
    id: Any = None


class ExportAllGeneratedPayload(ExportPayload):
    ids: List[Any] = Field(default_factory=list)

    @field_validator("ids", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> List[Any]:
        return value if isinstance(value, list) else []


class OutboundMessage(BaseModel):
    type: str
    payload: dict = Field(default_factory=dict)
