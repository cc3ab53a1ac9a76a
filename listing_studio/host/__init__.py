"""
Host module for Listing Studio.

Provides the scene capability interface and the in-memory scene.
"""

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
    INTER_BOLD,
    INTER_REGULAR,
)
from listing_studio.host.memory import InMemoryScene

__all__ = [
    "Color",
    "ConstraintType",
    "ExportSettings",
    "FontName",
    "ImagePaint",
    "NodeType",
    "RasterFormat",
    "SceneHost",
    "SceneNode",
    "SolidPaint",
    "WHITE",
    "INTER_BOLD",
    "INTER_REGULAR",
    "InMemoryScene",
]
