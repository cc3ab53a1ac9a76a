"""
Layout module for Listing Studio.

Provides the template table, the layout engine, grid arrangement and export.
"""

from listing_studio.layout.templates import TEMPLATES, MAIN_TEMPLATE, TemplateSpec, background_prompt
from listing_studio.layout.engine import LayoutEngine
from listing_studio.layout.arrange import (
    ExportEntry,
    arrange_grid,
    export_all,
    export_frame,
    focus_on_canvas,
    normalize_format,
    resolve_frame,
)

__all__ = [
    "TEMPLATES",
    "MAIN_TEMPLATE",
    "TemplateSpec",
    "background_prompt",
    "LayoutEngine",
    "ExportEntry",
    "arrange_grid",
    "export_all",
    "export_frame",
    "focus_on_canvas",
    "normalize_format",
    "resolve_frame",
]
