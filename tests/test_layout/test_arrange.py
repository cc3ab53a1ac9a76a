"""Tests for grid arrangement and frame export."""

from __future__ import annotations

import asyncio
import io

import pytest
from PIL import Image

from listing_studio.errors import StateError
from listing_studio.host.base import RasterFormat
from listing_studio.host.memory import InMemoryScene
from listing_studio.layout import (
    arrange_grid,
    export_all,
    export_frame,
    focus_on_canvas,
    normalize_format,
    resolve_frame,
)
from listing_studio.layout.arrange import LISTING_SET_NAME


def _frames(host, count, size=100):
    frames = []
    for i in range(count):
        frame = host.create_frame()
        frame.name = f"0{i + 1} Frame {size}x{size}"
        frame.resize(size, size)
        frames.append(frame)
    return frames


def test_six_frames_in_three_columns():
    host = InMemoryScene()
    frames = _frames(host, 6)

    parent = arrange_grid(host, frames, columns=3, gap=80)

    assert parent.name == LISTING_SET_NAME
    assert (parent.width, parent.height) == (3 * 100 + 2 * 80, 2 * 100 + 80)
    assert [(f.x, f.y) for f in frames] == [
        (0, 0), (180, 0), (360, 0),
        (0, 180), (180, 180), (360, 180),
    ]
    assert parent.children == frames
    assert host.top_level_nodes() == [parent]


def test_partial_last_row():
    host = InMemoryScene()
    parent = arrange_grid(host, _frames(host, 4), columns=3, gap=10)
    assert (parent.width, parent.height) == (320, 210)


@pytest.mark.parametrize("columns", [0, -2, "3", None, True])
def test_invalid_columns_fall_back_to_three(columns):
    host = InMemoryScene()
    parent = arrange_grid(host, _frames(host, 6), columns=columns, gap=0)
    assert parent.width == 300


def test_invalid_gap_falls_back_to_eighty():
    host = InMemoryScene()
    parent = arrange_grid(host, _frames(host, 2), columns=2, gap="wide")
    assert parent.width == 280


def test_nothing_to_arrange():
    with pytest.raises(StateError):
        arrange_grid(InMemoryScene(), [])


def test_focus_centers_and_selects():
    host = InMemoryScene()
    parent = arrange_grid(host, _frames(host, 3), columns=3, gap=0)

    focus_on_canvas(host, parent)

    assert (parent.x, parent.y) == (-150, -50)
    assert host.get_selection() == [parent]
    assert host.viewport_center() == (0, 0)


def test_normalize_format():
    assert normalize_format("PNG") == RasterFormat.PNG
    assert normalize_format("JPG") == RasterFormat.JPEG
    assert normalize_format("webp") == RasterFormat.JPEG
    assert normalize_format(None) == RasterFormat.JPEG


def test_resolve_frame_only_returns_frames():
    host = InMemoryScene()
    frame = host.create_frame()
    rect = host.create_rectangle()

    assert resolve_frame(host, frame.id) is frame
    assert resolve_frame(host, rect.id) is None
    assert resolve_frame(host, "9:99") is None
    assert resolve_frame(host, 12) is None


def test_export_frame_by_width():
    host = InMemoryScene()
    frame = _frames(host, 1, size=300)[0]

    entry = asyncio.run(export_frame(host, frame, "JPG", 150))

    assert entry.name == "01 Frame 300x300.jpeg"
    image = Image.open(io.BytesIO(entry.bytes))
    assert image.format == "JPEG"
    assert image.size == (150, 150)


def test_export_all_skips_missing_ids():
    host = InMemoryScene()
    first, second = _frames(host, 2)
    second.remove()

    entries = asyncio.run(export_all(host, [first.id, second.id, "nope", first.id], "PNG", 50))

    assert [e.name for e in entries] == ["01 Frame 100x100.png", "01 Frame 100x100.png"]
