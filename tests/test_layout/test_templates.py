"""Tests for the template table."""

from __future__ import annotations

from listing_studio.layout.templates import (
    BODY,
    HEADING_LARGE,
    MAIN_TEMPLATE,
    TEMPLATES,
    BackgroundKind,
    Layer,
    Metric,
    background_prompt,
    remote_prompt_keys,
)


def test_six_templates_in_order():
    assert [t.index for t in TEMPLATES] == [1, 2, 3, 4, 5, 6]
    assert [t.name for t in TEMPLATES] == [
        "01 Main",
        "02 Lifestyle",
        "03 Infographic",
        "04 Benefits",
        "05 Dimensions",
        "06 In-Box",
    ]
    assert MAIN_TEMPLATE is TEMPLATES[0]


def test_every_template_places_the_cutout():
    for template in TEMPLATES:
        assert Layer.CUTOUT in template.layers
        assert 0 < template.fill_ratio <= 1


def test_main_template_is_plain_white():
    assert MAIN_TEMPLATE.background.kind == BackgroundKind.SOLID
    assert MAIN_TEMPLATE.layers == (Layer.CUTOUT,)
    assert MAIN_TEMPLATE.fill_ratio == 0.88


def test_remote_backgrounds():
    assert remote_prompt_keys() == ("lifestyle", "context")


def test_metric_has_floor():
    assert Metric(40, 0.032).resolve(500) == 40
    assert HEADING_LARGE.resolve(2000) == 64
    assert BODY.resolve(2000) == 28


def test_lifestyle_prompt_includes_user_text():
    assert background_prompt("lifestyle", "  cozy kitchen ") == "photo background, cozy kitchen"
    assert background_prompt("lifestyle") == "photo background, "


def test_context_prompt_ignores_user_text():
    assert background_prompt("context", "beach") == background_prompt("context")
