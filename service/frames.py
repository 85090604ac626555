"""Frame assembly: background + layout + effect for static and animated output."""

from __future__ import annotations

import logging
from typing import Sequence, Tuple

from PIL import Image

from domain.palette import DEFAULT_PALETTE, Palette
from domain.text_image import ANIMATION_EFFECTS, RenderConfig, RenderEffect
from service.backgrounds import synthesize
from service.compositor import render_effect
from service.layout import LayoutResult, fit_text, load_font_asset

ANIMATION_CYCLES = 2
FRAME_DELAY_CENTISECONDS = 15

LOGGER = logging.getLogger("render_text_image.frames")


def static_effect(config: RenderConfig) -> RenderEffect:
    """Outlined text by default, revealed background when requested."""
    if config.reveal_background:
        return RenderEffect.REVEAL
    return RenderEffect.OUTLINED


def animation_sequence(
    effects: Sequence[RenderEffect] = ANIMATION_EFFECTS,
    cycles: int = ANIMATION_CYCLES,
) -> Tuple[RenderEffect, ...]:
    """Effect per displayed frame, cycling through the distinct effects."""
    return tuple(effects) * cycles


def layout_text(text_value: str, config: RenderConfig) -> LayoutResult:
    """Load the configured font and fit text into the frame."""
    asset = load_font_asset(config.font_style, config.fonts_dir)
    layout = fit_text(text_value, asset, config.width, config.height, config.font_size)
    LOGGER.info(
        "render_text_image.layout.fitted: size=%s lines=%d",
        layout.font_size,
        len(layout.lines),
    )
    return layout


def create_frame(
    config: RenderConfig,
    layout: LayoutResult,
    effect: RenderEffect,
    palette: Palette = DEFAULT_PALETTE,
) -> Image.Image:
    """Synthesize a fresh background and composite the text onto it."""
    image = synthesize(config.background, config.width, config.height, palette)
    return render_effect(image, layout, effect)


def generate_static(
    text_value: str, config: RenderConfig, palette: Palette = DEFAULT_PALETTE
) -> Image.Image:
    """Render a single frame."""
    layout = layout_text(text_value, config)
    with layout.face:
        return create_frame(config, layout, static_effect(config), palette)


def generate_animated(
    text_value: str, config: RenderConfig, palette: Palette = DEFAULT_PALETTE
) -> list[Image.Image]:
    """Render one frame per distinct effect and repeat them for each cycle."""
    layout = layout_text(text_value, config)
    with layout.face:
        distinct = {
            effect: create_frame(config, layout, effect, palette)
            for effect in ANIMATION_EFFECTS
        }
    return [distinct[effect] for effect in animation_sequence()]
