"""Text compositing effects for render_text_image."""

from __future__ import annotations

from typing import Callable, Dict, Iterator, Tuple

from PIL import Image, ImageDraw

from domain.text_image import RenderEffect
from service.layout import LayoutResult

TEXT_RGBA = (255, 255, 255, 255)
OUTLINE_RGBA = (0, 0, 0, 255)
MASK_INK_RGBA = (0, 0, 0, 255)
REVEAL_FILL_RGBA = (255, 255, 255, 255)
TRANSPARENT_RGBA = (0, 0, 0, 0)

OUTLINE_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, 0),
    (1, 0),
    (0, -1),
    (0, 1),
    (-1, -1),
    (-1, 1),
    (1, -1),
    (1, 1),
)

# inclusive code point ranges with no glyph support
EMOJI_RANGES: Tuple[Tuple[int, int], ...] = (
    (0x1F600, 0x1F64F),
    (0x1F300, 0x1F5FF),
    (0x1F680, 0x1F6FF),
    (0x1F1E0, 0x1F1FF),
    (0x2600, 0x26FF),
    (0x2700, 0x27BF),
    (0xFE00, 0xFE0F),
    (0x1F900, 0x1F9FF),
    (0x1F018, 0x1F270),
)


def is_emoji(character: str) -> bool:
    """Check whether a character falls in one of the emoji ranges."""
    code_point = ord(character)
    return any(low <= code_point <= high for low, high in EMOJI_RANGES)


def line_start_x(image_width: int, line_width: int) -> int:
    """Left edge that centers a line, never negative."""
    return max(int((image_width - line_width) / 2), 0)


def block_start_y(image_height: int, block_height: int, ascent: int) -> int:
    """Baseline of the first line when centering a block vertically."""
    return max(int((image_height - block_height) / 2) + ascent, ascent)


def draw_text(
    image: Image.Image,
    layout: LayoutResult,
    text_value: str,
    x: int,
    y: int,
    color_rgba: Tuple[int, int, int, int],
) -> None:
    """Draw text one character at a time from a left baseline origin.

    Emoji are skipped without advancing the pen.
    """
    draw = ImageDraw.Draw(image)
    face = layout.face
    pen_x = x
    for character in text_value:
        if is_emoji(character):
            continue
        draw.text((pen_x, y), character, font=face.font, fill=color_rgba, anchor="ls")
        pen_x += face.advance(character)


def draw_outline(
    image: Image.Image,
    layout: LayoutResult,
    text_value: str,
    x: int,
    y: int,
    color_rgba: Tuple[int, int, int, int],
) -> None:
    """Draw text at each of the eight unit offsets around (x, y)."""
    for offset_x, offset_y in OUTLINE_OFFSETS:
        draw_text(image, layout, text_value, x + offset_x, y + offset_y, color_rgba)


def iter_line_origins(
    image: Image.Image, layout: LayoutResult
) -> Iterator[Tuple[str, int, int]]:
    """Yield (line, x, baseline_y) for every line, centered on the image."""
    start_y = block_start_y(image.height, layout.block_height, layout.ascent)
    for index, line in enumerate(layout.lines):
        x = line_start_x(image.width, layout.line_width(index))
        yield line, x, start_y + index * layout.line_spacing


def render_plain(image: Image.Image, layout: LayoutResult) -> Image.Image:
    for line, x, y in iter_line_origins(image, layout):
        draw_text(image, layout, line, x, y, TEXT_RGBA)
    return image


def render_outlined(image: Image.Image, layout: LayoutResult) -> Image.Image:
    for line, x, y in iter_line_origins(image, layout):
        draw_outline(image, layout, line, x, y, OUTLINE_RGBA)
        draw_text(image, layout, line, x, y, TEXT_RGBA)
    return image


def build_text_mask(
    image: Image.Image, layout: LayoutResult, with_outline: bool
) -> Image.Image:
    """Transparent image with the text silhouette drawn opaque."""
    mask = Image.new("RGBA", image.size, TRANSPARENT_RGBA)
    for line, x, y in iter_line_origins(image, layout):
        if with_outline:
            draw_outline(mask, layout, line, x, y, MASK_INK_RGBA)
        draw_text(mask, layout, line, x, y, MASK_INK_RGBA)
    return mask


def apply_text_mask(
    background: Image.Image, output: Image.Image, mask: Image.Image
) -> Image.Image:
    """Copy background pixels into output wherever the mask is not transparent."""
    coverage = mask.getchannel("A").point(lambda alpha: 255 if alpha else 0)
    output.paste(background, (0, 0), coverage)
    return output


def render_reveal(
    image: Image.Image, layout: LayoutResult, with_outline: bool = False
) -> Image.Image:
    """Show the background only through the glyphs, on a white field.

    The result replaces the pixels of ``image`` in place.
    """
    mask = build_text_mask(image, layout, with_outline)
    output = Image.new("RGBA", image.size, REVEAL_FILL_RGBA)
    apply_text_mask(image, output, mask)
    image.paste(output, (0, 0))
    return image


def render_reveal_outlined(image: Image.Image, layout: LayoutResult) -> Image.Image:
    return render_reveal(image, layout, with_outline=True)


EFFECT_RENDERERS: Dict[RenderEffect, Callable[[Image.Image, LayoutResult], Image.Image]] = {
    RenderEffect.PLAIN: render_plain,
    RenderEffect.OUTLINED: render_outlined,
    RenderEffect.REVEAL: render_reveal,
    RenderEffect.REVEAL_OUTLINED: render_reveal_outlined,
}


def render_effect(
    image: Image.Image, layout: LayoutResult, effect: RenderEffect
) -> Image.Image:
    """Composite the laid-out text onto image with the chosen effect."""
    return EFFECT_RENDERERS[effect](image, layout)
