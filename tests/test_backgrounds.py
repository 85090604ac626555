"""Tests for procedural background synthesis."""

from __future__ import annotations

import numpy as np
import pytest

from domain.palette import DEFAULT_PALETTE
from domain.text_image import BackgroundKind
from service.backgrounds import (
    DIAGONAL_TILE_SIZE,
    interpolate_color,
    map_to_gradient,
    synthesize,
)


def as_array(kind: BackgroundKind, width: int, height: int) -> np.ndarray:
    """Synthesize a background and return it as an int array (h, w, 4)."""
    return np.asarray(synthesize(kind, width, height)).astype(np.int64)


@pytest.mark.parametrize("kind", list(BackgroundKind))
@pytest.mark.parametrize("size", [(1, 1), (37, 23), (120, 200)])
def test_background_is_opaque_and_sized(kind: BackgroundKind, size: tuple[int, int]) -> None:
    """Every kind fills exactly width x height fully opaque pixels."""
    width, height = size
    image = synthesize(kind, width, height)

    assert image.mode == "RGBA"
    assert image.size == (width, height)
    assert image.getchannel("A").getextrema() == (255, 255)


@pytest.mark.parametrize("kind", list(BackgroundKind))
def test_background_is_deterministic(kind: BackgroundKind) -> None:
    """Two calls with the same size produce identical pixels."""
    first = synthesize(kind, 64, 48)
    second = synthesize(kind, 64, 48)

    assert first.tobytes() == second.tobytes()


def test_pattern_pixel_values() -> None:
    """XOR pattern channels follow value, its inverse and the wrapped triple mod 255."""
    image = synthesize(BackgroundKind.DEFAULT, 10, 10)
    value = 3 ^ (5 + (3 + 5) // 2)

    assert image.getpixel((3, 5)) == (value, 255 - value, ((value * 3) & 0xFF) % 255, 255)


def test_pattern_blue_channel_wraps_to_eight_bits() -> None:
    """Triple values above 255 wrap before the modulo."""
    image = synthesize(BackgroundKind.DEFAULT, 256, 256)

    assert image.getpixel((100, 0)) == (86, 169, 2, 255)
    assert image.getpixel((255, 0)) == (128, 127, 128, 255)


def test_radial_center_pixel() -> None:
    """At the center distance and angle are zero."""
    image = synthesize(BackgroundKind.RADIAL, 100, 100)

    assert image.getpixel((50, 50)) == (0, 255, 0, 255)


def test_perlin_adjacent_pixels_change_gradually() -> None:
    """Neighbouring pixels never differ by an abrupt jump."""
    pixels = as_array(BackgroundKind.PERLIN, 200, 150)[..., :3]

    horizontal = np.abs(np.diff(pixels, axis=1)).max()
    vertical = np.abs(np.diff(pixels, axis=0)).max()

    assert horizontal <= 64
    assert vertical <= 64


def test_smooth_perlin_is_smoother_than_pattern() -> None:
    """The smooth noise gradient is small compared to the XOR pattern."""
    smooth = as_array(BackgroundKind.PERLIN_SMOOTH, 800, 600)[..., :3]
    pattern = as_array(BackgroundKind.DEFAULT, 800, 600)[..., :3]

    smooth_steps = np.abs(np.diff(smooth, axis=1))
    pattern_steps = np.abs(np.diff(pattern, axis=1))

    assert np.percentile(smooth_steps, 99) <= 64
    assert smooth_steps.mean() < pattern_steps.mean() / 3


def test_noise_uses_only_palette_gradient_colors() -> None:
    """Noise pixels lie inside the palette's color range."""
    pixels = as_array(BackgroundKind.PERLIN, 80, 60)[..., :3]
    table = np.array([color[:3] for color in DEFAULT_PALETTE.thematic])

    assert (pixels.min(axis=(0, 1)) >= table.min(axis=0)).all()
    assert (pixels.max(axis=(0, 1)) <= table.max(axis=0)).all()


def test_diagonal_depends_only_on_anti_diagonal() -> None:
    """Pixels with the same x + y share a color."""
    pixels = as_array(BackgroundKind.DIAGONAL, 90, 70)

    assert (pixels[1:, :-1] == pixels[:-1, 1:]).all()


def test_diagonal_light_dark_split_repeats_every_tile() -> None:
    """Each 50px tile has a light half and a 0.7 darker half."""
    pixels = as_array(BackgroundKind.DIAGONAL, 400, 1)[0, :, :3]
    half = DIAGONAL_TILE_SIZE // 2

    for start in range(0, 400, DIAGONAL_TILE_SIZE):
        light = pixels[start]
        dark = pixels[start + half]
        assert (pixels[start : start + half] == light).all()
        assert (pixels[start + half : start + DIAGONAL_TILE_SIZE] == dark).all()
        assert (dark == np.floor(light * 0.7)).all()


def test_diagonal_cycles_through_palette() -> None:
    """Tile colors advance through the palette and wrap around."""
    color_count = len(DEFAULT_PALETTE.thematic)
    period = DIAGONAL_TILE_SIZE * color_count
    pixels = as_array(BackgroundKind.DIAGONAL, period + DIAGONAL_TILE_SIZE, 1)[0]

    assert tuple(pixels[0]) == DEFAULT_PALETTE.thematic[0]
    assert tuple(pixels[DIAGONAL_TILE_SIZE]) == DEFAULT_PALETTE.thematic[1]
    assert (pixels[period] == pixels[0]).all()


def test_interpolate_color_blends_channels() -> None:
    """Linear blend per channel with forced opacity."""
    assert interpolate_color((0, 0, 0, 0), (100, 200, 50, 0), 0.5) == (50, 100, 25, 255)
    assert interpolate_color((10, 20, 30, 255), (90, 90, 90, 255), 0.0) == (10, 20, 30, 255)


def test_map_to_gradient_endpoints() -> None:
    """Zero maps to the first color, one to the last."""
    colors = DEFAULT_PALETTE.thematic
    mapped = map_to_gradient(np.array([[0.0, 1.0]]), colors)

    assert tuple(mapped[0, 0]) == colors[0][:3]
    assert tuple(mapped[0, 1]) == colors[-1][:3]
