"""Procedural background patterns for render_text_image."""

from __future__ import annotations

from typing import Callable, Dict, Sequence, Tuple

import numpy as np
from PIL import Image

from domain.palette import DEFAULT_PALETTE, Palette
from domain.text_image import BackgroundKind

DIAGONAL_TILE_SIZE = 50
DIAGONAL_DARK_FACTOR = 0.7
SMOOTH_OCTAVES = 6
SMOOTH_AMPLITUDE_DECAY = 0.6
SMOOTH_FREQUENCY_GROWTH = 1.8

# (x period, y period, y weight) per pseudo-noise term
NOISE_TERMS: Tuple[Tuple[float, float, float], ...] = (
    (50.0, 40.0, 1.0),
    (25.0, 20.0, 0.5),
    (12.5, 10.0, 0.25),
    (80.0, 60.0, 1.5),
)

BackgroundGenerator = Callable[[int, int, Palette], Image.Image]


def pixel_grid(width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
    """Return (yy, xx) float coordinate grids of shape (height, width)."""
    yy, xx = np.mgrid[0:height, 0:width].astype(np.float64)
    return yy, xx


def rgb_to_image(rgb: np.ndarray) -> Image.Image:
    """Wrap an (h, w, 3) uint8 array as an opaque RGBA image."""
    height, width = rgb.shape[:2]
    alpha = np.full((height, width, 1), 255, dtype=np.uint8)
    return Image.fromarray(np.concatenate([rgb.astype(np.uint8), alpha], axis=2))


def interpolate_color(
    first_rgba: Sequence[int], second_rgba: Sequence[int], amount: float
) -> Tuple[int, int, int, int]:
    """Blend two colors channel-wise; alpha is always opaque."""
    return (
        int(first_rgba[0] * (1 - amount) + second_rgba[0] * amount),
        int(first_rgba[1] * (1 - amount) + second_rgba[1] * amount),
        int(first_rgba[2] * (1 - amount) + second_rgba[2] * amount),
        255,
    )


def map_to_gradient(
    normalized: np.ndarray, colors: Sequence[Tuple[int, int, int, int]]
) -> np.ndarray:
    """Map values in [0, 1] onto a color gradient, interpolating neighbours.

    Vectorised form of ``interpolate_color`` over the palette; values at
    the top end take the last color.
    """
    table = np.array([color[:3] for color in colors], dtype=np.float64)
    last_index = len(table) - 1
    position = np.clip(normalized, 0.0, 1.0) * last_index
    index = position.astype(np.int64)
    fraction = (position - index)[..., np.newaxis]
    upper = np.minimum(index + 1, last_index)
    blended = table[index] * (1 - fraction) + table[upper] * fraction
    blended = np.where((index >= last_index)[..., np.newaxis], table[last_index], blended)
    return blended.astype(np.uint8)


def generate_pattern_background(width: int, height: int, palette: Palette) -> Image.Image:
    """XOR pattern; ignores the palette. Blue wraps to 8 bits before the modulo."""
    yy, xx = np.mgrid[0:height, 0:width]
    value = (xx ^ (yy + (xx + yy) // 2)) & 0xFF
    rgb = np.stack([value, 255 - value, ((value * 3) & 0xFF) % 255], axis=2)
    return rgb_to_image(rgb)


def generate_perlin_like_background(
    width: int, height: int, palette: Palette
) -> Image.Image:
    """Four-term trigonometric pseudo-noise mapped onto the palette."""
    yy, xx = pixel_grid(width, height)
    combined = np.zeros((height, width), dtype=np.float64)
    for x_period, y_period, y_weight in NOISE_TERMS:
        combined += np.sin(xx / x_period) + np.cos(yy / y_period) * y_weight
    normalized = np.clip((combined + 4.0) / 8.0, 0.0, 1.0)
    return rgb_to_image(map_to_gradient(normalized, palette.thematic))


def generate_perlin_smooth_background(
    width: int, height: int, palette: Palette
) -> Image.Image:
    """Six-octave trigonometric noise with a tanh S-curve."""
    yy, xx = pixel_grid(width, height)
    fx = xx / width
    fy = yy / height

    noise = np.zeros((height, width), dtype=np.float64)
    amplitude = 1.0
    frequency = 1.0
    for _ in range(SMOOTH_OCTAVES):
        n1 = np.sin(fx * frequency * np.pi * 4) * np.cos(fy * frequency * np.pi * 3)
        n2 = np.cos(fx * frequency * np.pi * 3) * np.sin(fy * frequency * np.pi * 4)
        n3 = np.sin((fx + fy) * frequency * np.pi * 2)
        n4 = np.cos((fx - fy) * frequency * np.pi * 2.5)
        noise += amplitude * (n1 + n2 + n3 + n4) / 4.0
        amplitude *= SMOOTH_AMPLITUDE_DECAY
        frequency *= SMOOTH_FREQUENCY_GROWTH

    normalized = (np.tanh(noise) + 1.0) / 2.0
    return rgb_to_image(map_to_gradient(normalized, palette.thematic))


def generate_radial_background(width: int, height: int, palette: Palette) -> Image.Image:
    """Polar sine/cosine rings around the image center; ignores the palette."""
    yy, xx = pixel_grid(width, height)
    dx = xx - width / 2.0
    dy = yy - height / 2.0
    distance = np.sqrt(dx * dx + dy * dy)
    angle = np.arctan2(dy, dx)

    red = np.abs(np.sin(distance / 20.0 + angle * 5.0)) * 255.0
    green = np.abs(np.cos(distance / 30.0 - angle * 3.0)) * 255.0
    blue = np.abs(np.sin(distance / 40.0 + angle * 7.0)) * 255.0
    return rgb_to_image(np.stack([red, green, blue], axis=2))


def generate_diagonal_background(
    width: int, height: int, palette: Palette
) -> Image.Image:
    """Diagonal stripes, each tile split into a light and a darker half."""
    yy, xx = np.mgrid[0:height, 0:width]
    diagonal = xx + yy
    table = np.array([color[:3] for color in palette.thematic], dtype=np.float64)
    base = table[(diagonal // DIAGONAL_TILE_SIZE) % len(table)]
    dark = (diagonal % DIAGONAL_TILE_SIZE) >= DIAGONAL_TILE_SIZE // 2
    shaded = np.where(dark[..., np.newaxis], np.floor(base * DIAGONAL_DARK_FACTOR), base)
    return rgb_to_image(shaded)


BACKGROUND_GENERATORS: Dict[BackgroundKind, BackgroundGenerator] = {
    BackgroundKind.DEFAULT: generate_pattern_background,
    BackgroundKind.PERLIN: generate_perlin_like_background,
    BackgroundKind.PERLIN_SMOOTH: generate_perlin_smooth_background,
    BackgroundKind.RADIAL: generate_radial_background,
    BackgroundKind.DIAGONAL: generate_diagonal_background,
}


def synthesize(
    kind: BackgroundKind,
    width: int,
    height: int,
    palette: Palette = DEFAULT_PALETTE,
) -> Image.Image:
    """Generate a width x height opaque RGBA background of the given kind."""
    return BACKGROUND_GENERATORS[kind](width, height, palette)
