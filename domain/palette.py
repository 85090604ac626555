"""Shared color palette for background gradients and GIF quantization."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

MAX_PALETTE_SIZE = 256
RESERVED_COLOR_COUNT = 2

BLACK_RGBA = (0, 0, 0, 255)
WHITE_RGBA = (255, 255, 255, 255)

STUDIO_COLORS_RGBA: Tuple[Tuple[int, int, int, int], ...] = (
    # forest
    (34, 89, 34, 255),
    (85, 139, 47, 255),
    (154, 205, 50, 255),
    (173, 255, 47, 255),
    # sky and water
    (70, 130, 180, 255),
    (135, 206, 235, 255),
    (176, 224, 230, 255),
    (240, 248, 255, 255),
    # earth
    (160, 82, 45, 255),
    (205, 133, 63, 255),
    (222, 184, 135, 255),
    (245, 222, 179, 255),
    # accents
    (255, 182, 193, 255),
    (221, 160, 221, 255),
    (230, 230, 250, 255),
    (255, 228, 181, 255),
)


@dataclass(frozen=True)
class Palette:
    """Ordered, capped color list; slots 0 and 1 hold black and white."""

    colors: Tuple[Tuple[int, int, int, int], ...]

    def __post_init__(self) -> None:
        if len(self.colors) > MAX_PALETTE_SIZE:
            raise ValueError(f"palette exceeds {MAX_PALETTE_SIZE} colors")
        if len(self.colors) < RESERVED_COLOR_COUNT + 2:
            raise ValueError("palette needs at least two thematic colors")
        if self.colors[0] != BLACK_RGBA or self.colors[1] != WHITE_RGBA:
            raise ValueError("palette must start with black and white")
        for color in self.colors:
            if len(color) != 4 or color[3] != 255:
                raise ValueError(f"palette color must be opaque RGBA: {color!r}")

    @property
    def thematic(self) -> Tuple[Tuple[int, int, int, int], ...]:
        """Colors after the reserved black/white slots."""
        return self.colors[RESERVED_COLOR_COUNT:]

    def __len__(self) -> int:
        return len(self.colors)

    def flat_rgb(self) -> list[int]:
        """Flatten to the 768-entry RGB list PIL expects for a "P" image."""
        flat: list[int] = []
        for red, green, blue, _ in self.colors:
            flat.extend((red, green, blue))
        flat.extend(flat[:3] * (MAX_PALETTE_SIZE - len(self.colors)))
        return flat


def build_palette(
    extra_colors: Sequence[Tuple[int, int, int, int]] = STUDIO_COLORS_RGBA,
) -> Palette:
    """Build the palette: black, white, then the thematic colors up to the cap."""
    colors: list[Tuple[int, int, int, int]] = [BLACK_RGBA, WHITE_RGBA]
    for color in extra_colors:
        if len(colors) >= MAX_PALETTE_SIZE:
            break
        if color in colors:
            continue
        colors.append(color)
    return Palette(colors=tuple(colors))


DEFAULT_PALETTE = build_palette()
