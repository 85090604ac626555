"""Domain types and parsing for render_text_image."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import unicodedata
from typing import Tuple

INVALID_CONFIG_CODE = "render_text_image.input.invalid_config"
INVALID_BACKGROUND_CODE = "render_text_image.input.invalid_background"
INVALID_FONT_STYLE_CODE = "render_text_image.input.invalid_font_style"

BUILTIN_FONT_STYLE = "aileron_regular"
DEFAULT_FONT_STYLE = BUILTIN_FONT_STYLE
DEFAULT_FONTS_DIR = "assets/fonts"
DEFAULT_OUTPUT_DIR = "images"
DEFAULT_WIDTH = 600
DEFAULT_HEIGHT = 300
DEFAULT_FONT_SIZE = 48.0

FILENAME_MAX_CHARS = 20
FILENAME_FORBIDDEN = '/\\:*?"<>|'
FILENAME_FALLBACK = "output"

FONT_FILES = {
    "roboto_black": "Roboto-Black.ttf",
    "roboto_c_black": "Roboto_Condensed-Black.ttf",
    "roboto_sc_ebold": "Roboto_SemiCondensed-ExtraBold.ttf",
    "roboto_bold": "Roboto-Bold.ttf",
    "roboto_c_bold": "Roboto_Condensed-Bold.ttf",
    "roboto_sc_italic": "Roboto_SemiCondensed-Italic.ttf",
    "roboto_ebold": "Roboto-ExtraBold.ttf",
    "roboto_c_ebitalic": "Roboto_Condensed-ExtraBoldItalic.ttf",
    "roboto_sc_light": "Roboto_SemiCondensed-Light.ttf",
    "roboto_elight": "Roboto-ExtraLight.ttf",
    "roboto_c_elight": "Roboto_Condensed-ExtraLight.ttf",
    "roboto_sc_litalic": "Roboto_SemiCondensed-LightItalic.ttf",
    "roboto_italic": "Roboto-Italic.ttf",
    "roboto_c_elitalic": "Roboto_Condensed-ExtraLightItalic.ttf",
    "roboto_sc_medium": "Roboto_SemiCondensed-Medium.ttf",
    "roboto_light": "Roboto-Light.ttf",
    "roboto_c_regular": "Roboto_Condensed-Regular.ttf",
    "roboto_sc_mitalic": "Roboto_SemiCondensed-MediumItalic.ttf",
    "roboto_medium": "Roboto-Medium.ttf",
    "roboto_c_titalic": "Roboto_Condensed-ThinItalic.ttf",
    "roboto_sc_sbold": "Roboto_SemiCondensed-SemiBold.ttf",
    "roboto_regular": "Roboto-Regular.ttf",
    "roboto_sc_blitalic": "Roboto_SemiCondensed-BlackItalic.ttf",
    "roboto_sc_sbitalic": "Roboto_SemiCondensed-SemiBoldItalic.ttf",
    "roboto_sbold": "Roboto-SemiBold.ttf",
    "roboto_sc_bitalic": "Roboto_SemiCondensed-BoldItalic.ttf",
    "roboto_sc_thin": "Roboto_SemiCondensed-Thin.ttf",
}


class RenderValidationError(ValueError):
    """Validation error with a stable error code."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


class BackgroundKind(str, Enum):
    """Supported background patterns."""

    DEFAULT = "default"
    PERLIN = "perlin"
    PERLIN_SMOOTH = "perlin-s"
    RADIAL = "radial"
    DIAGONAL = "diagonal"


class RenderEffect(str, Enum):
    """Text compositing effects."""

    PLAIN = "plain"
    OUTLINED = "outlined"
    REVEAL = "reveal"
    REVEAL_OUTLINED = "reveal-outlined"


ANIMATION_EFFECTS: Tuple[RenderEffect, ...] = (
    RenderEffect.OUTLINED,
    RenderEffect.REVEAL,
    RenderEffect.PLAIN,
    RenderEffect.REVEAL_OUTLINED,
)


def list_font_styles() -> list[str]:
    """Sorted font style keys, including the bundled style."""
    return sorted([*FONT_FILES, BUILTIN_FONT_STYLE])


def list_background_kinds() -> list[str]:
    """Sorted background kind keys."""
    return sorted(kind.value for kind in BackgroundKind)


@dataclass(frozen=True)
class RenderConfig:
    """Validated configuration for render_text_image."""

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    font_size: float = DEFAULT_FONT_SIZE
    output_dir: str = DEFAULT_OUTPUT_DIR
    background: BackgroundKind = BackgroundKind.DEFAULT
    font_style: str = DEFAULT_FONT_STYLE
    fonts_dir: str = DEFAULT_FONTS_DIR
    reveal_background: bool = False
    animate: bool = False

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise RenderValidationError(
                INVALID_CONFIG_CODE, "width and height must be positive"
            )
        if self.font_size <= 0:
            raise RenderValidationError(
                INVALID_CONFIG_CODE, "font size must be positive"
            )
        if not self.output_dir.strip():
            raise RenderValidationError(
                INVALID_CONFIG_CODE, "output directory must be non-empty"
            )
        if not self.fonts_dir.strip():
            raise RenderValidationError(
                INVALID_CONFIG_CODE, "fonts directory must be non-empty"
            )
        if not isinstance(self.background, BackgroundKind):
            raise RenderValidationError(
                INVALID_BACKGROUND_CODE, "background is invalid"
            )
        if self.font_style != BUILTIN_FONT_STYLE and self.font_style not in FONT_FILES:
            raise RenderValidationError(
                INVALID_FONT_STYLE_CODE, f"invalid font style: {self.font_style}"
            )


def parse_background_kind(value: str) -> BackgroundKind:
    """Parse a background key into a BackgroundKind."""
    normalized = value.strip().lower()
    try:
        return BackgroundKind(normalized)
    except ValueError as exc:
        raise RenderValidationError(
            INVALID_BACKGROUND_CODE, f"invalid background type: {value!r}"
        ) from exc


def parse_font_style(value: str) -> str:
    """Validate a font style key."""
    normalized = value.strip().lower()
    if normalized != BUILTIN_FONT_STYLE and normalized not in FONT_FILES:
        raise RenderValidationError(
            INVALID_FONT_STYLE_CODE, f"invalid font style: {value!r}"
        )
    return normalized


def require_text(text_value: str | None) -> str:
    """Reject a missing TEXT argument; empty and blank strings are valid."""
    if text_value is None:
        raise RenderValidationError(INVALID_CONFIG_CODE, "missing TEXT argument")
    return text_value


def sanitize_filename(text_value: str) -> str:
    """Turn input text into a short, filesystem-safe file stem."""
    result: list[str] = []
    for character in text_value:
        if character in FILENAME_FORBIDDEN:
            continue
        if character.isprintable():
            result.append("_" if character.isspace() else character)
        elif unicodedata.category(character).startswith("S"):
            result.append(character)
        if len(result) > FILENAME_MAX_CHARS:
            break

    filename = "".join(result)
    if not filename:
        return FILENAME_FALLBACK
    return filename
