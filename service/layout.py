"""Font loading, measurement and size fitting for render_text_image."""

from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass
from io import BytesIO
import logging
import math
import os
from typing import Sequence, Tuple

from PIL import ImageFont

from domain.text_image import BUILTIN_FONT_STYLE, FONT_FILES

FONT_ASSET_CODE = "render_text_image.font.asset_unreadable"
FONT_FACE_CODE = "render_text_image.font.face_rejected"

MIN_FONT_SIZE = 8.0
FONT_SIZE_STEP = 2.0
FIT_RATIO = 0.9
LINE_SPACING_FACTOR = 1.2
PROBE_FONT_SIZE = 12

LOGGER = logging.getLogger("render_text_image.layout")


class FontLoadError(RuntimeError):
    """Font asset or face failure with a stable error code."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


class FontFace:
    """A font loaded at one size; release it with close() or a with block."""

    def __init__(self, font: ImageFont.FreeTypeFont, size: float) -> None:
        self._font: ImageFont.FreeTypeFont | None = font
        self.size = size

    @property
    def font(self) -> ImageFont.FreeTypeFont:
        if self._font is None:
            raise ValueError("font face is closed")
        return self._font

    @property
    def closed(self) -> bool:
        return self._font is None

    @property
    def ascent(self) -> int:
        return self.font.getmetrics()[0]

    @property
    def descent(self) -> int:
        return self.font.getmetrics()[1]

    @property
    def line_height(self) -> int:
        ascent, descent = self.font.getmetrics()
        return ascent + descent

    def advance(self, character: str) -> int:
        """Horizontal distance the pen moves after drawing the character."""
        return math.ceil(self.font.getlength(character))

    def close(self) -> None:
        self._font = None

    def __enter__(self) -> FontFace:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass(frozen=True)
class FontAsset:
    """Raw font bytes for one style; None data means Pillow's bundled font."""

    style: str
    source: str
    data: bytes | None

    def open_face(self, size: float) -> FontFace:
        """Create a face at the given pixel size."""
        try:
            if self.data is None:
                font = ImageFont.load_default(size=size)
            else:
                font = ImageFont.truetype(
                    BytesIO(self.data), size=size, layout_engine=ImageFont.Layout.BASIC
                )
        except (OSError, ValueError) as exc:
            raise FontLoadError(
                FONT_FACE_CODE,
                f"failed to create font face {self.source} at size {size}: {exc}",
            ) from exc
        if not isinstance(font, ImageFont.FreeTypeFont):
            raise FontLoadError(
                FONT_FACE_CODE, "FreeType support is unavailable in Pillow"
            )
        return FontFace(font, size)


def resolve_font_path(font_style: str, fonts_dir: str) -> str:
    """Map a font style key to its file under the fonts directory."""
    return os.path.join(fonts_dir, FONT_FILES[font_style])


def load_font_asset(font_style: str, fonts_dir: str) -> FontAsset:
    """Read and sanity-check the font file for a style."""
    if font_style == BUILTIN_FONT_STYLE:
        return FontAsset(style=font_style, source="<pillow default>", data=None)

    font_path = resolve_font_path(font_style, fonts_dir)
    try:
        with open(font_path, "rb") as font_file:
            data = font_file.read()
    except OSError as exc:
        raise FontLoadError(
            FONT_ASSET_CODE, f"unable to read font file: {font_path} ({exc})"
        ) from exc

    try:
        ImageFont.truetype(BytesIO(data), size=PROBE_FONT_SIZE)
    except OSError as exc:
        raise FontLoadError(
            FONT_ASSET_CODE, f"failed to parse font: {font_path} ({exc})"
        ) from exc
    return FontAsset(style=font_style, source=font_path, data=data)


def measure_text(face: FontFace, text_value: str) -> Tuple[int, int]:
    """Measure the inked width and height of a string."""
    if not text_value:
        return 0, 0
    left, top, right, bottom = face.font.getbbox(text_value)
    return right - left, bottom - top


def wrap_text(text_value: str, max_width: int, face: FontFace) -> list[str]:
    """Greedily pack whitespace-separated words into lines of max_width."""
    words = text_value.split()
    if not words:
        return [text_value]

    lines: list[str] = []
    current_line = ""
    for word in words:
        candidate = f"{current_line} {word}" if current_line else word
        width, _ = measure_text(face, candidate)
        if width <= max_width or not current_line:
            current_line = candidate
        else:
            lines.append(current_line)
            current_line = word

    if current_line:
        lines.append(current_line)
    return lines


def compute_line_spacing(line_height: int) -> int:
    """Distance between consecutive baselines."""
    return int(line_height * LINE_SPACING_FACTOR)


@dataclass(frozen=True)
class LayoutResult:
    """Chosen face, size and wrapped lines for a text block."""

    face: FontFace
    font_size: float
    lines: Tuple[str, ...]

    @property
    def ascent(self) -> int:
        return self.face.ascent

    @property
    def line_height(self) -> int:
        return self.face.line_height

    @property
    def line_spacing(self) -> int:
        return compute_line_spacing(self.face.line_height)

    @property
    def block_height(self) -> int:
        return len(self.lines) * self.line_spacing

    def line_width(self, index: int) -> int:
        return measure_text(self.face, self.lines[index])[0]


def fit_lines(
    text_value: str, face: FontFace, max_width: int, max_height: int
) -> Sequence[str] | None:
    """Return the lines for text at this face if they fit the box, else None."""
    width, height = measure_text(face, text_value)
    if width <= (max_width * 9) // 10 and height <= (max_height * 9) // 10:
        return [text_value]

    width_limit = int(max_width * FIT_RATIO)
    lines = wrap_text(text_value, width_limit, face)
    total_height = len(lines) * compute_line_spacing(face.line_height)
    if total_height > int(max_height * FIT_RATIO):
        return None
    for line in lines:
        if measure_text(face, line)[0] > width_limit:
            return None
    return lines


def fit_text(
    text_value: str,
    asset: FontAsset,
    max_width: int,
    max_height: int,
    starting_size: float,
) -> LayoutResult:
    """Find the largest size (stepping down by 2) whose layout fits the box.

    Faces that fail to build at a candidate size are skipped. When nothing
    fits, the text is wrapped at the minimum size without any fit check;
    only a failure at that size is fatal. The caller owns the returned face.
    """
    font_size = starting_size
    while font_size >= MIN_FONT_SIZE:
        try:
            face = asset.open_face(font_size)
        except FontLoadError as exc:
            LOGGER.debug("render_text_image.layout.face_skipped: %s", exc)
            font_size -= FONT_SIZE_STEP
            continue

        with ExitStack() as stack:
            stack.callback(face.close)
            lines = fit_lines(text_value, face, max_width, max_height)
            if lines is not None:
                stack.pop_all()
                return LayoutResult(face=face, font_size=font_size, lines=tuple(lines))
        font_size -= FONT_SIZE_STEP

    face = asset.open_face(MIN_FONT_SIZE)
    LOGGER.warning(
        "render_text_image.layout.fallback: text does not fit %dx%d, using size %s",
        max_width,
        max_height,
        MIN_FONT_SIZE,
    )
    with ExitStack() as stack:
        stack.callback(face.close)
        lines = wrap_text(text_value, int(max_width * FIT_RATIO), face)
        stack.pop_all()
    return LayoutResult(face=face, font_size=MIN_FONT_SIZE, lines=tuple(lines))
