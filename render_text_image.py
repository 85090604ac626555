#!/usr/bin/env -S uv run
# /// script
# requires-python = ">=3.11"
# dependencies = [
#   "pillow>=10.1",
#   "numpy>=1.26"
# ]
# ///
"""Render text over a procedural background into a PNG or looping GIF."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
import logging
import os
import sys
from typing import NoReturn, Sequence

from PIL import Image

from domain.palette import DEFAULT_PALETTE, Palette
from domain.text_image import (
    DEFAULT_FONT_SIZE,
    DEFAULT_FONT_STYLE,
    DEFAULT_FONTS_DIR,
    DEFAULT_HEIGHT,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_WIDTH,
    INVALID_CONFIG_CODE,
    BackgroundKind,
    RenderConfig,
    RenderValidationError,
    list_background_kinds,
    list_font_styles,
    parse_background_kind,
    parse_font_style,
    require_text,
    sanitize_filename,
)
from service.frames import FRAME_DELAY_CENTISECONDS, generate_animated, generate_static
from service.layout import FontLoadError

LOGGER = logging.getLogger("render_text_image")

OUTPUT_WRITE_CODE = "render_text_image.output.write_failed"

USAGE_EXAMPLES = """examples:
  render_text_image.py "Hello World"
  render_text_image.py --width 800 --height 400 --font roboto_bold "Custom Text"
  render_text_image.py --animate --bg perlin "Animated Text"
"""


class RenderOutputError(RuntimeError):
    """Output error with a stable error code."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class RenderRequest:
    """Parsed CLI request."""

    config: RenderConfig
    text: str
    list_styles: bool


class RenderArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors as validation errors."""

    def error(self, message: str) -> NoReturn:
        raise RenderValidationError(INVALID_CONFIG_CODE, message)


def configure_logging() -> None:
    """Configure logging for CLI output."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = RenderArgumentParser(
        prog="render_text_image.py",
        description="Text image generator",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("text", nargs="?", help="text to render")
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH, help="image width in pixels")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT, help="image height in pixels")
    parser.add_argument(
        "--font-size", type=float, default=DEFAULT_FONT_SIZE, help="starting font size"
    )
    parser.add_argument("--output", default=DEFAULT_OUTPUT_DIR, help="output directory")
    parser.add_argument(
        "--bg",
        default=BackgroundKind.DEFAULT.value,
        help="background pattern: " + ", ".join(list_background_kinds()),
    )
    parser.add_argument(
        "--font",
        default=DEFAULT_FONT_STYLE,
        help="font style: " + ", ".join(list_font_styles()),
    )
    parser.add_argument("--fonts-dir", default=DEFAULT_FONTS_DIR)
    parser.add_argument(
        "--reveal-bg", action="store_true", help="show the background through the text"
    )
    parser.add_argument("--animate", action="store_true", help="create an animated GIF")
    parser.add_argument(
        "--list-styles",
        action="store_true",
        help="print background and font styles and exit",
    )
    return parser


def parse_args(argv: Sequence[str]) -> RenderRequest:
    """Parse CLI arguments into a RenderRequest."""
    parsed = build_parser().parse_args(argv)
    config = RenderConfig(
        width=parsed.width,
        height=parsed.height,
        font_size=parsed.font_size,
        output_dir=parsed.output,
        background=parse_background_kind(parsed.bg),
        font_style=parse_font_style(parsed.font),
        fonts_dir=parsed.fonts_dir,
        reveal_background=parsed.reveal_bg,
        animate=parsed.animate,
    )
    if parsed.list_styles:
        return RenderRequest(config=config, text="", list_styles=True)
    return RenderRequest(
        config=config, text=require_text(parsed.text), list_styles=False
    )


def build_output_path(text_value: str, output_dir: str, extension: str) -> str:
    """Create the output directory and return the target file path."""
    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as exc:
        raise RenderOutputError(
            OUTPUT_WRITE_CODE, f"cannot create output directory {output_dir}: {exc}"
        ) from exc
    return os.path.join(output_dir, f"{sanitize_filename(text_value)}.{extension}")


def quantize_frame(frame: Image.Image, palette: Palette) -> Image.Image:
    """Map every pixel to its nearest palette color, without dithering."""
    palette_image = Image.new("P", (1, 1))
    palette_image.putpalette(palette.flat_rgb())
    return frame.convert("RGB").quantize(
        palette=palette_image, dither=Image.Dither.NONE
    )


def save_image(image: Image.Image, text_value: str, output_dir: str) -> str:
    """Write a PNG and return its path."""
    file_path = build_output_path(text_value, output_dir, "png")
    try:
        image.save(file_path, format="PNG")
    except OSError as exc:
        raise RenderOutputError(
            OUTPUT_WRITE_CODE, f"failed to write {file_path}: {exc}"
        ) from exc
    LOGGER.info("render_text_image.output.png_written: %s", file_path)
    return file_path


def save_animated_gif(
    frames: Sequence[Image.Image],
    text_value: str,
    output_dir: str,
    palette: Palette = DEFAULT_PALETTE,
) -> str:
    """Write a looping GIF with a shared palette and return its path."""
    paletted = [quantize_frame(frame, palette) for frame in frames]
    file_path = build_output_path(text_value, output_dir, "gif")
    try:
        paletted[0].save(
            file_path,
            format="GIF",
            save_all=True,
            append_images=paletted[1:],
            duration=FRAME_DELAY_CENTISECONDS * 10,
            loop=0,
            optimize=False,
        )
    except OSError as exc:
        raise RenderOutputError(
            OUTPUT_WRITE_CODE, f"failed to write {file_path}: {exc}"
        ) from exc
    LOGGER.info(
        "render_text_image.output.gif_written: %s (%d frames)", file_path, len(paletted)
    )
    return file_path


def print_styles() -> None:
    """Print the available background and font styles."""
    print("backgrounds: " + ", ".join(list_background_kinds()))
    print("fonts: " + ", ".join(list_font_styles()))


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    configure_logging()

    try:
        request = parse_args(sys.argv[1:] if argv is None else argv)
        if request.list_styles:
            print_styles()
            return 0
        text_value = request.text
        if request.config.animate:
            frames = generate_animated(text_value, request.config)
            save_animated_gif(frames, text_value, request.config.output_dir)
        else:
            image = generate_static(text_value, request.config)
            save_image(image, text_value, request.config.output_dir)
        return 0
    except RenderValidationError as exc:
        LOGGER.error("%s: %s", exc.code, str(exc).strip())
        return 1
    except FontLoadError as exc:
        LOGGER.error("%s: %s", exc.code, str(exc).strip())
        return 1
    except RenderOutputError as exc:
        LOGGER.error("%s: %s", exc.code, str(exc).strip())
        return 1
    except Exception as exc:
        LOGGER.error("render_text_image.unhandled_error: %s", str(exc).strip())
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
