"""Tests for font loading, wrapping and size fitting."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from domain.text_image import BUILTIN_FONT_STYLE
from service.layout import (
    FONT_ASSET_CODE,
    FONT_FACE_CODE,
    MIN_FONT_SIZE,
    FontAsset,
    FontFace,
    FontLoadError,
    fit_text,
    load_font_asset,
    measure_text,
    wrap_text,
)

SENTENCE = "the quick brown fox jumps over the lazy dog again today"


def builtin_asset() -> FontAsset:
    """Return the font asset bundled with Pillow."""
    return load_font_asset(BUILTIN_FONT_STYLE, "unused")


@dataclass(frozen=True)
class RecordingAsset(FontAsset):
    """Asset that rejects sizes above a limit and records opened faces."""

    max_size: float = 1000.0
    opened: list = field(default_factory=list)

    def open_face(self, size: float) -> FontFace:
        if size > self.max_size:
            raise FontLoadError(FONT_FACE_CODE, f"size {size} rejected")
        face = super().open_face(size)
        self.opened.append(face)
        return face


def recording_asset(max_size: float = 1000.0) -> RecordingAsset:
    """Build a recording asset backed by the bundled font."""
    return RecordingAsset(
        style=BUILTIN_FONT_STYLE, source="<test>", data=None, max_size=max_size
    )


def test_single_short_word_fits_on_one_line() -> None:
    """A short word in a generous box stays a single line."""
    layout = fit_text("Hi", builtin_asset(), 400, 200, 48)

    assert layout.lines == ("Hi",)
    assert layout.font_size <= 48
    layout.face.close()


def test_long_sentence_wraps_preserving_word_order() -> None:
    """Wrapped lines are contiguous slices that rebuild the original text."""
    layout = fit_text(SENTENCE, builtin_asset(), 120, 200, 48)

    assert len(layout.lines) >= 2
    assert all(line for line in layout.lines)
    assert " ".join(layout.lines).split() == SENTENCE.split()
    layout.face.close()


def test_accepted_layout_fits_the_box() -> None:
    """A non-fallback layout keeps every line inside 90% of the width."""
    layout = fit_text(SENTENCE, builtin_asset(), 300, 300, 48)

    assert layout.font_size > MIN_FONT_SIZE
    for index in range(len(layout.lines)):
        assert layout.line_width(index) <= int(300 * 0.9)
    assert layout.block_height <= int(300 * 0.9)
    layout.face.close()


def test_unsatisfiable_box_falls_back_to_minimum_size() -> None:
    """Nothing fits a tiny box, so the minimum size is returned anyway."""
    layout = fit_text(SENTENCE, builtin_asset(), 10, 10, 48)

    assert layout.font_size == MIN_FONT_SIZE
    assert " ".join(layout.lines).split() == SENTENCE.split()
    layout.face.close()


def test_rejected_sizes_are_skipped() -> None:
    """Face creation failures move on to the next smaller size."""
    asset = recording_asset(max_size=20)
    layout = fit_text("Hi", asset, 400, 200, 48)

    assert layout.font_size == 20
    assert layout.lines == ("Hi",)
    layout.face.close()


def test_every_size_rejected_fails() -> None:
    """Without a loadable minimum size the request fails."""
    asset = recording_asset(max_size=4)

    with pytest.raises(FontLoadError) as excinfo:
        fit_text("Hi", asset, 400, 200, 48)
    assert excinfo.value.code == FONT_FACE_CODE


def test_discarded_faces_are_closed() -> None:
    """Only the returned face stays open after fitting."""
    asset = recording_asset()
    layout = fit_text(SENTENCE, asset, 60, 40, 30)

    assert len(asset.opened) > 1
    assert [face for face in asset.opened if not face.closed] == [layout.face]
    layout.face.close()
    assert all(face.closed for face in asset.opened)


def test_wrap_without_words_returns_input() -> None:
    """Empty or whitespace-only text comes back as a single line."""
    with builtin_asset().open_face(20) as face:
        assert wrap_text("", 100, face) == [""]
        assert wrap_text("   ", 100, face) == ["   "]


def test_wrap_keeps_overlong_word_on_its_own_line() -> None:
    """A word wider than the limit still gets placed."""
    with builtin_asset().open_face(20) as face:
        lines = wrap_text("a supercalifragilistic b", 30, face)

    assert lines == ["a", "supercalifragilistic", "b"]


def test_measure_text_grows_with_length() -> None:
    """Longer strings measure wider."""
    with builtin_asset().open_face(24) as face:
        short_width, short_height = measure_text(face, "ab")
        long_width, _ = measure_text(face, "abababab")

    assert short_width > 0 and short_height > 0
    assert long_width > short_width


def test_closed_face_rejects_use() -> None:
    """Using a face after close raises."""
    face = builtin_asset().open_face(12)
    face.close()

    with pytest.raises(ValueError):
        face.advance("a")


def test_missing_font_file_is_fatal(tmp_path: Path) -> None:
    """A missing font file is an asset failure."""
    with pytest.raises(FontLoadError) as excinfo:
        load_font_asset("roboto_bold", str(tmp_path))
    assert excinfo.value.code == FONT_ASSET_CODE


def test_unparsable_font_file_is_fatal(tmp_path: Path) -> None:
    """Garbage bytes are an asset failure."""
    (tmp_path / "Roboto-Bold.ttf").write_bytes(b"not a font")

    with pytest.raises(FontLoadError) as excinfo:
        load_font_asset("roboto_bold", str(tmp_path))
    assert excinfo.value.code == FONT_ASSET_CODE
