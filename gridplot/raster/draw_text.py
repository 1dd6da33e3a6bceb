from __future__ import annotations

from functools import lru_cache
import logging
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from gridplot.raster.canvas import RGBA, blend_mask


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "DejaVu Sans"
DEFAULT_FONT_SIZE_PX = 10.0
SANS_FONT_FALLBACK_PATTERNS = (
    "dejavusans",
    "dejavu sans",
    "liberationsans",
    "arial",
    "helvetica",
    "freesans",
)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


def draw_text(
    dst: np.ndarray,
    x: int,
    y: int,
    text: str,
    color: RGBA,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
    bold: bool = False,
    rotate_deg: int = 0,
) -> None:
    """Draw ``text`` with its baseline starting at ``(x, y)``.

    ``rotate_deg=90`` turns the run counter-clockwise so it reads bottom to top
    from the same baseline origin.
    """
    if not text:
        return
    font = _load_font(font_family=font_family, font_size_px=font_size_px)
    left, top, _, _ = _baseline_bbox(font, text)
    mask = _render_mask(text=text, font=font)
    if bold:
        mask = _embolden(mask, bold_extra_px(font_size_px) + 1)
    turns = _normalize_quarter_turns(rotate_deg)
    if turns == 0:
        blend_mask(dst, x + left, y + top, mask, color)
    elif turns == 1:
        blend_mask(dst, x + top, y - left - (mask.shape[1] - 1), np.rot90(mask, k=1), color)
    else:
        raise ValueError("only 0 and 90 degree text is supported")


def text_size(
    text: str,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
    bold: bool = False,
    rotate_deg: int = 0,
) -> tuple[int, int]:
    font = _load_font(font_family=font_family, font_size_px=font_size_px)
    if not text:
        ascent, descent = font.getmetrics()
        return (0, max(1, int(ascent + descent)))
    left, top, right, bottom = font.getbbox(text)
    w = max(0, int(right - left))
    if bold:
        w += bold_extra_px(font_size_px)
    h = max(1, int(bottom - top))
    turns = _normalize_quarter_turns(rotate_deg)
    if turns % 2 == 1:
        return (h, w)
    return (w, h)


def _baseline_bbox(font: Font, text: str) -> tuple[int, int, int, int]:
    left, top, right, bottom = font.getbbox(text, anchor="ls")
    return (int(left), int(top), int(right), int(bottom))


def _embolden(mask: np.ndarray, embolden_px: int) -> np.ndarray:
    if embolden_px <= 1:
        return mask
    out = np.zeros((mask.shape[0], mask.shape[1] + embolden_px - 1), dtype=np.uint8)
    out[:, : mask.shape[1]] = mask
    for shift in range(1, embolden_px):
        dst = out[:, shift : shift + mask.shape[1]]
        np.maximum(dst, mask, out=dst)
    return out


@lru_cache(maxsize=256)
def _render_mask(text: str, font: Font) -> np.ndarray:
    left, top, right, bottom = _baseline_bbox(font, text)
    width = max(1, right - left)
    height = max(1, bottom - top)
    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.text((-left, -top), text, fill=255, font=font, anchor="ls")
    return np.asarray(image, dtype=np.uint8)


@lru_cache(maxsize=64)
def _load_font(font_family: str, font_size_px: float) -> Font:
    size = max(1, int(round(font_size_px)))
    font_path = _resolve_font_path(font_family)
    if font_path is not None:
        try:
            return ImageFont.truetype(str(font_path), size=size)
        except OSError as exc:
            LOGGER.warning("could not load font %s (%s); using the built-in font", font_path, exc)
    return ImageFont.load_default(size=size)


FONT_DIRS = (
    Path.home() / ".fonts",
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/System/Library/Fonts/Supplemental"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path("C:/Windows/Fonts"),
)


def _font_key(name: str) -> str:
    return name.lower().replace(" ", "").replace("-", "")


@lru_cache(maxsize=1)
def _installed_fonts() -> tuple[Path, ...]:
    found: list[Path] = []
    for base in FONT_DIRS:
        if base.is_dir():
            found.extend(p for p in sorted(base.rglob("*")) if p.suffix.lower() in {".ttf", ".otf", ".ttc"})
    LOGGER.debug("found %d installed font file(s)", len(found))
    return tuple(found)


@lru_cache(maxsize=16)
def _resolve_font_path(font_family: str) -> Path | None:
    fonts = [(_font_key(p.stem), p) for p in _installed_fonts()]
    for pattern in (font_family.strip() or DEFAULT_FONT_FAMILY,) + SANS_FONT_FALLBACK_PATTERNS:
        key = _font_key(pattern)
        # Exact stem first so "DejaVu Sans" does not pick DejaVuSans-Bold.
        exact = next((p for stem, p in fonts if stem == key), None)
        if exact is not None:
            return exact
        partial = next((p for stem, p in fonts if key in stem), None)
        if partial is not None:
            return partial
    return None


def _normalize_quarter_turns(rotate_deg: int) -> int:
    if rotate_deg % 90 != 0:
        raise ValueError("rotate_deg must be a multiple of 90")
    return (rotate_deg // 90) % 4


def bold_extra_px(font_size_px: float) -> int:
    """Columns the bold smear adds to the right of a run."""
    return max(2, int(round(font_size_px / 12.0)) + 1) - 1
