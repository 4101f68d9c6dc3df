# FILE: cepoka/icons.py
"""
Favicon / touch-icon generation from the site logo.

Every icon is: background (white circle or white square) + logo centered,
aspect ratio kept, inside the padding box. Outputs are PNG bytes.
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, Tuple, Union

from PIL import Image, ImageDraw

from .settings import PUBLIC_DIR, SOURCE_LOGO

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255, 255)
CIRCLE = "circle"
SQUARE = "square"

# filename -> (size, logo box as fraction of size), sitelogo set
SITELOGO_FAVICONS: Dict[str, Tuple[int, float]] = {
    "sitelogo-favicon-16x16.png": (16, 0.7),
    "sitelogo-favicon-32x32.png": (32, 0.7),
    "sitelogo-favicon-192x192.png": (192, 0.7),
    "sitelogo-favicon-512x512.png": (512, 0.7),
    "sitelogo-apple-touch-icon.png": (180, 0.7),
}


def load_logo(source: Union[str, Path, bytes] = SOURCE_LOGO) -> Image.Image:
    """Open and fully decode the logo (RGBA)."""
    if isinstance(source, bytes):
        img = Image.open(io.BytesIO(source))
    else:
        img = Image.open(source)
    img.load()
    return img.convert("RGBA")


def fit_within(width: int, height: int, max_size: float) -> Tuple[int, int]:
    """Largest (w, h) with the same aspect ratio that fits a max_size square."""
    aspect = width / height
    if aspect > 1:
        w, h = max_size, max_size / aspect
    else:
        w, h = max_size * aspect, max_size
    return max(1, round(w)), max(1, round(h))


def draw_background(width: int, height: int, shape: str = CIRCLE) -> Image.Image:
    img = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    if shape == CIRCLE:
        draw.ellipse((0, 0, width - 1, height - 1), fill=WHITE)
    else:
        draw.rectangle((0, 0, width - 1, height - 1), fill=WHITE)
    return img


def compose_icon(
    logo: Image.Image,
    size: Union[int, Tuple[int, int]],
    max_logo: float,
    shape: str = CIRCLE,
) -> Image.Image:
    width, height = (size, size) if isinstance(size, int) else size
    canvas = draw_background(width, height, shape)
    w, h = fit_within(logo.width, logo.height, max_logo)
    resized = logo.resize((w, h), Image.Resampling.LANCZOS)
    canvas.alpha_composite(resized, ((width - w) // 2, (height - h) // 2))
    return canvas


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def png_to_ico(png: bytes) -> bytes:
    img = Image.open(io.BytesIO(png))
    buf = io.BytesIO()
    img.save(buf, format="ICO", sizes=[img.size])
    return buf.getvalue()


# ------------------------------------------------------------------
# Generators

def generate_circular_favicon(logo: Image.Image, size: int = 512, padding_ratio: float = 0.2) -> bytes:
    max_logo = size - 2 * size * padding_ratio
    return encode_png(compose_icon(logo, size, max_logo, CIRCLE))


def create_simple_favicon(logo: Image.Image, size: int = 32, logo_size: int = 24) -> bytes:
    return encode_png(compose_icon(logo, size, logo_size, SQUARE))


def generate_apple_icon(logo: Image.Image, size: int = 180, padding: int = 20) -> bytes:
    return encode_png(compose_icon(logo, size, size - 2 * padding, CIRCLE))


def generate_splash_screen(logo: Image.Image, size: int = 1024, logo_ratio: float = 0.6) -> bytes:
    return encode_png(compose_icon(logo, size, size * logo_ratio, SQUARE))


def generate_sitelogo_favicons(logo: Image.Image) -> Dict[str, bytes]:
    return {
        name: encode_png(compose_icon(logo, size, size * ratio, CIRCLE))
        for name, (size, ratio) in SITELOGO_FAVICONS.items()
    }


def write_icon(data: bytes, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info("Created %s", path)
    return path


def write_icons(source: Union[str, Path] = SOURCE_LOGO, out_dir: Path = PUBLIC_DIR) -> Dict[str, Path]:
    """
    Generate every icon under ``out_dir``. A failing icon is logged and
    skipped (no retry); a logo that can't be loaded yields an empty result.
    """
    try:
        logo = load_logo(source)
    except (OSError, ValueError):
        logger.exception("Error loading logo %s", source)
        return {}

    jobs = {
        "favicon-512.png": lambda: generate_circular_favicon(logo, 512),
        "favicon.png": lambda: generate_circular_favicon(logo, 192),
        "favicon-32x32.png": lambda: create_simple_favicon(logo),
        "favicon.ico": lambda: png_to_ico(create_simple_favicon(logo)),
        "apple-icon.png": lambda: generate_apple_icon(logo),
        "splash-screen.png": lambda: generate_splash_screen(logo),
    }
    written: Dict[str, Path] = {}
    for name, job in jobs.items():
        try:
            written[name] = write_icon(job(), out_dir / name)
        except (OSError, ValueError):
            logger.exception("Error creating %s", name)

    try:
        for name, data in generate_sitelogo_favicons(logo).items():
            written[name] = write_icon(data, out_dir / "icons" / name)
    except (OSError, ValueError):
        logger.exception("Error creating sitelogo favicons")

    logger.info("Generated %d icon files", len(written))
    return written
