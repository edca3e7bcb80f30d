"""
ui/helpers.py
=============
Utility functions shared across UI modules: the paper-grain texture,
alpha-surface drawing and text rendering.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import pygame

from .constants import hex_to_rgb


# ── Paper grain ──────────────────────────────────────────────────────────────

def grain_field(
    width: int,
    height: int,
    seed: Optional[int] = None,
    scale: float = 100.0,
    max_alpha: int = 40,
) -> Tuple[np.ndarray, np.ndarray]:
    """Smooth value noise plus random alpha, both ``(width, height)`` uint8.

    The grey channel is bilinear-interpolated lattice noise (smoothstep
    weights) with one lattice point every *scale* pixels, the alpha channel
    is white noise in ``[0, max_alpha)``.  Arrays are indexed ``[x, y]`` to
    match :mod:`pygame.surfarray`.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"grain size must be positive, got {width}x{height}")
    rng = np.random.default_rng(seed)
    lattice = rng.random((int(width / scale) + 2, int(height / scale) + 2))

    xs = np.arange(width) / scale
    ys = np.arange(height) / scale
    x0 = xs.astype(int)
    y0 = ys.astype(int)
    tx = (xs - x0)[:, None]
    ty = (ys - y0)[None, :]
    tx = tx * tx * (3.0 - 2.0 * tx)
    ty = ty * ty * (3.0 - 2.0 * ty)

    top = lattice[np.ix_(x0, y0)] * (1.0 - tx) + lattice[np.ix_(x0 + 1, y0)] * tx
    bottom = lattice[np.ix_(x0, y0 + 1)] * (1.0 - tx) + lattice[np.ix_(x0 + 1, y0 + 1)] * tx
    value = top * (1.0 - ty) + bottom * ty

    grey = (value * 255.0).astype(np.uint8)
    alpha = rng.integers(0, max(1, max_alpha), size=(width, height), dtype=np.uint8)
    return grey, alpha


def make_grain_surface(
    width: int,
    height: int,
    seed: Optional[int] = None,
    scale: float = 100.0,
    max_alpha: int = 40,
) -> pygame.Surface:
    """Translucent grey noise overlay the size of the grid."""
    grey, alpha = grain_field(width, height, seed, scale, max_alpha)
    surface = pygame.Surface((width, height), pygame.SRCALPHA)
    rgb = pygame.surfarray.pixels3d(surface)
    rgb[...] = grey[:, :, None]
    del rgb  # release the surface lock
    pixels_alpha = pygame.surfarray.pixels_alpha(surface)
    pixels_alpha[...] = alpha
    del pixels_alpha
    return surface


# ── Alpha drawing helpers ────────────────────────────────────────────────────

def draw_alpha_rect(
    target: pygame.Surface,
    color: Tuple[int, ...],
    rect: pygame.Rect,
    border_radius: int = 0,
) -> None:
    """Draw a semi-transparent rectangle (colour tuple with 4 channels)."""
    if rect.w < 1 or rect.h < 1:
        return
    tmp = pygame.Surface((rect.w, rect.h), pygame.SRCALPHA)
    pygame.draw.rect(tmp, color, (0, 0, rect.w, rect.h), border_radius=border_radius)
    target.blit(tmp, rect.topleft)


# ── Text helper ──────────────────────────────────────────────────────────────

def render_text(
    surface: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    pos: Tuple[int, int],
    color: Tuple[int, ...] = (230, 230, 235),
    anchor: str = "topleft",
) -> pygame.Rect:
    """Render text with flexible *anchor* ('topleft', 'center', 'midright' …)."""
    img = font.render(text, True, color)
    rect = img.get_rect(**{anchor: pos})
    surface.blit(img, rect)
    return rect


class ViewHelpers:
    """Mixin exposing the helpers above plus font loading."""

    hex_to_rgb = staticmethod(hex_to_rgb)
    draw_alpha_rect = staticmethod(draw_alpha_rect)
    render_text = staticmethod(render_text)

    @staticmethod
    def _load_font(size: int, bold: bool = False) -> pygame.font.Font:
        for name in ("DejaVu Sans Mono", "Menlo", "Consolas"):
            path = pygame.font.match_font(name, bold=bold)
            if path:
                return pygame.font.Font(path, size)
        font = pygame.font.Font(None, size + 4)
        font.set_bold(bold)
        return font
