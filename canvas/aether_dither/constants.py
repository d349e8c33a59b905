"""Dither canvas constants: Bayer matrix, palettes, default tunables."""

from __future__ import annotations

from enum import Enum

import numpy as np

# ── Ordered dither matrix (4x4 Bayer) ────────────────────────────────

BAYER_4X4: tuple[tuple[int, ...], ...] = (
    (0, 8, 2, 10),
    (12, 4, 14, 6),
    (3, 11, 1, 9),
    (15, 7, 13, 5),
)
BAYER_SIZE = 4
BAYER_LEVELS = 16

# Threshold table on the 0-255 brightness scale, read-only.
BAYER_THRESHOLDS: np.ndarray = np.array(BAYER_4X4, dtype=np.float64) / BAYER_LEVELS * 255.0
BAYER_THRESHOLDS.setflags(write=False)


# ── Modes + palettes ─────────────────────────────────────────────────


class RenderMode(str, Enum):
    BACKGROUND = "background"  # subtle texture over the page color
    FOREGROUND = "foreground"  # high-contrast dots for compositing


RGBA = tuple[int, int, int, int]

BASE_COLOR: tuple[int, int, int] = (230, 229, 224)  # #E6E5E0
CLEAR: RGBA = (*BASE_COLOR, 0)

PALETTES: dict[RenderMode, tuple[RGBA, RGBA]] = {
    # (on, off)
    RenderMode.BACKGROUND: ((200, 200, 195, 255), CLEAR),
    RenderMode.FOREGROUND: ((26, 26, 24, 255), CLEAR),
}

DEFAULT_DIVISOR: dict[RenderMode, int] = {
    RenderMode.BACKGROUND: 4,
    RenderMode.FOREGROUND: 2,
}


# ── Pattern tunables ─────────────────────────────────────────────────

TIME_STEP = 0.015  # per tick, not wall-clock
POINTER_RADIUS = 150.0  # buffer units
DISTORTION_GAIN = 10.0
WAVE_FREQ = 0.03
PERTURB_FREQ = 0.05
DISTORTION_SPEED = 2.0
BRIGHTNESS_SCALE = 100.0  # wave value [0, 2] -> [0, 200]
POINTER_BOOST = 50.0

# ── Host defaults ────────────────────────────────────────────────────

ANIM_FPS = 60
WINDOW_W = 1280
WINDOW_H = 720
