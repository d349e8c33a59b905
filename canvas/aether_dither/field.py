"""Procedural wave field + ordered dithering.

Everything here is a pure function of ``(x, y, time, pointer)``: no state,
no randomness. Functions accept numpy arrays or plain floats.
"""

from __future__ import annotations

import numpy as np

from aether_dither.constants import (
    BAYER_SIZE,
    BAYER_THRESHOLDS,
    BRIGHTNESS_SCALE,
    DISTORTION_GAIN,
    DISTORTION_SPEED,
    PERTURB_FREQ,
    POINTER_BOOST,
    POINTER_RADIUS,
    RGBA,
    WAVE_FREQ,
)


def mouse_factor(dist, radius: float = POINTER_RADIUS):
    """Pointer proximity in [0, 1]: 1 at the pointer, linear falloff to 0 at *radius*."""
    return np.maximum(0.0, radius - dist) / radius


def bayer_threshold(x: int, y: int) -> float:
    """Threshold for one pixel on the 0-255 scale."""
    return float(BAYER_THRESHOLDS[y % BAYER_SIZE, x % BAYER_SIZE])


def threshold_map(width: int, height: int) -> np.ndarray:
    """Tile the Bayer thresholds over a *height* x *width* buffer."""
    reps_y = -(-height // BAYER_SIZE)
    reps_x = -(-width // BAYER_SIZE)
    return np.tile(BAYER_THRESHOLDS, (reps_y, reps_x))[:height, :width]


def brightness_field(
    width: int,
    height: int,
    t: float,
    pointer: tuple[float, float],
    *,
    radius: float = POINTER_RADIUS,
    distortion_gain: float = DISTORTION_GAIN,
    wave_freq: float = WAVE_FREQ,
    perturb_freq: float = PERTURB_FREQ,
    distortion_speed: float = DISTORTION_SPEED,
    brightness_scale: float = BRIGHTNESS_SCALE,
    pointer_boost: float = POINTER_BOOST,
) -> np.ndarray:
    """Brightness per pixel, shape ``(height, width)``.

    Two traveling waves, one along x perturbed by ``sin(y)`` and one along
    y perturbed by ``cos(x)``. The pointer adds turbulence to the x-wave
    phase and a flat brightness boost, both scaled by ``mouse_factor``.
    """
    ys, xs = np.indices((height, width), dtype=np.float64)
    mx, my = pointer
    dist = np.sqrt((xs - mx) ** 2 + (ys - my) ** 2)
    mf = mouse_factor(dist, radius)

    distortion = mf * distortion_gain
    x_val = (
        xs * wave_freq
        + t
        + np.sin(ys * perturb_freq)
        + distortion * np.sin(t * distortion_speed)
    )
    y_val = ys * wave_freq + t + np.cos(xs * perturb_freq)

    value = (np.sin(x_val) + np.sin(y_val) + 2.0) * 0.5  # 0..2
    return value * brightness_scale + mf * pointer_boost


def dither_mask(brightness: np.ndarray, thresholds: np.ndarray | None = None) -> np.ndarray:
    """True where a pixel is "on" (dark): brightness below its Bayer threshold."""
    if thresholds is None:
        height, width = brightness.shape
        thresholds = threshold_map(width, height)
    return brightness < thresholds


def shade(mask: np.ndarray, on: RGBA, off: RGBA) -> bytes:
    """Map an on/off mask to a packed RGBA byte string (row-major)."""
    on_px = np.array(on, dtype=np.uint8)
    off_px = np.array(off, dtype=np.uint8)
    rgba = np.where(mask[..., None], on_px, off_px)
    return rgba.astype(np.uint8, copy=False).tobytes()
