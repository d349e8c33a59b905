"""Dither renderer: animated, pointer-reactive ordered-dither texture.

Lifecycle:
    start(descriptor, options)  subscribe to host events, allocate buffer
    tick()                      one frame; called by the host per refresh
    stop()                      unsubscribe, release; idempotent

The host guarantees ticks never overlap. Pointer and resize events only
update instance state; the buffer is reallocated lazily at the start of
the next tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from aether_dither.constants import (
    BRIGHTNESS_SCALE,
    DEFAULT_DIVISOR,
    DISTORTION_GAIN,
    DISTORTION_SPEED,
    PALETTES,
    PERTURB_FREQ,
    POINTER_BOOST,
    POINTER_RADIUS,
    TIME_STEP,
    WAVE_FREQ,
    RenderMode,
)
from aether_dither.events import (
    WINDOW,
    HostEvents,
    PointerMoveEvent,
    ResizeEvent,
)
from aether_dither.field import brightness_field, dither_mask, shade, threshold_map
from aether_dither.surface import PixelSurface, SurfaceError

log = logging.getLogger(__name__)


# ── Options + state ──────────────────────────────────────────────────


@dataclass
class RendererOptions:
    """Per-instance tunables. ``divisor=None`` picks the mode's default."""

    mode: RenderMode = RenderMode.BACKGROUND
    divisor: int | None = None
    time_step: float = TIME_STEP
    pointer_radius: float = POINTER_RADIUS
    distortion_gain: float = DISTORTION_GAIN
    wave_freq: float = WAVE_FREQ
    perturb_freq: float = PERTURB_FREQ
    distortion_speed: float = DISTORTION_SPEED
    brightness_scale: float = BRIGHTNESS_SCALE
    pointer_boost: float = POINTER_BOOST

    def __post_init__(self) -> None:
        self.mode = RenderMode(self.mode)
        if self.divisor is None:
            self.divisor = DEFAULT_DIVISOR[self.mode]
        if int(self.divisor) != self.divisor or self.divisor < 1:
            raise ValueError("divisor must be an integer >= 1")
        self.divisor = int(self.divisor)
        if self.pointer_radius <= 0.0:
            raise ValueError("pointer_radius must be > 0")
        if self.time_step < 0.0:
            raise ValueError("time_step must be >= 0")


@dataclass
class RenderState:
    """Time accumulator + last pointer position (buffer space)."""

    time: float = 0.0
    pointer_x: float = 0.0
    pointer_y: float = 0.0
    ticks: int = 0


@dataclass
class SurfaceDescriptor:
    """A drawable surface plus the layout bounds of the element hosting it.

    *element* names the host element whose ``ResizeEvent``s this renderer
    follows; *bounds* is its initial ``(x, y, width, height)`` in window
    coordinates.
    """

    surface: PixelSurface | None
    bounds: tuple[int, int, int, int]
    element: str = WINDOW


def render_frame(
    width: int,
    height: int,
    state: RenderState,
    options: RendererOptions,
    thresholds=None,
) -> bytes:
    """Compute one RGBA frame for a *width* x *height* buffer."""
    brightness = brightness_field(
        width,
        height,
        state.time,
        (state.pointer_x, state.pointer_y),
        radius=options.pointer_radius,
        distortion_gain=options.distortion_gain,
        wave_freq=options.wave_freq,
        perturb_freq=options.perturb_freq,
        distortion_speed=options.distortion_speed,
        brightness_scale=options.brightness_scale,
        pointer_boost=options.pointer_boost,
    )
    on, off = PALETTES[options.mode]
    return shade(dither_mask(brightness, thresholds), on, off)


# ── Renderer ─────────────────────────────────────────────────────────


class DitherRenderer:
    """Owns one pixel surface and animates it from host ticks."""

    def __init__(self, events: HostEvents) -> None:
        self._events = events
        self._options = RendererOptions()
        self._state = RenderState()
        self._surface: PixelSurface | None = None
        self._element = WINDOW
        self._origin = (0, 0)
        self._pending_size: tuple[int, int] | None = None
        self._thresholds = None
        self._unsubscribers: list[Callable[[], None]] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def options(self) -> RendererOptions:
        return self._options

    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def buffer_size(self) -> tuple[int, int]:
        if self._surface is None:
            return 0, 0
        return self._surface.size

    def start(
        self,
        descriptor: SurfaceDescriptor | None,
        options: RendererOptions | None = None,
    ) -> bool:
        """Begin animating *descriptor*'s surface. Returns False on no-op."""
        if self._running:
            self.stop()
        if descriptor is None or descriptor.surface is None:
            log.debug("no drawable surface; dither renderer disabled")
            return False

        self._options = options or RendererOptions()
        self._state = RenderState()
        self._surface = descriptor.surface
        self._element = descriptor.element
        x, y, width, height = descriptor.bounds
        self._origin = (x, y)
        self._pending_size = (width, height)

        if self._buffer_dims(width, height) != (0, 0) and not self._reallocate():
            log.warning(
                "could not allocate %s surface; dither renderer disabled",
                self._options.mode.value,
            )
            self._surface = None
            self._pending_size = None
            return False

        self._unsubscribers = [
            self._events.subscribe(PointerMoveEvent, self._on_pointer),
            self._events.subscribe(ResizeEvent, self._on_resize),
        ]
        self._running = True
        log.info(
            "dither renderer started (mode=%s divisor=%d element=%s)",
            self._options.mode.value,
            self._options.divisor,
            self._element,
        )
        return True

    def stop(self) -> None:
        """Deregister listeners and release the surface. Safe to repeat."""
        if not self._running:
            return
        self._running = False
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        if self._surface is not None:
            self._surface.release()
            self._surface = None
        self._pending_size = None
        self._thresholds = None
        log.info("dither renderer stopped after %d ticks", self._state.ticks)

    def tick(self) -> bool:
        """Advance time and draw one frame. Returns True if a frame was presented."""
        if not self._running or self._surface is None:
            return False

        self._state.time += self._options.time_step
        self._state.ticks += 1

        if self._pending_size is not None and not self._reallocate():
            return False

        width, height = self._surface.size
        if width <= 0 or height <= 0:
            return False

        frame = render_frame(width, height, self._state, self._options, self._thresholds)
        try:
            self._surface.write_buffer(frame)
            self._surface.present()
        except SurfaceError as exc:
            log.debug("frame skipped: %s", exc)
            return False
        return True

    # ── Event handlers ───────────────────────────────────────────────

    def _on_pointer(self, event: PointerMoveEvent) -> None:
        divisor = self._options.divisor
        self._state.pointer_x = (event.x - self._origin[0]) / divisor
        self._state.pointer_y = (event.y - self._origin[1]) / divisor

    def _on_resize(self, event: ResizeEvent) -> None:
        if event.element != self._element:
            return
        self._origin = (event.x, event.y)
        self._pending_size = (event.width, event.height)

    # ── Internals ────────────────────────────────────────────────────

    def _buffer_dims(self, host_width: int, host_height: int) -> tuple[int, int]:
        divisor = self._options.divisor
        width = max(0, int(host_width) // divisor)
        height = max(0, int(host_height) // divisor)
        if width == 0 or height == 0:
            return 0, 0
        return width, height

    def _reallocate(self) -> bool:
        """Allocate at the pending host size. False leaves the resize pending."""
        assert self._surface is not None and self._pending_size is not None
        width, height = self._buffer_dims(*self._pending_size)
        if width == 0:
            return False
        if not self._surface.allocate(width, height):
            log.debug("surface allocation failed at %dx%d", width, height)
            return False
        self._thresholds = threshold_map(width, height)
        self._pending_size = None
        return True
