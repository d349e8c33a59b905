"""Dither canvas package exports."""

from aether_dither.constants import BAYER_4X4, RenderMode
from aether_dither.events import HostEvents, PointerMoveEvent, ResizeEvent
from aether_dither.renderer import (
    DitherRenderer,
    RendererOptions,
    RenderState,
    SurfaceDescriptor,
    render_frame,
)
from aether_dither.surface import MemorySurface, PixelSurface, SurfaceError

__all__ = [
    "BAYER_4X4",
    "RenderMode",
    "HostEvents",
    "PointerMoveEvent",
    "ResizeEvent",
    "DitherRenderer",
    "RendererOptions",
    "RenderState",
    "SurfaceDescriptor",
    "render_frame",
    "MemorySurface",
    "PixelSurface",
    "SurfaceError",
]
