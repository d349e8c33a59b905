"""Raster targets the renderer draws into.

The renderer only needs three capabilities: allocate a buffer, write a full
RGBA frame, present it. ``MemorySurface`` keeps frames in a bytearray
(tests, headless snapshots); ``PygameSurface`` blits onto a region of a
pygame display with nearest-neighbor upscaling.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import numpy as np
import pygame

from aether_dither.constants import RGBA

log = logging.getLogger(__name__)

BYTES_PER_PIXEL = 4


class SurfaceError(RuntimeError):
    """Raised when a frame cannot be written to a surface."""


class PixelSurface(ABC):
    """Minimal capability interface for a 2D RGBA raster target."""

    def __init__(self) -> None:
        self._width = 0
        self._height = 0

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> tuple[int, int]:
        return self._width, self._height

    @abstractmethod
    def allocate(self, width: int, height: int) -> bool:
        """(Re)allocate the backing buffer. Returns False if unavailable."""
        raise NotImplementedError

    @abstractmethod
    def write_buffer(self, data: bytes) -> None:
        raise NotImplementedError

    @abstractmethod
    def present(self) -> None:
        raise NotImplementedError

    def release(self) -> None:
        self._width = 0
        self._height = 0

    def _check_frame(self, data: bytes) -> None:
        expected = self._width * self._height * BYTES_PER_PIXEL
        if len(data) != expected:
            raise SurfaceError(
                f"frame is {len(data)} bytes, expected {expected} "
                f"for {self._width}x{self._height}"
            )


class MemorySurface(PixelSurface):
    """In-memory RGBA buffer."""

    def __init__(self) -> None:
        super().__init__()
        self.buffer = bytearray()
        self.allocations = 0
        self.writes = 0
        self.presents = 0

    def allocate(self, width: int, height: int) -> bool:
        self._width = width
        self._height = height
        self.buffer = bytearray(width * height * BYTES_PER_PIXEL)
        self.allocations += 1
        return True

    def write_buffer(self, data: bytes) -> None:
        self._check_frame(data)
        self.buffer[:] = data
        self.writes += 1

    def present(self) -> None:
        self.presents += 1

    def release(self) -> None:
        super().release()
        self.buffer = bytearray()

    def pixel(self, x: int, y: int) -> RGBA:
        i = (y * self._width + x) * BYTES_PER_PIXEL
        r, g, b, a = self.buffer[i : i + BYTES_PER_PIXEL]
        return r, g, b, a

    def snapshot(self) -> bytes:
        return bytes(self.buffer)


class PygameSurface(PixelSurface):
    """Blits frames onto *rect* of a pygame surface, upscaled without smoothing."""

    def __init__(
        self,
        target: pygame.Surface,
        rect: pygame.Rect | tuple[int, int, int, int],
    ) -> None:
        super().__init__()
        self._target = target
        self._rect = pygame.Rect(rect)
        self._frame: pygame.Surface | None = None

    @property
    def rect(self) -> pygame.Rect:
        return self._rect

    @property
    def frame(self) -> pygame.Surface | None:
        """The allocated buffer-resolution surface frames are written into."""
        return self._frame

    def set_rect(self, rect: pygame.Rect | tuple[int, int, int, int]) -> None:
        self._rect = pygame.Rect(rect)

    def allocate(self, width: int, height: int) -> bool:
        try:
            self._frame = pygame.Surface((width, height), pygame.SRCALPHA)
        except pygame.error as exc:
            log.debug("pygame surface allocation failed: %s", exc)
            self._frame = None
            return False
        self._width = width
        self._height = height
        return True

    def write_buffer(self, data: bytes) -> None:
        if self._frame is None:
            raise SurfaceError("surface not allocated")
        self._check_frame(data)
        # surfarray indexes [x, y]; frames are row-major [y, x].
        rgba = np.frombuffer(data, dtype=np.uint8).reshape(
            self._height, self._width, BYTES_PER_PIXEL
        ).transpose(1, 0, 2)
        try:
            pygame.surfarray.pixels3d(self._frame)[...] = rgba[..., :3]
            pygame.surfarray.pixels_alpha(self._frame)[...] = rgba[..., 3]
        except (pygame.error, ValueError) as exc:
            raise SurfaceError(str(exc)) from exc

    def present(self) -> None:
        if self._frame is None or self._rect.width <= 0 or self._rect.height <= 0:
            return
        # transform.scale is nearest-neighbor; smoothscale would blur the cells.
        scaled = pygame.transform.scale(self._frame, self._rect.size)
        self._target.blit(scaled, self._rect.topleft)

    def release(self) -> None:
        super().release()
        self._frame = None
