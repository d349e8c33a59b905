"""Dither canvas host: background + hero-panel renderers in a pygame window.

Run: python -m aether_dither
     python -m aether_dither --config canvas.yaml --fps 30
     python -m aether_dither --snapshot frame.png --frames 120
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pygame

from aether_dither.config import CanvasConfig, load_config
from aether_dither.constants import BASE_COLOR
from aether_dither.events import (
    WINDOW,
    HostEvents,
    PointerMoveEvent,
    ResizeEvent,
)
from aether_dither.renderer import DitherRenderer, SurfaceDescriptor
from aether_dither.surface import MemorySurface, PygameSurface

log = logging.getLogger(__name__)

HERO = "hero"


def hero_bounds(
    width: int, height: int, fraction: float
) -> tuple[int, int, int, int]:
    """Centered hero panel covering *fraction* of each window edge."""
    w = int(width * fraction)
    h = int(height * fraction)
    return (width - w) // 2, (height - h) // 2, w, h


# ── Headless snapshot ────────────────────────────────────────────────


def render_snapshot(
    cfg: CanvasConfig,
    path: Path,
    frames: int,
    pointer: tuple[float, float] | None = None,
) -> bytes:
    """Tick a background renderer *frames* times and save the result as PNG.

    Returns the raw RGBA buffer of the last frame.
    """
    events = HostEvents()
    surface = MemorySurface()
    renderer = DitherRenderer(events)
    win = cfg.window
    renderer.start(
        SurfaceDescriptor(surface, (0, 0, win.width, win.height)), cfg.background
    )
    try:
        if pointer is not None:
            events.push(PointerMoveEvent(*pointer))
        for _ in range(frames):
            events.dispatch()
            renderer.tick()

        data = surface.snapshot()
        if not data:
            log.warning(
                "window smaller than divisor %d; nothing to save",
                cfg.background.divisor,
            )
            return data
        frame = pygame.image.frombuffer(data, surface.size, "RGBA")
        canvas = pygame.Surface((win.width, win.height))
        canvas.fill(BASE_COLOR)
        canvas.blit(pygame.transform.scale(frame, (win.width, win.height)), (0, 0))
        pygame.image.save(canvas, str(path))
        log.info("snapshot saved to %s (%dx%d buffer)", path, *surface.size)
        return data
    finally:
        renderer.stop()


# ── Window loop ──────────────────────────────────────────────────────


def run_window(cfg: CanvasConfig) -> None:
    pygame.init()
    win = cfg.window
    screen = pygame.display.set_mode((win.width, win.height), pygame.RESIZABLE)
    pygame.display.set_caption("Studio Aether | Dither Canvas")
    clock = pygame.time.Clock()

    events = HostEvents()
    window_rect = (0, 0, win.width, win.height)
    hero_rect = hero_bounds(win.width, win.height, win.hero_fraction)

    bg_surface = PygameSurface(screen, window_rect)
    background = DitherRenderer(events)
    background.start(SurfaceDescriptor(bg_surface, window_rect, WINDOW), cfg.background)

    hero_surface = PygameSurface(screen, hero_rect)
    hero = DitherRenderer(events)
    if win.hero_enabled:
        hero.start(SurfaceDescriptor(hero_surface, hero_rect, HERO), cfg.foreground)

    running = True
    try:
        while running:
            # ── 1. pygame events → host event bus ──────────────────
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key in (
                    pygame.K_ESCAPE,
                    pygame.K_q,
                ):
                    running = False
                elif event.type == pygame.MOUSEMOTION:
                    events.push(PointerMoveEvent(*event.pos))
                elif event.type == pygame.VIDEORESIZE:
                    w, h = event.size
                    hero_rect = hero_bounds(w, h, win.hero_fraction)
                    bg_surface.set_rect((0, 0, w, h))
                    hero_surface.set_rect(hero_rect)
                    events.push(ResizeEvent(WINDOW, 0, 0, w, h))
                    events.push(ResizeEvent(HERO, *hero_rect))

            # ── 2. Deliver input, then tick ────────────────────────
            events.dispatch()
            screen.fill(BASE_COLOR)
            background.tick()
            hero.tick()

            pygame.display.set_caption(
                f"Studio Aether | Dither Canvas  |  {clock.get_fps():.0f} fps"
            )
            pygame.display.flip()
            clock.tick(win.fps)
    finally:
        hero.stop()
        background.stop()
        pygame.quit()


# ── CLI ──────────────────────────────────────────────────────────────


def _parse_pointer(raw: str) -> tuple[float, float]:
    try:
        x, y = (float(v) for v in raw.split(","))
    except ValueError as exc:
        raise argparse.ArgumentTypeError("pointer must be X,Y") from exc
    return x, y


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Studio Aether dither canvas")
    p.add_argument("--config", default=None, help="YAML config file path")
    p.add_argument("--fps", type=int, default=None, help="Override frame rate")
    p.add_argument("--no-hero", action="store_true", help="Disable hero panel")
    p.add_argument("--snapshot", type=Path, default=None, help="Render to PNG and exit")
    p.add_argument("--frames", type=int, default=60, help="Ticks before snapshot")
    p.add_argument(
        "--pointer", type=_parse_pointer, default=None, help="Snapshot pointer X,Y"
    )
    p.add_argument("--log-level", default="INFO", help="Log level")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-5s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    cfg = load_config(args.config)
    if args.fps is not None:
        cfg.window.fps = max(1, args.fps)
    if args.no_hero:
        cfg.window.hero_enabled = False

    if args.snapshot is not None:
        render_snapshot(cfg, args.snapshot, max(1, args.frames), args.pointer)
        return

    run_window(cfg)


if __name__ == "__main__":
    main()
