"""Canvas host configuration with defaults, loadable from YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from aether_dither.constants import ANIM_FPS, WINDOW_H, WINDOW_W, RenderMode
from aether_dither.renderer import RendererOptions

log = logging.getLogger(__name__)


@dataclass
class WindowConfig:
    width: int = WINDOW_W
    height: int = WINDOW_H
    fps: int = ANIM_FPS
    hero_enabled: bool = True
    hero_fraction: float = 0.5  # hero panel edge relative to the window

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError("window size must be >= 1x1")
        if self.fps < 1:
            raise ValueError("fps must be >= 1")
        if not (0.0 < self.hero_fraction <= 1.0):
            raise ValueError("hero_fraction must be in (0, 1]")


def _background() -> RendererOptions:
    return RendererOptions(mode=RenderMode.BACKGROUND)


def _foreground() -> RendererOptions:
    return RendererOptions(mode=RenderMode.FOREGROUND)


@dataclass
class CanvasConfig:
    background: RendererOptions = field(default_factory=_background)
    foreground: RendererOptions = field(default_factory=_foreground)
    window: WindowConfig = field(default_factory=WindowConfig)


def load_config(path: str | Path | None = None) -> CanvasConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        return CanvasConfig()

    path = Path(path)
    if not path.exists():
        log.warning("config file not found: %s, using defaults", path)
        return CanvasConfig()

    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError("top level must be a mapping")

        cfg = CanvasConfig(
            background=RendererOptions(
                **{**(raw.get("background") or {}), "mode": RenderMode.BACKGROUND}
            ),
            foreground=RendererOptions(
                **{**(raw.get("foreground") or {}), "mode": RenderMode.FOREGROUND}
            ),
            window=WindowConfig(**(raw.get("window") or {})),
        )
    except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
        log.warning("config load error: %s, using defaults", e)
        return CanvasConfig()

    log.info("config loaded from %s", path)
    return cfg
