from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace

from .event_generator import Scenario, parse_scenario

ENV_PREFIX = "BUBBLE_CHAMBER_"

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True, slots=True)
class ChamberConfig:
    window_size: tuple[int, int] = (1100, 640)
    target_fps: int = 60
    default_scenario: Scenario = Scenario.PROTON_PROTON

    # View transform.
    initial_zoom: float = 0.7
    zoom_min: float = 0.5
    zoom_max: float = 3.0
    zoom_factor: float = 1.1
    pan_step_px: float = 20.0

    # Hit-testing.
    label_radius_px: float = 30.0
    track_hover_threshold: float = 0.05  # normalized chamber units
    hover_interval_s: float = 0.016

    # Background texture.
    grain_density: float = 0.0005  # points per pixel
    grid_size_px: int = 50

    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT
    log_file: str | None = None

    def __post_init__(self) -> None:
        if self.zoom_min <= 0 or self.zoom_min > self.zoom_max:
            raise ValueError("zoom bounds must satisfy 0 < zoom_min <= zoom_max")
        if not (self.zoom_min <= self.initial_zoom <= self.zoom_max):
            raise ValueError("initial_zoom must lie within the zoom bounds")
        if self.zoom_factor <= 1.0:
            raise ValueError("zoom_factor must be > 1")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "ChamberConfig":
        env = os.environ if environ is None else environ
        cfg = cls()

        raw_scenario = env.get(f"{ENV_PREFIX}SCENARIO", "").strip()
        if raw_scenario:
            cfg = replace(cfg, default_scenario=parse_scenario(raw_scenario))

        raw_level = env.get(f"{ENV_PREFIX}LOG_LEVEL", "").strip().upper()
        if raw_level and isinstance(logging.getLevelName(raw_level), int):
            cfg = replace(cfg, log_level=raw_level)

        raw_file = env.get(f"{ENV_PREFIX}LOG_FILE", "").strip()
        if raw_file:
            cfg = replace(cfg, log_file=raw_file)

        zoom = _as_float(env.get(f"{ENV_PREFIX}INITIAL_ZOOM"), cfg.initial_zoom)
        if cfg.zoom_min <= zoom <= cfg.zoom_max:
            cfg = replace(cfg, initial_zoom=zoom)

        width = _as_int(env.get(f"{ENV_PREFIX}WINDOW_WIDTH"), cfg.window_size[0])
        height = _as_int(env.get(f"{ENV_PREFIX}WINDOW_HEIGHT"), cfg.window_size[1])
        if width > 0 and height > 0:
            cfg = replace(cfg, window_size=(width, height))

        return cfg


def _as_float(value: object, fallback: float) -> float:
    if value is None:
        return float(fallback)
    try:
        return float(str(value).strip())
    except ValueError:
        return float(fallback)


def _as_int(value: object, fallback: int) -> int:
    if value is None:
        return int(fallback)
    try:
        return int(str(value).strip())
    except ValueError:
        return int(fallback)
