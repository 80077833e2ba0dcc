from __future__ import annotations

import logging

import pytest

from bubble_chamber.config import ChamberConfig
from bubble_chamber.event_generator import Scenario
from bubble_chamber.logger_setup import APP_LOGGER, setup_logging


def test_defaults() -> None:
    cfg = ChamberConfig()
    assert cfg.default_scenario is Scenario.PROTON_PROTON
    assert cfg.initial_zoom == 0.7
    assert (cfg.zoom_min, cfg.zoom_max, cfg.zoom_factor) == (0.5, 3.0, 1.1)
    assert cfg.label_radius_px == 30.0
    assert cfg.track_hover_threshold == 0.05


def test_from_env_overlays_values() -> None:
    cfg = ChamberConfig.from_env(
        {
            "BUBBLE_CHAMBER_SCENARIO": "muon-decay",
            "BUBBLE_CHAMBER_LOG_LEVEL": "debug",
            "BUBBLE_CHAMBER_LOG_FILE": "logs/chamber.log",
            "BUBBLE_CHAMBER_INITIAL_ZOOM": "1.5",
            "BUBBLE_CHAMBER_WINDOW_WIDTH": "1280",
            "BUBBLE_CHAMBER_WINDOW_HEIGHT": "720",
        }
    )
    assert cfg.default_scenario is Scenario.MUON_DECAY
    assert cfg.log_level == "DEBUG"
    assert cfg.log_file == "logs/chamber.log"
    assert cfg.initial_zoom == 1.5
    assert cfg.window_size == (1280, 720)


def test_from_env_ignores_malformed_values() -> None:
    cfg = ChamberConfig.from_env(
        {
            "BUBBLE_CHAMBER_LOG_LEVEL": "chatty",
            "BUBBLE_CHAMBER_INITIAL_ZOOM": "lots",
            "BUBBLE_CHAMBER_WINDOW_WIDTH": "-5",
            "BUBBLE_CHAMBER_WINDOW_HEIGHT": "wide",
        }
    )
    assert cfg == ChamberConfig()

    # Out-of-range zoom keeps the default as well.
    assert ChamberConfig.from_env({"BUBBLE_CHAMBER_INITIAL_ZOOM": "9"}).initial_zoom == 0.7


def test_from_env_rejects_unknown_scenario() -> None:
    with pytest.raises(ValueError, match="neutron-decay"):
        ChamberConfig.from_env({"BUBBLE_CHAMBER_SCENARIO": "tau-decay"})


def test_invalid_zoom_bounds_raise() -> None:
    with pytest.raises(ValueError):
        ChamberConfig(zoom_min=2.0, zoom_max=1.0, initial_zoom=1.5)
    with pytest.raises(ValueError):
        ChamberConfig(initial_zoom=5.0)
    with pytest.raises(ValueError):
        ChamberConfig(zoom_factor=1.0)


def test_setup_logging_replaces_handlers_and_writes_file(tmp_path) -> None:
    log_file = tmp_path / "nested" / "chamber.log"
    cfg = ChamberConfig(log_level="DEBUG", log_file=str(log_file))

    logger = setup_logging(cfg)
    logger = setup_logging(cfg)
    try:
        assert logger.name == APP_LOGGER
        assert logger.propagate is False
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2

        logging.getLogger("bubble_chamber.event_generator").info("hello from a child")
        for handler in logger.handlers:
            handler.flush()
        assert "hello from a child" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
