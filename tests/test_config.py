"""Tests for TimelineConfig."""

from __future__ import annotations

import pytest

from flightline.config import TimelineConfig
from flightline.domain.models import MissingSyllabusPolicy


def test_defaults():
    config = TimelineConfig()
    assert (config.day_start, config.day_end) == (0.0, 24.0)
    assert config.steps_per_hour == 12
    assert config.pixels_per_hour == 200.0
    assert config.missing_syllabus == MissingSyllabusPolicy.ZERO_BUFFER
    assert config.day_length == 24.0


def test_from_env_reads_prefixed_variables():
    config = TimelineConfig.from_env(
        {
            "FLIGHTLINE_DAY_START": "6",
            "FLIGHTLINE_DAY_END": "20.5",
            "FLIGHTLINE_SNAP_MINUTES": "15",
            "FLIGHTLINE_MISSING_SYLLABUS": "skip",
            "FLIGHTLINE_LOG_LEVEL": " ",
            "UNRELATED": "x",
        }
    )
    assert config.day_start == 6.0
    assert config.day_end == 20.5
    assert config.steps_per_hour == 4
    assert config.missing_syllabus == MissingSyllabusPolicy.SKIP
    assert config.log_level == "INFO"


def test_from_env_rejects_bad_values():
    with pytest.raises(ValueError):
        TimelineConfig.from_env({"FLIGHTLINE_SNAP_MINUTES": "zero"})


def test_day_must_not_be_empty():
    with pytest.raises(ValueError):
        TimelineConfig(day_start=12, day_end=12)


def test_config_is_frozen():
    config = TimelineConfig()
    with pytest.raises(ValueError):
        config.day_end = 20
