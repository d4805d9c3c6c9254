"""Timeline configuration: day bounds, snap granularity and display scale."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator

from flightline.domain.models import MissingSyllabusPolicy

ENV_PREFIX = "FLIGHTLINE_"

PIXELS_PER_HOUR = 200.0


class TimelineConfig(BaseModel):
    """Settings shared by the store, the validators and the drag controller.

    Hours are measured from midnight. ``snap_minutes`` is the smallest step
    a dragged tile can move by.
    """

    model_config = ConfigDict(frozen=True)

    day_start: float = Field(default=0.0, ge=0, le=24)
    day_end: float = Field(default=24.0, ge=0, le=24)
    snap_minutes: int = Field(default=5, gt=0, le=60)
    pixels_per_hour: float = Field(default=PIXELS_PER_HOUR, gt=0)
    missing_syllabus: MissingSyllabusPolicy = MissingSyllabusPolicy.ZERO_BUFFER
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _day_not_empty(self) -> TimelineConfig:
        if self.day_end <= self.day_start:
            raise ValueError("day_end must be after day_start")
        return self

    @property
    def steps_per_hour(self) -> float:
        return 60 / self.snap_minutes

    @property
    def day_length(self) -> float:
        return self.day_end - self.day_start

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> TimelineConfig:
        """Build a config from ``FLIGHTLINE_*`` environment variables.

        Unset variables keep their defaults; values are validated by pydantic.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is not None and raw.strip():
                values[name] = raw.strip()
        return cls.model_validate(values)
