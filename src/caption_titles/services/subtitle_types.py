"""Shared types for caption conversion."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from ..core import config


class CaptionFormat(StrEnum):
    SRT = "srt"
    ITT = "itt"

    @property
    def label(self) -> str:
        return self.value.upper()


class ReferenceOrigin(StrEnum):
    DEFAULT = "default"
    SOURCE = "source"
    DOCUMENT = "document"


@dataclass(frozen=True)
class Cue:
    start: float
    end: float
    text: str


@dataclass(frozen=True)
class TimelineReference:
    """Numeric encoding of an output timeline: ticks per second and per frame."""

    timescale: int = config.DEFAULT_TIMESCALE
    frame_ticks: int = config.DEFAULT_FRAME_TICKS
    format_name: str = config.DEFAULT_FORMAT_NAME
    effect_uid: str = config.DEFAULT_EFFECT_UID

    def __post_init__(self) -> None:
        if self.timescale < 1:
            raise ValueError(f"timescale must be >= 1, got {self.timescale}")
        if self.frame_ticks < 1:
            raise ValueError(f"frame_ticks must be >= 1, got {self.frame_ticks}")

    @property
    def frame_duration(self) -> str:
        return f"{self.frame_ticks}/{self.timescale}s"

    @property
    def frame_rate(self) -> float:
        return self.timescale / self.frame_ticks
