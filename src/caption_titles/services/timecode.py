"""Timecode arithmetic and textual timecode parsing.

Ticks are integer timeline units; ``timescale`` ticks make one second and
``frame_ticks`` ticks make one frame. All rounding in this module is
round-half-away-from-zero (``2.5 -> 3``, ``-2.5 -> -3``) so that results do
not depend on Python's banker's rounding.
"""

from __future__ import annotations

import math
import re

from ..core import config

_RATIONAL_RE = re.compile(r"^\s*(-?\d+)(?:/(\d+))?s?\s*$")


def round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def seconds_to_ticks(seconds: float, timescale: int) -> int:
    return round_half_away(seconds * timescale)


def snap_to_frame(ticks: int, frame_ticks: int) -> int:
    """Round ``ticks`` to the nearest multiple of ``frame_ticks``."""
    if frame_ticks < 1:
        raise ValueError(f"frame_ticks must be >= 1, got {frame_ticks}")
    frames, remainder = divmod(abs(ticks), frame_ticks)
    if remainder * 2 >= frame_ticks:
        frames += 1
    if ticks < 0:
        frames = -frames
    return frames * frame_ticks


def ticks_to_rational(ticks: int, timescale: int) -> str:
    # Never reduced: FCPXML consumers expect the timeline timescale as denominator.
    return f"{ticks}/{timescale}s"


def rational_to_ticks(value: str) -> tuple[int, int] | None:
    """Parse ``"N/Ds"`` (or ``"Ns"``) into ``(N, D)``; ``None`` when malformed."""
    match = _RATIONAL_RE.match(value or "")
    if not match:
        return None
    numerator, denominator = match.groups()
    return int(numerator), int(denominator) if denominator is not None else 1


def _component(value: str) -> float:
    # Non-numeric fields count as zero rather than failing the whole timecode.
    try:
        number = float(value)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_srt_time(text: str) -> float | None:
    """Parse ``HH:MM:SS,mmm`` or ``HH:MM:SS.mmm`` into seconds."""
    parts = text.replace(",", ".").split(":")
    if len(parts) != 3:
        return None
    hours, minutes, seconds = (_component(p) for p in parts)
    return hours * 3600 + minutes * 60 + seconds


def parse_any_timecode(text: str, fps: float = config.DEFAULT_SOURCE_FPS) -> float | None:
    """
    Parse clock or SMPTE timecodes into seconds.

    Accepts ``01:02:03.456``, ``01:02:03,456``, ``01:02:03.456s`` and
    ``01:02:03:24`` (frame field divided by ``fps``, floored at 1 fps).
    """
    value = text.strip()
    # Only a seconds suffix is understood; any other unit leaves the field non-numeric.
    value = value.removesuffix("s")
    parts = value.replace(",", ".").split(":")

    if len(parts) == 3:
        hours, minutes, seconds = (_component(p) for p in parts)
        return hours * 3600 + minutes * 60 + seconds
    if len(parts) == 4:
        hours, minutes, seconds, frames = (_component(p) for p in parts)
        return hours * 3600 + minutes * 60 + seconds + frames / max(fps, 1.0)
    return None
