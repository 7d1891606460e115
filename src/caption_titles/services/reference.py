"""Resolve the timeline reference (timescale, frame duration, format, title effect)."""

from __future__ import annotations

import logging
import math

from .subtitle_types import ReferenceOrigin, TimelineReference
from .timecode import rational_to_ticks, round_half_away
from .xml_events import StartElement, iter_xml_events

logger = logging.getLogger(__name__)

# Canonical (timescale, frame_ticks, format name) for exact broadcast rates.
_EXACT_RATES: dict[float, tuple[int, int, str]] = {
    30.0: (30000, 1000, "FFVideoFormat1080p30"),
    25.0: (25000, 1000, "FFVideoFormat1080p25"),
    24.0: (24000, 1000, "FFVideoFormat1080p24"),
}
_NTSC_RATE = 29.97
_NTSC_TOLERANCE = 0.01
_NTSC_REFERENCE = (30000, 1001, "FFVideoFormat1080p2997")

_EFFECT_KEYWORDS = ("title", "text")


def _valid_frame_duration(attributes: dict[str, str]) -> tuple[int, int] | None:
    raw = attributes.get("frameDuration")
    if raw is None:
        return None
    return rational_to_ticks(raw)


def _is_title_effect(attributes: dict[str, str]) -> bool:
    name = attributes.get("name")
    if not attributes.get("uid") or not name:
        return False
    lowered = name.lower()
    return any(keyword in lowered for keyword in _EFFECT_KEYWORDS)


def reference_from_document(data: bytes) -> TimelineReference:
    """
    Read timing and title effect from a reference FCPXML document.

    The format used by the first ``<sequence>`` wins when it declares a
    frame duration; otherwise the last ``<format>`` with one is used. The
    last effect whose name mentions "title" or "text" supplies the effect
    UID. Anything missing keeps the built-in defaults; a document that turns
    malformed partway through keeps what was read before the error.
    """
    formats: list[dict[str, str]] = []
    sequence_format: str | None = None
    effect_uid: str | None = None

    for event in iter_xml_events(data):
        if not isinstance(event, StartElement):
            continue
        if event.name == "format":
            formats.append(event.attributes)
        elif event.name == "sequence" and sequence_format is None:
            sequence_format = event.attributes.get("format")
        elif event.name == "effect" and _is_title_effect(event.attributes):
            effect_uid = event.attributes["uid"]

    chosen: dict[str, str] | None = None
    if sequence_format is not None:
        chosen = next(
            (f for f in formats if f.get("id") == sequence_format and _valid_frame_duration(f)),
            None,
        )
    if chosen is None:
        chosen = next((f for f in reversed(formats) if _valid_frame_duration(f)), None)

    defaults = TimelineReference()
    timescale, frame_ticks = defaults.timescale, defaults.frame_ticks
    format_name = defaults.format_name

    if chosen is not None:
        numerator, denominator = _valid_frame_duration(chosen)  # type: ignore[misc]
        frame_ticks = max(numerator, 1)
        timescale = max(denominator, 1)
        format_name = chosen.get("name") or format_name
    else:
        if formats:
            logger.warning("Reference document declares no usable frameDuration; keeping defaults")
        named = next((f["name"] for f in reversed(formats) if f.get("name")), None)
        format_name = named or format_name

    reference = TimelineReference(
        timescale=timescale,
        frame_ticks=frame_ticks,
        format_name=format_name,
        effect_uid=effect_uid or defaults.effect_uid,
    )
    logger.info(
        "Reference resolved from document: %s @ %s, effect=%s",
        reference.format_name,
        reference.frame_duration,
        reference.effect_uid,
    )
    return reference


def reference_for_frame_rate(rate: float) -> TimelineReference:
    """
    Map a source frame rate onto canonical FCPXML timing.

    30, 25 and 24 fps match exactly and 29.97 within 0.01. Any other rate
    uses ``round(rate * 1000)`` ticks per second with 1000 ticks per frame
    and a format name built from the rounded integer rate.
    """
    if not math.isfinite(rate) or rate <= 0:
        return TimelineReference()

    if rate in _EXACT_RATES:
        timescale, frame_ticks, format_name = _EXACT_RATES[rate]
    elif abs(rate - _NTSC_RATE) <= _NTSC_TOLERANCE:
        timescale, frame_ticks, format_name = _NTSC_REFERENCE
    else:
        timescale = max(round_half_away(rate * 1000), 1)
        frame_ticks = 1000
        format_name = f"FFVideoFormat1080p{round_half_away(rate)}"

    return TimelineReference(timescale=timescale, frame_ticks=frame_ticks, format_name=format_name)


def resolve_reference(
    reference_data: bytes | None = None,
    source_frame_rate: float | None = None,
) -> tuple[TimelineReference, ReferenceOrigin]:
    """Pick exactly one resolution path: reference document, source rate, or defaults."""
    if reference_data is not None:
        return reference_from_document(reference_data), ReferenceOrigin.DOCUMENT
    if source_frame_rate is not None:
        return reference_for_frame_rate(source_frame_rate), ReferenceOrigin.SOURCE
    return TimelineReference(), ReferenceOrigin.DEFAULT
