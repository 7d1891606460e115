"""Conversion session: caption bytes in, FCPXML text out.

``load`` and ``convert`` are the only entry points the CLI and the API use;
neither keeps state between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..core.config import settings
from .caption_sources import parse_captions
from .fcpxml import build_fcpxml
from .reference import resolve_reference
from .subtitle_types import CaptionFormat, Cue, ReferenceOrigin, TimelineReference

logger = logging.getLogger(__name__)

UNRECOGNIZED_STATUS = "Could not detect SRT or ITT"


@dataclass(frozen=True)
class ConversionSession:
    cues: tuple[Cue, ...]
    reference: TimelineReference
    source_format: CaptionFormat | None
    reference_origin: ReferenceOrigin

    @property
    def recognized(self) -> bool:
        return self.source_format is not None and bool(self.cues)

    @property
    def status(self) -> str:
        if not self.recognized:
            return UNRECOGNIZED_STATUS
        return f"Loaded {len(self.cues)} cues from {self.source_format.label}"  # type: ignore[union-attr]


def load(
    source: bytes,
    reference: bytes | None = None,
    *,
    hint: CaptionFormat | str | None = None,
) -> ConversionSession:
    """
    Parse caption bytes and resolve the timeline they will be placed on.

    A reference document, when given, decides the timing; otherwise a frame
    rate declared by an ITT source does; otherwise the 29.97 defaults apply.
    Unrecognized input is reported through ``recognized``/``status``.
    """
    if source is None:
        raise TypeError("caption source must be bytes, not None")

    parsed = parse_captions(source, hint=hint)
    timeline, origin = resolve_reference(reference, parsed.declared_frame_rate)
    session = ConversionSession(
        cues=parsed.cues,
        reference=timeline,
        source_format=parsed.format,
        reference_origin=origin,
    )
    logger.info(
        "%s",
        session.status,
        extra={
            "data": {
                "format": session.source_format,
                "cue_count": len(session.cues),
                "frame_duration": timeline.frame_duration,
                "reference_origin": origin,
            }
        },
    )
    return session


def convert(cues: Sequence[Cue], reference: TimelineReference, name: str) -> str:
    project_name = name or settings.default_project_name
    return build_fcpxml(cues, reference, project_name)


def convert_session(session: ConversionSession, name: str) -> str:
    return convert(session.cues, session.reference, name)
