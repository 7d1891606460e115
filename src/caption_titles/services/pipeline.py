"""File-to-file conversion with timing metrics."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from ..core import metrics
from ..core.config import settings
from ..core.errors import UnrecognizedCaptionFormat
from . import session as conversion
from .files import ensure_fcpxml_suffix, format_hint_for, project_name_for, read_reference_bytes
from .subtitle_types import CaptionFormat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    output_path: Path
    project_name: str
    session: conversion.ConversionSession


def convert_caption_file(
    source: Path,
    output: Path,
    *,
    reference: Path | None = None,
    format_hint: CaptionFormat | str | None = None,
    project_name: str | None = None,
) -> ConversionResult:
    """
    Convert a caption file into an FCPXML file at ``output``.

    The output always gets the ``.fcpxml`` extension and, unless a name is
    given, the event and project are named after the output file. Without an
    explicit ``reference`` the configured ``reference_file`` is used.

    Raises:
        UnrecognizedCaptionFormat: If neither SRT nor ITT cues are found
        ReferenceNotFound: If the reference path does not exist
    """
    output_path = ensure_fcpxml_suffix(output)
    name = project_name or project_name_for(output_path)
    hint = format_hint if format_hint is not None else format_hint_for(source)
    reference_path = reference if reference is not None else settings.reference_file

    pipeline_timings: dict[str, float] = {}
    pipeline_error: str | None = None
    overall_start = time.perf_counter()
    session: conversion.ConversionSession | None = None

    try:
        with metrics.measure_time(pipeline_timings, "read_s"):
            source_bytes = source.read_bytes()
            reference_bytes = read_reference_bytes(reference_path) if reference_path else None

        with metrics.measure_time(pipeline_timings, "parse_s"):
            session = conversion.load(source_bytes, reference_bytes, hint=hint)
        if not session.recognized:
            raise UnrecognizedCaptionFormat(session.status)

        with metrics.measure_time(pipeline_timings, "build_s"):
            document = conversion.convert_session(session, name)

        with metrics.measure_time(pipeline_timings, "write_s"):
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(document, encoding="utf-8")
    except Exception as exc:
        pipeline_error = str(exc)
        raise
    finally:
        pipeline_timings["total_s"] = time.perf_counter() - overall_start
        if session is not None and not session.recognized:
            status = "unrecognized"
        else:
            status = "error" if pipeline_error else "success"
        metrics.log_pipeline_metrics(
            {
                "event": "convert",
                "status": status,
                "error": pipeline_error,
                "source": source.name,
                "format": session.source_format.value if session and session.source_format else None,
                "cue_count": len(session.cues) if session else 0,
                "reference_origin": session.reference_origin.value if session else None,
                "timings": pipeline_timings,
            }
        )

    logger.info("Saved FCPXML to %s", output_path)
    return ConversionResult(output_path=output_path, project_name=name, session=session)
