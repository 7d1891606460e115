"""Caption conversion API endpoints."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from urllib.parse import quote

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from ...core import metrics
from ...core.config import settings
from ...core.errors import UnrecognizedCaptionFormat
from ...schemas import CueResponse, InspectResponse, TimelineReferenceResponse
from ...services import session as conversion
from ...services.files import format_hint_for
from ...services.subtitle_types import CaptionFormat

logger = logging.getLogger(__name__)

router = APIRouter()

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._\- ]")


def read_upload_with_limit(upload: UploadFile) -> bytes:
    """Read an upload into memory while enforcing the configured size limit.

    Raises:
        HTTPException: If file is too large or empty
    """
    total = 0
    chunks: list[bytes] = []
    upload.file.seek(0)
    for chunk in iter(lambda: upload.file.read(1024 * 1024), b""):
        total += len(chunk)
        if total > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large; limit is {settings.max_upload_mb}MB",
            )
        chunks.append(chunk)
    if total == 0:
        raise HTTPException(status_code=400, detail="Empty upload")
    return b"".join(chunks)


def resolve_format_hint(explicit: str | None, filename: str | None) -> CaptionFormat | None:
    if explicit:
        try:
            return CaptionFormat(explicit.strip().lower())
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Unsupported caption format: {explicit}")
    if filename:
        return format_hint_for(Path(filename))
    return None


def _load_session(
    captions: UploadFile,
    reference: UploadFile | None,
    caption_format: str | None,
    timings: dict[str, float],
) -> conversion.ConversionSession:
    hint = resolve_format_hint(caption_format, captions.filename)
    with metrics.measure_time(timings, "read_s"):
        source_bytes = read_upload_with_limit(captions)
        reference_bytes = read_upload_with_limit(reference) if reference is not None else None
    with metrics.measure_time(timings, "parse_s"):
        return conversion.load(source_bytes, reference_bytes, hint=hint)


def attachment_filename(project_name: str) -> str:
    safe = _UNSAFE_FILENAME_CHARS.sub("_", project_name).strip() or settings.default_project_name
    return f"{safe}.fcpxml"


def content_disposition(project_name: str) -> str:
    """Attachment header with an ASCII fallback name plus the RFC 5987 UTF-8 name."""
    fallback = attachment_filename(project_name)
    encoded = quote(f"{project_name.strip() or settings.default_project_name}.fcpxml", safe="")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"


@router.post("/convert")
def convert_captions(
    captions: UploadFile = File(...),
    reference: UploadFile | None = File(None),
    project_name: str | None = Form(None),
    caption_format: str | None = Form(None, alias="format"),
) -> Response:
    """Convert uploaded captions into an FCPXML attachment."""
    timings: dict[str, float] = {}
    session = None
    status = "error"
    try:
        session = _load_session(captions, reference, caption_format, timings)
        if not session.recognized:
            status = "unrecognized"
            raise UnrecognizedCaptionFormat(session.status)

        name = (project_name or "").strip() or settings.default_project_name
        with metrics.measure_time(timings, "build_s"):
            document = conversion.convert_session(session, name)
        status = "success"
    finally:
        metrics.log_pipeline_metrics(
            {
                "event": "convert",
                "status": status,
                "source": "api",
                "format": session.source_format.value if session and session.source_format else None,
                "cue_count": len(session.cues) if session else 0,
                "timings": timings,
            }
        )

    return Response(
        content=document.encode("utf-8"),
        media_type="application/xml",
        headers={
            "Content-Disposition": content_disposition(name),
            "X-Caption-Status": session.status,
        },
    )


@router.post("/inspect", response_model=InspectResponse)
def inspect_captions(
    captions: UploadFile = File(...),
    reference: UploadFile | None = File(None),
    caption_format: str | None = Form(None, alias="format"),
) -> InspectResponse:
    """Report the detected format, resolved timeline and cues without building a document."""
    timings: dict[str, float] = {}
    session = _load_session(captions, reference, caption_format, timings)
    timeline = session.reference
    return InspectResponse(
        format=session.source_format.value if session.source_format else None,
        status=session.status,
        recognized=session.recognized,
        cue_count=len(session.cues),
        reference=TimelineReferenceResponse(
            timescale=timeline.timescale,
            frame_ticks=timeline.frame_ticks,
            frame_duration=timeline.frame_duration,
            format_name=timeline.format_name,
            effect_uid=timeline.effect_uid,
            origin=session.reference_origin.value,
        ),
        cues=[
            CueResponse(index=idx, start=cue.start, end=cue.end, text=cue.text)
            for idx, cue in enumerate(session.cues, start=1)
        ],
    )
