"""Filesystem helpers for the CLI and the file pipeline."""

from __future__ import annotations

from pathlib import Path

from ..core.errors import ReferenceNotFound
from .subtitle_types import CaptionFormat

FCPXML_SUFFIX = ".fcpxml"
BUNDLE_DOCUMENT = "Info.fcpxml"

_HINTS = {
    ".srt": CaptionFormat.SRT,
    ".itt": CaptionFormat.ITT,
}


def format_hint_for(path: Path) -> CaptionFormat | None:
    """Caption format implied by the file extension, if any."""
    return _HINTS.get(path.suffix.lower())


def read_reference_bytes(path: Path) -> bytes:
    """Read a reference FCPXML file, or the timeline document inside a ``.fcpxmld`` bundle.

    Raises:
        ReferenceNotFound: If the path (or the bundle's document) does not exist
    """
    if path.is_dir():
        document = path / BUNDLE_DOCUMENT
        if not document.is_file():
            raise ReferenceNotFound(f"No {BUNDLE_DOCUMENT} inside bundle {path}")
        return document.read_bytes()
    if not path.is_file():
        raise ReferenceNotFound(f"Reference file not found: {path}")
    return path.read_bytes()


def ensure_fcpxml_suffix(path: Path) -> Path:
    """Replace any extension with ``.fcpxml`` (a matching one is kept as is)."""
    if path.suffix.lower() == FCPXML_SUFFIX:
        return path
    return path.with_suffix(FCPXML_SUFFIX)


def project_name_for(path: Path) -> str:
    """Event and project name used for an output file: its stem."""
    return ensure_fcpxml_suffix(path).stem
