"""Caption source sniffing and parsing (SRT blocks and ITT/TTML markup).

Malformed cues are dropped and parsing continues; a document that yields no
cue in any grammar comes back with ``format=None`` instead of raising.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from ..core import config
from .subtitle_types import CaptionFormat, Cue
from .timecode import parse_any_timecode, parse_srt_time
from .xml_events import CharacterData, EndElement, StartElement, XmlEvent, iter_xml_events

logger = logging.getLogger(__name__)

ARROW = "-->"
_INDEX_LINE_RE = re.compile(r"^\s*\d+\s*$", re.MULTILINE)
_BLOCK_SEPARATOR_RE = re.compile(r"\n(?:[ \t]*\n)+")


@dataclass(frozen=True)
class SourceParse:
    cues: tuple[Cue, ...]
    format: CaptionFormat | None
    declared_frame_rate: float | None = None


@dataclass(frozen=True)
class TimedTextParse:
    cues: tuple[Cue, ...]
    declared_frame_rate: float | None


def decode_source(data: bytes) -> str:
    return data.decode("utf-8-sig", errors="replace")


# ==================== SRT ====================


def looks_like_srt(text: str) -> bool:
    return ARROW in text and _INDEX_LINE_RE.search(text) is not None


def _parse_srt_block(block: str) -> Cue | None:
    lines = block.split("\n")
    if len(lines) < 2:
        return None

    timing_index = 0 if ARROW in lines[0] else 1
    timing = lines[timing_index]
    if ARROW not in timing:
        return None

    parts = timing.split(ARROW)
    if len(parts) != 2:
        return None

    # Only the first token is the timecode; cue settings may follow the end time.
    start_token, end_token = (p.split()[0] if p.split() else "" for p in parts)
    start = parse_srt_time(start_token)
    end = parse_srt_time(end_token)
    text = "\n".join(lines[timing_index + 1:]).strip()

    if start is None or end is None or not end > start:
        return None
    return Cue(start=start, end=end, text=text)


def parse_srt(text: str) -> list[Cue]:
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    blocks = [
        b.strip("\n")
        for b in _BLOCK_SEPARATOR_RE.split(normalized)
        if b.strip()
    ]

    cues: list[Cue] = []
    for block in blocks:
        cue = _parse_srt_block(block)
        if cue is None:
            logger.debug("Dropping malformed SRT block: %r", block[:80])
            continue
        cues.append(cue)
    return cues


# ==================== ITT / TTML ====================


def looks_like_itt(data: bytes) -> bool:
    text = decode_source(data)
    return "<tt" in text and "<p" in text


class ScannerState(Enum):
    OUTSIDE = "outside"
    INSIDE_PARAGRAPH = "inside_paragraph"


@dataclass
class ParagraphAccumulator:
    begin: str | None = None
    end: str | None = None
    parts: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.parts)


def _parse_rate(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        rate = float(value)
    except ValueError:
        return None
    if not math.isfinite(rate) or rate <= 0:
        return None
    return rate


def _multiplier_factor(value: str) -> float:
    factors: list[float] = []
    for part in value.split():
        try:
            factors.append(float(part))
        except ValueError:
            factors.append(1.0)
    if len(factors) == 2 and factors[1] != 0:
        return factors[0] / factors[1]
    return 1.0


class TimedTextScanner:
    """
    State machine turning timed-text XML events into cues.

    The frame rate comes from the root ``<tt>`` element only; it is used for
    every SMPTE frame field in the document.
    """

    def __init__(self, default_fps: float = config.DEFAULT_SOURCE_FPS):
        self.fps = default_fps
        self.declared_frame_rate: float | None = None
        self.cues: list[Cue] = []
        self.state = ScannerState.OUTSIDE
        self._accumulator = ParagraphAccumulator()
        self._root_seen = False

    def feed(self, event: XmlEvent) -> None:
        if isinstance(event, StartElement):
            self._on_start(event)
        elif isinstance(event, EndElement):
            self._on_end(event)
        elif isinstance(event, CharacterData):
            if self.state is ScannerState.INSIDE_PARAGRAPH:
                self._accumulator.parts.append(event.text)

    def feed_all(self, events: Iterable[XmlEvent]) -> "TimedTextScanner":
        for event in events:
            self.feed(event)
        return self

    def _on_start(self, event: StartElement) -> None:
        name = event.name.lower()
        if name == "tt":
            if not self._root_seen:
                self._root_seen = True
                self._read_frame_rate(event.attributes)
        elif name == "p":
            self.state = ScannerState.INSIDE_PARAGRAPH
            self._accumulator = ParagraphAccumulator(
                begin=event.attributes.get("begin"),
                end=event.attributes.get("end"),
            )
        elif name == "br" and self.state is ScannerState.INSIDE_PARAGRAPH:
            self._accumulator.parts.append("\n")

    def _on_end(self, event: EndElement) -> None:
        if event.name.lower() != "p":
            return
        acc = self._accumulator
        self.state = ScannerState.OUTSIDE
        self._accumulator = ParagraphAccumulator()

        if acc.begin is None or acc.end is None:
            logger.debug("Dropping paragraph without begin/end")
            return
        start = parse_any_timecode(acc.begin, fps=self.fps)
        end = parse_any_timecode(acc.end, fps=self.fps)
        if start is None or end is None or not end > start:
            logger.debug("Dropping paragraph with invalid timing: %r -> %r", acc.begin, acc.end)
            return
        self.cues.append(Cue(start=start, end=end, text=acc.text.strip()))

    def _read_frame_rate(self, attributes: dict[str, str]) -> None:
        rate = _parse_rate(attributes.get("frameRate"))
        if rate is None:
            return
        multiplier = attributes.get("frameRateMultiplier")
        if multiplier is not None:
            rate *= _multiplier_factor(multiplier)
        if not math.isfinite(rate) or rate <= 0:
            return
        self.declared_frame_rate = rate
        self.fps = rate


def parse_itt(data: bytes) -> TimedTextParse:
    scanner = TimedTextScanner().feed_all(iter_xml_events(data))
    return TimedTextParse(cues=tuple(scanner.cues), declared_frame_rate=scanner.declared_frame_rate)


# ==================== Detection ====================


def _attempt_order(text: str, data: bytes, hint: CaptionFormat | None) -> list[CaptionFormat]:
    order: list[CaptionFormat] = []
    if hint is not None:
        order.append(hint)
    elif looks_like_srt(text):
        order.append(CaptionFormat.SRT)
    elif looks_like_itt(data):
        order.append(CaptionFormat.ITT)
    for fmt in (CaptionFormat.SRT, CaptionFormat.ITT):
        if fmt not in order:
            order.append(fmt)
    return order


def parse_captions(data: bytes, *, hint: CaptionFormat | str | None = None) -> SourceParse:
    """
    Detect the caption grammar and parse ``data`` into cues in file order.

    An explicit ``hint`` is tried first, then whichever format the content
    sniffers recognise, then the remaining grammars (SRT before ITT). The
    first grammar yielding at least one cue wins.
    """
    if data is None:
        raise TypeError("caption source must be bytes, not None")
    hint_format = CaptionFormat(hint) if hint is not None else None

    text = decode_source(data)
    for fmt in _attempt_order(text, data, hint_format):
        if fmt is CaptionFormat.SRT:
            cues = parse_srt(text)
            if cues:
                return SourceParse(cues=tuple(cues), format=fmt)
        else:
            parsed = parse_itt(data)
            if parsed.cues:
                return SourceParse(
                    cues=parsed.cues,
                    format=fmt,
                    declared_frame_rate=parsed.declared_frame_rate,
                )

    logger.info("No SRT or ITT cues found in %d bytes of input", len(data))
    return SourceParse(cues=(), format=None)
