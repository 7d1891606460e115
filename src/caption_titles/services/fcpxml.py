"""FCPXML timeline builder: one title element per cue on a single spine."""

from __future__ import annotations

from typing import List, Sequence

from ..core import config
from .subtitle_types import Cue, TimelineReference
from .timecode import seconds_to_ticks, snap_to_frame, ticks_to_rational

_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_xml(text: str) -> str:
    # "&" first so already-produced entities are not escaped twice.
    for raw, entity in _XML_ESCAPES:
        text = text.replace(raw, entity)
    return text


def first_line(text: str) -> str:
    lines = text.splitlines()
    return lines[0] if lines else ""


def _snapped_ticks(seconds: float, reference: TimelineReference) -> int:
    return snap_to_frame(seconds_to_ticks(seconds, reference.timescale), reference.frame_ticks)


def _title_lines(index: int, cue: Cue, reference: TimelineReference) -> List[str]:
    offset_ticks = _snapped_ticks(cue.start, reference)
    # Duration is snapped on its own, not derived from the snapped endpoints.
    duration_ticks = _snapped_ticks(cue.end - cue.start, reference)
    if duration_ticks == 0:
        duration_ticks = reference.frame_ticks

    text = escape_xml(cue.text)
    name = first_line(text) or f"Caption {index}"
    offset = ticks_to_rational(offset_ticks, reference.timescale)
    duration = ticks_to_rational(duration_ticks, reference.timescale)
    style_id = f"ts{index}"

    return [
        f'            <title ref="r2" name="{name}" offset="{offset}" start="0s" duration="{duration}">',
        "              <text>",
        f'                <text-style ref="{style_id}">{text}</text-style>',
        "              </text>",
        f'              <text-style-def id="{style_id}">',
        (
            f'                <text-style font="{config.TITLE_FONT}" fontSize="{config.TITLE_FONT_SIZE}" '
            f'fontColor="{config.TITLE_FONT_COLOR}" alignment="{config.TITLE_ALIGNMENT}"/>'
        ),
        "              </text-style-def>",
        "            </title>",
    ]


def build_fcpxml(cues: Sequence[Cue], reference: TimelineReference, project_name: str) -> str:
    """
    Render cues as FCPXML titles on one spine.

    Every offset and duration is a multiple of ``reference.frame_ticks``
    expressed as ``ticks/timescale`` seconds. Cues are placed in start order
    (stable for equal starts) and a gap fills the time before the first one.
    """
    ordered = sorted(cues, key=lambda cue: cue.start)
    total_seconds = max(max((cue.end for cue in ordered), default=0.0), 1.0)
    sequence_duration = ticks_to_rational(
        _snapped_ticks(total_seconds, reference), reference.timescale
    )

    name = escape_xml(project_name)
    format_name = escape_xml(reference.format_name)
    effect_uid = escape_xml(reference.effect_uid)

    lines: List[str] = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        "<!DOCTYPE fcpxml>",
        f'<fcpxml version="{config.FCPXML_VERSION}">',
        "  <resources>",
        (
            f'    <format id="r1" name="{format_name}" frameDuration="{reference.frame_duration}" '
            f'width="{config.FORMAT_WIDTH}" height="{config.FORMAT_HEIGHT}" '
            f'colorSpace="{config.FORMAT_COLOR_SPACE}"/>'
        ),
        f'    <effect id="r2" name="Text" uid="{effect_uid}"/>',
        "  </resources>",
        "  <library>",
        f'    <event name="{name}">',
        f'      <project name="{name}">',
        (
            f'        <sequence format="r1" duration="{sequence_duration}" tcStart="0s" '
            'tcFormat="NDF" audioLayout="stereo" audioRate="48k">'
        ),
        "          <spine>",
    ]

    if ordered:
        first_offset = _snapped_ticks(ordered[0].start, reference)
        if first_offset > 0:
            gap = ticks_to_rational(first_offset, reference.timescale)
            lines.append(f'            <gap name="Gap" offset="0s" duration="{gap}"/>')

    for index, cue in enumerate(ordered, start=1):
        lines.extend(_title_lines(index, cue, reference))

    lines.extend(
        [
            "          </spine>",
            "        </sequence>",
            "      </project>",
            "    </event>",
            "  </library>",
            "</fcpxml>",
        ]
    )
    return "\n".join(lines) + "\n"
