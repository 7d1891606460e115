"""Flatten XML documents into start/end/text events.

Parsers in this package are written as state machines over these events so
they can be driven by synthetic event lists in tests. Element and attribute
names are reduced to their local part (namespaces and prefixes dropped).
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Iterator, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartElement:
    name: str
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EndElement:
    name: str


@dataclass(frozen=True)
class CharacterData:
    text: str


XmlEvent = Union[StartElement, EndElement, CharacterData]


def local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1].rsplit(":", 1)[-1]


@dataclass
class _OpenElement:
    element: ET.Element
    last_child: ET.Element | None = None


def _pending_text(frame: _OpenElement) -> str | None:
    # Text before the next child or end tag sits on the element until its
    # first child closes, then on the tail of the latest closed child.
    if frame.last_child is None:
        return frame.element.text
    return frame.last_child.tail


def iter_xml_events(data: bytes) -> Iterator[XmlEvent]:
    """
    Yield events in document order.

    Parsing is incremental: when the document turns malformed partway
    through, the events produced before the error are still yielded and the
    rest of the input is ignored.
    """
    parser = ET.XMLPullParser(events=("start", "end"))
    try:
        parser.feed(data)
        parser.close()
    except ET.ParseError as exc:
        logger.warning("Malformed XML document: %s", exc)

    stack: list[_OpenElement] = []
    try:
        for kind, element in parser.read_events():
            if kind == "start":
                if stack:
                    text = _pending_text(stack[-1])
                    if text:
                        yield CharacterData(text)
                stack.append(_OpenElement(element))
                yield StartElement(
                    local_name(element.tag),
                    {local_name(k): v for k, v in element.attrib.items()},
                )
                continue

            frame = stack.pop()
            text = _pending_text(frame)
            if text:
                yield CharacterData(text)
            yield EndElement(local_name(element.tag))
            if stack:
                stack[-1].last_child = element
    except ET.ParseError as exc:
        logger.debug("Keeping events parsed before malformed XML: %s", exc)
