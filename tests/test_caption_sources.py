import pytest

from caption_titles.services.caption_sources import (
    ScannerState,
    TimedTextScanner,
    looks_like_itt,
    looks_like_srt,
    parse_captions,
    parse_itt,
    parse_srt,
)
from caption_titles.services.subtitle_types import CaptionFormat, Cue
from caption_titles.services.xml_events import (
    CharacterData,
    EndElement,
    StartElement,
    iter_xml_events,
    local_name,
)


def test_parse_srt_keeps_file_order_and_text(srt_bytes):
    cues = parse_srt(srt_bytes.decode("utf-8"))

    assert cues == [Cue(1.0, 2.5, "Hello"), Cue(3.0, 5.0, "World")]


def test_parse_srt_normalizes_line_endings_and_multiline_text():
    text = "1\r\n00:00:01,000 --> 00:00:02,000\r\nLine one\r\nLine two\r\n\r\n"

    assert parse_srt(text) == [Cue(1.0, 2.0, "Line one\nLine two")]


def test_parse_srt_accepts_block_without_index():
    cues = parse_srt("00:00:01.000 --> 00:00:02.000\nNo index\n")

    assert cues == [Cue(1.0, 2.0, "No index")]


def test_parse_srt_ignores_cue_settings_after_end_time():
    cues = parse_srt("1\n00:00:01,000 --> 00:00:02,000 X1:100 X2:600 Y1:20 Y2:50\nPositioned\n")

    assert cues == [Cue(1.0, 2.0, "Positioned")]


def test_parse_srt_drops_malformed_blocks_and_continues():
    text = "\n\n".join(
        [
            "1\n00:00:05,000 --> 00:00:04,000\nBackwards",
            "2\n00:00:04,000 --> 00:00:04,000\nZero length",
            "3\nno timing here\nStill text",
            "4",
            "5\n00:00:01,000 --> 00:00:02,000 --> 00:00:03,000\nTwo arrows",
            "6\n00:00:06,000 --> 00:00:07,000\nKept",
        ]
    )

    assert parse_srt(text) == [Cue(6.0, 7.0, "Kept")]


def test_parse_srt_splits_on_whitespace_only_lines():
    text = "1\n00:00:01,000 --> 00:00:02,000\nA\n   \n2\n00:00:03,000 --> 00:00:04,000\nB\n"

    assert [c.text for c in parse_srt(text)] == ["A", "B"]


def test_looks_like_srt_needs_arrow_and_index_line(srt_bytes):
    assert looks_like_srt(srt_bytes.decode("utf-8"))
    assert not looks_like_srt("00:00:01,000 --> 00:00:02,000\nNo index\n")
    assert not looks_like_srt("1\n2\n3\n")


def test_looks_like_itt(itt_bytes, srt_bytes):
    assert looks_like_itt(itt_bytes)
    assert not looks_like_itt(srt_bytes)
    assert not looks_like_itt(b"<tt></tt>")


def test_local_name_drops_namespace_and_prefix():
    assert local_name("{http://www.w3.org/ns/ttml}p") == "p"
    assert local_name("ttp:frameRate") == "frameRate"
    assert local_name("begin") == "begin"


def test_iter_xml_events_emits_text_and_tails_in_order():
    events = list(iter_xml_events(b"<p begin='1'>a<br/>b<span>c</span>d</p>"))

    assert events == [
        StartElement("p", {"begin": "1"}),
        CharacterData("a"),
        StartElement("br", {}),
        EndElement("br"),
        CharacterData("b"),
        StartElement("span", {}),
        CharacterData("c"),
        EndElement("span"),
        CharacterData("d"),
        EndElement("p"),
    ]


def test_iter_xml_events_keeps_events_before_malformed_input():
    assert list(iter_xml_events(b"<tt><p>a</p><p>b & c</p></tt>")) == [
        StartElement("tt", {}),
        StartElement("p", {}),
        CharacterData("a"),
        EndElement("p"),
        StartElement("p", {}),
    ]


@pytest.mark.parametrize("data", [b"", b"not xml at all", b"</tt>"])
def test_iter_xml_events_unparsable_yields_nothing(data):
    assert list(iter_xml_events(data)) == []


def test_scanner_builds_cues_from_synthetic_events():
    scanner = TimedTextScanner()
    scanner.feed_all(
        [
            StartElement("tt", {"frameRate": "25"}),
            StartElement("body"),
            CharacterData("ignored outside paragraphs"),
            StartElement("p", {"begin": "00:00:00:00", "end": "00:00:01:00"}),
            CharacterData("  Hi"),
            StartElement("br"),
            EndElement("br"),
            CharacterData("there  "),
            EndElement("p"),
            EndElement("body"),
            EndElement("tt"),
        ]
    )

    assert scanner.declared_frame_rate == 25.0
    assert scanner.cues == [Cue(0.0, 1.0, "Hi\nthere")]
    assert scanner.state is ScannerState.OUTSIDE


def test_scanner_state_transitions():
    scanner = TimedTextScanner()
    assert scanner.state is ScannerState.OUTSIDE

    scanner.feed(StartElement("p", {"begin": "00:00:01.000", "end": "00:00:02.000"}))
    assert scanner.state is ScannerState.INSIDE_PARAGRAPH

    scanner.feed(EndElement("p"))
    assert scanner.state is ScannerState.OUTSIDE
    assert scanner.cues == [Cue(1.0, 2.0, "")]


def test_scanner_resets_accumulator_after_dropped_paragraph():
    scanner = TimedTextScanner().feed_all(
        [
            StartElement("p", {"begin": "00:00:01.000"}),
            CharacterData("no end"),
            EndElement("p"),
            StartElement("p", {"begin": "00:00:03.000", "end": "00:00:02.000"}),
            CharacterData("backwards"),
            EndElement("p"),
            StartElement("p", {"begin": "00:00:04.000", "end": "00:00:05.000"}),
            CharacterData("kept"),
            EndElement("p"),
        ]
    )

    assert scanner.cues == [Cue(4.0, 5.0, "kept")]


def test_scanner_reads_frame_rate_from_root_only():
    scanner = TimedTextScanner().feed_all(
        [
            StartElement("tt", {"frameRate": "25"}),
            StartElement("tt", {"frameRate": "50"}),
            StartElement("p", {"begin": "00:00:00:00", "end": "00:00:00:10"}),
            EndElement("p"),
        ]
    )

    assert scanner.declared_frame_rate == 25.0
    assert scanner.cues[0].end == pytest.approx(0.4)


@pytest.mark.parametrize(
    "attributes, expected",
    [
        ({"frameRate": "30", "frameRateMultiplier": "1000 1001"}, 30 * 1000 / 1001),
        ({"frameRate": "30", "frameRateMultiplier": "1000 0"}, 30.0),
        ({"frameRate": "30", "frameRateMultiplier": "1000"}, 30.0),
        ({"frameRate": "30", "frameRateMultiplier": "x 2"}, 15.0),
        ({"frameRate": "24"}, 24.0),
    ],
)
def test_scanner_frame_rate_multiplier(attributes, expected):
    scanner = TimedTextScanner()
    scanner.feed(StartElement("tt", attributes))

    assert scanner.declared_frame_rate == pytest.approx(expected)


@pytest.mark.parametrize("rate", ["abc", "0", "-25", "nan"])
def test_scanner_ignores_invalid_frame_rate(rate):
    scanner = TimedTextScanner()
    scanner.feed(StartElement("tt", {"frameRate": rate}))

    assert scanner.declared_frame_rate is None
    assert scanner.fps == 30.0


def test_parse_itt_document(itt_bytes):
    parsed = parse_itt(itt_bytes)

    assert parsed.declared_frame_rate == 25.0
    assert parsed.cues == (
        Cue(0.0, 2.0, "First line\nsecond line"),
        Cue(2.0, 4.0, "Next caption"),
    )


def test_parse_itt_keeps_cues_before_malformed_markup():
    data = b"""<tt frameRate="25"><body><div>
    <p begin="00:00:01.000" end="00:00:02.000">First</p>
    <p begin="00:00:03.000" end="00:00:04.000">Tom & Jerry</p>
    <p begin="00:00:05.000" end="00:00:06.000">Never reached</p>
  </div></body></tt>"""

    parsed = parse_itt(data)

    assert parsed.cues == (Cue(1.0, 2.0, "First"),)
    assert parsed.declared_frame_rate == 25.0

    detected = parse_captions(data)
    assert detected.format is CaptionFormat.ITT
    assert detected.cues == (Cue(1.0, 2.0, "First"),)


def test_parse_itt_unclosed_paragraph_is_dropped():
    parsed = parse_itt(b"<tt><body><p begin='00:00:01.000' end='00:00:02.000'>oops</body>")

    assert parsed.cues == ()
    assert parsed.declared_frame_rate is None


def test_itt_at_2997_agrees_with_srt_timings():
    itt = b"""<tt xmlns="http://www.w3.org/ns/ttml" xmlns:ttp="http://www.w3.org/ns/ttml#parameter"
    ttp:frameRate="30" ttp:frameRateMultiplier="1000 1001">
  <body><div>
    <p begin="00:00:01:15" end="00:00:03:00">One</p>
    <p begin="00:00:04:00" end="00:00:06:15">Two</p>
  </div></body>
</tt>"""
    srt = "1\n00:00:01,500 --> 00:00:03,000\nOne\n\n2\n00:00:04,000 --> 00:00:06,500\nTwo\n"

    itt_cues = parse_itt(itt).cues
    srt_cues = parse_srt(srt)

    assert len(itt_cues) == len(srt_cues) == 2
    for a, b in zip(itt_cues, srt_cues):
        assert abs(a.start - b.start) < 1e-3
        assert abs(a.end - b.end) < 1e-3


def test_parse_captions_sniffs_srt(srt_bytes):
    parsed = parse_captions(srt_bytes)

    assert parsed.format is CaptionFormat.SRT
    assert len(parsed.cues) == 2
    assert parsed.declared_frame_rate is None


def test_parse_captions_sniffs_itt(itt_bytes):
    parsed = parse_captions(itt_bytes)

    assert parsed.format is CaptionFormat.ITT
    assert parsed.declared_frame_rate == 25.0


def test_parse_captions_wrong_hint_falls_through(srt_bytes, itt_bytes):
    assert parse_captions(srt_bytes, hint=CaptionFormat.ITT).format is CaptionFormat.SRT
    assert parse_captions(itt_bytes, hint="srt").format is CaptionFormat.ITT


def test_parse_captions_tries_srt_when_sniffing_fails():
    parsed = parse_captions(b"00:00:01,000 --> 00:00:02,000\nNo index line\n")

    assert parsed.format is CaptionFormat.SRT
    assert parsed.cues == (Cue(1.0, 2.0, "No index line"),)


def test_parse_captions_unrecognized_is_not_an_error():
    parsed = parse_captions(b"just some notes\nnothing timed here\n")

    assert parsed.format is None
    assert parsed.cues == ()


def test_parse_captions_strips_bom_and_replaces_invalid_bytes():
    data = b"\xef\xbb\xbf1\n00:00:01,000 --> 00:00:02,000\nCaf\xe9\n"
    parsed = parse_captions(data)

    assert parsed.format is CaptionFormat.SRT
    assert parsed.cues[0].text == "Caf\ufffd"


def test_parse_captions_rejects_none():
    with pytest.raises(TypeError):
        parse_captions(None)  # type: ignore[arg-type]


def test_parse_captions_rejects_unknown_hint(srt_bytes):
    with pytest.raises(ValueError):
        parse_captions(srt_bytes, hint="vtt")
