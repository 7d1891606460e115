from __future__ import annotations

import pytest

SRT_HELLO_WORLD = (
    b"1\n"
    b"00:00:01,000 --> 00:00:02,500\n"
    b"Hello\n"
    b"\n"
    b"2\n"
    b"00:00:03,000 --> 00:00:05,000\n"
    b"World\n"
)

ITT_25FPS = b"""<?xml version="1.0" encoding="UTF-8"?>
<tt xmlns="http://www.w3.org/ns/ttml"
    xmlns:ttp="http://www.w3.org/ns/ttml#parameter"
    ttp:frameRate="25" ttp:timeBase="smpte" xml:lang="en">
  <body>
    <div>
      <p begin="00:00:00:00" end="00:00:02:00">First line<br/>second line</p>
      <p begin="00:00:02:00" end="00:00:04:00">Next <span>caption</span></p>
    </div>
  </body>
</tt>
"""

REFERENCE_2997 = b"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE fcpxml>
<fcpxml version="1.13">
  <resources>
    <format id="r1" name="FFVideoFormat1080p2997" frameDuration="1001/30000s" width="1920" height="1080"/>
    <effect id="r2" name="Basic Title" uid=".../Titles.localized/Bumper:Opener.localized/Basic Title.localized/Basic Title.moti"/>
  </resources>
  <library>
    <event name="Reference">
      <project name="Reference">
        <sequence format="r1" duration="0s" tcStart="0s">
          <spine/>
        </sequence>
      </project>
    </event>
  </library>
</fcpxml>
"""


@pytest.fixture
def srt_bytes() -> bytes:
    return SRT_HELLO_WORLD

@pytest.fixture
def itt_bytes() -> bytes:
    return ITT_25FPS

@pytest.fixture
def reference_bytes() -> bytes:
    return REFERENCE_2997
