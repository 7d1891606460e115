from typing import List, Optional

from pydantic import BaseModel


class CueResponse(BaseModel):
    index: int
    start: float
    end: float
    text: str


class TimelineReferenceResponse(BaseModel):
    timescale: int
    frame_ticks: int
    frame_duration: str
    format_name: str
    effect_uid: str
    origin: str


class InspectResponse(BaseModel):
    format: Optional[str]
    status: str
    recognized: bool
    cue_count: int
    reference: TimelineReferenceResponse
    cues: List[CueResponse]


class HealthResponse(BaseModel):
    status: str
