"""Convert SRT and ITT captions into Final Cut Pro FCPXML title timelines."""

__version__ = "0.1.0"
