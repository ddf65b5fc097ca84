"""Helpers for the playback timeline: time labels and segment load states."""

from __future__ import annotations

import enum
import math

from quadplay.common import remap


class SegmentState(enum.Enum):
    """How a segment of the video is shown on the stream bar."""

    UNLOADED = "unloaded"
    LOADED = "loaded"
    SEEK = "seek"


def format_time(seconds: float) -> str:
    """Format seconds as ``MM:SS``."""
    whole = int(seconds)
    minutes = int(seconds / 60)
    secs = int(math.fmod(whole, 60))
    return f"{minutes:02}:{secs:02}"


def _check_segment(frames_per_segment: int) -> None:
    if frames_per_segment < 1:
        raise ValueError("frames per segment must be greater than 0")


def segment_states(
    frame_count: int,
    frames_per_segment: int,
    seek: int,
    frame_range: tuple[int, int],
) -> list[SegmentState]:
    """Return the state of every segment, the seek segment taking precedence."""
    _check_segment(frames_per_segment)
    segment_count = frame_count // frames_per_segment + 1
    seek_seg = seek // frames_per_segment
    begin_seg = frame_range[0] // frames_per_segment
    end_seg = frame_range[1] // frames_per_segment

    def state(index: int) -> SegmentState:
        if index == seek_seg:
            return SegmentState.SEEK
        if begin_seg <= index <= end_seg:
            return SegmentState.LOADED
        return SegmentState.UNLOADED

    return [state(i) for i in range(segment_count)]


def seek_fraction(seek: int, frames_per_segment: int, frame_count: int) -> float:
    """Position of ``seek`` within its own segment, from 0 at its start towards 1."""
    _check_segment(frames_per_segment)
    begin = (seek // frames_per_segment) * frames_per_segment
    end = min(begin + frames_per_segment, frame_count)
    if end <= begin:
        return 0.0
    return remap(float(seek), float(begin), float(end), 0.0, 1.0)