"""Segmented decoding of a video into per-frame quadtree white nodes.

Decoding the whole video up front costs too much memory and time, so frames
are decoded a few segments at a time. The frames held always form one
contiguous span. Moving the seek position past that span schedules decoding
of the next segments on a background worker.
"""

from __future__ import annotations

import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from os import PathLike
from typing import Iterator, Protocol

import numpy as np

from quadplay.common import Vec2
from quadplay.quadtree import QuadTree, QuadTreeNode

WHITE_THRESHOLD = 127
"""A pixel whose first channel reaches this value counts as white."""


@dataclass(frozen=True)
class VideoInfo:
    """Basic properties of an opened video."""

    frame_size: Vec2
    frame_count: int
    fps: float
    duration: float


@dataclass(frozen=True)
class SegmentPart:
    """The white nodes of one decoded frame."""

    frame: tuple[QuadTreeNode, ...]
    frame_index: int


class _VideoSource(Protocol):
    fps: float

    @property
    def frame_count(self) -> int: ...

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def read(self, start: int, stop: int) -> Iterator[np.ndarray]: ...


class ArrayVideoSource:
    """A video held in memory as an array of frames (N x H x W, optionally x C)."""

    def __init__(self, frames, fps: float) -> None:
        data = np.asarray(frames)
        if data.ndim not in (3, 4):
            raise ValueError("frames must have shape (N, H, W) or (N, H, W, C)")
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.frames = data
        self.fps = float(fps)

    @property
    def frame_count(self) -> int:
        return int(self.frames.shape[0])

    @property
    def width(self) -> int:
        return int(self.frames.shape[2])

    @property
    def height(self) -> int:
        return int(self.frames.shape[1])

    def read(self, start: int, stop: int) -> Iterator[np.ndarray]:
        """Yield frames ``start`` up to ``stop``, stopping early at the end of the video."""
        for index in range(max(start, 0), min(stop, self.frame_count)):
            yield self.frames[index]


def open_video(path: str | PathLike[str]) -> ArrayVideoSource:
    """Decode a video file into an in-memory source."""
    import imageio.v3 as iio

    try:
        frames = iio.imread(path, index=None)
        meta = iio.immeta(path)
    except Exception as exc:
        raise OSError(f"cannot open video: {path}") from exc
    fps = meta.get("fps")
    if not fps:
        raise OSError(f"video has no frame rate: {path}")
    return ArrayVideoSource(frames, float(fps))


def range_diff(a: int, b: int, c: int, d: int) -> tuple[int, int] | None:
    """Subtract the closed interval [c, d] from [a, b].

    Returns [a, b] when they do not overlap, the remaining piece when [c, d]
    cuts off one end, and None when [c, d] covers [a, b] or splits it in two.
    """
    if a > b or c > d:
        raise ValueError("invalid range: a > b or c > d")
    if d < a or b < c:
        return (a, b)
    if c <= a and b <= d:
        return None
    if c <= a and d < b:
        return (d + 1, b)
    if a < c and b <= d:
        return (a, c - 1)
    return None


def pack_frame(frame) -> bytes:
    """Threshold a frame on its first channel and pack it MSB-first, one bit per pixel."""
    data = np.asarray(frame)
    if data.ndim == 3:
        data = data[..., 0]
    elif data.ndim != 2:
        raise ValueError("frame must have shape (H, W) or (H, W, C)")
    return np.packbits(data.reshape(-1) >= WHITE_THRESHOLD).tobytes()


class SegmentedVideo:
    """Decodes a video segment by segment into quadtree white nodes."""

    def __init__(
        self,
        source: _VideoSource,
        quad_tree_depth: int = 8,
        frames_per_segment: int = 120,
        load_segment_count: int = 3,
    ) -> None:
        if quad_tree_depth < 1:
            raise ValueError("quadtree depth must be greater than 0")
        if frames_per_segment < 1:
            raise ValueError("frames per segment must be greater than 0")
        if load_segment_count < 1:
            raise ValueError("load segment count must be greater than 0")
        fps = float(source.fps)
        if fps <= 0:
            raise ValueError("fps must be positive")
        count = int(source.frame_count)

        self._source = source
        self._info = VideoInfo(
            frame_size=Vec2(float(source.width), float(source.height)),
            frame_count=count,
            fps=fps,
            duration=count / fps,
        )
        self._depth = quad_tree_depth
        self._frames_per_segment = frames_per_segment
        self._load_segment_count = load_segment_count
        self._tree = QuadTree(self._info.frame_size, quad_tree_depth)

        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="quadplay-video")
        self._job: Future | None = None
        self._parts: deque[SegmentPart] = deque()
        self._frame_range: tuple[int, int] = (0, 0)
        self._seek = 0

        self.move_seek(0, sync=True)

    def __enter__(self) -> SegmentedVideo:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def info(self) -> VideoInfo:
        return self._info

    @property
    def seek_position(self) -> int:
        return self._seek

    @property
    def frame_range(self) -> tuple[int, int]:
        """First and last frame index currently held."""
        return self._frame_range

    @property
    def quad_tree_depth(self) -> int:
        return self._depth

    @property
    def frames_per_segment(self) -> int:
        return self._frames_per_segment

    @property
    def load_segment_count(self) -> int:
        return self._load_segment_count

    def set_quad_tree_depth(self, depth: int) -> None:
        """Rebuild the quadtree at a new depth and reload around the seek position."""
        if depth < 1:
            raise ValueError("quadtree depth must be greater than 0")
        if depth == self._depth:
            return
        self._wait_job()
        self._depth = depth
        self._tree = QuadTree(self._info.frame_size, depth)
        self._reset()

    def set_frames_per_segment(self, frames: int) -> None:
        if frames < 1:
            raise ValueError("frames per segment must be greater than 0")
        if frames == self._frames_per_segment:
            return
        self._wait_job()
        self._frames_per_segment = frames
        self._reset()

    def set_load_segment_count(self, count: int) -> None:
        if count < 1:
            raise ValueError("load segment count must be greater than 0")
        if count == self._load_segment_count:
            return
        self._wait_job()
        self._load_segment_count = count
        self._reset()

    def move_seek(self, seek: int, sync: bool = True) -> None:
        """Move the seek position and schedule decoding if it leaves the held span.

        With ``sync`` the call waits for any decoding it starts; without it,
        nothing is scheduled while a previous decoding is still running.
        """
        if seek < 0:
            raise ValueError("seek position must not be negative")
        self._seek = seek
        if not sync and self._job is not None and not self._job.done():
            return

        per_segment = self._frames_per_segment
        head_seg, tail_seg = (frame // per_segment for frame in self._frame_range)
        seek_seg = seek // per_segment
        max_seg = self._info.frame_count // per_segment

        if head_seg <= seek_seg < tail_seg:
            return
        if seek_seg == tail_seg == max_seg:
            return

        new_range = (seek_seg, min(seek_seg + self._load_segment_count - 1, max_seg))
        self._wait_job()
        self._job = self._executor.submit(self._execute, new_range)
        if sync:
            self._wait_job()

    def fetch(self, frame: int) -> list[QuadTreeNode]:
        """Return the white nodes of ``frame``, decoding it synchronously if not held."""
        if not self._parts:
            return []
        if not 0 <= frame < self._info.frame_count:
            raise IndexError(f"Frame index out of range: {frame}")

        head, tail = self._frame_range
        if frame < head or frame > tail:
            self.move_seek(frame, sync=True)
            with self._lock:
                part = self._part_at(frame)
            return list(part.frame)

        with self._lock:
            part = self._part_at(frame)
        self.move_seek(frame, sync=False)
        return list(part.frame)

    def close(self) -> None:
        """Wait for pending decoding and stop the background worker."""
        self._executor.shutdown(wait=True)

    def _reset(self) -> None:
        self._frame_range = (0, 0)
        self._parts.clear()
        self.move_seek(self._seek, sync=True)

    def _wait_job(self) -> None:
        if self._job is not None:
            self._job.result()

    def _part_at(self, frame: int) -> SegmentPart:
        index = frame - self._frame_range[0]
        if not 0 <= index < len(self._parts):
            raise IndexError(f"Frame index out of range: {frame}")
        part = self._parts[index]
        if part.frame_index != frame:
            raise RuntimeError(
                f"Frame index mismatch: expected {frame}, got {part.frame_index}"
            )
        return part

    def _execute(self, new_seg_range: tuple[int, int]) -> None:
        head, tail = self._frame_range
        per_segment = self._frames_per_segment
        new_head = new_seg_range[0] * per_segment
        new_tail = (new_seg_range[1] + 1) * per_segment

        load_range = new_seg_range
        if self._parts:
            missing = range_diff(
                load_range[0], load_range[1], head // per_segment, tail // per_segment
            )
            if missing is None:
                return
            load_range = missing

        begin = load_range[0] * per_segment
        end = min((load_range[1] + 1) * per_segment, self._info.frame_count)
        decoded = self._decode(begin, end)
        if not decoded:
            return

        with self._lock:
            if self._parts and decoded[-1].frame_index < head:
                # Decoding before the held span: the new frames take its place.
                self._parts.clear()
            elif self._parts:
                stale = range_diff(head, tail, new_head, new_tail)
                if stale is not None:
                    for _ in range(min(stale[1] - stale[0] + 1, len(self._parts))):
                        self._parts.popleft()
            self._parts.extend(decoded)
            self._frame_range = (self._parts[0].frame_index, self._parts[-1].frame_index)

    def _decode(self, begin: int, end: int) -> list[SegmentPart]:
        count = self._info.frame_count
        if begin >= count or end > count or begin >= end:
            raise ValueError(f"Invalid frame range: [{begin}, {end})")
        return [
            SegmentPart(
                frame=tuple(self._tree.white_nodes(pack_frame(image))),
                frame_index=begin + offset,
            )
            for offset, image in enumerate(self._source.read(begin, end))
        ]