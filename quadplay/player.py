"""Playback control that keeps decoded quadtree frames in step with an audio clock."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Protocol

from quadplay.common import Vec2
from quadplay.quadtree import QuadTreeNode
from quadplay.video import SegmentedVideo, VideoInfo


class AudioClock(Protocol):
    """The playback clock the player follows, positions in seconds."""

    def start(self, position: float) -> None: ...

    def stop(self) -> None: ...

    def set_paused(self, paused: bool) -> None: ...

    def seek(self, position: float) -> None: ...

    def position(self) -> float: ...


@dataclass
class WallClock:
    """A clock that advances with real time, for playback without an audio device."""

    time_func: Callable[[], float] = time.monotonic
    _offset: float = field(default=0.0, init=False, repr=False)
    _started: float = field(default=0.0, init=False, repr=False)
    _running: bool = field(default=False, init=False, repr=False)
    _paused: bool = field(default=False, init=False, repr=False)

    def start(self, position: float) -> None:
        """Start running from ``position`` seconds."""
        self._offset = position
        self._started = self.time_func()
        self._running = True
        self._paused = False

    def stop(self) -> None:
        """Stop running; the position stays where it was."""
        self._offset = self.position()
        self._running = False

    def set_paused(self, paused: bool) -> None:
        """Freeze or unfreeze the clock."""
        if paused and not self._paused:
            self._offset = self.position()
            self._paused = True
        elif not paused and self._paused:
            self._started = self.time_func()
            self._paused = False

    def seek(self, position: float) -> None:
        """Jump to ``position`` seconds."""
        self._offset = position
        self._started = self.time_func()

    def position(self) -> float:
        """Current position in seconds."""
        if self._running and not self._paused:
            return self._offset + (self.time_func() - self._started)
        return self._offset


class AnimationPlayer:
    """Plays a segmented video by following a clock and fetching the matching frame."""

    def __init__(self, video: SegmentedVideo, clock: AudioClock | None = None) -> None:
        self.video = video
        self.clock: AudioClock = clock if clock is not None else WallClock()
        self._current_frame: list[QuadTreeNode] = []
        self._playing = False
        self._paused = False
        self._current_time = 0.0

    @property
    def info(self) -> VideoInfo:
        return self.video.info

    @property
    def frame_size(self) -> Vec2:
        return self.video.info.frame_size

    @property
    def current_frame(self) -> list[QuadTreeNode]:
        """White nodes of the frame shown last."""
        return self._current_frame

    @property
    def current_time(self) -> float:
        """Time in seconds the player is at, as taken from the clock."""
        return self._current_time

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def is_playing(self) -> bool:
        return self._playing and not self._paused

    @property
    def play_time(self) -> float:
        """Time in seconds of the video's seek position."""
        fps = self.video.info.fps
        if fps == 0.0:
            return 0.0
        return self.video.seek_position / fps

    @play_time.setter
    def play_time(self, seconds: float) -> None:
        info = self.video.info
        if seconds < 0.0 or seconds > info.duration:
            return
        seek = min(int(seconds * info.fps), max(info.frame_count - 1, 0))
        self.video.move_seek(seek, sync=False)
        self._current_time = seconds
        self.clock.seek(seconds)

    def update(self) -> None:
        """Fetch the frame for the current time and advance time from the clock."""
        info = self.video.info
        frame_index = int(self._current_time * info.fps)
        if frame_index >= info.frame_count - 1:
            self.stop()
            return

        self._current_frame = self.video.fetch(frame_index)

        if self.is_playing:
            self._current_time = self.clock.position()

    def play(self) -> None:
        if self._playing:
            return
        self._playing = True
        self.clock.stop()
        self.clock.start(self._current_time)

    def stop(self) -> None:
        self._playing = False
        self._paused = False
        self.clock.stop()
        self.clock.set_paused(False)

    def pause(self) -> None:
        self._paused = True
        self.clock.set_paused(True)

    def resume(self) -> None:
        self._paused = False
        self.clock.set_paused(False)