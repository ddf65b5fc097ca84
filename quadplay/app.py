"""Command-line player that shows a black-and-white video as quadtree rectangles."""

from __future__ import annotations

import argparse
import sys
from os import PathLike
from pathlib import Path

import pygame

from quadplay.common import (
    AUDIO_FILE_NAME,
    QUAD_TREE_MAX_DEPTH,
    VIDEO_FILE_NAME,
    WINDOW_TITLE,
)
from quadplay.fps import FPSCounter
from quadplay.player import AnimationPlayer, AudioClock, WallClock
from quadplay.render import RectangleRenderer
from quadplay.timeline import SegmentState, format_time, seek_fraction, segment_states
from quadplay.video import SegmentedVideo, open_video

_SEEK_STEP = 5.0
_TIMELINE_HEIGHT = 6
_SEGMENT_COLORS = {
    SegmentState.UNLOADED: (128, 128, 128),
    SegmentState.LOADED: (173, 255, 47),
    SegmentState.SEEK: (0, 255, 255),
}
_SEEK_BAR_COLOR = (255, 0, 0)


def missing_assets(
    video_path: str | PathLike[str], audio_path: str | PathLike[str]
) -> list[Path]:
    """Return the paths among the video and audio file that do not exist."""
    return [Path(p) for p in (video_path, audio_path) if not Path(p).exists()]


def _depth(text: str) -> int:
    value = int(text)
    if not 1 <= value <= QUAD_TREE_MAX_DEPTH:
        raise argparse.ArgumentTypeError(
            f"depth must be between 1 and {QUAD_TREE_MAX_DEPTH}"
        )
    return value


def _positive(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError("value must be greater than 0")
    return value


def _non_negative(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError("value must not be negative")
    return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse the command line."""
    parser = argparse.ArgumentParser(
        prog="quadplay",
        description="Play a black-and-white video rendered as quadtree rectangles.",
    )
    parser.add_argument("video", nargs="?", default=VIDEO_FILE_NAME, type=Path)
    parser.add_argument("audio", nargs="?", default=AUDIO_FILE_NAME, type=Path)
    parser.add_argument("--depth", type=_depth, default=8, help="quadtree depth")
    parser.add_argument(
        "--frames-per-segment", type=_positive, default=120, help="frames per segment"
    )
    parser.add_argument(
        "--load-segments", type=_positive, default=3, help="segments kept loaded"
    )
    parser.add_argument("--show-tree", action="store_true", help="colour nodes by space")
    parser.add_argument(
        "--no-keep-aspect", dest="keep_aspect", action="store_false",
        help="stretch the video over the window",
    )
    parser.add_argument(
        "--no-fill-outside", dest="fill_outside", action="store_false",
        help="leave the area around the video black",
    )
    parser.add_argument(
        "--max-fps", type=_non_negative, default=0, help="frame-rate cap, 0 for none"
    )
    parser.add_argument("--width", type=_positive, default=960)
    parser.add_argument("--height", type=_positive, default=720)
    return parser.parse_args(argv)


class _MusicClock:
    """Plays the audio track through the mixer and keeps time with a wall clock."""

    def __init__(self) -> None:
        self._wall = WallClock()

    def start(self, position: float) -> None:
        self._wall.start(position)
        try:
            pygame.mixer.music.play(start=position)
        except pygame.error:
            pygame.mixer.music.play()

    def stop(self) -> None:
        self._wall.stop()
        pygame.mixer.music.stop()

    def set_paused(self, paused: bool) -> None:
        self._wall.set_paused(paused)
        if paused:
            pygame.mixer.music.pause()
        else:
            pygame.mixer.music.unpause()

    def seek(self, position: float) -> None:
        self._wall.seek(position)
        try:
            pygame.mixer.music.set_pos(position)
        except pygame.error:
            if pygame.mixer.music.get_busy():
                try:
                    pygame.mixer.music.play(start=position)
                except pygame.error:
                    pass

    def position(self) -> float:
        return self._wall.position()


def _open_clock(audio_path: Path) -> AudioClock:
    try:
        pygame.mixer.init()
        pygame.mixer.music.load(str(audio_path))
    except pygame.error as exc:
        print(f"audio unavailable ({exc}); playing without sound", file=sys.stderr)
        return WallClock()
    return _MusicClock()


def _toggle_play(player: AnimationPlayer) -> None:
    if player.is_paused:
        player.resume()
    elif player.is_playing:
        player.pause()
    else:
        player.play()


def _handle_key(key: int, player: AnimationPlayer, renderer: RectangleRenderer) -> bool:
    """Apply one key press; return False when the player should quit."""
    video = player.video
    duration = player.info.duration
    if key in (pygame.K_ESCAPE, pygame.K_q):
        return False
    if key == pygame.K_SPACE:
        _toggle_play(player)
    elif key == pygame.K_HOME:
        player.play_time = 0.0
        player.stop()
    elif key == pygame.K_END:
        player.play_time = duration
        player.stop()
    elif key == pygame.K_LEFT:
        player.play_time = max(0.0, player.current_time - _SEEK_STEP)
    elif key == pygame.K_RIGHT:
        player.play_time = min(duration, player.current_time + _SEEK_STEP)
    elif key == pygame.K_UP:
        video.set_quad_tree_depth(min(video.quad_tree_depth + 1, QUAD_TREE_MAX_DEPTH))
    elif key == pygame.K_DOWN:
        video.set_quad_tree_depth(max(video.quad_tree_depth - 1, 1))
    elif key == pygame.K_t:
        renderer.show_tree = not renderer.show_tree
    elif key == pygame.K_a:
        renderer.keep_aspect = not renderer.keep_aspect
    elif key == pygame.K_f:
        renderer.fill_outside = not renderer.fill_outside
    return True


def _draw_timeline(surface: pygame.Surface, video: SegmentedVideo) -> None:
    width, height = surface.get_size()
    info = video.info
    per_segment = video.frames_per_segment
    states = segment_states(info.frame_count, per_segment, video.seek_position, video.frame_range)
    top = height - _TIMELINE_HEIGHT
    segment_width = width / len(states)
    for index, state in enumerate(states):
        left = round(index * segment_width)
        right = round((index + 1) * segment_width)
        rect = pygame.Rect(left, top, max(right - left - 1, 1), _TIMELINE_HEIGHT)
        pygame.draw.rect(surface, _SEGMENT_COLORS[state], rect)
        if state is SegmentState.SEEK:
            fraction = seek_fraction(video.seek_position, per_segment, info.frame_count)
            x = left + round(fraction * (right - left))
            pygame.draw.rect(surface, _SEEK_BAR_COLOR, pygame.Rect(x - 1, top, 2, _TIMELINE_HEIGHT))


def _run(player: AnimationPlayer, renderer: RectangleRenderer, args: argparse.Namespace) -> None:
    screen = pygame.display.set_mode((args.width, args.height), pygame.RESIZABLE)
    ticker = pygame.time.Clock()
    counter = FPSCounter()
    total = format_time(player.info.duration)
    running = True
    while running:
        delta = ticker.tick(args.max_fps) / 1000.0
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                running = _handle_key(event.key, player, renderer) and running
        counter.update(delta)
        player.update()
        renderer.draw(screen, player.current_frame, player.frame_size)
        _draw_timeline(screen, player.video)
        pygame.display.set_caption(
            f"{WINDOW_TITLE}  {format_time(player.play_time)} / {total}"
            f"  FPS {counter.fps:.2f} ({counter.frame_time_ms:.2f} ms)"
        )
        pygame.display.flip()


def main(argv: list[str] | None = None) -> int:
    """Run the player; return the process exit status."""
    args = parse_args(argv)

    missing = missing_assets(args.video, args.audio)
    if missing:
        print("Please check the file paths and ensure they exist:", file=sys.stderr)
        for kind, path in (("Video", args.video), ("Audio", args.audio)):
            if Path(path) in missing:
                print(f"{kind} file not found: {path}", file=sys.stderr)
        return 1

    try:
        source = open_video(args.video)
    except OSError as exc:
        print(exc, file=sys.stderr)
        return 1

    pygame.init()
    try:
        with SegmentedVideo(
            source,
            quad_tree_depth=args.depth,
            frames_per_segment=args.frames_per_segment,
            load_segment_count=args.load_segments,
        ) as video:
            player = AnimationPlayer(video, _open_clock(args.audio))
            renderer = RectangleRenderer(args.keep_aspect, args.fill_outside, args.show_tree)
            _run(player, renderer, args)
    finally:
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())