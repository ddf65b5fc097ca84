import random

import numpy as np
import pytest

from quadplay.common import Vec2
from quadplay.quadtree import QuadTree, SpaceColor, pixel_color
from quadplay.video import (
    ArrayVideoSource,
    SegmentedVideo,
    open_video,
    pack_frame,
    range_diff,
)

SIZE = 8
FPS = 30.0


def make_frames(n):
    frames = np.zeros((n, SIZE, SIZE), dtype=np.uint8)
    for i in range(n):
        frames[i, :, : i % (SIZE + 1)] = 255
    return frames


def expected_nodes(frame, depth):
    return QuadTree(Vec2(SIZE, SIZE), depth).white_nodes(pack_frame(frame))


@pytest.fixture
def frames():
    return make_frames(10)


@pytest.fixture
def video(frames):
    v = SegmentedVideo(ArrayVideoSource(frames, FPS), 4, 4, 2)
    yield v
    v.close()


def test_range_diff_no_overlap_returns_first():
    assert range_diff(1, 5, 7, 9) == (1, 5)


def test_range_diff_covered_is_none():
    assert range_diff(3, 4, 1, 9) is None


def test_range_diff_cuts_left():
    assert range_diff(3, 8, 1, 5) == (6, 8)


def test_range_diff_cuts_right():
    assert range_diff(3, 8, 5, 10) == (3, 4)


def test_range_diff_middle_is_none():
    assert range_diff(1, 9, 3, 5) is None


@pytest.mark.parametrize("args", [(5, 1, 0, 2), (0, 2, 5, 1)])
def test_range_diff_invalid(args):
    with pytest.raises(ValueError):
        range_diff(*args)


def test_pack_frame_round_trip():
    rng = np.random.default_rng(1)
    frame = rng.integers(0, 256, size=(5, 7), dtype=np.uint8)
    bits = pack_frame(frame)
    for y in range(5):
        for x in range(7):
            want = SpaceColor.WHITE if frame[y, x] >= 127 else SpaceColor.BLACK
            assert pixel_color(bits, x, y, 7) is want


def test_pack_frame_threshold():
    bits = pack_frame(np.array([[126, 127]], dtype=np.uint8))
    assert pixel_color(bits, 0, 0, 2) is SpaceColor.BLACK
    assert pixel_color(bits, 1, 0, 2) is SpaceColor.WHITE


def test_pack_frame_uses_first_channel():
    frame = np.zeros((1, 2, 3), dtype=np.uint8)
    frame[0, 0, 0] = 200
    frame[0, 1, 1] = 255
    bits = pack_frame(frame)
    assert pixel_color(bits, 0, 0, 2) is SpaceColor.WHITE
    assert pixel_color(bits, 1, 0, 2) is SpaceColor.BLACK


def test_pack_frame_length():
    assert len(pack_frame(np.zeros((3, 3)))) == 2


def test_pack_frame_rejects_bad_shape():
    with pytest.raises(ValueError):
        pack_frame(np.zeros(4))


def test_array_source_read_clips(frames):
    source = ArrayVideoSource(frames, FPS)
    read = list(source.read(8, 20))
    assert len(read) == len(frames) - 8
    assert all(np.array_equal(a, b) for a, b in zip(read, frames[8:]))


def test_array_source_rejects_bad_fps(frames):
    with pytest.raises(ValueError):
        ArrayVideoSource(frames, 0)


def test_open_video_missing_file(tmp_path):
    with pytest.raises(OSError):
        open_video(tmp_path / "missing.mp4")


def test_info(video, frames):
    info = video.info
    assert info.frame_count == len(frames)
    assert info.fps == FPS
    assert info.frame_size == Vec2(SIZE, SIZE)
    assert info.duration == pytest.approx(len(frames) / FPS)


def test_initial_range(video):
    assert video.frame_range == (0, 7)


def test_fetch_sequential(video, frames):
    for i, frame in enumerate(frames):
        assert video.fetch(i) == expected_nodes(frame, 4)
    assert video.seek_position == len(frames) - 1


def test_fetch_random_order(video, frames):
    order = list(range(len(frames))) * 3
    random.Random(7).shuffle(order)
    for i in order:
        assert video.fetch(i) == expected_nodes(frames[i], 4)
        head, tail = video.frame_range
        assert head <= tail


def test_fetch_far_frame_loads_it(video, frames):
    video.fetch(9)
    head, tail = video.frame_range
    assert head <= 9 <= tail
    assert video.fetch(0) == expected_nodes(frames[0], 4)


def test_fetch_full_white_is_root():
    frames = np.full((3, SIZE, SIZE), 255, dtype=np.uint8)
    with SegmentedVideo(ArrayVideoSource(frames, FPS), 4, 2, 2) as v:
        nodes = v.fetch(1)
    assert len(nodes) == 1
    assert nodes[0].level == 0
    assert nodes[0].size == Vec2(SIZE, SIZE)


@pytest.mark.parametrize("frame", [10, -1])
def test_fetch_out_of_range(video, frame):
    with pytest.raises(IndexError):
        video.fetch(frame)


def test_fetch_empty_video():
    source = ArrayVideoSource(np.zeros((0, SIZE, SIZE), dtype=np.uint8), FPS)
    with SegmentedVideo(source, 3, 4, 2) as v:
        assert v.fetch(0) == []


def test_set_quad_tree_depth(video, frames):
    video.set_quad_tree_depth(2)
    assert video.quad_tree_depth == 2
    for i in (0, 5, 9):
        assert video.fetch(i) == expected_nodes(frames[i], 2)


def test_set_quad_tree_depth_zero(video):
    with pytest.raises(ValueError):
        video.set_quad_tree_depth(0)


def test_set_frames_per_segment(video, frames):
    video.set_frames_per_segment(3)
    assert video.frames_per_segment == 3
    for i in range(len(frames)):
        assert video.fetch(i) == expected_nodes(frames[i], 4)


def test_set_frames_per_segment_zero(video):
    with pytest.raises(ValueError):
        video.set_frames_per_segment(0)


def test_set_load_segment_count(video, frames):
    video.set_load_segment_count(1)
    assert video.load_segment_count == 1
    for i in reversed(range(len(frames))):
        assert video.fetch(i) == expected_nodes(frames[i], 4)


def test_negative_seek_rejected(video):
    with pytest.raises(ValueError):
        video.move_seek(-3)


def test_constructor_rejects_zero_depth(frames):
    with pytest.raises(ValueError):
        SegmentedVideo(ArrayVideoSource(frames, FPS), 0, 4, 2)