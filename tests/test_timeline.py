import pytest

from quadplay.timeline import SegmentState, format_time, seek_fraction, segment_states


def test_format_zero():
    assert format_time(0.0) == "00:00"


def test_format_truncates_fraction():
    assert format_time(59.9) == format_time(59.0)


def test_format_minutes_and_seconds():
    text = format_time(125.0)
    minutes, seconds = text.split(":")
    assert int(minutes) * 60 + int(seconds) == 125
    assert len(seconds) == 2


def test_segment_count():
    states = segment_states(100, 10, 0, (0, 0))
    assert len(states) == 100 // 10 + 1


def test_segment_states_mark_loaded_and_seek():
    states = segment_states(100, 10, 25, (20, 49))
    assert states[2] is SegmentState.SEEK
    assert states[3] is SegmentState.LOADED
    assert states[4] is SegmentState.LOADED
    assert states[1] is SegmentState.UNLOADED
    assert states[5] is SegmentState.UNLOADED
    assert states.count(SegmentState.SEEK) == 1


def test_seek_segment_outside_loaded_range():
    states = segment_states(100, 10, 75, (0, 19))
    assert states[7] is SegmentState.SEEK
    assert states[:2] == [SegmentState.LOADED, SegmentState.LOADED]


def test_invalid_segment_size():
    with pytest.raises(ValueError):
        segment_states(100, 0, 0, (0, 0))
    with pytest.raises(ValueError):
        seek_fraction(0, 0, 100)


def test_seek_fraction_at_segment_start_is_zero():
    assert seek_fraction(30, 10, 100) == 0.0


def test_seek_fraction_increases_within_segment():
    values = [seek_fraction(s, 10, 100) for s in range(30, 40)]
    assert values == sorted(values)
    assert all(0.0 <= v < 1.0 for v in values)


def test_seek_fraction_in_short_last_segment():
    short = seek_fraction(96, 10, 98)
    full = seek_fraction(96, 10, 200)
    assert short > full


def test_seek_fraction_at_empty_last_segment():
    assert seek_fraction(100, 10, 100) == 0.0