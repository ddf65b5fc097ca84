import pytest

from quadplay.fps import FPSCounter


def test_starts_empty():
    counter = FPSCounter(5)
    assert counter.fps == 0.0
    assert counter.frame_time_ms == 0.0
    assert counter.history == [0.0] * 5


def test_fps_refreshes_after_one_second():
    counter = FPSCounter(10)
    counter.update(0.5)
    assert counter.fps == 0.0
    counter.update(0.5)
    assert counter.fps == pytest.approx(2.0)
    assert counter.frame_time_ms == pytest.approx(500.0)


def test_fps_is_held_until_next_second():
    counter = FPSCounter(10)
    counter.update(1.0)
    first = counter.fps
    counter.update(0.25)
    assert counter.fps == first


def test_zero_delta_after_a_second_gives_zero():
    counter = FPSCounter(10)
    counter.update(1.0)
    counter.update(0.0)
    assert counter.fps == 1.0
    counter.update(1.0)
    counter.update(0.0)
    assert counter.fps == 1.0


def test_history_keeps_size_and_order():
    counter = FPSCounter(3)
    for delta in (0.001, 0.002, 0.003, 0.004):
        counter.update(delta)
    history = counter.history
    assert len(history) == 3
    assert history == sorted(history)
    assert history[-1] == pytest.approx(4.0)


@pytest.mark.parametrize("size", [0, -1])
def test_invalid_history_size(size):
    with pytest.raises(ValueError):
        FPSCounter(size)