"""Tests for app/geocoding/pacing.py."""
from __future__ import annotations

import pytest

from app.geocoding.pacing import Pacer


class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instead of blocking."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _pacer(interval_s: float = 2.0) -> tuple[Pacer, FakeClock]:
    clock = FakeClock()
    return Pacer(interval_s, clock=clock, sleep=clock.sleep), clock


class TestPacer:
    def test_first_call_does_not_wait(self) -> None:
        pacer, clock = _pacer()
        assert pacer.wait() == 0.0
        assert clock.sleeps == []
        assert pacer.last_call == 100.0

    def test_back_to_back_calls_are_spaced(self) -> None:
        pacer, clock = _pacer()
        pacer.wait()
        clock.advance(0.5)  # request latency

        assert pacer.wait() == pytest.approx(1.5)
        assert clock.sleeps == [pytest.approx(1.5)]
        assert pacer.last_call == pytest.approx(102.0)

    def test_no_wait_once_interval_elapsed(self) -> None:
        pacer, clock = _pacer()
        pacer.wait()
        clock.advance(3.0)

        assert pacer.wait() == 0.0
        assert clock.sleeps == []

    def test_call_starts_never_closer_than_interval(self) -> None:
        pacer, clock = _pacer(1.2)
        starts = []
        for latency in (0.0, 0.3, 1.5, 0.1, 0.0):
            pacer.wait()
            starts.append(clock.now)
            clock.advance(latency)

        gaps = [b - a for a, b in zip(starts, starts[1:])]
        assert all(gap >= 1.2 - 1e-9 for gap in gaps)
        assert pacer.calls == 5

    def test_remaining(self) -> None:
        pacer, clock = _pacer()
        assert pacer.remaining() == 0.0
        pacer.wait()
        clock.advance(0.5)
        assert pacer.remaining() == pytest.approx(1.5)

    def test_zero_interval_never_sleeps(self) -> None:
        pacer, clock = _pacer(0.0)
        for _ in range(3):
            pacer.wait()
        assert clock.sleeps == []
        assert pacer.calls == 3

    def test_negative_interval_rejected(self) -> None:
        with pytest.raises(ValueError):
            Pacer(-1.0)
