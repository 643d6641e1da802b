"""Tests for the jittered exponential backoff counter."""

from __future__ import annotations

import pytest

from grove_central.backoff import Backoff


class TestBackoffWithoutJitter:
    """Deterministic delay sequence."""

    def test_delays_grow_exponentially(self) -> None:
        backoff = Backoff(min_seconds=0.1, max_seconds=10.0, factor=2.0, jitter=False)

        delays = [backoff.duration() for _ in range(4)]

        assert delays == pytest.approx([0.1, 0.2, 0.4, 0.8])
        assert backoff.attempt == 4

    def test_delays_are_capped(self) -> None:
        backoff = Backoff(min_seconds=1.0, max_seconds=3.0, factor=2.0, jitter=False)

        delays = [backoff.duration() for _ in range(5)]

        assert delays == pytest.approx([1.0, 2.0, 3.0, 3.0, 3.0])

    def test_reset_restarts_sequence(self) -> None:
        backoff = Backoff(min_seconds=0.5, jitter=False)
        backoff.duration()
        backoff.duration()

        backoff.reset()

        assert backoff.attempt == 0
        assert backoff.duration() == pytest.approx(0.5)

    def test_huge_attempt_returns_max(self) -> None:
        backoff = Backoff(min_seconds=0.1, max_seconds=10.0, jitter=False)
        backoff.attempt = 5000

        assert backoff.duration() == 10.0


class TestBackoffWithJitter:
    """Randomized delays stay between the minimum and the exponential bound."""

    def test_jitter_uses_random_fraction(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("grove_central.backoff.random.random", lambda: 0.5)
        backoff = Backoff(min_seconds=1.0, max_seconds=100.0, factor=2.0, jitter=True)

        delays = [backoff.duration() for _ in range(3)]

        # bounds are 1, 2, 4 -> halfway between 1 and each bound
        assert delays == pytest.approx([1.0, 1.5, 2.5])

    def test_jittered_delays_within_bounds(self) -> None:
        backoff = Backoff(min_seconds=0.1, max_seconds=10.0, factor=2.0, jitter=True)

        for attempt in range(12):
            delay = backoff.duration()
            assert 0.1 <= delay <= min(10.0, 0.1 * 2.0**attempt)
