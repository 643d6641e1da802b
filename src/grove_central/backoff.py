"""Jittered exponential backoff counter.

A ``Backoff`` is created for a single request and discarded afterwards; it is
not safe to share between concurrent calls.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field


@dataclass
class Backoff:
    """Exponential delay generator.

    The n-th call to ``duration()`` (counting from zero) returns
    ``min_seconds * factor**n`` capped at ``max_seconds``. With jitter the
    value is drawn uniformly between ``min_seconds`` and that bound.

    Attributes:
        min_seconds: Delay of the first attempt.
        max_seconds: Upper bound for any delay.
        factor: Growth multiplier between attempts.
        jitter: If True, randomize each delay.
    """

    min_seconds: float = 0.1
    max_seconds: float = 10.0
    factor: float = 2.0
    jitter: bool = True
    attempt: int = field(default=0, init=False)

    def duration(self) -> float:
        """Return the next delay in seconds and advance the attempt counter."""
        attempt = self.attempt
        self.attempt += 1

        try:
            delay = self.min_seconds * self.factor**attempt
        except OverflowError:
            return self.max_seconds

        if self.jitter:
            delay = random.random() * (delay - self.min_seconds) + self.min_seconds
        return min(delay, self.max_seconds)

    def reset(self) -> None:
        """Restart the sequence from the first attempt."""
        self.attempt = 0
