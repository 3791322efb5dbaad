"""
Synthetic price oscillator for quotes without a computable daily change.

    change_pct = (sin(now_ms / 60000 + phase) + jitter * 0.2) * 0.9

``phase`` is a per-ticker offset (the ticker's fallback base price), so
different instruments drift out of step.  ``jitter`` is uniform in [0, 1).
The output is bounded to [-0.9, 1.08], small enough that a simulated price
``base * (1 + change_pct / 100)`` stays positive.

Clock and random source are injectable so tests can pin exact values.
"""

from __future__ import annotations

import math
import random
import time
from collections.abc import Callable
from typing import Optional

MIN_SHIFT = -0.9
MAX_SHIFT = 1.08


class SyntheticOscillator:
    """Smooth time-driven wave plus bounded jitter.

    Args:
        clock: Returns wall-clock seconds since the epoch. Default ``time.time``.
        rng:   ``random.Random`` instance for jitter. Default: unseeded.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._clock = clock
        self._rng = rng or random.Random()

    def shift(self, phase: float) -> float:
        """Return a synthetic percent change for the ticker seeded by ``phase``."""
        now_ms = self._clock() * 1000.0
        return (math.sin(now_ms / 60000.0 + phase) + self._rng.random() * 0.2) * 0.9
