"""Exponential backoff with jitter for client retry loops."""

from __future__ import annotations

import random


def backoff_delay(attempt: int, backoff_base: float = 1.0, max_delay: float = 30.0) -> float:
    """Delay before retry *attempt* (0-indexed), with +/-25% jitter.

    ``min(max_delay, backoff_base * 2^attempt) * (1 + uniform(-0.25, 0.25))``
    """
    base_delay = min(max_delay, max(0.0, backoff_base * (2**attempt)))
    return base_delay * (1.0 + random.uniform(-0.25, 0.25))
