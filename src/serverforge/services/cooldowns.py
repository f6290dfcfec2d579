from __future__ import annotations

import time
from typing import Callable, Dict


class CooldownTracker:
    """Per-user command cooldowns, owned by whoever constructs it.

    Expired entries are dropped whenever a new cooldown starts, so the map only
    holds users still cooling down.
    """

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.seconds = max(0.0, float(seconds))
        self._clock = clock
        self._expires: Dict[int, float] = {}

    def __len__(self) -> int:
        return len(self._expires)

    def remaining(self, user_id: int) -> float:
        expires_at = self._expires.get(user_id)
        if expires_at is None:
            return 0.0
        left = expires_at - self._clock()
        if left <= 0:
            self._expires.pop(user_id, None)
            return 0.0
        return left

    def touch(self, user_id: int) -> None:
        self.prune()
        if self.seconds > 0:
            self._expires[user_id] = self._clock() + self.seconds

    def reset(self, user_id: int) -> None:
        self._expires.pop(user_id, None)

    def prune(self) -> int:
        """Drop expired entries; returns how many were removed."""
        now = self._clock()
        stale = [k for k, v in self._expires.items() if v <= now]
        for k in stale:
            self._expires.pop(k, None)
        return len(stale)
