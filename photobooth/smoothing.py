from __future__ import annotations

from typing import Dict

DEFAULT_SMOOTHING_ALPHA = 0.38


class SmoothingStore:
    """Exponential moving average per coordinate key."""

    def __init__(self, alpha: float = DEFAULT_SMOOTHING_ALPHA) -> None:
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        self.alpha = float(alpha)
        self._values: Dict[str, float] = {}

    def update(self, key: str, raw: float) -> float:
        previous = self._values.get(key)
        if previous is None:
            smoothed = float(raw)
        else:
            smoothed = previous * (1.0 - self.alpha) + float(raw) * self.alpha
        self._values[key] = smoothed
        return smoothed

    def get(self, key: str) -> float | None:
        return self._values.get(key)

    def discard(self, prefix: str) -> None:
        for key in [k for k in self._values if k.startswith(prefix)]:
            del self._values[key]

    def reset(self) -> None:
        self._values.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
