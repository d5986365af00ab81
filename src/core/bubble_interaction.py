from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto

try:
    from core.config_manager import BubbleConfig
except ModuleNotFoundError:
    from .config_manager import BubbleConfig


class HoldState(Enum):
    IDLE = auto()
    HOLDING = auto()


@dataclass(frozen=True, slots=True)
class PopEvent:
    """Reward for one hold gesture, applied atomically by the scene."""

    held_seconds: float
    burst_size: int
    mood_delta: float
    cancelled: bool = False


class BubbleInteraction:
    """
    Hold-to-inflate, release-to-pop gesture.

    ``start`` while holding and ``release``/``cancel`` while idle are no-ops,
    so duplicated or out-of-order input events are harmless.
    """

    def __init__(self, config: BubbleConfig | None = None):
        self._config = config or BubbleConfig()
        self._state = HoldState.IDLE
        self._started_at = 0.0
        self._scale = self._config.base_scale

    @property
    def state(self) -> HoldState:
        return self._state

    @property
    def is_holding(self) -> bool:
        return self._state == HoldState.HOLDING

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def started_at(self) -> float | None:
        return self._started_at if self._state == HoldState.HOLDING else None

    def start(self, now: float) -> bool:
        if self._state == HoldState.HOLDING:
            return False
        self._state = HoldState.HOLDING
        self._started_at = float(now)
        self._scale = self._config.base_scale
        return True

    def update(self, dt: float) -> float:
        """Inflate by ``scale_step`` per ``step_interval_ms`` of ``dt``, up to ``max_scale``."""
        if self._state != HoldState.HOLDING:
            return self._scale
        if not math.isfinite(dt) or dt <= 0:
            return self._scale
        if self._scale >= self._config.max_scale:
            return self._scale
        steps = dt / (self._config.step_interval_ms / 1000.0)
        self._scale = min(self._config.max_scale, self._scale + steps * self._config.scale_step)
        return self._scale

    def release(self, now: float) -> PopEvent | None:
        return self._finish(now, cancelled=False)

    def cancel(self, now: float) -> PopEvent | None:
        """Pointer left the control mid-hold; rewarded like a release unless configured otherwise."""
        return self._finish(now, cancelled=True)

    def reward_for(self, held_seconds: float) -> tuple[int, float]:
        """Monotonic (burst_size, mood_delta) for a hold of ``held_seconds``; an endless hold earns the cap."""
        cfg = self._config
        held = 0.0 if math.isnan(held_seconds) else max(0.0, held_seconds)
        burst = self._clamped(cfg.burst_base, cfg.burst_gain, held, cfg.burst_min, cfg.burst_max)
        delta = self._clamped(cfg.mood_base, cfg.mood_gain, held, cfg.mood_min, cfg.mood_max)
        delta = max(cfg.mood_min, min(cfg.mood_max, float(round(delta))))
        return int(round(burst)), delta

    @staticmethod
    def _clamped(base: float, gain: float, held: float, low: float, high: float) -> float:
        # clamp before rounding; inf * 0 is nan
        raw = base + held * gain if gain else base
        return max(low, min(high, raw))

    def _finish(self, now: float, *, cancelled: bool) -> PopEvent | None:
        if self._state != HoldState.HOLDING:
            return None
        held = max(0.0, float(now) - self._started_at)
        self._state = HoldState.IDLE
        self._scale = self._config.base_scale
        if cancelled and not self._config.reward_on_cancel:
            return PopEvent(held_seconds=held, burst_size=0, mood_delta=0.0, cancelled=True)
        burst, delta = self.reward_for(held)
        return PopEvent(held_seconds=held, burst_size=burst, mood_delta=delta, cancelled=cancelled)
