from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

try:
    from core.color_mapper import DEFAULT_MOOD_BANDS, MOOD_MAX, MOOD_MIN, MoodBand, band_index_for, validate_bands
    from core.config_manager import MoodConfig
except ModuleNotFoundError:
    from .color_mapper import DEFAULT_MOOD_BANDS, MOOD_MAX, MOOD_MIN, MoodBand, band_index_for, validate_bands
    from .config_manager import MoodConfig

logger = logging.getLogger("Daydream")


@dataclass(slots=True)
class BloomState:
    active: bool = False
    cooldown_until: float = 0.0
    fired_count: int = 0


class MoodEngine:
    """
    Mood range: 0.0 (numb) -> 100.0 (saturated), default 18.

    Saturation fires a one-shot bloom, after which mood drops just below the
    ceiling and further blooms are held off until the cooldown expires.
    """

    def __init__(self, config: MoodConfig | None = None, bands: Sequence[MoodBand] = DEFAULT_MOOD_BANDS):
        self._config = config or MoodConfig()
        self._bands = validate_bands(bands)
        self._mood = self._clamp(float(self._config.initial_mood))
        self._bloom = BloomState()

    @property
    def mood(self) -> float:
        return self._mood

    @property
    def bloom(self) -> BloomState:
        return self._bloom

    @property
    def bloom_active(self) -> bool:
        return self._bloom.active

    @property
    def mood_label(self) -> str:
        return self.current_band().label

    def current_band(self) -> MoodBand:
        return self._bands[band_index_for(self._bands, self._mood)]

    def apply_delta(self, delta: float) -> float:
        if not math.isfinite(delta):
            return self._mood
        self._mood = self._clamp(self._mood + delta)
        return self._mood

    def decay(self, dt: float) -> float:
        if not math.isfinite(dt) or dt <= 0:
            return self._mood
        self._mood = self._clamp(self._mood - self._config.decay_rate * dt)
        return self._mood

    def tick(self, now: float) -> bool:
        """Expire a finished cooldown, then fire a bloom if mood is saturated. True when one fired."""
        if not math.isfinite(now):
            return False
        bloom = self._bloom
        if bloom.active and now >= bloom.cooldown_until:
            bloom.active = False
            if self._config.settle_mood is not None:
                self._mood = self._clamp(self._config.settle_mood)
            logger.debug("Bloom cooldown expired, mood=%.2f", self._mood)

        if self._mood < MOOD_MAX or bloom.active:
            return False

        self._mood = self._clamp(self._config.bloom_reset_mood)
        bloom.active = True
        bloom.cooldown_until = now + self._config.bloom_cooldown_seconds
        bloom.fired_count += 1
        logger.info("Bloom #%d fired, cooldown until %.2f", bloom.fired_count, bloom.cooldown_until)
        return True

    @staticmethod
    def _clamp(value: float) -> float:
        return max(MOOD_MIN, min(MOOD_MAX, value))
