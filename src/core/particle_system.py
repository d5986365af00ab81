"""
Heart particle system.

Particles are plain records aged by ``tick``: there is no per-particle timer,
so teardown is just dropping the live list. Positions are scene fractions in
[0, 1]; sizes are in pixels at scale 1.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

try:
    from core.config_manager import ParticleConfig
except ModuleNotFoundError:
    from .config_manager import ParticleConfig

MIN_LIFETIME_SECONDS = 0.05


@dataclass(frozen=True, slots=True)
class Particle:
    particle_id: int
    x: float
    y: float
    size: float
    spawned_at: float
    lifetime: float
    color: str | None = None
    rotation: float = 0.0  # final tilt in degrees
    end_scale: float = 1.0  # scale reached at end of life

    @property
    def expires_at(self) -> float:
        return self.spawned_at + self.lifetime

    def is_alive(self, now: float) -> bool:
        return self.spawned_at <= now < self.expires_at

    def progress(self, now: float) -> float:
        """Fraction of lifetime elapsed, clamped to [0, 1]."""
        return max(0.0, min(1.0, (now - self.spawned_at) / self.lifetime))


class ParticleSystem:
    """Owns the bounded set of live heart particles."""

    def __init__(self, config: ParticleConfig | None = None, rng: random.Random | None = None):
        self._config = config or ParticleConfig()
        self._rng = rng or random.Random()
        self._live: list[Particle] = []
        self._next_id = 0

    @property
    def config(self) -> ParticleConfig:
        return self._config

    @property
    def live(self) -> tuple[Particle, ...]:
        return tuple(self._live)

    @property
    def count(self) -> int:
        return len(self._live)

    def clear(self) -> None:
        self._live.clear()

    def spawn_ambient(self, now: float) -> Particle:
        cfg = self._config
        particle = self._make_particle(
            now,
            x=self._uniform(cfg.ambient_x_range),
            y=self._uniform(cfg.ambient_y_range),
            size=self._uniform(cfg.ambient_size_range),
            lifetime=cfg.lifetime_seconds,
            color=None,
        )
        self._add([particle])
        return particle

    def maybe_spawn_ambient(self, now: float) -> Particle | None:
        if self._rng.random() < self._config.ambient_probability:
            return self.spawn_ambient(now)
        return None

    def burst(
        self,
        count: int,
        now: float,
        origin: tuple[float, float] | None = None,
        color: str | None = None,
    ) -> list[Particle]:
        """
        Spawn up to ``max_burst`` particles at once.

        With ``origin`` the particles cluster around that point, otherwise they
        spread over the configured burst area. Non-positive or non-numeric
        counts spawn nothing.
        """
        try:
            requested = int(count)
        except (TypeError, ValueError, OverflowError):
            return []
        amount = min(requested, self._config.max_burst)
        if amount <= 0:
            return []

        cfg = self._config
        origin_point = self._sanitize_origin(origin)
        jitter = cfg.lifetime_jitter_seconds
        spawned: list[Particle] = []
        for _ in range(amount):
            if origin_point is None:
                x = self._uniform(cfg.burst_x_range)
                y = self._uniform(cfg.burst_y_range)
            else:
                x = self._clamp_unit(origin_point[0] + self._rng.uniform(-cfg.origin_jitter, cfg.origin_jitter))
                y = self._clamp_unit(origin_point[1] + self._rng.uniform(-cfg.origin_jitter, cfg.origin_jitter))
            lifetime = cfg.lifetime_seconds + self._rng.uniform(-jitter, jitter)
            spawned.append(
                self._make_particle(
                    now,
                    x=x,
                    y=y,
                    size=self._uniform(cfg.burst_size_range),
                    lifetime=lifetime,
                    color=color,
                )
            )
        self._add(spawned)
        return spawned

    def tick(self, now: float) -> tuple[Particle, ...]:
        """Retire expired particles and return the live set."""
        self._live = [particle for particle in self._live if now < particle.expires_at]
        return tuple(self._live)

    def _add(self, particles: list[Particle]) -> None:
        self._live.extend(particles)
        overflow = len(self._live) - self._config.max_live
        if overflow > 0:
            # Oldest first: the list is kept in spawn order.
            del self._live[:overflow]

    def _make_particle(
        self,
        now: float,
        *,
        x: float,
        y: float,
        size: float,
        lifetime: float,
        color: str | None,
    ) -> Particle:
        self._next_id += 1
        return Particle(
            particle_id=self._next_id,
            x=x,
            y=y,
            size=size,
            spawned_at=now,
            lifetime=max(MIN_LIFETIME_SECONDS, lifetime),
            color=color,
            rotation=self._rng.uniform(-30.0, 30.0),
            end_scale=1.0 + self._rng.uniform(0.0, 0.4),
        )

    def _uniform(self, bounds: tuple[float, float]) -> float:
        low, high = bounds
        return self._rng.uniform(low, high)

    def _sanitize_origin(self, origin: tuple[float, float] | None) -> tuple[float, float] | None:
        if origin is None:
            return None
        try:
            x, y = float(origin[0]), float(origin[1])
        except (TypeError, ValueError, IndexError):
            return None
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        return self._clamp_unit(x), self._clamp_unit(y)

    @staticmethod
    def _clamp_unit(value: float) -> float:
        return max(0.0, min(1.0, value))
