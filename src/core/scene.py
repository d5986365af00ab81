"""
Scene aggregate.

Owns the mood engine, particle system and bubble gesture for one scene and
advances them in a fixed order per step:

    decay -> bubble + queued rewards -> ambient spawn -> particle aging
    -> bloom check -> theme

Input handlers only queue rewards, so the bloom check always sees the
post-decay, post-reward mood and the theme always sees the post-bloom mood.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Sequence

try:
    from core.bubble_interaction import BubbleInteraction, PopEvent
    from core.color_mapper import ColorMapper, ThemeColors
    from core.config_manager import SceneConfig
    from core.mood_engine import MoodEngine
    from core.particle_system import Particle, ParticleSystem
    from core.reflection import Reflection, compose_reflection
    from core.spectrum import visualizer_bars
except ModuleNotFoundError:
    from .bubble_interaction import BubbleInteraction, PopEvent
    from .color_mapper import ColorMapper, ThemeColors
    from .config_manager import SceneConfig
    from .mood_engine import MoodEngine
    from .particle_system import Particle, ParticleSystem
    from .reflection import Reflection, compose_reflection
    from .spectrum import visualizer_bars

logger = logging.getLogger("Daydream")


@dataclass(frozen=True, slots=True)
class SceneFrame:
    """Everything a renderer needs for one frame. Read-only."""

    now: float
    mood: float
    theme: ThemeColors
    particles: tuple[Particle, ...]
    bubble_scale: float
    holding: bool
    bloom_active: bool
    bloom_fired: bool
    pointer: tuple[float, float]
    spectrum: tuple[float, ...]


class Scene:
    def __init__(self, config: SceneConfig | None = None, *, rng: random.Random | None = None):
        self._config = config or SceneConfig()
        # Raises BandConfigError before any state exists.
        self._color_mapper = ColorMapper(self._config.bands)
        self._mood = MoodEngine(self._config.mood, self._color_mapper.bands)
        self._particles = ParticleSystem(self._config.particles, rng=rng)
        self._bubble = BubbleInteraction(self._config.bubble)

        self._pending_pops: list[PopEvent] = []
        self._pending_deltas: list[float] = []
        self._pointer = (0.5, 0.5)
        self._spectrum: tuple[float, ...] = (0.0,) * self._config.loop.spectrum_bars
        self._last_step_at: float | None = None
        self._theme = self._color_mapper.color_for(self._mood.mood)

    @property
    def config(self) -> SceneConfig:
        return self._config

    @property
    def mood(self) -> MoodEngine:
        return self._mood

    @property
    def particles(self) -> ParticleSystem:
        return self._particles

    @property
    def bubble(self) -> BubbleInteraction:
        return self._bubble

    @property
    def theme(self) -> ThemeColors:
        return self._theme

    @property
    def pointer(self) -> tuple[float, float]:
        return self._pointer

    # ------------------------------------------------------------------
    # Input handlers
    # ------------------------------------------------------------------

    def hold_start(self, now: float) -> bool:
        return self._bubble.start(now)

    def hold_end(self, now: float) -> PopEvent | None:
        pop = self._bubble.release(now)
        if pop is not None:
            self._pending_pops.append(pop)
        return pop

    def hold_cancel(self, now: float) -> PopEvent | None:
        pop = self._bubble.cancel(now)
        if pop is not None:
            self._pending_pops.append(pop)
        return pop

    def pointer_move(self, x: float, y: float) -> None:
        if not (math.isfinite(x) and math.isfinite(y)):
            return
        self._pointer = (max(0.0, min(1.0, x)), max(0.0, min(1.0, y)))

    def add_mood(self, delta: float) -> None:
        """Queue a mood delta for the next step."""
        if math.isfinite(delta):
            self._pending_deltas.append(float(delta))

    def feed_audio(self, magnitudes) -> tuple[float, ...]:
        self._spectrum = visualizer_bars(magnitudes, self._config.loop.spectrum_bars)
        return self._spectrum

    def spawn_ambient(self, now: float) -> Particle:
        return self._particles.spawn_ambient(now)

    def make_reflection(self, text: str | None) -> Reflection:
        return compose_reflection(text, self._theme.band_name, self._theme.particle)

    # ------------------------------------------------------------------
    # Step
    # ------------------------------------------------------------------

    def step(self, now: float) -> SceneFrame:
        dt = 0.0 if self._last_step_at is None else max(0.0, now - self._last_step_at)
        self._last_step_at = now

        self._mood.decay(dt)

        self._bubble.update(dt)
        self._apply_pending(now)

        self._particles.maybe_spawn_ambient(now)
        live = self._particles.tick(now)

        bloom_fired = self._mood.tick(now)
        if bloom_fired:
            live = self._bloom_burst(now)

        self._theme = self._color_mapper.color_for(self._mood.mood)

        return SceneFrame(
            now=now,
            mood=self._mood.mood,
            theme=self._theme,
            particles=live,
            bubble_scale=self._bubble.scale,
            holding=self._bubble.is_holding,
            bloom_active=self._mood.bloom_active,
            bloom_fired=bloom_fired,
            pointer=self._pointer,
            spectrum=self._spectrum,
        )

    def reset_clock(self) -> None:
        """Forget the last step time so a resumed loop does not see the paused gap as one step."""
        self._last_step_at = None

    def _apply_pending(self, now: float) -> None:
        pops: Sequence[PopEvent] = self._pending_pops
        self._pending_pops = []
        for pop in pops:
            self._mood.apply_delta(pop.mood_delta)
            self._particles.burst(pop.burst_size, now, color=self._theme.particle)
            logger.debug(
                "Bubble popped: held=%.2fs burst=%d mood_delta=%.1f cancelled=%s",
                pop.held_seconds,
                pop.burst_size,
                pop.mood_delta,
                pop.cancelled,
            )

        deltas: Sequence[float] = self._pending_deltas
        self._pending_deltas = []
        for delta in deltas:
            self._mood.apply_delta(delta)

    def _bloom_burst(self, now: float) -> tuple[Particle, ...]:
        top_band = self._color_mapper.bands[-1]
        self._particles.burst(self._config.mood.bloom_burst, now, color=top_band.particle)
        return self._particles.live
