from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from PySide6.QtCore import QIODevice, QSaveFile

try:
    from core.color_mapper import DEFAULT_MOOD_BANDS, BandConfigError, MoodBand
except ModuleNotFoundError:
    from .color_mapper import DEFAULT_MOOD_BANDS, BandConfigError, MoodBand


@dataclass(slots=True)
class MoodConfig:
    initial_mood: float = 18.0
    decay_rate: float = 0.05  # mood units per second
    bloom_cooldown_seconds: float = 4.5
    bloom_reset_mood: float = 99.0
    settle_mood: float | None = None  # applied when the bloom cooldown expires
    bloom_burst: int = 120


@dataclass(slots=True)
class BubbleConfig:
    base_scale: float = 1.0
    max_scale: float = 2.6
    scale_step: float = 0.06
    step_interval_ms: int = 60
    burst_base: float = 8.0
    burst_gain: float = 32.0  # particles per held second
    burst_min: int = 1
    burst_max: int = 60
    mood_base: float = 6.0
    mood_gain: float = 10.0  # mood units per held second
    mood_min: float = 0.0
    mood_max: float = 40.0
    reward_on_cancel: bool = True


@dataclass(slots=True)
class ParticleConfig:
    max_burst: int = 120
    max_live: int = 600
    lifetime_seconds: float = 1.8
    lifetime_jitter_seconds: float = 0.3
    ambient_probability: float = 0.05
    ambient_interval_ms: int = 1400
    ambient_x_range: tuple[float, float] = (0.2, 0.8)
    ambient_y_range: tuple[float, float] = (0.7, 0.85)
    ambient_size_range: tuple[float, float] = (12.0, 22.0)
    burst_x_range: tuple[float, float] = (0.2, 0.8)
    burst_y_range: tuple[float, float] = (0.5, 0.7)
    burst_size_range: tuple[float, float] = (12.0, 28.0)
    origin_jitter: float = 0.08


@dataclass(slots=True)
class LoopConfig:
    frame_interval_ms: int = 16
    spectrum_bars: int = 30


@dataclass(slots=True)
class BehaviorConfig:
    debug_mode: bool = False


@dataclass(slots=True)
class SceneConfig:
    version: str = "1.0.0"
    mood: MoodConfig = field(default_factory=MoodConfig)
    bubble: BubbleConfig = field(default_factory=BubbleConfig)
    particles: ParticleConfig = field(default_factory=ParticleConfig)
    loop: LoopConfig = field(default_factory=LoopConfig)
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)
    bands: tuple[MoodBand, ...] = DEFAULT_MOOD_BANDS


def _as_float(value: Any, default: float) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _as_bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _as_range(value: Any, default: tuple[float, float], *, low: float, high: float) -> tuple[float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return default
    first = _as_float(value[0], default[0])
    second = _as_float(value[1], default[1])
    if first > second:
        first, second = second, first
    return max(low, min(high, first)), max(low, min(high, second))


class ConfigManager:
    """Load scene configuration from JSON with safe defaults."""

    def __init__(self, config_path: Path):
        self._config_path = config_path

    def load(self) -> SceneConfig:
        """
        Read the config file.

        Missing or unreadable files yield defaults. Malformed band entries
        raise BandConfigError: the scene must not start on a colour mapping
        it cannot trust.
        """
        if not self._config_path.exists():
            return SceneConfig()
        try:
            raw = json.loads(self._config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return SceneConfig()
        if not isinstance(raw, dict):
            return SceneConfig()

        return SceneConfig(
            version=str(raw.get("version", "1.0.0")),
            mood=self._build_mood(raw.get("mood")),
            bubble=self._build_bubble(raw.get("bubble")),
            particles=self._build_particles(raw.get("particles")),
            loop=self._build_loop(raw.get("loop")),
            behavior=self._build_behavior(raw.get("behavior")),
            bands=self._build_bands(raw.get("bands")),
        )

    def save(self, config: SceneConfig) -> bool:
        payload = self.to_dict(config)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
        try:
            saver = QSaveFile(str(self._config_path))
            if not saver.open(QIODevice.OpenModeFlag.WriteOnly | QIODevice.OpenModeFlag.Truncate):
                return False
            raw = content.encode("utf-8")
            written = saver.write(raw)
            if written != len(raw):
                saver.cancelWriting()
                return False
            if not saver.commit():
                return False
        except Exception:
            return False
        return True

    @staticmethod
    def to_dict(config: SceneConfig) -> dict[str, Any]:
        particles = config.particles
        return {
            "version": str(config.version),
            "mood": {
                "initial_mood": float(config.mood.initial_mood),
                "decay_rate": float(config.mood.decay_rate),
                "bloom_cooldown_seconds": float(config.mood.bloom_cooldown_seconds),
                "bloom_reset_mood": float(config.mood.bloom_reset_mood),
                "settle_mood": None if config.mood.settle_mood is None else float(config.mood.settle_mood),
                "bloom_burst": int(config.mood.bloom_burst),
            },
            "bubble": {
                "base_scale": float(config.bubble.base_scale),
                "max_scale": float(config.bubble.max_scale),
                "scale_step": float(config.bubble.scale_step),
                "step_interval_ms": int(config.bubble.step_interval_ms),
                "burst_base": float(config.bubble.burst_base),
                "burst_gain": float(config.bubble.burst_gain),
                "burst_min": int(config.bubble.burst_min),
                "burst_max": int(config.bubble.burst_max),
                "mood_base": float(config.bubble.mood_base),
                "mood_gain": float(config.bubble.mood_gain),
                "mood_min": float(config.bubble.mood_min),
                "mood_max": float(config.bubble.mood_max),
                "reward_on_cancel": bool(config.bubble.reward_on_cancel),
            },
            "particles": {
                "max_burst": int(particles.max_burst),
                "max_live": int(particles.max_live),
                "lifetime_seconds": float(particles.lifetime_seconds),
                "lifetime_jitter_seconds": float(particles.lifetime_jitter_seconds),
                "ambient_probability": float(particles.ambient_probability),
                "ambient_interval_ms": int(particles.ambient_interval_ms),
                "ambient_x_range": list(particles.ambient_x_range),
                "ambient_y_range": list(particles.ambient_y_range),
                "ambient_size_range": list(particles.ambient_size_range),
                "burst_x_range": list(particles.burst_x_range),
                "burst_y_range": list(particles.burst_y_range),
                "burst_size_range": list(particles.burst_size_range),
                "origin_jitter": float(particles.origin_jitter),
            },
            "loop": {
                "frame_interval_ms": int(config.loop.frame_interval_ms),
                "spectrum_bars": int(config.loop.spectrum_bars),
            },
            "behavior": {
                "debug_mode": bool(config.behavior.debug_mode),
            },
            "bands": [
                {
                    "name": band.name,
                    "label": band.label,
                    "start": float(band.start),
                    "end": float(band.end),
                    "background": band.background,
                    "light": band.light,
                    "mid": band.mid,
                    "particle": band.particle,
                }
                for band in config.bands
            ],
        }

    @staticmethod
    def _build_mood(payload: Any) -> MoodConfig:
        if not isinstance(payload, dict):
            return MoodConfig()
        defaults = MoodConfig()
        settle = payload.get("settle_mood")
        settle_mood = None if settle is None else max(0.0, min(100.0, _as_float(settle, 40.0)))
        return MoodConfig(
            initial_mood=max(0.0, min(100.0, _as_float(payload.get("initial_mood"), defaults.initial_mood))),
            decay_rate=max(0.0, _as_float(payload.get("decay_rate"), defaults.decay_rate)),
            bloom_cooldown_seconds=max(
                0.1, _as_float(payload.get("bloom_cooldown_seconds"), defaults.bloom_cooldown_seconds)
            ),
            bloom_reset_mood=max(
                0.0, min(99.999, _as_float(payload.get("bloom_reset_mood"), defaults.bloom_reset_mood))
            ),
            settle_mood=settle_mood,
            bloom_burst=max(0, _as_int(payload.get("bloom_burst"), defaults.bloom_burst)),
        )

    @staticmethod
    def _build_bubble(payload: Any) -> BubbleConfig:
        if not isinstance(payload, dict):
            return BubbleConfig()
        defaults = BubbleConfig()
        base_scale = max(0.1, _as_float(payload.get("base_scale"), defaults.base_scale))
        burst_min = max(0, _as_int(payload.get("burst_min"), defaults.burst_min))
        mood_min = max(0.0, _as_float(payload.get("mood_min"), defaults.mood_min))
        return BubbleConfig(
            base_scale=base_scale,
            max_scale=max(base_scale, _as_float(payload.get("max_scale"), defaults.max_scale)),
            scale_step=max(0.0, _as_float(payload.get("scale_step"), defaults.scale_step)),
            step_interval_ms=max(1, _as_int(payload.get("step_interval_ms"), defaults.step_interval_ms)),
            burst_base=_as_float(payload.get("burst_base"), defaults.burst_base),
            burst_gain=max(0.0, _as_float(payload.get("burst_gain"), defaults.burst_gain)),
            burst_min=burst_min,
            burst_max=max(burst_min, _as_int(payload.get("burst_max"), defaults.burst_max)),
            mood_base=_as_float(payload.get("mood_base"), defaults.mood_base),
            mood_gain=max(0.0, _as_float(payload.get("mood_gain"), defaults.mood_gain)),
            mood_min=mood_min,
            mood_max=max(mood_min, min(100.0, _as_float(payload.get("mood_max"), defaults.mood_max))),
            reward_on_cancel=_as_bool(payload.get("reward_on_cancel"), defaults.reward_on_cancel),
        )

    @staticmethod
    def _build_particles(payload: Any) -> ParticleConfig:
        if not isinstance(payload, dict):
            return ParticleConfig()
        defaults = ParticleConfig()
        lifetime = max(0.05, _as_float(payload.get("lifetime_seconds"), defaults.lifetime_seconds))
        return ParticleConfig(
            max_burst=max(1, min(1000, _as_int(payload.get("max_burst"), defaults.max_burst))),
            max_live=max(1, min(5000, _as_int(payload.get("max_live"), defaults.max_live))),
            lifetime_seconds=lifetime,
            lifetime_jitter_seconds=max(
                0.0,
                min(lifetime, _as_float(payload.get("lifetime_jitter_seconds"), defaults.lifetime_jitter_seconds)),
            ),
            ambient_probability=max(
                0.0, min(1.0, _as_float(payload.get("ambient_probability"), defaults.ambient_probability))
            ),
            ambient_interval_ms=max(100, _as_int(payload.get("ambient_interval_ms"), defaults.ambient_interval_ms)),
            ambient_x_range=_as_range(payload.get("ambient_x_range"), defaults.ambient_x_range, low=0.0, high=1.0),
            ambient_y_range=_as_range(payload.get("ambient_y_range"), defaults.ambient_y_range, low=0.0, high=1.0),
            ambient_size_range=_as_range(
                payload.get("ambient_size_range"), defaults.ambient_size_range, low=1.0, high=256.0
            ),
            burst_x_range=_as_range(payload.get("burst_x_range"), defaults.burst_x_range, low=0.0, high=1.0),
            burst_y_range=_as_range(payload.get("burst_y_range"), defaults.burst_y_range, low=0.0, high=1.0),
            burst_size_range=_as_range(payload.get("burst_size_range"), defaults.burst_size_range, low=1.0, high=256.0),
            origin_jitter=max(0.0, min(0.5, _as_float(payload.get("origin_jitter"), defaults.origin_jitter))),
        )

    @staticmethod
    def _build_loop(payload: Any) -> LoopConfig:
        if not isinstance(payload, dict):
            return LoopConfig()
        return LoopConfig(
            frame_interval_ms=max(1, min(1000, _as_int(payload.get("frame_interval_ms"), 16))),
            spectrum_bars=max(1, min(256, _as_int(payload.get("spectrum_bars"), 30))),
        )

    @staticmethod
    def _build_behavior(payload: Any) -> BehaviorConfig:
        if not isinstance(payload, dict):
            return BehaviorConfig()
        return BehaviorConfig(debug_mode=_as_bool(payload.get("debug_mode"), False))

    @staticmethod
    def _build_bands(payload: Any) -> tuple[MoodBand, ...]:
        if payload is None:
            return DEFAULT_MOOD_BANDS
        if not isinstance(payload, list):
            raise BandConfigError("'bands' must be a list")
        bands: list[MoodBand] = []
        for index, entry in enumerate(payload):
            if not isinstance(entry, dict):
                raise BandConfigError(f"Band #{index} must be an object")
            try:
                bands.append(
                    MoodBand(
                        name=str(entry["name"]),
                        label=str(entry.get("label", entry["name"])),
                        start=float(entry["start"]),
                        end=float(entry["end"]),
                        background=str(entry["background"]),
                        light=str(entry["light"]),
                        mid=str(entry["mid"]),
                        particle=str(entry["particle"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise BandConfigError(f"Band #{index} is malformed: {exc}") from exc
        return tuple(bands)
