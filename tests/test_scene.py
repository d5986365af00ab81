from __future__ import annotations

import random
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from core.color_mapper import BandConfigError, ColorMapper, MoodBand
from core.config_manager import MoodConfig, ParticleConfig, SceneConfig
from core.scene import Scene


def _quiet_config(**mood_overrides) -> SceneConfig:
    return SceneConfig(
        mood=MoodConfig(**mood_overrides),
        particles=ParticleConfig(ambient_probability=0.0),
    )


class SceneStepTest(unittest.TestCase):
    def test_three_second_hold_spawns_capped_burst(self) -> None:
        scene = Scene(_quiet_config(), rng=random.Random(5))
        scene.hold_start(0.0)
        pop = scene.hold_end(3.0)
        self.assertEqual(pop.burst_size, 60)
        frame = scene.step(3.0)
        self.assertEqual(len(frame.particles), 60)

    def test_release_at_far_future_time_is_capped(self) -> None:
        scene = Scene(_quiet_config(), rng=random.Random(5))
        scene.hold_start(0.0)
        pop = scene.hold_end(1e308)
        self.assertEqual(pop.burst_size, 60)
        self.assertEqual(pop.mood_delta, 40.0)
        frame = scene.step(1e308)
        self.assertEqual(frame.mood, 58.0)

    def test_pop_applies_after_decay(self) -> None:
        scene = Scene(_quiet_config(initial_mood=18.0, decay_rate=0.05), rng=random.Random(5))
        scene.hold_start(0.0)
        scene.step(0.0)
        scene.hold_end(1.0)
        frame = scene.step(1.0)
        self.assertAlmostEqual(frame.mood, 18.0 - 0.05 + 16.0, places=6)
        self.assertEqual(len(frame.particles), 40)
        self.assertEqual(frame.bubble_scale, 1.0)
        self.assertFalse(frame.holding)

    def test_bloom_sees_post_delta_mood_and_theme_sees_correction(self) -> None:
        scene = Scene(_quiet_config(initial_mood=95.0, decay_rate=0.05), rng=random.Random(5))
        scene.step(0.0)
        scene.add_mood(10.0)
        frame = scene.step(1.0)
        self.assertTrue(frame.bloom_fired)
        self.assertTrue(frame.bloom_active)
        self.assertEqual(frame.mood, 99.0)
        self.assertEqual(frame.theme, ColorMapper().color_for(99.0))
        self.assertEqual(len(frame.particles), 120)
        self.assertTrue(all(particle.color == "#B88CFF" for particle in frame.particles))

    def test_saturated_scene_blooms_once_per_cooldown(self) -> None:
        scene = Scene(_quiet_config(initial_mood=50.0, decay_rate=0.0), rng=random.Random(5))
        fired = 0
        for step in range(9):  # 0.0 .. 4.0 seconds
            scene.add_mood(100.0)
            if scene.step(step * 0.5).bloom_fired:
                fired += 1
        self.assertEqual(fired, 1)

    def test_bubble_inflates_across_steps(self) -> None:
        scene = Scene(_quiet_config(), rng=random.Random(5))
        scene.step(0.0)
        scene.hold_start(0.0)
        scene.hold_start(0.0)
        frame = scene.step(0.06)
        self.assertAlmostEqual(frame.bubble_scale, 1.06)
        self.assertTrue(frame.holding)
        frame = scene.step(120.0)
        self.assertEqual(frame.bubble_scale, 2.6)

    def test_large_gap_is_one_bounded_step(self) -> None:
        scene = Scene(_quiet_config(initial_mood=50.0), rng=random.Random(5))
        scene.step(0.0)
        frame = scene.step(100_000.0)
        self.assertEqual(frame.mood, 0.0)
        frame = scene.step(50.0)  # clock went backwards
        self.assertEqual(frame.mood, 0.0)

    def test_particles_age_out(self) -> None:
        scene = Scene(_quiet_config(), rng=random.Random(5))
        scene.step(0.0)
        scene.spawn_ambient(0.0)
        self.assertEqual(len(scene.step(1.0).particles), 1)
        self.assertEqual(len(scene.step(1.9).particles), 0)

    def test_pointer_is_clamped(self) -> None:
        scene = Scene(_quiet_config())
        scene.pointer_move(1.5, -0.2)
        self.assertEqual(scene.pointer, (1.0, 0.0))
        scene.pointer_move(float("nan"), 0.3)
        self.assertEqual(scene.pointer, (1.0, 0.0))

    def test_audio_feed_reaches_frame(self) -> None:
        scene = Scene(_quiet_config())
        scene.feed_audio([255] * 64)
        frame = scene.step(0.0)
        self.assertEqual(len(frame.spectrum), 30)
        self.assertTrue(all(value == 1.0 for value in frame.spectrum))
        self.assertEqual(frame.mood, 18.0)

    def test_reflection_carries_band_and_accent(self) -> None:
        scene = Scene(_quiet_config(initial_mood=10.0))
        scene.step(0.0)
        reflection = scene.make_reflection("  thinking of you  ")
        self.assertEqual(reflection.text, "thinking of you")
        self.assertEqual(reflection.band_name, "Blue/Numbness")
        self.assertEqual(reflection.accent_color, scene.theme.particle)
        self.assertEqual(scene.make_reflection("").text, "For you")

    def test_invalid_bands_refuse_to_start(self) -> None:
        bands = (
            MoodBand("a", "a", 0.0, 50.0, "#000000", "#000000", "#000000", "#000000"),
            MoodBand("b", "b", 40.0, 100.0, "#000000", "#000000", "#000000", "#000000"),
        )
        with self.assertRaises(BandConfigError):
            Scene(SceneConfig(bands=bands))


if __name__ == "__main__":
    unittest.main()
