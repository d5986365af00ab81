from __future__ import annotations

import json
import sys
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from core.color_mapper import DEFAULT_MOOD_BANDS, BandConfigError
from core.config_manager import ConfigManager, SceneConfig
from core.scene import Scene


class ConfigManagerTest(unittest.TestCase):
    def test_loads_bundled_config(self) -> None:
        config = ConfigManager(ROOT / "config" / "config.json").load()
        self.assertEqual(config.mood.initial_mood, 18.0)
        self.assertEqual(config.bubble.burst_max, 60)
        self.assertEqual(config.particles.max_burst, 120)
        self.assertEqual([band.name for band in config.bands], [band.name for band in DEFAULT_MOOD_BANDS])
        self.assertIsNone(config.mood.settle_mood)

    def test_missing_or_broken_file_gives_defaults(self) -> None:
        with TemporaryDirectory() as td:
            missing = ConfigManager(Path(td) / "nope.json").load()
            self.assertEqual(missing, SceneConfig())

            broken_path = Path(td) / "broken.json"
            broken_path.write_text("{not json", encoding="utf-8")
            self.assertEqual(ConfigManager(broken_path).load(), SceneConfig())

    def test_values_are_sanitised(self) -> None:
        with TemporaryDirectory() as td:
            cfg_path = Path(td) / "config.json"
            cfg_path.write_text(
                json.dumps(
                    {
                        "mood": {"initial_mood": 500, "decay_rate": "fast", "settle_mood": 40},
                        "bubble": {"max_scale": 0.2, "burst_max": -3},
                        "particles": {"ambient_probability": 4, "ambient_x_range": [0.9, -1]},
                        "loop": {"frame_interval_ms": 0},
                    }
                ),
                encoding="utf-8",
            )
            config = ConfigManager(cfg_path).load()

        self.assertEqual(config.mood.initial_mood, 100.0)
        self.assertEqual(config.mood.decay_rate, 0.05)
        self.assertEqual(config.mood.settle_mood, 40.0)
        self.assertEqual(config.bubble.max_scale, config.bubble.base_scale)
        self.assertEqual(config.bubble.burst_max, config.bubble.burst_min)
        self.assertEqual(config.particles.ambient_probability, 1.0)
        self.assertEqual(config.particles.ambient_x_range, (0.0, 0.9))
        self.assertEqual(config.loop.frame_interval_ms, 1)

    def test_only_real_booleans_are_accepted(self) -> None:
        with TemporaryDirectory() as td:
            cfg_path = Path(td) / "config.json"
            cfg_path.write_text(
                json.dumps(
                    {
                        "bubble": {"reward_on_cancel": "false"},
                        "behavior": {"debug_mode": "false"},
                    }
                ),
                encoding="utf-8",
            )
            quoted = ConfigManager(cfg_path).load()

            cfg_path.write_text(
                json.dumps({"bubble": {"reward_on_cancel": False}, "behavior": {"debug_mode": True}}),
                encoding="utf-8",
            )
            real = ConfigManager(cfg_path).load()

        self.assertTrue(quoted.bubble.reward_on_cancel)
        self.assertFalse(quoted.behavior.debug_mode)
        self.assertFalse(real.bubble.reward_on_cancel)
        self.assertTrue(real.behavior.debug_mode)

    def test_malformed_band_entry_raises(self) -> None:
        with TemporaryDirectory() as td:
            cfg_path = Path(td) / "config.json"
            cfg_path.write_text(json.dumps({"bands": [{"name": "only-a-name"}]}), encoding="utf-8")
            with self.assertRaises(BandConfigError):
                ConfigManager(cfg_path).load()

    def test_overlapping_bands_load_but_scene_refuses(self) -> None:
        payload = ConfigManager.to_dict(SceneConfig())
        payload["bands"][1]["start"] = 20.0
        with TemporaryDirectory() as td:
            cfg_path = Path(td) / "config.json"
            cfg_path.write_text(json.dumps(payload), encoding="utf-8")
            config = ConfigManager(cfg_path).load()
        self.assertEqual(config.bands[1].start, 20.0)
        with self.assertRaises(BandConfigError):
            Scene(config)

    def test_save_and_reload(self) -> None:
        with TemporaryDirectory() as td:
            cfg_path = Path(td) / "nested" / "config.json"
            manager = ConfigManager(cfg_path)
            config = manager.load()
            config.mood.decay_rate = 0.2
            config.mood.settle_mood = 40.0
            config.bubble.reward_on_cancel = False
            config.particles.ambient_interval_ms = 2000
            config.behavior.debug_mode = True

            self.assertTrue(manager.save(config))
            reloaded = manager.load()

        self.assertEqual(reloaded, config)


if __name__ == "__main__":
    unittest.main()
