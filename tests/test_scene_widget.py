from __future__ import annotations

import os
import random
import sys
import unittest
from pathlib import Path

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QCoreApplication, QEvent, QPoint, Qt
from PySide6.QtTest import QTest
from PySide6.QtWidgets import QApplication

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from core.config_manager import ParticleConfig, SceneConfig
from core.scene import Scene
from core.scene_loop import SceneLoop
from ui.scene_widget import SceneWidget


def _get_or_create_app() -> QApplication | None:
    current = QCoreApplication.instance()
    if current is not None:
        if isinstance(current, QApplication):
            return current
        return None
    return QApplication(sys.argv)


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class SceneWidgetTest(unittest.TestCase):
    def setUp(self) -> None:
        self._app = _get_or_create_app()
        if self._app is None:
            self.skipTest("QCoreApplication already exists; widget tests require QApplication.")
        self._clock = _FakeClock()
        scene = Scene(SceneConfig(particles=ParticleConfig(ambient_probability=0.0)), rng=random.Random(2))
        self._loop = SceneLoop(scene, clock=self._clock)
        self._widget = SceneWidget(self._loop)
        self._widget.resize(480, 360)

    def tearDown(self) -> None:
        self._widget.deleteLater()
        self._loop.deleteLater()

    def _lollipop_point(self) -> QPoint:
        return self._widget.lollipop_center().toPoint()

    def test_receives_frames(self) -> None:
        frame = self._loop.tick()
        self.assertIs(self._widget.frame, frame)
        self.assertFalse(self._widget.grab().isNull())

    def test_press_and_release_on_lollipop_pops_bubble(self) -> None:
        pops: list[object] = []
        self._loop.bubble_popped.connect(pops.append)

        QTest.mousePress(self._widget, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, self._lollipop_point())
        self.assertTrue(self._loop.scene.bubble.is_holding)
        self._clock.now = 1.0
        QTest.mouseRelease(self._widget, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, self._lollipop_point())

        self.assertEqual(len(pops), 1)
        self.assertFalse(pops[0].cancelled)

    def test_press_away_from_lollipop_is_ignored(self) -> None:
        QTest.mousePress(self._widget, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, QPoint(5, 5))
        self.assertFalse(self._loop.scene.bubble.is_holding)

    def test_leaving_mid_hold_cancels(self) -> None:
        pops: list[object] = []
        self._loop.bubble_popped.connect(pops.append)

        QTest.mousePress(self._widget, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, self._lollipop_point())
        self._widget.leaveEvent(QEvent(QEvent.Type.Leave))

        self.assertEqual(len(pops), 1)
        self.assertTrue(pops[0].cancelled)

    def test_keyboard_hold(self) -> None:
        pops: list[object] = []
        self._loop.bubble_popped.connect(pops.append)

        QTest.keyPress(self._widget, Qt.Key.Key_Space)
        self.assertTrue(self._loop.scene.bubble.is_holding)
        QTest.keyRelease(self._widget, Qt.Key.Key_Space)

        self.assertEqual(len(pops), 1)

    def test_paints_particles_and_bloom(self) -> None:
        self._loop.scene.add_mood(100.0)
        frame = self._loop.tick()
        self.assertTrue(frame.bloom_fired)
        self.assertFalse(self._widget.grab().isNull())


if __name__ == "__main__":
    unittest.main()
