from __future__ import annotations

import logging
import time
from typing import Callable

from PySide6.QtCore import QObject, QTimer, Signal, Slot

try:
    from core.bubble_interaction import PopEvent
    from core.reflection import Reflection, ReflectionSink
    from core.scene import Scene, SceneFrame
except ModuleNotFoundError:
    from .bubble_interaction import PopEvent
    from .reflection import Reflection, ReflectionSink
    from .scene import Scene, SceneFrame

logger = logging.getLogger("Daydream")


class SceneLoop(QObject):
    """
    Drives a Scene from the Qt event loop.

    Two independent periodic triggers feed the scene: the frame timer steps
    it, the ambient timer adds idle heart drift. Both fire on the thread that
    owns this object, as do the input slots, so scene state is never touched
    concurrently.
    """

    frame_ready = Signal(object)  # SceneFrame
    bloom_triggered = Signal()
    bubble_popped = Signal(object)  # PopEvent
    reflection_ready = Signal(object)  # Reflection

    def __init__(
        self,
        scene: Scene,
        *,
        clock: Callable[[], float] = time.monotonic,
        reflection_sink: ReflectionSink | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._scene = scene
        self._clock = clock
        self._reflection_sink = reflection_sink
        self._running = False
        self._last_frame: SceneFrame | None = None

        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(scene.config.loop.frame_interval_ms)
        self._frame_timer.timeout.connect(self.tick)

        self._ambient_timer = QTimer(self)
        self._ambient_timer.setInterval(scene.config.particles.ambient_interval_ms)
        self._ambient_timer.timeout.connect(self._on_ambient_timeout)

    @property
    def scene(self) -> Scene:
        return self._scene

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def last_frame(self) -> SceneFrame | None:
        return self._last_frame

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._scene.reset_clock()
        self._frame_timer.start()
        self._ambient_timer.start()
        logger.info(
            "Scene loop started (frame=%dms ambient=%dms)",
            self._frame_timer.interval(),
            self._ambient_timer.interval(),
        )

    def stop(self) -> None:
        if self._frame_timer.isActive():
            self._frame_timer.stop()
        if self._ambient_timer.isActive():
            self._ambient_timer.stop()
        if not self._running:
            return
        self._running = False
        logger.info("Scene loop stopped")

    @Slot()
    def tick(self) -> SceneFrame:
        frame = self._scene.step(self._clock())
        self._last_frame = frame
        self.frame_ready.emit(frame)
        if frame.bloom_fired:
            self.bloom_triggered.emit()
        return frame

    # ------------------------------------------------------------------
    # Input source
    # ------------------------------------------------------------------

    @Slot()
    def hold_start(self) -> None:
        self._scene.hold_start(self._clock())

    @Slot()
    def hold_end(self) -> None:
        self._emit_pop(self._scene.hold_end(self._clock()))

    @Slot()
    def hold_cancel(self) -> None:
        self._emit_pop(self._scene.hold_cancel(self._clock()))

    @Slot(float, float)
    def pointer_move(self, x: float, y: float) -> None:
        self._scene.pointer_move(x, y)

    def feed_audio(self, magnitudes) -> None:
        self._scene.feed_audio(magnitudes)

    # ------------------------------------------------------------------
    # Notes collaborator
    # ------------------------------------------------------------------

    def submit_note(self, text: str | None) -> Reflection:
        """Tag ``text`` with the current mood and hand it off; sink failures are only logged."""
        reflection = self._scene.make_reflection(text)
        self.reflection_ready.emit(reflection)
        if self._reflection_sink is not None:
            try:
                self._reflection_sink(reflection)
            except Exception:
                logger.warning("Reflection sink failed", exc_info=True)
        return reflection

    @Slot()
    def _on_ambient_timeout(self) -> None:
        if not self._running:
            return
        self._scene.spawn_ambient(self._clock())

    def _emit_pop(self, pop: PopEvent | None) -> None:
        if pop is not None:
            self.bubble_popped.emit(pop)
