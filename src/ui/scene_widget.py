from __future__ import annotations

from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import (
    QBrush,
    QColor,
    QKeyEvent,
    QLinearGradient,
    QMouseEvent,
    QPainter,
    QPainterPath,
    QPaintEvent,
    QRadialGradient,
)
from PySide6.QtWidgets import QWidget

try:
    from core.scene import SceneFrame
    from core.scene_loop import SceneLoop
except ModuleNotFoundError:
    from ..core.scene import SceneFrame
    from ..core.scene_loop import SceneLoop


def _heart_path() -> QPainterPath:
    # 100x85 unit heart, centred on the origin
    path = QPainterPath(QPointF(50, 15))
    path.cubicTo(35, -5, 0, 0, 0, 37)
    path.cubicTo(0, 60, 50, 85, 50, 85)
    path.cubicTo(50, 85, 100, 60, 100, 37)
    path.cubicTo(100, 0, 65, -5, 50, 15)
    path.closeSubpath()
    return path.translated(-50, -42.5)


class SceneWidget(QWidget):
    """
    Qt renderer and input source for a SceneLoop.

    Paints whatever frame the loop last emitted and forwards pointer and key
    input back to the loop. It never mutates scene state directly.
    """

    note_requested = Signal()

    LOLLIPOP_RADIUS_PX = 28
    BUBBLE_RADIUS_PX = 22
    HEART_RISE = 2.2  # in heart sizes over the particle lifetime

    def __init__(self, loop: SceneLoop, parent: QWidget | None = None):
        super().__init__(parent)
        self._loop = loop
        self._frame: SceneFrame | None = loop.last_frame
        self._heart = _heart_path()
        self._pressed = False

        self.setWindowTitle("Daydream")
        self.setMinimumSize(480, 360)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        loop.frame_ready.connect(self.on_frame)

    @property
    def frame(self) -> SceneFrame | None:
        return self._frame

    def on_frame(self, frame: SceneFrame) -> None:
        self._frame = frame
        self.update()

    def lollipop_center(self) -> QPointF:
        return QPointF(self.width() * 0.5, self.height() * 0.72)

    def _hits_lollipop(self, point: QPointF) -> bool:
        delta = point - self.lollipop_center()
        return delta.x() ** 2 + delta.y() ** 2 <= (self.LOLLIPOP_RADIUS_PX * 1.6) ** 2

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton and self._hits_lollipop(event.position()):
            self._pressed = True
            self._loop.hold_start()
            event.accept()
            return
        if event.button() == Qt.MouseButton.RightButton:
            self.note_requested.emit()
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton and self._pressed:
            self._pressed = False
            self._loop.hold_end()
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self.width() > 0 and self.height() > 0:
            pos = event.position()
            self._loop.pointer_move(pos.x() / self.width(), pos.y() / self.height())
        super().mouseMoveEvent(event)

    def leaveEvent(self, event) -> None:
        if self._pressed:
            self._pressed = False
            self._loop.hold_cancel()
        super().leaveEvent(event)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if event.key() in (Qt.Key.Key_Space, Qt.Key.Key_Return, Qt.Key.Key_Enter):
            if not event.isAutoRepeat():
                self._loop.hold_start()
            event.accept()
            return
        super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QKeyEvent) -> None:
        if event.key() in (Qt.Key.Key_Space, Qt.Key.Key_Return, Qt.Key.Key_Enter):
            if not event.isAutoRepeat():
                self._loop.hold_end()
            event.accept()
            return
        super().keyReleaseEvent(event)

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def paintEvent(self, event: QPaintEvent) -> None:
        frame = self._frame
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        try:
            if frame is None:
                painter.fillRect(self.rect(), QColor("#BFE7FF"))
                return
            self._paint_background(painter, frame)
            self._paint_spectrum(painter, frame)
            self._paint_bubble(painter, frame)
            self._paint_hearts(painter, frame)
            self._paint_meter(painter, frame)
        finally:
            painter.end()

    def _paint_background(self, painter: QPainter, frame: SceneFrame) -> None:
        gradient = QLinearGradient(0, 0, 0, self.height())
        gradient.setColorAt(0.0, QColor(frame.theme.light))
        gradient.setColorAt(1.0, QColor(frame.theme.background))
        painter.fillRect(self.rect(), QBrush(gradient))

        light_x = frame.pointer[0] * self.width()
        light_y = frame.pointer[1] * self.height()
        glow = QRadialGradient(QPointF(light_x, light_y), max(self.width(), self.height()) * 0.35)
        warm = QColor(frame.theme.light)
        warm.setAlpha(150)
        glow.setColorAt(0.0, warm)
        glow.setColorAt(1.0, QColor(0, 0, 0, 0))
        painter.fillRect(self.rect(), QBrush(glow))

        if frame.bloom_active:
            veil = QColor(frame.theme.particle)
            veil.setAlpha(40)
            painter.fillRect(self.rect(), veil)

    def _paint_spectrum(self, painter: QPainter, frame: SceneFrame) -> None:
        bars = frame.spectrum
        if not bars:
            return
        height = self.height() * 0.12
        bar_width = self.width() / len(bars)
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor(255, 255, 255, 210))
        for index, value in enumerate(bars):
            bar_height = value * height * 0.9 + 2
            painter.drawRect(QRectF(index * bar_width + 2, self.height() - bar_height - 6, bar_width - 4, bar_height))

    def _paint_bubble(self, painter: QPainter, frame: SceneFrame) -> None:
        center = self.lollipop_center()
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor(frame.theme.mid))
        painter.drawEllipse(center, self.LOLLIPOP_RADIUS_PX, self.LOLLIPOP_RADIUS_PX)

        radius = self.BUBBLE_RADIUS_PX * frame.bubble_scale
        bubble = QColor(frame.theme.light)
        bubble.setAlpha(170 if frame.holding else 90)
        painter.setBrush(bubble)
        painter.drawEllipse(center - QPointF(0, self.LOLLIPOP_RADIUS_PX + radius), radius, radius)

    def _paint_hearts(self, painter: QPainter, frame: SceneFrame) -> None:
        painter.setPen(Qt.PenStyle.NoPen)
        for particle in frame.particles:
            progress = particle.progress(frame.now)
            color = QColor(particle.color or frame.theme.particle)
            color.setAlphaF(max(0.0, 1.0 - progress))
            scale = (particle.size / 100.0) * (1.0 + (particle.end_scale - 1.0) * progress)

            painter.save()
            painter.translate(
                particle.x * self.width(),
                particle.y * self.height() - particle.size * self.HEART_RISE * progress,
            )
            painter.rotate(15.0 + particle.rotation * progress)
            painter.scale(scale, scale)
            painter.setBrush(color)
            painter.drawPath(self._heart)
            painter.restore()

    def _paint_meter(self, painter: QPainter, frame: SceneFrame) -> None:
        track = QRectF(16, 16, self.width() - 32, 8)
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor(255, 255, 255, 120))
        painter.drawRoundedRect(track, 4, 4)
        fill = QRectF(track.x(), track.y(), track.width() * frame.mood / 100.0, track.height())
        painter.setBrush(QColor(frame.theme.mid))
        painter.drawRoundedRect(fill, 4, 4)
