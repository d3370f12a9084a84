from __future__ import annotations

import sys
import traceback
from typing import Callable, Dict, Hashable

from PySide6.QtCore import QElapsedTimer, QEvent, Qt, QTimer, Signal
from PySide6.QtGui import QColor, QImage, QInputDevice, QPainter
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QColorDialog,
    QComboBox,
    QDoubleSpinBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from polefield.core.compositor import Compositor
from polefield.core.noise import NoiseFamily
from polefield.core.params import ControlParameters
from polefield.core.scheduler import FrameScheduler
from polefield.core.trajectories import AnimationPattern
from polefield.core.types import Mode, Raster, Theme

FRAME_INTERVAL_MS = 16


class QtFrameScheduler(FrameScheduler):
    """Next-frame callbacks driven by a single QTimer."""

    def __init__(self, parent=None, interval_ms: int = FRAME_INTERVAL_MS):
        self._pending: Dict[int, Callable[[float], None]] = {}
        self._next_id = 0
        self._elapsed = QElapsedTimer()
        self._elapsed.start()
        self.timer = QTimer(parent)
        self.timer.setInterval(interval_ms)
        self.timer.timeout.connect(self._on_timeout)

    def request(self, callback) -> int:
        self._next_id += 1
        self._pending[self._next_id] = callback
        if not self.timer.isActive():
            self.timer.start()
        return self._next_id

    def cancel(self, handle: Hashable) -> None:
        self._pending.pop(handle, None)
        if not self._pending:
            self.timer.stop()

    def _on_timeout(self):
        callbacks = list(self._pending.values())
        self._pending.clear()
        now = float(self._elapsed.elapsed())
        for cb in callbacks:
            cb(now)
        if not self._pending:
            self.timer.stop()


def qimage_from_buffer(buf) -> QImage:
    h, w, _ = buf.shape
    return QImage(buf.data, w, h, 4 * w, QImage.Format_RGBA8888).copy()


def from_touchscreen(event) -> bool:
    """True for mouse events Qt synthesized from an unaccepted touch."""
    device = event.device()
    return device is not None and device.type() == QInputDevice.DeviceType.TouchScreen


class FieldView(QWidget):
    hapticRequested = Signal(str)

    def __init__(self, width: int, height: int, params: ControlParameters | None = None, parent=None):
        super().__init__(parent)
        self.setFixedSize(width, height)
        self.setMouseTracking(True)
        self.setAttribute(Qt.WA_AcceptTouchEvents, True)
        self.theme = Theme.LIGHT
        self.scheduler = QtFrameScheduler(self)
        self.compositor = Compositor(
            Raster(width, height),
            params=params,
            scheduler=self.scheduler,
            haptic=self.hapticRequested.emit,
            on_update=self.update,
        )
        self._sync_cursor()
        self.compositor.mount()

    def set_theme(self, theme: Theme):
        self.theme = theme
        self.update()

    def apply_changes(self, changes):
        self.compositor.update_parameters(changes)
        self._sync_cursor()

    def _sync_cursor(self):
        animated = self.compositor.mode is Mode.ANIMATED
        self.setCursor(Qt.ArrowCursor if animated else Qt.CrossCursor)

    def paintEvent(self, event):
        try:
            buf = self.compositor.render(self.theme)
        except Exception as e:
            print(f"[WARNING] render failed: {e}", file=sys.stderr, flush=True)
            return
        p = QPainter(self)
        p.drawImage(0, 0, qimage_from_buffer(buf))
        p.end()

    def closeEvent(self, event):
        self.compositor.unmount()
        super().closeEvent(event)

    # --- pointer -----------------------------------------------------------
    # touches are handled in event(); their synthesized mouse twins are dropped

    def mousePressEvent(self, e):
        if e.button() == Qt.LeftButton and not from_touchscreen(e):
            pos = e.position()
            self.compositor.pointer_press(pos.x(), pos.y())

    def mouseMoveEvent(self, e):
        if from_touchscreen(e):
            return
        pos = e.position()
        self.compositor.pointer_move(pos.x(), pos.y())

    def mouseReleaseEvent(self, e):
        if from_touchscreen(e):
            return
        self.compositor.pointer_release()

    def leaveEvent(self, e):
        self.compositor.pointer_leave()
        super().leaveEvent(e)

    def event(self, e):
        kind = e.type()
        if kind in (QEvent.TouchBegin, QEvent.TouchUpdate, QEvent.TouchEnd):
            points = e.points()
            if not points:
                return super().event(e)
            pos = points[0].position()
            if kind == QEvent.TouchBegin:
                result = self.compositor.pointer_press(pos.x(), pos.y(), touch=True)
            elif kind == QEvent.TouchUpdate:
                result = self.compositor.pointer_move(pos.x(), pos.y(), touch=True)
            else:
                self.compositor.pointer_release()
                return super().event(e)
            if result.suppress_default:
                e.accept()
                return True
            e.ignore()
            return False
        return super().event(e)


class MainWindow(QWidget):
    def __init__(self, width: int = 512, height: int = 512, params: ControlParameters | None = None):
        super().__init__()
        self.setWindowTitle("polefield")
        self.view = FieldView(width, height, params, self)
        self.status = QLabel()
        self.pattern = QLabel()
        self.color_buttons = []
        self._build_ui()
        self._refresh_status()

    def _build_ui(self):
        params = self.view.compositor.params
        form = QFormLayout()

        for i, hex_color in enumerate(params.pole_colors):
            btn = QPushButton(hex_color)
            btn.setStyleSheet(f"background:{hex_color}")
            btn.clicked.connect(lambda _=False, idx=i: self._pick_color(idx))
            self.color_buttons.append(btn)
            form.addRow(f"Pole {i + 1}", btn)

        self.power = QDoubleSpinBox()
        self.power.setRange(0.1, 10.0)
        self.power.setSingleStep(0.1)
        self.power.setValue(params.interpolation_power)
        self.power.valueChanged.connect(lambda v: self._changed(interpolationPower=v))
        form.addRow("Falloff", self.power)

        self.animate = QCheckBox()
        self.animate.setChecked(params.animation_enabled)
        self.animate.toggled.connect(lambda v: self._changed(animationEnabled=v))
        form.addRow("Animate", self.animate)

        self.pattern_box = QComboBox()
        for pattern in AnimationPattern:
            if pattern is not AnimationPattern.STATIC:
                self.pattern_box.addItem(pattern.value)
        self.pattern_box.setCurrentText(params.animation_pattern.value)
        self.pattern_box.currentTextChanged.connect(lambda v: self._changed(animationPattern=v))
        form.addRow("Pattern", self.pattern_box)

        self.speed = QDoubleSpinBox()
        self.speed.setRange(0.1, 10.0)
        self.speed.setSingleStep(0.1)
        self.speed.setValue(params.animation_speed)
        self.speed.valueChanged.connect(lambda v: self._changed(animationSpeed=v))
        form.addRow("Speed", self.speed)

        self.noise = QCheckBox()
        self.noise.setChecked(params.noise_enabled)
        self.noise.toggled.connect(lambda v: self._changed(noiseEnabled=v))
        form.addRow("Noise", self.noise)

        self.noise_type = QComboBox()
        for family in NoiseFamily:
            if family is not NoiseFamily.UNIFORM:
                self.noise_type.addItem(family.value)
        self.noise_type.setCurrentText(params.noise_type.value)
        self.noise_type.currentTextChanged.connect(lambda v: self._changed(noiseType=v))
        form.addRow("Noise type", self.noise_type)

        self.intensity = QDoubleSpinBox()
        self.intensity.setRange(0.0, 1.0)
        self.intensity.setSingleStep(0.05)
        self.intensity.setValue(params.noise_intensity)
        self.intensity.valueChanged.connect(lambda v: self._changed(noiseIntensity=v))
        form.addRow("Intensity", self.intensity)

        self.scale = QDoubleSpinBox()
        self.scale.setDecimals(3)
        self.scale.setRange(0.001, 1.0)
        self.scale.setSingleStep(0.005)
        self.scale.setValue(params.noise_scale)
        self.scale.valueChanged.connect(lambda v: self._changed(noiseScale=v))
        form.addRow("Noise scale", self.scale)

        self.show_poles = QCheckBox()
        self.show_poles.setChecked(params.show_poles)
        self.show_poles.toggled.connect(lambda v: self._changed(showPoles=v))
        form.addRow("Show poles", self.show_poles)

        self.dark = QCheckBox()
        self.dark.toggled.connect(lambda v: self.view.set_theme(Theme.DARK if v else Theme.LIGHT))
        form.addRow("Dark theme", self.dark)

        left = QVBoxLayout()
        header = QHBoxLayout()
        header.addWidget(self.status)
        header.addStretch(1)
        header.addWidget(self.pattern)
        left.addLayout(header)
        left.addWidget(self.view)
        left.addStretch(1)

        root = QHBoxLayout(self)
        root.addLayout(left)
        root.addLayout(form)

    def _pick_color(self, index: int):
        current = self.view.compositor.params.pole_colors[index]
        color = QColorDialog.getColor(QColor(current), self)
        if not color.isValid():
            return
        hex_color = color.name().upper()
        btn = self.color_buttons[index]
        btn.setText(hex_color)
        btn.setStyleSheet(f"background:{hex_color}")
        self._changed(**{f"pole{index + 1}Color": hex_color})

    def _changed(self, **changes):
        self.view.apply_changes(changes)
        self._refresh_status()

    def _refresh_status(self):
        self.status.setText(self.view.compositor.status())
        self.pattern.setText(self.view.compositor.pattern_status())

    def closeEvent(self, event):
        self.view.compositor.unmount()
        super().closeEvent(event)


def main(width: int = 512, height: int = 512, params: ControlParameters | None = None) -> int:
    try:
        app = QApplication.instance() or QApplication(sys.argv)
        w = MainWindow(width, height, params)
        w.show()
        print(f"[OK] polefield window {width}x{height}", file=sys.stderr, flush=True)
        return app.exec()
    except Exception as e:
        print(f"Fatal error:\n\n{e}\n\n{traceback.format_exc()}", file=sys.stderr, flush=True)
        return 1
