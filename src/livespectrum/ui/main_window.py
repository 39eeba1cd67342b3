"""
Main application window: source selection, start/stop, spectrum display.
"""

import logging
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import Slot
from PySide6.QtWidgets import (
    QComboBox, QFileDialog, QHBoxLayout, QLabel, QMainWindow,
    QPushButton, QVBoxLayout, QWidget,
)

from ..audio_capture import (
    AudioDevice, AudioStream, CaptureSession, DeviceCaptureProvider, DeviceType,
    FileCaptureProvider, get_input_devices, get_loopback_devices,
)
from ..audio_capture.system_audio import SOUNDDEVICE_AVAILABLE
from ..config import DEFAULT_FRAME_RATE, VisualizerConfig
from ..errors import AcquisitionDenied
from ..models import SessionState
from .frame_clock import QtFrameClock
from .spectrum_widget import SpectrumWidget

logger = logging.getLogger(__name__)

SOURCE_SYSTEM = "system"
SOURCE_MIC = "mic"
SOURCE_FILE = "file"


class FileDialogProvider:
    """Asks the user for a file when a stream is requested."""

    def __init__(self, parent: QWidget, loop: bool = False):
        self._parent = parent
        self.loop = loop

    def request_stream(self, audio: bool = True, video: bool = True) -> AudioStream:
        extensions = " ".join(f"*{ext}" for ext in sorted(FileCaptureProvider.SUPPORTED_EXTENSIONS))
        path, _ = QFileDialog.getOpenFileName(
            self._parent, "Open Audio File", "", f"Audio Files ({extensions})"
        )
        if not path:
            raise AcquisitionDenied("No audio file selected")
        return FileCaptureProvider(path, loop=self.loop).request_stream(audio, video)


class MainWindow(QMainWindow):
    """
    Spectrum visualizer window.

    Contains:
    - Source selector (System Audio / Microphone / Audio File)
    - Device selector
    - Start/Stop toggle and error text
    - Spectrum bar chart with frequency axis labels
    """

    def __init__(
        self,
        config: Optional[VisualizerConfig] = None,
        frame_rate: int = DEFAULT_FRAME_RATE,
        initial_file: Optional[Path] = None,
        device: Optional[AudioDevice] = None,
        loop_file: bool = False,
    ):
        super().__init__()
        self.setWindowTitle("Audio Visualizer")
        self.resize(900, 560)

        self.config = config or VisualizerConfig()
        self._initial_file = initial_file
        self._device_index = device.index if device is not None else None
        self._loop_file = loop_file
        self._devices: List[AudioDevice] = []

        self._spectrum = SpectrumWidget()
        self._clock = QtFrameClock(frame_rate, self)
        self.session = CaptureSession(
            provider=DeviceCaptureProvider(),
            surface=self._spectrum.surface,
            clock=self._clock,
            config=self.config,
        )
        self.session.set_callbacks(on_state_changed=self._on_state_changed)

        self._setup_ui()

        if initial_file is not None:
            self._source_combo.setCurrentIndex(self._source_combo.findData(SOURCE_FILE))
        elif device is not None:
            source = SOURCE_SYSTEM if device.device_type is DeviceType.LOOPBACK else SOURCE_MIC
            self._source_combo.setCurrentIndex(self._source_combo.findData(source))
        self._refresh_devices()

    def _setup_ui(self):
        """Set up the UI."""
        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(8)

        title = QLabel("Audio Visualizer")
        title.setStyleSheet("font-size: 20px; font-weight: 600;")
        layout.addWidget(title)

        subtitle = QLabel("Horizontal: frequency (Hz) / Vertical: signal level")
        subtitle.setStyleSheet("color: #888;")
        layout.addWidget(subtitle)

        # Controls
        controls = QHBoxLayout()
        controls.addWidget(QLabel("Source:"))

        self._source_combo = QComboBox()
        self._source_combo.addItem("System Audio", SOURCE_SYSTEM)
        self._source_combo.addItem("Microphone", SOURCE_MIC)
        self._source_combo.addItem("Audio File…", SOURCE_FILE)
        controls.addWidget(self._source_combo)

        self._device_combo = QComboBox()
        controls.addWidget(self._device_combo, stretch=1)

        self._refresh_btn = QPushButton("↻")
        self._refresh_btn.setFixedWidth(30)
        self._refresh_btn.setToolTip("Refresh device list")
        self._refresh_btn.clicked.connect(self._refresh_devices)
        controls.addWidget(self._refresh_btn)

        self._toggle_btn = QPushButton("Start Capture")
        self._toggle_btn.clicked.connect(self._toggle_capture)
        controls.addWidget(self._toggle_btn)

        layout.addLayout(controls)

        self._error_label = QLabel("")
        self._error_label.setWordWrap(True)
        self._error_label.setStyleSheet("color: #f87171;")
        self._error_label.hide()
        layout.addWidget(self._error_label)

        layout.addWidget(self._spectrum, stretch=1)

        # Frequency axis
        axis = QHBoxLayout()
        low = QLabel("0 Hz")
        high = QLabel(f"~{self.config.max_display_frequency_hz:.0f} Hz")
        for label in (low, high):
            label.setStyleSheet("color: #666; font-size: 11px;")
        axis.addWidget(low)
        axis.addStretch()
        axis.addWidget(high)
        layout.addLayout(axis)

        footer = QLabel(
            f"FFT size: {self.config.transform_size} / "
            f"Frequency bins: {self.config.bin_count}"
        )
        footer.setStyleSheet("color: #666; font-size: 11px;")
        layout.addWidget(footer)

        self.setCentralWidget(central)
        self._source_combo.currentIndexChanged.connect(self._on_source_changed)

        if not SOUNDDEVICE_AVAILABLE:
            self._show_error(
                "sounddevice not installed. Install with: pip install sounddevice"
            )

    def _current_source(self) -> str:
        return self._source_combo.currentData()

    def _refresh_devices(self):
        """Refresh the device list based on current source."""
        self._device_combo.clear()
        self._devices = []

        source = self._current_source()
        if source == SOURCE_FILE:
            label = self._initial_file.name if self._initial_file else "Choose on start"
            self._device_combo.addItem(label, None)
            self._update_controls()
            return

        devices = get_loopback_devices() if source == SOURCE_SYSTEM else get_input_devices()
        for dev in devices:
            label = f"{'★ ' if dev.is_default else ''}{dev.name}"
            self._device_combo.addItem(label, dev)
            self._devices.append(dev)
            if dev.index == self._device_index:
                self._device_combo.setCurrentIndex(self._device_combo.count() - 1)

        if not devices:
            if source == SOURCE_SYSTEM:
                self._device_combo.addItem("No loopback devices found", None)
            else:
                self._device_combo.addItem("No input devices found", None)

        self._update_controls()

    def _update_controls(self):
        """Update UI based on current state."""
        active = self.session.is_active
        source = self._current_source()

        self._source_combo.setEnabled(not active)
        self._device_combo.setEnabled(not active and bool(self._devices))
        self._refresh_btn.setEnabled(not active and source != SOURCE_FILE)

        can_start = source == SOURCE_FILE or bool(self._devices)
        self._toggle_btn.setEnabled(active or can_start)
        self._toggle_btn.setText("Stop" if active else "Start Capture")

    def _build_provider(self):
        source = self._current_source()
        if source == SOURCE_FILE:
            if self._initial_file is not None:
                path, self._initial_file = self._initial_file, None
                return FileCaptureProvider(path, loop=self._loop_file)
            return FileDialogProvider(self, loop=self._loop_file)
        return DeviceCaptureProvider(device=self._device_combo.currentData())

    @Slot(int)
    def _on_source_changed(self, index: int):
        self._refresh_devices()

    @Slot()
    def _toggle_capture(self):
        if self.session.is_active:
            self.stop_capture()
        else:
            self.start_capture()

    def start_capture(self):
        """Start capturing from the selected source."""
        self._hide_error()
        self.session.provider = self._build_provider()
        result = self.session.start()
        if not result.ok:
            self._show_error(result.error.message)
        self._update_controls()

    def stop_capture(self):
        """Stop capturing and blank the chart."""
        self.session.stop()
        self._spectrum.clear_display()
        self._update_controls()

    def _on_state_changed(self, state: SessionState):
        if state is SessionState.FAILED and self.session.failure is not None:
            self._show_error(self.session.failure.message)
            self._spectrum.clear_display()
        self._update_controls()

    def _show_error(self, message: str):
        self._error_label.setText(message)
        self._error_label.show()

    def _hide_error(self):
        self._error_label.clear()
        self._error_label.hide()

    def closeEvent(self, event):
        """Release the capture when the window closes."""
        self.session.stop()
        self._clock.cancel_all()
        super().closeEvent(event)
