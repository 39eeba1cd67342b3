"""
Main entry point for the livespectrum application.
"""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .config import (
    DEFAULT_FRAME_RATE,
    DEFAULT_MAX_DISPLAY_FREQUENCY,
    DEFAULT_SMOOTHING,
    DEFAULT_TRANSFORM_SIZE,
    VisualizerConfig,
)

logger = logging.getLogger(__name__)

STYLESHEET = """
    QMainWindow, QWidget {
        background-color: #0f0f14;
        color: #e0e0e0;
    }

    QPushButton {
        background-color: #2563eb;
        border: none;
        border-radius: 6px;
        color: white;
        padding: 6px 12px;
        min-width: 60px;
    }

    QPushButton:hover {
        background-color: #3b82f6;
    }

    QPushButton:disabled {
        background-color: #2a2a35;
        color: #666;
    }

    QComboBox {
        background-color: #1a1a24;
        border: 1px solid #2a2a35;
        border-radius: 4px;
        padding: 4px 8px;
    }

    QLabel {
        background-color: transparent;
    }
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="livespectrum",
        description="Real-time audio spectrum visualizer",
    )
    parser.add_argument("file", nargs="?", type=Path, help="Audio file to play instead of a device")
    parser.add_argument("--loop", action="store_true", help="Loop the audio file")
    parser.add_argument("--device", type=int, default=None, help="Capture device index")
    parser.add_argument("--list-devices", action="store_true", help="List capture devices and exit")
    parser.add_argument("--fft-size", type=int, default=DEFAULT_TRANSFORM_SIZE,
                        help="FFT window length, power of two (default: %(default)s)")
    parser.add_argument("--smoothing", type=float, default=DEFAULT_SMOOTHING,
                        help="Temporal smoothing factor in [0, 1) (default: %(default)s)")
    parser.add_argument("--max-freq", type=float, default=DEFAULT_MAX_DISPLAY_FREQUENCY,
                        help="Highest displayed frequency in Hz (default: %(default)s)")
    parser.add_argument("--fps", type=int, default=DEFAULT_FRAME_RATE,
                        help="Display refresh rate (default: %(default)s)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def list_devices():
    from .audio_capture import get_input_devices, get_loopback_devices

    print("System audio (loopback):")
    for dev in get_loopback_devices():
        print(f"  [{dev.index}] {dev.name} - {dev.channels}ch @ {dev.sample_rate:.0f} Hz")
    print("Microphones:")
    for dev in get_input_devices():
        marker = " (default)" if dev.is_default else ""
        print(f"  [{dev.index}] {dev.name} - {dev.channels}ch @ {dev.sample_rate:.0f} Hz{marker}")


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    if args.list_devices:
        list_devices()
        return 0

    try:
        config = VisualizerConfig(
            transform_size=args.fft_size,
            smoothing_factor=args.smoothing,
            max_display_frequency_hz=args.max_freq,
        )
    except ValidationError as e:
        parser.error(str(e))

    if args.fps <= 0:
        parser.error("--fps must be positive")

    if args.file is not None and not args.file.exists():
        parser.error(f"file not found: {args.file}")

    device = None
    if args.device is not None:
        from .audio_capture import get_device

        device = get_device(args.device)
        if device is None:
            parser.error(f"no capture device with index {args.device} (see --list-devices)")

    from PySide6.QtWidgets import QApplication

    from .ui import MainWindow

    app = QApplication(sys.argv[:1])
    app.setApplicationName("livespectrum")
    app.setApplicationDisplayName("Audio Visualizer")
    app.setStyleSheet(STYLESHEET)

    window = MainWindow(
        config=config,
        frame_rate=args.fps,
        initial_file=args.file,
        device=device,
        loop_file=args.loop,
    )
    window.show()

    if args.file is not None:
        window.start_capture()

    logger.debug("Entering Qt event loop")
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
