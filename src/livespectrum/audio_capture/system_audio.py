"""
Live capture from system audio (loopback) or microphone input.

Supports:
- Windows: WASAPI Loopback via pyaudiowpatch (captures system audio output)
- Linux: PulseAudio/PipeWire monitor sources via sounddevice
- macOS: Virtual audio devices (BlackHole, Loopback) via sounddevice
"""

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import numpy as np

from ..config import DEFAULT_BLOCK_SIZE
from ..errors import AcquisitionDenied
from .stream import AudioStream, MediaTrack, TrackKind

logger = logging.getLogger(__name__)

# pyaudiowpatch provides true WASAPI loopback on Windows
PYAUDIO_AVAILABLE = False
try:
    import pyaudiowpatch as pyaudio
    PYAUDIO_AVAILABLE = True
except ImportError:
    pass

# sounddevice raises OSError when the PortAudio library itself is missing
SOUNDDEVICE_AVAILABLE = False
try:
    import sounddevice as sd
    SOUNDDEVICE_AVAILABLE = True
except (ImportError, OSError):
    pass

VIRTUAL_DEVICE_NAMES = ("blackhole", "loopback", "soundflower", "virtual")


class DeviceType(Enum):
    """Type of audio device."""
    INPUT = "input"  # Microphone
    LOOPBACK = "loopback"  # System audio capture


@dataclass
class AudioDevice:
    """Audio device information."""
    index: int
    name: str
    device_type: DeviceType
    channels: int
    sample_rate: float
    is_default: bool = False
    host_api: str = ""
    is_loopback: bool = False

    def __str__(self):
        return f"{self.name} ({self.device_type.value})"


def get_loopback_devices() -> List[AudioDevice]:
    """
    Get available loopback devices for system audio capture.

    On Windows with WASAPI, uses pyaudiowpatch for true loopback.
    On Linux, returns PulseAudio/PipeWire monitor sources.
    On macOS, returns virtual audio devices if available.
    """
    if sys.platform == 'win32' and PYAUDIO_AVAILABLE:
        return _get_windows_loopback_devices()
    if SOUNDDEVICE_AVAILABLE:
        return _get_sounddevice_loopback_devices()
    return []


def _get_windows_loopback_devices() -> List[AudioDevice]:
    """Get WASAPI loopback devices on Windows using pyaudiowpatch."""
    devices = []
    p = pyaudio.PyAudio()
    try:
        for dev in p.get_loopback_device_info_generator():
            devices.append(AudioDevice(
                index=dev['index'],
                name=dev['name'],
                device_type=DeviceType.LOOPBACK,
                channels=dev['maxInputChannels'],
                sample_rate=dev['defaultSampleRate'],
                host_api="WASAPI",
                is_loopback=True,
            ))
    except OSError as e:
        logger.warning("Error getting Windows loopback devices: %s", e)
    finally:
        p.terminate()

    return devices


def _get_sounddevice_loopback_devices() -> List[AudioDevice]:
    """Get loopback devices using sounddevice (Linux/macOS)."""
    devices = []

    try:
        all_devices = sd.query_devices()
    except sd.PortAudioError as e:
        logger.warning("Error querying audio devices: %s", e)
        return devices

    for i, dev in enumerate(all_devices):
        lower_name = dev['name'].lower()

        if sys.platform.startswith('linux'):
            # PulseAudio/PipeWire expose output monitors as inputs
            is_match = 'monitor' in lower_name
            host_api = "PulseAudio/PipeWire"
        elif sys.platform == 'darwin':
            is_match = any(vd in lower_name for vd in VIRTUAL_DEVICE_NAMES)
            host_api = "CoreAudio"
        else:
            is_match = False
            host_api = ""

        if is_match and dev['max_input_channels'] > 0:
            devices.append(AudioDevice(
                index=i,
                name=dev['name'],
                device_type=DeviceType.LOOPBACK,
                channels=dev['max_input_channels'],
                sample_rate=dev['default_samplerate'],
                host_api=host_api,
            ))

    return devices


def get_input_devices() -> List[AudioDevice]:
    """Get available input devices (microphones)."""
    devices = []

    if not SOUNDDEVICE_AVAILABLE:
        return devices

    try:
        all_devices = sd.query_devices()
        default_input = sd.default.device[0]
    except sd.PortAudioError as e:
        logger.warning("Error getting input devices: %s", e)
        return devices

    for i, dev in enumerate(all_devices):
        if dev['max_input_channels'] <= 0:
            continue
        name = dev['name']
        if 'monitor' in name.lower() or 'loopback' in name.lower():
            continue

        devices.append(AudioDevice(
            index=i,
            name=name,
            device_type=DeviceType.INPUT,
            channels=dev['max_input_channels'],
            sample_rate=dev['default_samplerate'],
            is_default=(i == default_input),
        ))

    return devices


def get_device(index: int) -> Optional[AudioDevice]:
    """Look up a device by its backend index."""
    for device in get_loopback_devices() + get_input_devices():
        if device.index == index:
            return device
    return None


def default_capture_device() -> Optional[AudioDevice]:
    """Prefer system audio; fall back to the default microphone."""
    loopback = get_loopback_devices()
    if loopback:
        return loopback[0]

    inputs = get_input_devices()
    for device in inputs:
        if device.is_default:
            return device
    return inputs[0] if inputs else None


class DeviceCaptureProvider:
    """
    Grants a stream backed by a live audio device.

    Uses pyaudiowpatch for WASAPI loopback on Windows and sounddevice
    everywhere else. The granted stream carries a single audio track; stopping
    it stops and closes the backend stream. Devices never produce video.
    """

    def __init__(
        self,
        device: Optional[AudioDevice] = None,
        channels: int = 2,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ):
        """
        Args:
            device: Device to capture from (None picks a default on request)
            channels: Maximum number of channels to open
            block_size: Frames per backend callback
        """
        self.device = device
        self.channels = channels
        self.block_size = block_size

    def request_stream(self, audio: bool = True, video: bool = True) -> AudioStream:
        device = self.device or default_capture_device()
        if device is None:
            raise AcquisitionDenied("No audio capture device available")

        if not audio or device.channels <= 0:
            logger.info("Device %s has no input channels", device.name)
            return AudioStream([], sample_rate=device.sample_rate)

        if sys.platform == 'win32' and PYAUDIO_AVAILABLE and device.is_loopback:
            return self._open_pyaudio(device)
        return self._open_sounddevice(device)

    def _open_sounddevice(self, device: AudioDevice) -> AudioStream:
        """Open an input stream using sounddevice."""
        if not SOUNDDEVICE_AVAILABLE:
            raise AcquisitionDenied(
                "sounddevice not available. Install with: pip install sounddevice"
            )

        channels = min(self.channels, device.channels)
        track = MediaTrack(TrackKind.AUDIO, device.name)
        stream = AudioStream([track], sample_rate=device.sample_rate, channels=channels)

        def callback(indata: np.ndarray, frames: int, time_info, status):
            if status:
                logger.debug("Sounddevice status: %s", status)
            stream.push(indata.copy())

        try:
            sd_stream = sd.InputStream(
                device=device.index,
                samplerate=device.sample_rate,
                channels=channels,
                blocksize=self.block_size,
                dtype="float32",
                callback=callback,
                finished_callback=track.mark_ended,
            )
        except (sd.PortAudioError, ValueError) as e:
            raise AcquisitionDenied(f"Could not open {device.name}: {e}") from e

        track.on_stop = lambda: _close_sounddevice(sd_stream)

        try:
            sd_stream.start()
        except sd.PortAudioError as e:
            track.stop()
            raise AcquisitionDenied(f"Could not start {device.name}: {e}") from e

        logger.info(
            "Opened %s: rate=%s, channels=%d", device.name, device.sample_rate, channels
        )
        return stream

    def _open_pyaudio(self, device: AudioDevice) -> AudioStream:
        """Open a WASAPI loopback stream using pyaudiowpatch."""
        p = pyaudio.PyAudio()
        pa_stream = None

        try:
            dev_info = p.get_device_info_by_index(device.index)
            rate = int(dev_info.get('defaultSampleRate', device.sample_rate))
            channels = min(self.channels, int(dev_info.get('maxInputChannels', 0)))
            if channels == 0:
                channels = min(self.channels, int(dev_info.get('maxOutputChannels', 2)))

            track = MediaTrack(TrackKind.AUDIO, device.name)
            stream = AudioStream([track], sample_rate=rate, channels=channels)

            def callback(in_data, frame_count, time_info, status):
                if status:
                    logger.debug("PyAudio status: %s", status)
                audio = np.frombuffer(in_data, dtype=np.float32).reshape(-1, channels)
                stream.push(audio)
                return (None, pyaudio.paContinue)

            pa_stream = p.open(
                format=pyaudio.paFloat32,
                channels=channels,
                rate=rate,
                input=True,
                input_device_index=device.index,
                frames_per_buffer=self.block_size,
                stream_callback=callback,
            )
            pa_stream.start_stream()
        except (OSError, ValueError) as e:
            _close_pyaudio(pa_stream, p)
            raise AcquisitionDenied(f"Could not open {device.name}: {e}") from e

        track.on_stop = lambda: _close_pyaudio(pa_stream, p)
        logger.info("Opened WASAPI loopback %s: rate=%d, channels=%d", device.name, rate, channels)
        return stream


def _close_sounddevice(sd_stream):
    try:
        sd_stream.stop()
    finally:
        sd_stream.close()


def _close_pyaudio(pa_stream, p):
    try:
        if pa_stream is not None:
            pa_stream.stop_stream()
            pa_stream.close()
    finally:
        p.terminate()
