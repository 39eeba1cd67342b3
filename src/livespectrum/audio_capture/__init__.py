"""
Audio capture for system audio, microphone, and file input.

Supports:
- System audio loopback (WASAPI on Windows, PulseAudio on Linux, virtual devices on macOS)
- Microphone input
- Audio file playback at real-time pace
- Capture session owning stream, analyzer and render loop
"""

from .ring_buffer import RingBuffer
from .stream import AudioStream, MediaTrack, TrackKind
from .providers import CaptureProvider, GrantedCaptureProvider, DeniedCaptureProvider
from .system_audio import (
    AudioDevice,
    DeviceCaptureProvider,
    DeviceType,
    default_capture_device,
    get_device,
    get_input_devices,
    get_loopback_devices,
)
from .file_source import FileCaptureProvider
from .capture_session import CaptureSession

__all__ = [
    "RingBuffer",
    "AudioStream",
    "MediaTrack",
    "TrackKind",
    "CaptureProvider",
    "GrantedCaptureProvider",
    "DeniedCaptureProvider",
    "AudioDevice",
    "DeviceCaptureProvider",
    "DeviceType",
    "default_capture_device",
    "get_device",
    "get_input_devices",
    "get_loopback_devices",
    "FileCaptureProvider",
    "CaptureSession",
]
