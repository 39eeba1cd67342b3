"""
Capture error taxonomy.

Errors are returned as values from the capture session, never raised past it.
"""


class CaptureError(Exception):
    """Base class for capture session errors."""

    default_message = "Audio capture failed"

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class AcquisitionDenied(CaptureError):
    """The environment refused or the user cancelled the capture request."""

    default_message = "Could not start sharing the audio source"


class NoAudioTrack(CaptureError):
    """Capture was granted but carries no audio."""

    default_message = (
        "Audio is not being shared. Enable audio sharing "
        "(or pick a device with input channels) and try again."
    )


class RuntimeFailure(CaptureError):
    """The stream or the analysis became unusable mid-session."""

    default_message = "The audio stream stopped unexpectedly"
