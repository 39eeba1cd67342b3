"""
Data models shared by the capture, analysis and render layers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np
from pydantic import BaseModel, Field

from ..errors import CaptureError


class SessionState(Enum):
    """State of a capture session."""
    IDLE = "idle"
    ACTIVE = "active"
    FAILED = "failed"


@dataclass(frozen=True)
class SpectralFrame:
    """
    One analysis cycle worth of normalized magnitudes.

    The bins array is made read-only on construction; a new frame is produced
    on every refresh.
    """
    bins: np.ndarray
    sample_rate: float
    bin_count: int = field(init=False)

    def __post_init__(self):
        bins = np.array(self.bins, dtype=np.float32)
        bins.setflags(write=False)
        object.__setattr__(self, "bins", bins)
        object.__setattr__(self, "bin_count", len(bins))

    @property
    def nyquist(self) -> float:
        return self.sample_rate / 2

    @classmethod
    def silent(cls, bin_count: int, sample_rate: float) -> "SpectralFrame":
        """Frame of zeros, used before enough audio has arrived."""
        return cls(bins=np.zeros(bin_count, dtype=np.float32), sample_rate=sample_rate)


class ActiveCapture(BaseModel):
    """Description of a successfully started session."""
    sample_rate: float = Field(..., gt=0, description="Native rate of the captured stream")
    channels: int = Field(..., ge=1, description="Channel count of the captured stream")
    bin_count: int = Field(..., description="Magnitude bins per frame")
    bar_count: int = Field(..., description="Bars drawn per frame")
    tracks: list[str] = Field(default_factory=list, description="Labels of the audio tracks")


@dataclass
class StartResult:
    """Outcome of CaptureSession.start(): either ready or an error."""
    ready: Optional[ActiveCapture] = None
    error: Optional[CaptureError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.ready is not None
