"""
Data models for spectrum frames and session state.
"""

from .spectrum import ActiveCapture, SessionState, SpectralFrame, StartResult

__all__ = [
    "ActiveCapture",
    "SessionState",
    "SpectralFrame",
    "StartResult",
]
