"""
Spectral analysis of captured audio.
"""

from .spectral import SampleSource, SpectralAnalyzer

__all__ = ["SampleSource", "SpectralAnalyzer"]
