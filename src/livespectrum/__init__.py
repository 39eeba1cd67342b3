"""
livespectrum - Real-time Spectrum Visualizer

Captures a live audio signal and renders its magnitude spectrum as a bar chart:
- System audio (loopback), microphone, or audio file input
- Windowed FFT with exponential temporal smoothing
- Frame-synchronized rendering with deterministic resource cleanup
"""

__version__ = "1.0.0"
__author__ = "livespectrum contributors"
