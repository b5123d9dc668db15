"""Building blocks for FM synthesis and spectral analysis."""

__version__ = "0.1.0"

__all__ = [
    "algorithm",
    "envelope",
    "envelope_graph",
    "fft",
    "mfcc",
    "operator",
    "spectrum",
    "voice",
]