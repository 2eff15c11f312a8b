"""RGBE image I/O, cross cube-map extraction, FFT ocean waves and a resource cache."""

__version__ = "0.1.0"
__all__ = ["cubemap", "ocean", "resources", "rgbe", "wave"]