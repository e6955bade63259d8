"""Brief-to-video pipeline: scenarios, per-scene generation and clip assembly."""

__version__ = "0.1.0"
