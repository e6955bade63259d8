"""Clip assembly and encoding."""

from .assembly import AssemblyEngine, MediaHandle, MergeResult, wrap_caption
from .encoder import EncodeClip, Encoder, MergeRequest, MoviePyEncoder

__all__ = [
    "AssemblyEngine",
    "MediaHandle",
    "MergeResult",
    "wrap_caption",
    "EncodeClip",
    "Encoder",
    "MergeRequest",
    "MoviePyEncoder",
]
