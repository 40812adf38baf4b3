"""Audio module."""

from voiceid.audio.io import load_audio, resample, to_mono

__all__ = [
    "load_audio",
    "resample",
    "to_mono",
]
