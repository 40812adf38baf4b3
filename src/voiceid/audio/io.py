"""Audio file loading."""

from math import gcd
from pathlib import Path
from typing import Union

import numpy as np
import soundfile as sf
from scipy.signal import resample_poly

from voiceid.utils.logger import get_logger

logger = get_logger(__name__)


def to_mono(audio: np.ndarray) -> np.ndarray:
    """Down-mix (frames, channels) audio to a single channel."""
    if audio.ndim == 1:
        return audio
    return audio.mean(axis=1)


def resample(audio: np.ndarray, orig_rate: int, target_rate: int) -> np.ndarray:
    """Resample audio with a polyphase filter.

    Args:
        audio: Mono audio
        orig_rate: Source sample rate in Hz
        target_rate: Target sample rate in Hz

    Returns:
        Resampled float32 audio
    """
    if orig_rate == target_rate:
        return audio.astype(np.float32)
    divisor = gcd(orig_rate, target_rate)
    resampled = resample_poly(audio, target_rate // divisor, orig_rate // divisor)
    return resampled.astype(np.float32)


def load_audio(path: Union[str, Path], target_rate: int = 16000) -> np.ndarray:
    """Read an audio file as mono float32 PCM at ``target_rate``.

    Args:
        path: Audio file (any format libsndfile reads)
        target_rate: Output sample rate in Hz

    Returns:
        Mono float32 samples in [-1, 1]
    """
    audio, sample_rate = sf.read(str(path), dtype="float32", always_2d=False)
    audio = to_mono(np.asarray(audio, dtype=np.float32))
    if sample_rate != target_rate:
        logger.debug(f"Resampling {path} from {sample_rate} Hz to {target_rate} Hz")
        audio = resample(audio, sample_rate, target_rate)
    logger.debug(f"Loaded {path}: {len(audio) / target_rate:.2f}s")
    return audio
