"""Speaker enrollment and identification."""

from voiceid.errors import (
    AudioProcessingError,
    BiometricsError,
    DuplicateUser,
    ExtractionError,
    InconsistentSamples,
    InsufficientSamples,
    InvalidEmbeddingDimension,
    InvalidProfileName,
    StoreError,
    UserNotFound,
)
from voiceid.speaker.manager import VoiceBiometrics
from voiceid.speaker.profile import UserProfile
from voiceid.storage.profile_store import ProfileStore

__version__ = "0.1.0"

__all__ = [
    "VoiceBiometrics",
    "UserProfile",
    "ProfileStore",
    "BiometricsError",
    "AudioProcessingError",
    "DuplicateUser",
    "ExtractionError",
    "InconsistentSamples",
    "InsufficientSamples",
    "InvalidEmbeddingDimension",
    "InvalidProfileName",
    "StoreError",
    "UserNotFound",
]
