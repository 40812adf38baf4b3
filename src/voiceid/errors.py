"""Voice biometrics error types."""

from typing import Optional


class BiometricsError(Exception):
    """Base class for all voice biometrics errors."""


class InsufficientSamples(BiometricsError):
    """Too few voice samples were supplied for enrollment."""

    def __init__(self, count: int, required: int = 3):
        self.count = count
        self.required = required
        super().__init__(
            f"Insufficient voice samples (need at least {required}, got {count})"
        )


class InconsistentSamples(BiometricsError):
    """Enrollment samples disagree too much to form a reliable voice print."""

    def __init__(self, variance: float, threshold: float):
        self.variance = variance
        self.threshold = threshold
        super().__init__(
            f"Inconsistent voice samples (variance: {variance:.3f}, threshold: {threshold:.3f})"
        )


class InvalidEmbeddingDimension(BiometricsError):
    """An embedding or serialized voice print has the wrong size."""

    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"Invalid embedding dimension (expected {expected}, got {got})")


class DuplicateUser(BiometricsError):
    """An active profile with this name already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"User profile already exists: {name}")


class InvalidProfileName(BiometricsError):
    """Profile name is empty, too short or too long."""

    def __init__(self, name: str, min_length: int = 2, max_length: int = 50):
        self.name = name
        self.min_length = min_length
        self.max_length = max_length
        super().__init__(
            f"Invalid profile name {name!r} (must be {min_length}-{max_length} characters)"
        )


class UserNotFound(BiometricsError):
    """No profile exists with the given id."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class AudioProcessingError(BiometricsError):
    """Embedding extraction failed for an enrollment or identification call."""

    def __init__(self, detail: str, sample_index: Optional[int] = None):
        self.detail = detail
        self.sample_index = sample_index
        if sample_index is None:
            message = f"Audio processing error: {detail}"
        else:
            message = f"Audio processing error (sample {sample_index + 1}): {detail}"
        super().__init__(message)


class StoreError(BiometricsError):
    """The profile database failed."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Database error: {detail}")


class ExtractionError(Exception):
    """Raised by an embedding extractor when it cannot produce an embedding."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)
