"""Speaker enrollment.

Enrollment turns several recordings of the same speaker into one voice print:

    1. Extract an embedding from every sample (any failure aborts the enrollment)
    2. Measure how tightly the samples agree (quality gate)
    3. Average the samples and normalize the result to unit length
    4. Store the new profile

Nothing is written unless every step succeeds.
"""

import asyncio
from typing import List, Sequence

import numpy as np

from voiceid.errors import (
    AudioProcessingError,
    DuplicateUser,
    ExtractionError,
    InconsistentSamples,
    InsufficientSamples,
    InvalidEmbeddingDimension,
    InvalidProfileName,
)
from voiceid.speaker.embedding import SAMPLE_RATE, EmbeddingExtractor
from voiceid.speaker.profile import utcnow
from voiceid.speaker.similarity import l2_normalize
from voiceid.storage.profile_store import ProfileStore
from voiceid.utils.config import (
    ENROLLMENT_VARIANCE_THRESHOLD,
    MIN_ENROLLMENT_SAMPLES,
)
from voiceid.utils.logger import get_logger

logger = get_logger(__name__)

# Averages shorter than this cannot be scaled to a meaningful unit vector
MIN_VOICE_PRINT_NORM = 1e-6


def average_embeddings(embeddings: Sequence[np.ndarray]) -> np.ndarray:
    """Component-wise mean of equal-length embeddings."""
    return np.mean(np.stack(embeddings), axis=0).astype(np.float32)


def embedding_spread(embeddings: Sequence[np.ndarray]) -> float:
    """Quality score for a set of enrollment embeddings.

    Each embedding is scaled to unit length, then the root mean squared
    Euclidean distance to their centroid is returned. 0.0 means identical
    samples; three mutually orthogonal samples score about 0.82.
    """
    if len(embeddings) < 2:
        return 0.0
    normalized = np.stack([l2_normalize(e) for e in embeddings]).astype(np.float64)
    centroid = normalized.mean(axis=0)
    squared_distances = np.sum((normalized - centroid) ** 2, axis=1)
    return float(np.sqrt(squared_distances.mean()))


class EnrollmentManager:
    """Create voice profiles from multiple voice samples."""

    def __init__(
        self,
        store: ProfileStore,
        extractor: EmbeddingExtractor,
        min_samples: int = MIN_ENROLLMENT_SAMPLES,
        variance_threshold: float = ENROLLMENT_VARIANCE_THRESHOLD,
        min_name_length: int = 2,
        max_name_length: int = 50,
        sample_rate: int = SAMPLE_RATE,
    ):
        """Initialize enrollment manager.

        Args:
            store: Profile store new profiles are written to
            extractor: Speaker embedding extractor
            min_samples: Minimum number of voice samples
            variance_threshold: Maximum allowed :func:`embedding_spread`
            min_name_length: Minimum profile name length
            max_name_length: Maximum profile name length
            sample_rate: Sample rate of the audio handed to the extractor
        """
        self.store = store
        self.extractor = extractor
        self.min_samples = min_samples
        self.variance_threshold = variance_threshold
        self.min_name_length = min_name_length
        self.max_name_length = max_name_length
        self.sample_rate = sample_rate

    def enroll(self, name: str, audio_samples: Sequence[np.ndarray]) -> int:
        """Enroll a new user.

        Args:
            name: Display name, unique among active profiles
            audio_samples: Recordings of the user (mono float32, 16 kHz)

        Returns:
            Id of the new profile
        """
        name = self._validate(name, audio_samples)
        embeddings = [
            self._extract(audio, index) for index, audio in enumerate(audio_samples)
        ]
        return self._commit(name, embeddings)

    async def enroll_async(self, name: str, audio_samples: Sequence[np.ndarray]) -> int:
        """Like :meth:`enroll`, with extraction run in worker threads.

        Cancellation is only possible while embeddings are being extracted;
        the store write itself runs without yielding to the event loop.
        """
        name = self._validate(name, audio_samples)
        embeddings = []
        for index, audio in enumerate(audio_samples):
            embeddings.append(await asyncio.to_thread(self._extract, audio, index))
        return self._commit(name, embeddings)

    def _validate(self, name: str, audio_samples: Sequence[np.ndarray]) -> str:
        if len(audio_samples) < self.min_samples:
            raise InsufficientSamples(len(audio_samples), self.min_samples)

        name = (name or "").strip()
        if not self.min_name_length <= len(name) <= self.max_name_length:
            raise InvalidProfileName(name, self.min_name_length, self.max_name_length)

        if self.store.find_active_by_name(name) is not None:
            raise DuplicateUser(name)
        return name

    def _extract(self, audio: np.ndarray, index: int) -> np.ndarray:
        logger.debug(f"Extracting embedding for sample {index + 1} ({len(audio)} samples)")
        try:
            embedding = self.extractor.extract(np.asarray(audio, dtype=np.float32), self.sample_rate)
        except ExtractionError as e:
            logger.error(f"Embedding extraction failed for sample {index + 1}: {e}")
            raise AudioProcessingError(str(e), sample_index=index) from e

        embedding = np.asarray(embedding, dtype=np.float32).ravel()
        if embedding.shape[0] != self.store.embedding_dim:
            raise InvalidEmbeddingDimension(self.store.embedding_dim, embedding.shape[0])
        if not np.all(np.isfinite(embedding)):
            logger.error(f"Sample {index + 1} produced a non-finite embedding")
            raise AudioProcessingError("Embedding contains NaN or infinite values", sample_index=index)
        if not np.any(embedding):
            logger.error(f"Sample {index + 1} produced an all-zero embedding")
            raise AudioProcessingError("Embedding is all zeros", sample_index=index)
        return embedding

    def _commit(self, name: str, embeddings: List[np.ndarray]) -> int:
        variance = embedding_spread(embeddings)
        # NaN never passes
        if not variance <= self.variance_threshold:
            logger.warning(
                f"Enrollment of '{name}' rejected: variance {variance:.3f} > {self.variance_threshold:.3f}"
            )
            raise InconsistentSamples(variance, self.variance_threshold)

        mean = average_embeddings(embeddings)
        if float(np.linalg.norm(mean)) < MIN_VOICE_PRINT_NORM:
            logger.warning(f"Enrollment of '{name}' rejected: samples cancel out")
            raise AudioProcessingError("Averaged embedding has zero norm")

        voice_print = l2_normalize(mean)
        profile_id = self.store.create(name, voice_print, utcnow())

        logger.info(
            f"User '{name}' enrolled (id={profile_id}, samples={len(embeddings)}, variance={variance:.3f})"
        )
        return profile_id
