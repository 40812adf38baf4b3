"""Speaker identification against all active profiles."""

import asyncio
from typing import List, Optional, Tuple

import numpy as np

from voiceid.errors import AudioProcessingError, ExtractionError, InvalidEmbeddingDimension
from voiceid.speaker.embedding import SAMPLE_RATE, EmbeddingExtractor
from voiceid.speaker.profile import UserProfile, utcnow
from voiceid.speaker.similarity import cosine_similarity
from voiceid.storage.profile_store import ProfileStore
from voiceid.utils.config import RECOGNITION_THRESHOLD
from voiceid.utils.logger import get_logger

logger = get_logger(__name__)


class IdentificationEngine:
    """Match an utterance against enrolled voice prints."""

    def __init__(
        self,
        store: ProfileStore,
        extractor: EmbeddingExtractor,
        recognition_threshold: float = RECOGNITION_THRESHOLD,
        sample_rate: int = SAMPLE_RATE,
    ):
        """Initialize identification engine.

        Args:
            store: Profile store to read voice prints from
            extractor: Speaker embedding extractor
            recognition_threshold: Minimum cosine similarity (inclusive) for a match
            sample_rate: Sample rate of the audio handed to the extractor
        """
        self.store = store
        self.extractor = extractor
        self.recognition_threshold = recognition_threshold
        self.sample_rate = sample_rate

    def identify(self, audio: np.ndarray) -> Optional[UserProfile]:
        """Identify which enrolled user is speaking.

        Args:
            audio: Mono float32 PCM at 16 kHz

        Returns:
            The matched profile with updated recognition stats, or None
        """
        return self._resolve(self._extract(audio))[0]

    async def identify_async(self, audio: np.ndarray) -> Optional[UserProfile]:
        """Like :meth:`identify`, with extraction run in a worker thread."""
        embedding = await asyncio.to_thread(self._extract, audio)
        return self._resolve(embedding)[0]

    def identify_ranked(
        self, audio: np.ndarray
    ) -> Tuple[Optional[UserProfile], List[Tuple[UserProfile, float]]]:
        """Identify the speaker and also return every active profile's score.

        The embedding is extracted once and used for both results.
        """
        return self._resolve(self._extract(audio))

    def score_all(self, audio: np.ndarray) -> List[Tuple[UserProfile, float]]:
        """Similarity of the utterance to every active profile, best first.

        Read-only: recognition stats are not touched.
        """
        return self._rank(self._extract(audio), self.store.list_active())

    def _extract(self, audio: np.ndarray) -> np.ndarray:
        try:
            embedding = self.extractor.extract(np.asarray(audio, dtype=np.float32), self.sample_rate)
        except ExtractionError as e:
            logger.error(f"Embedding extraction failed: {e}")
            raise AudioProcessingError(str(e)) from e

        embedding = np.asarray(embedding, dtype=np.float32).ravel()
        if embedding.shape[0] != self.store.embedding_dim:
            raise InvalidEmbeddingDimension(self.store.embedding_dim, embedding.shape[0])
        if not np.all(np.isfinite(embedding)):
            logger.error("Extractor returned a non-finite embedding")
            raise AudioProcessingError("Embedding contains NaN or infinite values")
        return embedding

    @staticmethod
    def _rank(
        embedding: np.ndarray, profiles: List[UserProfile]
    ) -> List[Tuple[UserProfile, float]]:
        scored = [(profile, cosine_similarity(embedding, profile.voice_print)) for profile in profiles]
        # Highest score first; equal scores resolve to the lowest id.
        scored.sort(key=lambda item: (-item[1], item[0].id))
        return scored

    def _resolve(
        self, embedding: np.ndarray
    ) -> Tuple[Optional[UserProfile], List[Tuple[UserProfile, float]]]:
        profiles = self.store.list_active()
        if not profiles:
            logger.debug("No enrolled users")
            return None, []

        scored = self._rank(embedding, profiles)
        for profile, score in scored:
            logger.debug(f"User '{profile.name}': similarity = {score:.3f}")

        best, best_score = scored[0]
        if not best_score >= self.recognition_threshold:
            logger.debug(
                f"No confident match (best similarity: {best_score:.3f} < threshold: {self.recognition_threshold:.3f})"
            )
            return None, scored

        self.store.increment_recognition(best.id, utcnow())
        logger.info(f"Speaker identified: {best.name} (similarity: {best_score:.3f})")
        return self.store.get(best.id), scored
