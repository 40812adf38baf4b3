"""Voice biometrics engine."""

from typing import List, Optional, Sequence

import numpy as np

from voiceid.speaker.embedding import EmbeddingExtractor, create_extractor
from voiceid.speaker.enrollment import EnrollmentManager
from voiceid.speaker.identification import IdentificationEngine
from voiceid.speaker.profile import UserProfile
from voiceid.storage.profile_store import ProfileStore
from voiceid.utils.config import Config
from voiceid.utils.logger import get_logger

logger = get_logger(__name__)


class VoiceBiometrics:
    """Enroll, identify and manage voice profiles.

    Build one instance at application start and hand it to whatever needs
    speaker identity. Enrollment and identification share the store and the
    extractor but are otherwise independent.
    """

    def __init__(
        self,
        store: ProfileStore,
        extractor: EmbeddingExtractor,
        config: Optional[Config] = None,
    ):
        """Initialize the engine.

        Args:
            store: Profile store
            extractor: Speaker embedding extractor
            config: Thresholds and limits (defaults if omitted)
        """
        config = config or Config()
        if extractor.embedding_dim != store.embedding_dim:
            raise ValueError(
                f"Extractor dimension {extractor.embedding_dim} does not match "
                f"store dimension {store.embedding_dim}"
            )

        self.store = store
        self.extractor = extractor
        self.config = config
        self.enrollment = EnrollmentManager(
            store,
            extractor,
            min_samples=config.enrollment.min_samples,
            variance_threshold=config.enrollment.variance_threshold,
            min_name_length=config.enrollment.min_name_length,
            max_name_length=config.enrollment.max_name_length,
            sample_rate=config.audio.sample_rate,
        )
        self.identification = IdentificationEngine(
            store,
            extractor,
            recognition_threshold=config.identification.recognition_threshold,
            sample_rate=config.audio.sample_rate,
        )

        logger.info(
            f"Voice biometrics initialized (threshold={config.identification.recognition_threshold}, "
            f"model_ready={extractor.is_available})"
        )

    @classmethod
    def from_config(cls, config: Config) -> "VoiceBiometrics":
        """Build the store and extractor described by ``config``."""
        store = ProfileStore(config.storage.db_path, embedding_dim=config.speaker.embedding_dim)
        extractor = create_extractor(
            mode=config.speaker.extractor,
            model_name=config.speaker.embedding_model,
            device=config.speaker.device,
            savedir=str(config.speaker.cache_dir) if config.speaker.cache_dir else None,
            embedding_dim=config.speaker.embedding_dim,
        )
        return cls(store, extractor, config)

    def is_model_ready(self) -> bool:
        return self.extractor.is_available

    def enroll(self, name: str, audio_samples: Sequence[np.ndarray]) -> int:
        return self.enrollment.enroll(name, audio_samples)

    async def enroll_async(self, name: str, audio_samples: Sequence[np.ndarray]) -> int:
        return await self.enrollment.enroll_async(name, audio_samples)

    def identify(self, audio: np.ndarray) -> Optional[UserProfile]:
        return self.identification.identify(audio)

    async def identify_async(self, audio: np.ndarray) -> Optional[UserProfile]:
        return await self.identification.identify_async(audio)

    def list_profiles(self, include_inactive: bool = False) -> List[UserProfile]:
        """List enrolled users.

        Args:
            include_inactive: Also return deactivated profiles

        Returns:
            Profiles ordered by id
        """
        if include_inactive:
            return self.store.list_all()
        return self.store.list_active()

    def get_profile(self, profile_id: int) -> UserProfile:
        return self.store.get(profile_id)

    def deactivate(self, profile_id: int) -> None:
        self.store.deactivate(profile_id)

    def delete(self, profile_id: int) -> None:
        self.store.delete(profile_id)

    def close(self) -> None:
        self.store.close()
