"""Speaker embedding extraction.

The enrollment and identification code only talks to :class:`EmbeddingExtractor`.
Which variant is used (real model, unavailable model, simulated) is decided once,
when the engine is built.
"""

import hashlib
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from voiceid.errors import ExtractionError
from voiceid.speaker.codec import EMBEDDING_DIM
from voiceid.utils.logger import get_logger

logger = get_logger(__name__)

SAMPLE_RATE = 16000


class EmbeddingExtractor(ABC):
    """Base class for speaker embedding extractors."""

    def __init__(self, embedding_dim: int = EMBEDDING_DIM):
        self.embedding_dim = embedding_dim

    @property
    def is_available(self) -> bool:
        """Whether :meth:`extract` can currently succeed."""
        return True

    @abstractmethod
    def extract(self, audio: np.ndarray, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
        """Extract a speaker embedding.

        Args:
            audio: Mono float32 PCM samples
            sample_rate: Sample rate in Hz

        Returns:
            Embedding of length ``embedding_dim``

        Raises:
            ExtractionError: If no embedding can be produced
        """
        pass


class SpeechBrainExtractor(EmbeddingExtractor):
    """Extract speaker embeddings using SpeechBrain ECAPA-TDNN."""

    def __init__(
        self,
        model_name: str = "speechbrain/spkrec-ecapa-voxceleb",
        device: str = "auto",
        savedir: Optional[str] = None,
        embedding_dim: int = EMBEDDING_DIM,
    ):
        """Initialize speaker embedding model.

        Args:
            model_name: SpeechBrain model name
            device: Device to run on (cpu, cuda, auto)
            savedir: Where downloaded model files are cached
            embedding_dim: Expected embedding dimension
        """
        super().__init__(embedding_dim)
        self.model_name = model_name
        self.device = device
        self.savedir = savedir
        self.model = None
        logger.info(f"Speaker embedding model: {model_name} (device={device})")

    @property
    def is_available(self) -> bool:
        return self.model is not None

    def load_model(self) -> None:
        """Load the model."""
        if self.model is not None:
            return

        try:
            import torch
            from speechbrain.inference import EncoderClassifier

            if self.device == "auto":
                self.device = "cuda" if torch.cuda.is_available() else "cpu"

            self.model = EncoderClassifier.from_hparams(
                source=self.model_name,
                savedir=self.savedir,
                run_opts={"device": self.device},
            )
        except Exception as e:
            logger.error(f"Error loading speaker model: {e}")
            raise ExtractionError(f"Failed to load speaker model {self.model_name}: {e}") from e

        logger.info(f"Speaker embedding model loaded (device={self.device})")

    def extract(self, audio: np.ndarray, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
        if sample_rate != SAMPLE_RATE:
            raise ExtractionError(f"Expected {SAMPLE_RATE} Hz audio, got {sample_rate} Hz")
        audio = np.asarray(audio, dtype=np.float32).ravel()
        if audio.size == 0:
            raise ExtractionError("Audio is empty")

        if self.model is None:
            self.load_model()

        import torch

        try:
            audio_tensor = torch.from_numpy(audio).unsqueeze(0)
            with torch.no_grad():
                embedding = self.model.encode_batch(audio_tensor)
            embedding_np = embedding.squeeze().cpu().numpy().astype(np.float32)
        except Exception as e:
            logger.error(f"Error extracting speaker embedding: {e}")
            raise ExtractionError(f"Embedding computation failed: {e}") from e

        if embedding_np.shape != (self.embedding_dim,):
            raise ExtractionError(
                f"Model returned {embedding_np.size} values, expected {self.embedding_dim}"
            )

        logger.debug(
            f"Extracted {self.embedding_dim}-dim embedding from "
            f"{audio.size / SAMPLE_RATE:.2f}s of audio"
        )
        return embedding_np


class UnavailableExtractor(EmbeddingExtractor):
    """Stand-in used when no speaker model could be loaded. Every call fails."""

    def __init__(self, reason: str = "Speaker model not loaded", embedding_dim: int = EMBEDDING_DIM):
        super().__init__(embedding_dim)
        self.reason = reason

    @property
    def is_available(self) -> bool:
        return False

    def extract(self, audio: np.ndarray, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
        raise ExtractionError(self.reason)


class SimulatedExtractor(EmbeddingExtractor):
    """Deterministic embeddings derived from the audio content.

    Identical audio always yields the identical unit vector, different audio
    yields unrelated vectors. Useful for running the pipeline without model
    weights; it does not recognize voices.
    """

    def extract(self, audio: np.ndarray, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
        audio = np.asarray(audio, dtype=np.float32).ravel()
        if audio.size == 0:
            raise ExtractionError("Audio is empty")

        digest = hashlib.sha256(audio.tobytes()).digest()
        rng = np.random.default_rng(int.from_bytes(digest[:8], "little"))
        embedding = rng.standard_normal(self.embedding_dim).astype(np.float32)
        return embedding / np.linalg.norm(embedding)


def create_extractor(
    mode: str = "speechbrain",
    model_name: str = "speechbrain/spkrec-ecapa-voxceleb",
    device: str = "auto",
    savedir: Optional[str] = None,
    embedding_dim: int = EMBEDDING_DIM,
) -> EmbeddingExtractor:
    """Build the extractor for the given mode.

    Args:
        mode: ``speechbrain`` (real model) or ``simulated``
        model_name: SpeechBrain model name
        device: Device to run on
        savedir: Model cache directory
        embedding_dim: Expected embedding dimension

    Returns:
        A ready extractor, or :class:`UnavailableExtractor` if the model failed to load
    """
    if mode == "simulated":
        logger.warning("Using simulated speaker embeddings; voices will not be recognized")
        return SimulatedExtractor(embedding_dim)
    if mode != "speechbrain":
        raise ValueError(f"Unknown extractor mode: {mode}")

    extractor = SpeechBrainExtractor(
        model_name=model_name,
        device=device,
        savedir=savedir,
        embedding_dim=embedding_dim,
    )
    try:
        extractor.load_model()
    except ExtractionError as e:
        logger.warning(f"Speaker model unavailable, biometrics disabled: {e}")
        return UnavailableExtractor(str(e), embedding_dim)
    return extractor
