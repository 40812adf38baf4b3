"""Pytest configuration and shared fixtures."""
import numpy as np
import pytest

from voiceid.errors import ExtractionError
from voiceid.speaker.embedding import EmbeddingExtractor
from voiceid.storage.profile_store import ProfileStore

DIM = 192


class PassthroughExtractor(EmbeddingExtractor):
    """Test double: the "audio" handed in is already the embedding."""

    def __init__(self, embedding_dim: int = DIM):
        super().__init__(embedding_dim)
        self.calls = 0

    def extract(self, audio, sample_rate=16000):
        self.calls += 1
        return np.asarray(audio, dtype=np.float32).copy()


class FailingExtractor(EmbeddingExtractor):
    """Test double that fails on the n-th call (1-based), or always if n is None."""

    def __init__(self, fail_on=None, embedding_dim: int = DIM):
        super().__init__(embedding_dim)
        self.fail_on = fail_on
        self.calls = 0

    def extract(self, audio, sample_rate=16000):
        self.calls += 1
        if self.fail_on is None or self.calls == self.fail_on:
            raise ExtractionError("model crashed")
        return np.asarray(audio, dtype=np.float32).copy()


def unit(vector) -> np.ndarray:
    vector = np.asarray(vector, dtype=np.float32)
    return vector / np.linalg.norm(vector)


def basis(index: int, dim: int = DIM) -> np.ndarray:
    vector = np.zeros(dim, dtype=np.float32)
    vector[index] = 1.0
    return vector


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def speaker_voice(rng):
    """Synthetic speaker: a fixed direction plus small per-utterance noise."""
    center = unit(rng.standard_normal(DIM))

    def utterance(noise: float = 0.005) -> np.ndarray:
        return (center + rng.standard_normal(DIM).astype(np.float32) * noise).astype(np.float32)

    utterance.center = center
    return utterance


@pytest.fixture
def store(tmp_path):
    """Profile store backed by a temporary SQLite file."""
    profile_store = ProfileStore(tmp_path / "profiles.db", embedding_dim=DIM)
    yield profile_store
    profile_store.close()


@pytest.fixture
def extractor():
    return PassthroughExtractor()


@pytest.fixture
def sample_audio():
    """Generate 1-second sample audio at 16kHz."""
    sample_rate = 16000
    t = np.linspace(0, 1.0, sample_rate, endpoint=False)
    audio = (0.3 * np.sin(2 * np.pi * 220 * t)).astype(np.float32)
    return audio, sample_rate


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "requires_model: marks tests that require downloaded models"
    )
