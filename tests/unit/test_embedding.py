"""Unit tests for speaker embedding extractors."""
import sys

import numpy as np
import pytest

from voiceid.errors import ExtractionError
from voiceid.speaker.embedding import (
    SimulatedExtractor,
    SpeechBrainExtractor,
    UnavailableExtractor,
    create_extractor,
)


def test_simulated_is_deterministic(sample_audio):
    audio, sample_rate = sample_audio
    extractor = SimulatedExtractor()

    first = extractor.extract(audio, sample_rate)
    second = extractor.extract(audio.copy(), sample_rate)

    assert first.shape == (192,)
    assert np.array_equal(first, second)
    assert np.linalg.norm(first) == pytest.approx(1.0, abs=1e-5)


def test_simulated_differs_per_audio(sample_audio):
    audio, sample_rate = sample_audio
    extractor = SimulatedExtractor()

    a = extractor.extract(audio, sample_rate)
    b = extractor.extract(audio * 0.5, sample_rate)

    assert not np.array_equal(a, b)


def test_simulated_rejects_empty_audio():
    with pytest.raises(ExtractionError):
        SimulatedExtractor().extract(np.array([], dtype=np.float32))


def test_unavailable_always_fails(sample_audio):
    audio, sample_rate = sample_audio
    extractor = UnavailableExtractor("no weights")

    assert extractor.is_available is False
    with pytest.raises(ExtractionError, match="no weights"):
        extractor.extract(audio, sample_rate)


def test_speechbrain_not_loaded_until_needed():
    extractor = SpeechBrainExtractor(device="cpu")

    assert extractor.model is None
    assert extractor.is_available is False
    assert extractor.embedding_dim == 192


def test_speechbrain_rejects_wrong_sample_rate():
    extractor = SpeechBrainExtractor(device="cpu")

    with pytest.raises(ExtractionError, match="16000"):
        extractor.extract(np.zeros(48000, dtype=np.float32), sample_rate=48000)
    assert extractor.model is None


def test_speechbrain_rejects_empty_audio():
    with pytest.raises(ExtractionError):
        SpeechBrainExtractor(device="cpu").extract(np.array([], dtype=np.float32))


def test_speechbrain_load_failure_raises_extraction_error(monkeypatch):
    monkeypatch.setitem(sys.modules, "speechbrain.inference", None)

    with pytest.raises(ExtractionError, match="Failed to load"):
        SpeechBrainExtractor(device="cpu").load_model()


class _FakeClassifier:
    def __init__(self, dim):
        self.dim = dim

    def encode_batch(self, batch):
        import torch
        return torch.ones((batch.shape[0], 1, self.dim)) * batch.mean()


def test_speechbrain_extract_with_loaded_model(sample_audio):
    pytest.importorskip("torch")
    audio, sample_rate = sample_audio
    extractor = SpeechBrainExtractor(device="cpu")
    extractor.model = _FakeClassifier(192)

    embedding = extractor.extract(audio, sample_rate)

    assert embedding.shape == (192,)
    assert embedding.dtype == np.float32


def test_speechbrain_wrong_output_dimension(sample_audio):
    pytest.importorskip("torch")
    audio, sample_rate = sample_audio
    extractor = SpeechBrainExtractor(device="cpu")
    extractor.model = _FakeClassifier(256)

    with pytest.raises(ExtractionError, match="256"):
        extractor.extract(audio, sample_rate)


def test_create_extractor_simulated():
    assert isinstance(create_extractor("simulated"), SimulatedExtractor)


def test_create_extractor_falls_back_to_unavailable(monkeypatch):
    def fail(self):
        raise ExtractionError("weights missing")

    monkeypatch.setattr(SpeechBrainExtractor, "load_model", fail)

    extractor = create_extractor("speechbrain", device="cpu")

    assert isinstance(extractor, UnavailableExtractor)
    assert "weights missing" in extractor.reason


def test_create_extractor_unknown_mode():
    with pytest.raises(ValueError):
        create_extractor("onnx")
