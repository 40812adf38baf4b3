"""Unit tests for embedding similarity."""
import numpy as np
import pytest

from voiceid.speaker.similarity import cosine_similarity, l2_normalize


def test_identical_unit_vectors():
    """A unit vector is perfectly similar to itself."""
    rng = np.random.default_rng(0)
    for _ in range(20):
        v = rng.standard_normal(192).astype(np.float32)
        v /= np.linalg.norm(v)
        assert cosine_similarity(v, v) == pytest.approx(1.0, abs=1e-6)


def test_orthogonal_vectors():
    assert cosine_similarity([1, 0, 0], [0, 1, 0]) == 0.0


def test_opposite_vectors():
    assert cosine_similarity([1, 0, 0], [-1, 0, 0]) == pytest.approx(-1.0)


def test_scale_invariant():
    a = np.array([3.0, 4.0, 0.0])
    assert cosine_similarity(a, a * 10) == pytest.approx(1.0)
    assert cosine_similarity([1, 1, 0], [2, 0, 0]) == pytest.approx(1 / np.sqrt(2))


def test_zero_vector_returns_zero():
    """Zero norm gives 0.0 instead of NaN."""
    assert cosine_similarity([0, 0, 0], [1, 2, 3]) == 0.0
    assert cosine_similarity([1, 2, 3], [0, 0, 0]) == 0.0
    assert cosine_similarity([0, 0, 0], [0, 0, 0]) == 0.0


def test_mismatched_lengths_raise():
    with pytest.raises(ValueError):
        cosine_similarity([1, 0, 0], [1, 0])


def test_result_is_python_float_in_range():
    rng = np.random.default_rng(1)
    a = rng.standard_normal(192).astype(np.float32)
    b = rng.standard_normal(192).astype(np.float32)

    score = cosine_similarity(a, b)

    assert isinstance(score, float)
    assert -1.0 <= score <= 1.0


def test_l2_normalize():
    normalized = l2_normalize(np.array([3.0, 4.0, 0.0]))

    assert np.linalg.norm(normalized) == pytest.approx(1.0, abs=1e-6)
    assert normalized.dtype == np.float32
    assert np.allclose(normalized, [0.6, 0.8, 0.0])


def test_l2_normalize_zero_vector():
    normalized = l2_normalize(np.zeros(4))

    assert np.array_equal(normalized, np.zeros(4, dtype=np.float32))


@pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
def test_non_finite_input_scores_zero(bad):
    """NaN must never be clipped into a perfect score."""
    a = np.array([1.0, 0.0, 0.0])
    b = np.array([bad, 0.0, 0.0])

    assert cosine_similarity(a, b) == 0.0
    assert cosine_similarity(b, a) == 0.0
    assert cosine_similarity(np.full(3, np.nan), np.full(3, np.nan)) == 0.0
