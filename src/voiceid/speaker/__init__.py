"""Speaker embedding module."""

from voiceid.speaker.codec import EMBEDDING_DIM, deserialize_embedding, serialize_embedding
from voiceid.speaker.embedding import (
    EmbeddingExtractor,
    SimulatedExtractor,
    SpeechBrainExtractor,
    UnavailableExtractor,
    create_extractor,
)
from voiceid.speaker.profile import UserProfile
from voiceid.speaker.similarity import cosine_similarity, l2_normalize

__all__ = [
    "EMBEDDING_DIM",
    "serialize_embedding",
    "deserialize_embedding",
    "EmbeddingExtractor",
    "SimulatedExtractor",
    "SpeechBrainExtractor",
    "UnavailableExtractor",
    "create_extractor",
    "UserProfile",
    "cosine_similarity",
    "l2_normalize",
]
