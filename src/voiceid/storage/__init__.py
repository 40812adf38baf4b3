"""Profile storage module."""

from voiceid.storage.profile_store import ProfileStore

__all__ = ["ProfileStore"]
