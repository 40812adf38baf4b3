"""User profile model."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import numpy as np


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class UserProfile:
    """Enrolled user with voice biometric data."""
    id: int
    name: str
    voice_print: np.ndarray = field(repr=False)
    enrollment_date: datetime
    last_recognized: Optional[datetime] = None
    recognition_count: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary (voice print omitted)."""
        return {
            "id": self.id,
            "name": self.name,
            "enrollment_date": self.enrollment_date.isoformat(),
            "last_recognized": self.last_recognized.isoformat() if self.last_recognized else None,
            "recognition_count": self.recognition_count,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
