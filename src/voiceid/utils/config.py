"""Configuration management utilities."""

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from voiceid.utils.logger import get_logger

logger = get_logger(__name__)

# Cosine similarity at or above which an identification counts as a match.
RECOGNITION_THRESHOLD = 0.70

# Maximum spread of normalized enrollment embeddings around their centroid.
ENROLLMENT_VARIANCE_THRESHOLD = 0.15

MIN_ENROLLMENT_SAMPLES = 3

DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


class AudioConfig(BaseModel):
    """Audio configuration."""
    sample_rate: int = Field(16000, description="Sample rate expected by the extractor")


class SpeakerConfig(BaseModel):
    """Speaker embedding configuration."""
    extractor: str = Field("speechbrain", description="Extractor mode (speechbrain, simulated)")
    embedding_model: str = Field(
        "speechbrain/spkrec-ecapa-voxceleb",
        description="Speaker embedding model"
    )
    embedding_dim: int = Field(192, description="Embedding dimension")
    device: str = Field("auto", description="Device to run the model on (cpu, cuda, auto)")
    cache_dir: Optional[Path] = Field(None, description="Model download/cache directory")


class EnrollmentConfig(BaseModel):
    """Enrollment quality control configuration."""
    min_samples: int = Field(MIN_ENROLLMENT_SAMPLES, ge=1, description="Minimum voice samples")
    variance_threshold: float = Field(
        ENROLLMENT_VARIANCE_THRESHOLD, gt=0.0, description="Maximum allowed sample spread"
    )
    min_name_length: int = Field(2, ge=1, description="Minimum profile name length")
    max_name_length: int = Field(50, ge=1, description="Maximum profile name length")


class IdentificationConfig(BaseModel):
    """Identification configuration."""
    recognition_threshold: float = Field(
        RECOGNITION_THRESHOLD, ge=-1.0, le=1.0, description="Minimum cosine similarity for a match"
    )


class StorageConfig(BaseModel):
    """Profile storage configuration."""
    db_path: Path = Field(Path("data/voice_profiles.db"), description="SQLite database path")


class Config(BaseModel):
    """Main application configuration."""
    audio: AudioConfig = Field(default_factory=AudioConfig)
    speaker: SpeakerConfig = Field(default_factory=SpeakerConfig)
    enrollment: EnrollmentConfig = Field(default_factory=EnrollmentConfig)
    identification: IdentificationConfig = Field(default_factory=IdentificationConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


class Settings(BaseSettings):
    """Environment-based settings."""
    model_config = SettingsConfigDict(
        env_prefix="VOICEID_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    config_path: Path = Field(DEFAULT_CONFIG_PATH)
    db_path: Optional[Path] = Field(None)
    extractor: Optional[str] = Field(None)

    log_level: str = Field("INFO")
    log_file: Optional[Path] = Field(None)


def load_config(config_path: Optional[Union[Path, str]] = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file (can be string or Path)

    Returns:
        Configuration object
    """
    config_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}, using default config")
        return Config()

    with open(config_path, "r") as f:
        config_dict = yaml.safe_load(f) or {}

    return Config(**config_dict)


def apply_settings(config: Config, settings: Settings) -> Config:
    """Return a copy of ``config`` with environment overrides applied."""
    updates = {}
    if settings.db_path is not None:
        updates["storage"] = config.storage.model_copy(update={"db_path": settings.db_path})
    if settings.extractor is not None:
        updates["speaker"] = config.speaker.model_copy(update={"extractor": settings.extractor})
    return config.model_copy(update=updates)


def save_config(config: Config, output_path: Path) -> None:
    """Save configuration to YAML file.

    Args:
        config: Configuration object
        output_path: Output file path
    """
    config_dict = config.model_dump(mode="json")

    with open(output_path, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)
