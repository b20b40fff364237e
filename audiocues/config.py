"""Application configuration."""

import tempfile
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings

from audiocues.analysis.models import WindowConfig


class Settings(BaseSettings):
    """App settings with env var overrides."""

    # Analysis window (fixed per deployment, the tempo correction depends on it)
    buffer_size: int = 4096
    hop_size: int = 256
    pitch_method: str = "default"

    # Request defaults for onset detection
    default_method: str = "default"
    default_threshold: float = 1.1
    default_silence: float = -70.0  # dB

    # Ingestion
    max_upload_mb: int = 50
    allowed_mime_types: list[str] = ["audio/wav", "audio/mpeg", "audio/mp3", "audio/ogg"]
    upload_dir: Path = Path(tempfile.gettempdir()) / "audiocues-uploads"
    fetch_timeout: float = 30.0

    # Ceiling for the three detector passes of one request
    analysis_timeout: float = 120.0

    # Server
    host: str = "0.0.0.0"
    port: int = 3002
    log_level: str = "INFO"

    model_config = {"env_prefix": "AUDIOCUES_"}

    @model_validator(mode="after")
    def _check_window(self) -> "Settings":
        WindowConfig(buffer_size=self.buffer_size, hop_size=self.hop_size)
        return self

    @property
    def window(self) -> WindowConfig:
        return WindowConfig(buffer_size=self.buffer_size, hop_size=self.hop_size)

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


settings = Settings()
