"""Application configuration using Pydantic Settings."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "fluency-coach"
    app_version: str = "0.1.0"
    debug: bool = False
    
    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    
    # Logging
    log_level: str = "INFO"

    # Exercise catalog (built-in catalog when unset)
    exercise_catalog_path: Optional[str] = None

    # Session control
    acceptance_threshold: int = 60
    liveness_timeout_seconds: float = 3.0
    watchdog_interval_seconds: float = 0.5
    recognition_error_limit: int = 3
    feedback_cooldown_seconds: float = 3.0

    # Audio features
    sample_rate_hz: int = 16000
    fft_size: int = 2048
    max_magnitude: float = 255.0
    speech_band_low_hz: float = 80.0
    speech_band_high_hz: float = 4000.0
    silence_volume: float = 10.0
    quiet_volume: float = 20.0
    loud_volume: float = 85.0

    # Fluency scoring
    slow_wpm: int = 120
    fast_wpm: int = 180
    reference_wpm: int = 150
    filler_weight: float = 30.0
    repetition_weight: float = 20.0
    pace_divisor: float = 2.0
    filler_words: list[str] = [
        "um", "uh", "like", "you know", "so", "well", "actually", "basically",
    ]


# Create a singleton instance
settings = Settings()
