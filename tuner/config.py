"""
Configuration management for Tuner.

Reads configuration from a .env file and environment variables with sensible defaults.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from tuner.catalog.models import AUDIO_QUALITIES
from tuner.outputs.factory import SINK_MODES

# Default .env file location
DEFAULT_ENV_FILE = Path.home() / ".config" / "tuner" / "tuner.env"

CATALOG_MODES = ("http", "local")

logger = logging.getLogger(__name__)


def _load_env_file() -> None:
    """Load environment variables from .env file if it exists."""
    env_path = Path(os.getenv("TUNER_ENV_FILE", str(DEFAULT_ENV_FILE)))
    if env_path.exists():
        load_dotenv(env_path, override=False)  # Don't override existing env vars


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid {name}: {value} (must be true or false)")


def _parse_int(name: str, value: str, minimum: int = 1) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise ValueError(f"Invalid {name}: {value} (must be an integer)")
    if parsed < minimum:
        raise ValueError(f"Invalid {name}: {value} (must be >= {minimum})")
    return parsed


def _parse_float(name: str, value: str) -> float:
    try:
        parsed = float(value)
    except ValueError:
        raise ValueError(f"Invalid {name}: {value} (must be a number)")
    if parsed <= 0:
        raise ValueError(f"Invalid {name}: {value} (must be positive)")
    return parsed


def _parse_choice(name: str, value: str, choices) -> str:
    lowered = value.strip().lower()
    if lowered not in choices:
        raise ValueError(f"Invalid {name}: {value} (must be one of {', '.join(choices)})")
    return lowered


@dataclass
class TunerConfig:
    """Tuner configuration loaded from .env file and environment variables."""

    # Catalog
    catalog_mode: str = "local"
    catalog_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    music_root: str = str(Path.home() / "Music")
    playlist_size: int = 4
    http_timeout_sec: float = 10.0

    # Playback
    audio_quality: str = "high"
    prefetch: bool = True
    skip_ads: bool = True
    shutdown_timeout_sec: float = 5.0

    # Output
    output_sink_mode: str = "ffplay"
    output_wav_path: str = "/tmp/tuner_output.wav"

    # Decode format
    sample_rate: int = 44100
    channels: int = 2
    frame_size: int = 1024  # samples per chunk

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def load_config(cls) -> "TunerConfig":
        """
        Load configuration from environment variables.

        Returns:
            TunerConfig instance with loaded values

        Raises:
            ValueError: If configuration is invalid
        """
        # Load .env file first (if it exists)
        _load_env_file()

        config = cls()
        env = os.environ

        if "TUNER_CATALOG_MODE" in env:
            config.catalog_mode = _parse_choice("TUNER_CATALOG_MODE", env["TUNER_CATALOG_MODE"], CATALOG_MODES)
        config.catalog_url = env.get("TUNER_CATALOG_URL", config.catalog_url)
        config.username = env.get("TUNER_USERNAME", config.username)
        config.password = env.get("TUNER_PASSWORD", config.password)
        config.music_root = env.get("TUNER_MUSIC_ROOT", config.music_root)
        if "TUNER_PLAYLIST_SIZE" in env:
            config.playlist_size = _parse_int("TUNER_PLAYLIST_SIZE", env["TUNER_PLAYLIST_SIZE"])
        if "TUNER_HTTP_TIMEOUT_SEC" in env:
            config.http_timeout_sec = _parse_float("TUNER_HTTP_TIMEOUT_SEC", env["TUNER_HTTP_TIMEOUT_SEC"])

        if "TUNER_AUDIO_QUALITY" in env:
            config.audio_quality = _parse_choice("TUNER_AUDIO_QUALITY", env["TUNER_AUDIO_QUALITY"], AUDIO_QUALITIES)
        if "TUNER_PREFETCH" in env:
            config.prefetch = _parse_bool("TUNER_PREFETCH", env["TUNER_PREFETCH"])
        if "TUNER_SKIP_ADS" in env:
            config.skip_ads = _parse_bool("TUNER_SKIP_ADS", env["TUNER_SKIP_ADS"])
        if "TUNER_SHUTDOWN_TIMEOUT_SEC" in env:
            config.shutdown_timeout_sec = _parse_float(
                "TUNER_SHUTDOWN_TIMEOUT_SEC", env["TUNER_SHUTDOWN_TIMEOUT_SEC"]
            )

        if "TUNER_OUTPUT_SINK_MODE" in env:
            config.output_sink_mode = _parse_choice(
                "TUNER_OUTPUT_SINK_MODE", env["TUNER_OUTPUT_SINK_MODE"], SINK_MODES
            )
        config.output_wav_path = env.get("TUNER_OUTPUT_WAV_PATH", config.output_wav_path)

        if "TUNER_SAMPLE_RATE" in env:
            config.sample_rate = _parse_int("TUNER_SAMPLE_RATE", env["TUNER_SAMPLE_RATE"], minimum=8000)
        if "TUNER_CHANNELS" in env:
            config.channels = _parse_int("TUNER_CHANNELS", env["TUNER_CHANNELS"])
        if "TUNER_FRAME_SIZE" in env:
            config.frame_size = _parse_int("TUNER_FRAME_SIZE", env["TUNER_FRAME_SIZE"])

        config.log_level = env.get("TUNER_LOG_LEVEL", config.log_level).upper()
        config.log_file = env.get("TUNER_LOG_FILE", config.log_file)

        config.validate()
        return config

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If any value is invalid
        """
        if self.catalog_mode == "http" and not self.catalog_url:
            raise ValueError("TUNER_CATALOG_URL is required when TUNER_CATALOG_MODE=http")
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid TUNER_LOG_LEVEL: {self.log_level}")
