"""
Configuration management for the inbox date filer.

Uses pydantic-settings to load configuration from environment variables
and .env files. The watched root itself is persisted separately by
WatchSettingsStore so that a first run can record its default.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models.schemas import WatchConfiguration


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Watch Configuration
    watch_path: Optional[Path] = None
    default_watch_path: Path = Path("~/Downloads")
    settings_file: Path = Path("~/.config/datefiler/settings.json")

    # Logging Configuration
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    # Stability Gate
    stability_max_wait: float = 10.0  # seconds
    stability_poll_interval: float = 1.0  # seconds

    # Mover Configuration
    move_attempts: int = 3
    move_retry_delay: float = 2.0  # seconds

    # Watcher Configuration
    notification_timeout: float = 1.0  # seconds
    ignored_extensions: str = "ini"
    supported_extensions: str = "pdf,eml,msg"

    # Binary container (.msg) reader
    msg_reader_enabled: bool = True

    model_config = SettingsConfigDict(
        env_prefix="DATEFILER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def get_ignored_extensions(self) -> set[str]:
        """Parse ignored extensions into a set of lowercase names without dots."""
        return _parse_extensions(self.ignored_extensions)

    def get_supported_extensions(self) -> set[str]:
        """Parse supported extensions into a set of lowercase names without dots."""
        return _parse_extensions(self.supported_extensions)


def _parse_extensions(raw: str) -> set[str]:
    return {
        e.strip().lstrip('.').lower()
        for e in raw.split(',')
        if e.strip()
    }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _StoredWatchSettings(BaseModel):
    root_path: str


class WatchSettingsStore:
    """JSON file holding the persisted watch root."""

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[WatchConfiguration]:
        """
        Load the stored watch configuration.

        Returns:
            WatchConfiguration, or None if the file is absent or invalid
        """
        if not self.path.is_file():
            logger.debug(f"No stored settings at {self.path}")
            return None

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            stored = _StoredWatchSettings.model_validate(raw)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Ignoring invalid settings file {self.path}: {e}")
            return None

        if not stored.root_path.strip():
            logger.warning(f"Settings file {self.path} has an empty root path")
            return None

        return WatchConfiguration(root_path=_absolute(Path(stored.root_path)))

    def save(self, config: WatchConfiguration) -> bool:
        """
        Persist the watch configuration. Failures are logged, not raised.

        Returns:
            True if the file was written
        """
        payload = _StoredWatchSettings(root_path=str(config.root_path))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not persist settings to {self.path}: {e}")
            return False

        logger.info(f"Saved watch path {config.root_path} to {self.path}")
        return True


def resolve_watch_configuration(
    store: WatchSettingsStore,
    default_root: Path,
    override: Optional[Path] = None,
) -> WatchConfiguration:
    """
    Decide which root to watch.

    An explicit override wins, then the stored configuration. When neither
    is available the default root is used and persisted back to the store.

    Args:
        store: Settings store collaborator
        default_root: Caller-supplied fallback root
        override: Explicit root from the command line or environment

    Returns:
        WatchConfiguration for this process
    """
    if override is not None:
        return WatchConfiguration(root_path=_absolute(override))

    stored = store.load()
    if stored is not None:
        return stored

    config = WatchConfiguration(root_path=_absolute(default_root))
    logger.info(f"Using default watch path: {config.root_path}")
    store.save(config)
    return config


def _absolute(path: Path) -> Path:
    return Path(path).expanduser().absolute()
