"""
Core configuration module for the coursework assignment toolkit.
Loads configuration from a YAML file, with environment variable overrides.
"""

import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

MB = 1024 * 1024

DEFAULT_ALLOWED_EXTENSIONS = [
    "pdf", "doc", "docx", "txt", "rtf",
    "jpg", "jpeg", "png", "gif",
    "xls", "xlsx", "csv",
    "ppt", "pptx",
    "zip", "rar",
]

DEFAULT_ALLOWED_MIME_TYPES = [
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "application/rtf",
    "image/jpeg",
    "image/png",
    "image/gif",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/csv",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "application/zip",
    "application/x-zip-compressed",
]


class ServerConfig(BaseModel):
    """Reference API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8090
    debug: bool = False


class BackendConfig(BaseModel):
    """Assignment backend collaborator configuration."""

    kind: str = "http"  # "http" or "memory"
    base_url: str = "http://localhost:8090/api/v1"
    timeout: float = 30.0  # seconds
    retry_attempts: int = 3  # idempotent calls only
    retry_backoff: float = 0.5  # seconds, doubled per attempt


class UploadsConfig(BaseModel):
    """Staged attachment configuration."""

    max_attachments: int = 2
    default_max_file_size: int = 10 * MB
    max_allowed_file_size: int = 100 * MB
    allowed_extensions: List[str] = list(DEFAULT_ALLOWED_EXTENSIONS)
    allowed_mime_types: List[str] = list(DEFAULT_ALLOWED_MIME_TYPES)
    signed_url_ttl: int = 3600  # seconds
    signing_key: str = "default_key_for_local_use"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    file: str = "coursework.log"
    level: str = os.getenv("LOG_LEVEL", "DEBUG")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size: int = 10  # MB
    backup_count: int = 5


class AppConfig(BaseSettings):
    """Main application configuration.

    Values come from config.yaml; COURSEWORK_* environment variables win,
    e.g. COURSEWORK_BACKEND__BASE_URL.
    """

    model_config = SettingsConfigDict(
        env_prefix="COURSEWORK_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    server: ServerConfig = ServerConfig()
    backend: BackendConfig = BackendConfig()
    uploads: UploadsConfig = UploadsConfig()
    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return env_settings, init_settings, file_secret_settings


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent.parent


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to the configuration file. If None, uses default location.

    Returns:
        AppConfig instance with loaded configuration.
    """
    if config_path is None:
        config_path = os.environ.get("COURSEWORK_CONFIG")
        if config_path is None:
            config_path = get_project_root() / "config.yaml"

    config_path = Path(config_path)

    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
            return AppConfig(**config_data)

    return AppConfig()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[AppConfig]) -> None:
    """Replace the global configuration (None forces a reload on next access)."""
    global _config
    _config = config


def get_log_path() -> Path:
    """
    Get the absolute path to the log file.

    Uses LOGS_DIR when set (container mode), otherwise project root/logs.
    """
    config = get_config()

    logs_dir_env = os.environ.get("LOGS_DIR")

    if logs_dir_env:
        log_dir = Path(logs_dir_env)
    else:
        log_dir = get_project_root() / "logs"

    log_dir.mkdir(parents=True, exist_ok=True)

    # Use only the filename from config so logs never go outside logs/
    name = Path(config.logging.file).name or "coursework.log"
    return log_dir / name
