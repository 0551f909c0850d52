"""
Configuration Management for dockshift
Centralizes all environment-based configuration and logging setup
"""

import os
import logging
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from typing import Optional

DEFAULT_STOP_SIGNAL = 'SIGTERM'

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off', ''}


def setup_logging(level: Optional[str] = None, log_to_file: bool = True):
    """Configure application logging with rotation"""
    from .paths import LOG_FILE, ensure_data_dirs

    root_logger = logging.getLogger()

    # Close and clear any existing handlers to ensure our configuration is used
    # and prevent file descriptor leaks when called more than once
    for handler in root_logger.handlers[:]:  # Copy list to avoid modification during iteration
        handler.close()
        root_logger.removeHandler(handler)

    log_level = (level or os.getenv('DOCKSHIFT_LOG_LEVEL', 'INFO')).upper()
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_to_file:
        ensure_data_dirs()
        # Max 10MB per file, keep 14 backups
        file_handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=14,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # The SDK logs every HTTP request at DEBUG
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('docker').setLevel(logging.INFO)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid number for {name}: {raw!r}") from None


@dataclass
class Settings:
    """
    Runtime settings for container updates.

    Docker connection settings (DOCKER_HOST, DOCKER_TLS_VERIFY, DOCKER_CERT_PATH)
    are read by the docker SDK itself in DockerDaemon.from_env().
    """
    pull_images: bool = True
    stop_timeout: float = 10.0
    stop_signal: str = DEFAULT_STOP_SIGNAL
    poll_interval: float = 1.0
    cleanup: bool = False
    lifecycle_hooks: bool = False
    docker_config_path: Optional[str] = None
    repo_user: Optional[str] = None
    repo_pass: Optional[str] = None
    docker_api_version: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'Settings':
        """Build settings from DOCKSHIFT_* environment variables"""
        settings = cls(
            pull_images=_env_bool('DOCKSHIFT_PULL_IMAGES', True),
            stop_timeout=_env_float('DOCKSHIFT_STOP_TIMEOUT', 10.0),
            stop_signal=os.getenv('DOCKSHIFT_STOP_SIGNAL') or DEFAULT_STOP_SIGNAL,
            poll_interval=_env_float('DOCKSHIFT_POLL_INTERVAL', 1.0),
            cleanup=_env_bool('DOCKSHIFT_CLEANUP', False),
            lifecycle_hooks=_env_bool('DOCKSHIFT_LIFECYCLE_HOOKS', False),
            docker_config_path=os.getenv('DOCKSHIFT_DOCKER_CONFIG') or None,
            repo_user=os.getenv('REPO_USER') or None,
            repo_pass=os.getenv('REPO_PASS') or None,
            docker_api_version=os.getenv('DOCKER_API_VERSION') or None,
        )
        settings.validate()
        return settings

    def validate(self) -> bool:
        """Validate configuration"""
        if self.stop_timeout < 0:
            raise ValueError(f"Stop timeout must not be negative: {self.stop_timeout}")

        if self.poll_interval <= 0:
            raise ValueError(f"Poll interval must be positive: {self.poll_interval}")

        if not self.stop_signal:
            raise ValueError("Default stop signal must not be empty")

        if bool(self.repo_user) != bool(self.repo_pass):
            raise ValueError("REPO_USER and REPO_PASS must be set together")

        return True
