"""
Configuration management for the dead link crawler.

Settings come from an optional YAML file, then from the environment
(``HOME_PAGE``, ``MAX_DEPTH``, also read from a ``.env`` file), then from
explicit overrides such as command-line flags.
"""

import os
import yaml
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field, fields
from dotenv import load_dotenv

from ..crawler.errors import ConfigError
from ..crawler.fetcher import DEFAULT_ACCEPT, DEFAULT_ACCEPT_LANGUAGE, DEFAULT_USER_AGENT


DEFAULT_MAX_DEPTH = 1

# Crawler settings that must be positive numbers, with their type
NUMERIC_SETTINGS = (
    ('page_timeout', float),
    ('link_timeout', float),
    ('max_concurrent_pages', int),
    ('max_concurrent_links', int),
    ('max_content_size', int),
)

logger = logging.getLogger(__name__)


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    start_url: Optional[str] = None
    max_depth: int = DEFAULT_MAX_DEPTH
    page_timeout: float = 30.0
    link_timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    max_concurrent_pages: int = 1
    max_concurrent_links: int = 1
    max_content_size: int = 10 * 1024 * 1024


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = 'INFO'
    file: str = 'logs/crawler.log'
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    json: bool = False


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def parse_max_depth(value: Any) -> int:
    """Parse a max depth value, falling back to the default when unset or invalid."""
    if value is None or value == '':
        logger.info(f"Max depth is not set, defaulting to {DEFAULT_MAX_DEPTH}")
        return DEFAULT_MAX_DEPTH
    try:
        depth = int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid max depth {value!r}, defaulting to {DEFAULT_MAX_DEPTH}")
        return DEFAULT_MAX_DEPTH
    if depth < 1:
        logger.warning(f"Max depth must be at least 1, got {depth}; defaulting to {DEFAULT_MAX_DEPTH}")
        return DEFAULT_MAX_DEPTH
    return depth


def _build_section(cls, data: Optional[Dict[str, Any]], section: str):
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration section '{section}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown keys in '{section}' section: {', '.join(sorted(unknown))}")
    return cls(**data)


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = "config.yaml",
                 env_file: Optional[str] = ".env"):
        self.config_path = Path(config_path) if config_path else None
        self.env_file = env_file
        self._config: Optional[Config] = None

    def load_config(self, overrides: Optional[Dict[str, Any]] = None) -> Config:
        """
        Load configuration from the YAML file and environment.

        Args:
            overrides: Crawler settings that take precedence over file and
                environment (``None`` values are ignored)

        Raises:
            ConfigError: if the file is malformed or no seed URL is configured
        """
        config_data: Dict[str, Any] = {}
        if self.config_path is not None and self.config_path.exists():
            try:
                with open(self.config_path, 'r') as file:
                    config_data = yaml.safe_load(file) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e
            if not isinstance(config_data, dict):
                raise ConfigError(f"Configuration file {self.config_path} must contain a mapping")

        crawler_data = dict(config_data.get('crawler') or {})
        logging_data = config_data.get('logging')

        if self.env_file:
            load_dotenv(self.env_file, override=False)
        if os.environ.get('HOME_PAGE'):
            crawler_data['start_url'] = os.environ['HOME_PAGE']
        if 'MAX_DEPTH' in os.environ:
            crawler_data['max_depth'] = os.environ['MAX_DEPTH']

        for key, value in (overrides or {}).items():
            if value is not None:
                crawler_data[key] = value

        crawler_data['max_depth'] = parse_max_depth(crawler_data.get('max_depth'))

        self._config = Config(
            crawler=_build_section(CrawlerConfig, crawler_data, 'crawler'),
            logging=_build_section(LoggingConfig, logging_data, 'logging')
        )

        self._validate_config()
        return self._config

    def _validate_config(self):
        """Validate configuration values."""
        if not self._config:
            raise ConfigError("Configuration not loaded")

        crawler = self._config.crawler

        if not crawler.start_url:
            raise ConfigError("No start URL configured: set HOME_PAGE or crawler.start_url")

        if not crawler.start_url.startswith(('http://', 'https://')):
            raise ConfigError(f"Start URL must be http(s): {crawler.start_url}")

        for name, cast in NUMERIC_SETTINGS:
            try:
                value = cast(getattr(crawler, name))
            except (TypeError, ValueError):
                raise ConfigError(f"{name} must be a positive number") from None
            if value <= 0:
                raise ConfigError(f"{name} must be a positive number")
            setattr(crawler, name, value)

        logger.debug("Configuration validation passed")

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ConfigError("Configuration not loaded. Call load_config() first.")
        return self._config


def load_config(config_path: Optional[str] = "config.yaml",
                overrides: Optional[Dict[str, Any]] = None,
                env_file: Optional[str] = ".env") -> Config:
    """Load configuration from file, environment and overrides."""
    return ConfigManager(config_path, env_file=env_file).load_config(overrides)
