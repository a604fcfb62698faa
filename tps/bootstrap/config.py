"""
bootstrap/config.py - Stack configuration

Provides configuration loading from files, environment variables, and defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from pathlib import Path
import os
import json
import logging

logger = logging.getLogger("tps.bootstrap.config")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _coerce(current: Any, value: Any) -> Any:
    """Convert a file value to the type of the setting it overrides."""
    if isinstance(current, bool):
        if isinstance(value, str):
            return value.lower() == "true"
        return bool(value)
    if isinstance(current, int):
        return int(value)
    return value


@dataclass
class StackConfig:
    """TransactionStack behavior switches."""

    thread_safe: bool = False  # One RLock per stack instance
    guard_reentrancy: bool = False  # Reject mutation from inside apply()/reverse()
    emit_events: bool = True
    event_history: int = 100

    @classmethod
    def from_env(cls) -> "StackConfig":
        return cls(
            thread_safe=_env_flag("TPS_THREAD_SAFE", "false"),
            guard_reentrancy=_env_flag("TPS_GUARD_REENTRANCY", "false"),
            emit_events=_env_flag("TPS_EMIT_EVENTS", "true"),
            event_history=int(os.getenv("TPS_EVENT_HISTORY", "100")),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("TPS_LOG_LEVEL", "INFO"),
            format=os.getenv("TPS_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("TPS_LOG_FILE"),
            json_logs=_env_flag("TPS_JSON_LOGS", "false"),
        )


@dataclass
class TPSConfig:
    """Root configuration."""

    environment: str = "development"
    debug: bool = False
    version: str = "1.0.0"

    stack: StackConfig = field(default_factory=StackConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Additional settings
    settings: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "TPSConfig":
        """Create configuration from environment variables."""
        return cls(
            environment=os.getenv("TPS_ENVIRONMENT", "development"),
            debug=_env_flag("TPS_DEBUG", "false"),
            stack=StackConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "TPSConfig":
        """Load configuration from JSON file."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using defaults")
            return cls.from_env()

        with open(path) as f:
            data = json.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "TPSConfig":
        """Create config from dictionary; file values override the environment."""
        config = cls.from_env()

        if "environment" in data:
            config.environment = data["environment"]
        if "debug" in data:
            config.debug = _coerce(config.debug, data["debug"])

        for section in ("stack", "logging"):
            target = getattr(config, section)
            for key, value in data.get(section, {}).items():
                if hasattr(target, key):
                    setattr(target, key, _coerce(getattr(target, key), value))
                else:
                    logger.warning(f"Ignoring unknown config key: {section}.{key}")

        if "settings" in data:
            config.settings.update(data["settings"])

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "version": self.version,
            "stack": {
                "thread_safe": self.stack.thread_safe,
                "guard_reentrancy": self.stack.guard_reentrancy,
                "emit_events": self.stack.emit_events,
                "event_history": self.stack.event_history,
            },
            "logging": {
                "level": self.logging.level,
                "log_file": self.logging.log_file,
                "json_logs": self.logging.json_logs,
            },
            "settings": dict(self.settings),
        }


# Global config instance
_config: Optional[TPSConfig] = None


def load_config(filepath: str = None) -> TPSConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file

    Returns:
        TPSConfig instance
    """
    global _config

    if filepath:
        _config = TPSConfig.from_file(filepath)
    else:
        default_paths = [
            "./tps.json",
            "./config/tps.json",
            os.path.expanduser("~/.tps/config.json"),
        ]

        for path in default_paths:
            if Path(path).exists():
                logger.info(f"Loading config from: {path}")
                _config = TPSConfig.from_file(path)
                return _config

        _config = TPSConfig.from_env()

    logger.info(f"Configuration loaded: environment={_config.environment}")
    return _config


def get_config() -> TPSConfig:
    """Get current configuration, loading if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration."""
    global _config
    _config = None
