"""
bootstrap/ - Configuration, logging and stack construction
"""

from .config import (
    TPSConfig,
    StackConfig,
    LoggingConfig,
    load_config,
    get_config,
    reset_config,
)

from .log_setup import (
    JSONFormatter,
    setup_logging,
    setup_logging_from_config,
)

from .factory import (
    create_stack,
)


__all__ = [
    # Config
    "TPSConfig",
    "StackConfig",
    "LoggingConfig",
    "load_config",
    "get_config",
    "reset_config",
    # Logging
    "JSONFormatter",
    "setup_logging",
    "setup_logging_from_config",
    # Factory
    "create_stack",
]
