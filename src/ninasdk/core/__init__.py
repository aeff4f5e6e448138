"""Core layer: configuration, structured logging and YAML loading.

Depends only on ``ninasdk.models`` and is depended upon by the I/O layers
(``ledger``, ``api``) and the [Nina][ninasdk.client.Nina] facade.

Attributes:
    ClientConfig: Root pydantic configuration with ``from_yaml()`` and
        ``from_dict()`` factories. See [ClientConfig][ninasdk.core.config.ClientConfig].
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][ninasdk.core.logger.Logger].
    load_yaml: Safe YAML loading with ``yaml.safe_load()``.
        See [load_yaml()][ninasdk.core.yaml.load_yaml].

Examples:
    ```python
    from ninasdk.core import ClientConfig, Logger, configure_logging

    config = ClientConfig.from_yaml("nina.yaml")
    configure_logging(config.logging)
    logger = Logger("app")
    ```
"""

from .config import (
    MAX_BATCH_SIZE,
    ApiConfig,
    ClientConfig,
    LedgerConfig,
    LoggingConfig,
    RetryConfig,
)
from .logger import Logger, StructuredFormatter, configure_logging, format_kv_pairs
from .yaml import load_yaml


__all__ = [
    "MAX_BATCH_SIZE",
    "ApiConfig",
    "ClientConfig",
    "LedgerConfig",
    "Logger",
    "LoggingConfig",
    "RetryConfig",
    "StructuredFormatter",
    "configure_logging",
    "format_kv_pairs",
    "load_yaml",
]
