"""YAML configuration loading.

Used by [ClientConfig.from_yaml()][ninasdk.core.config.ClientConfig.from_yaml]
and [Nina.from_yaml()][ninasdk.client.Nina.from_yaml]. Only ``yaml.safe_load``
is used, so YAML tags cannot instantiate arbitrary Python objects.

Examples:
    ```python
    from ninasdk.core.yaml import load_yaml

    raw = load_yaml("config/devnet.yaml")
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ninasdk.exceptions import ConfigurationError


def load_yaml(config_path: str | Path) -> dict[str, Any]:
    """Load and parse a YAML configuration file.

    Args:
        config_path: Path to the YAML file (absolute or relative).

    Returns:
        Parsed configuration as a nested dictionary. Returns an empty dict
        if the file exists but contains no data.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the file is not valid YAML or its top level
            is not a mapping.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with path.open(encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config root must be a mapping, got {type(data).__name__} in {config_path}"
        )
    return data
