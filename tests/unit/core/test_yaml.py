"""Unit tests for core.yaml module.

Tests:
- load_yaml() with valid, empty, missing and malformed files
"""

from pathlib import Path

import pytest

from ninasdk.core.yaml import load_yaml
from ninasdk.exceptions import ConfigurationError


class TestLoadYaml:
    """Tests for load_yaml()."""

    def test_valid_mapping(self, tmp_path: Path) -> None:
        """A mapping is returned as a nested dictionary."""
        path = tmp_path / "config.yaml"
        path.write_text("cluster: devnet\nledger:\n  batch_size: 10\n")
        assert load_yaml(path) == {"cluster": "devnet", "ledger": {"batch_size": 10}}

    def test_accepts_str_path(self, tmp_path: Path) -> None:
        """String paths work as well as Path objects."""
        path = tmp_path / "config.yaml"
        path.write_text("cluster: mainnet\n")
        assert load_yaml(str(path)) == {"cluster": "mainnet"}

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file yields an empty dict."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml(path) == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_yaml(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        """Unparseable YAML raises ConfigurationError."""
        path = tmp_path / "bad.yaml"
        path.write_text("cluster: [devnet\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_yaml(path)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        """A list at the top level is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_yaml(path)

    def test_unsafe_tags_rejected(self, tmp_path: Path) -> None:
        """Python object tags are not constructed."""
        path = tmp_path / "unsafe.yaml"
        path.write_text("value: !!python/object/apply:os.getcwd []\n")
        with pytest.raises(ConfigurationError):
            load_yaml(path)
