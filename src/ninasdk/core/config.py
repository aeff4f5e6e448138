"""
Pydantic configuration models for the Nina client.

[ClientConfig][ninasdk.core.config.ClientConfig] is the root model. It can be
built from a YAML file, a dictionary, or defaults. The API key is never read
from configuration files by default: it is resolved from the environment
variable named by ``ApiConfig.api_key_env`` and held as a ``SecretStr``.

Examples:
    ```yaml
    cluster: devnet
    api:
      timeout: 15.0
    ledger:
      batch_size: 50
      retry:
        max_attempts: 5
    logging:
      level: DEBUG
      json_output: true
    ```

    ```python
    config = ClientConfig.from_yaml("nina.yaml")
    config.ledger.rpc_endpoint   # 'https://api.devnet.solana.com'
    ```

See Also:
    [Nina][ninasdk.client.Nina]: Facade built from a ``ClientConfig``.
    [RpcLedgerGateway][ninasdk.ledger.rpc.RpcLedgerGateway]: Consumes
        [LedgerConfig][ninasdk.core.config.LedgerConfig].
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import (
    BaseModel,
    Field,
    SecretStr,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from solders.pubkey import Pubkey

from ninasdk.exceptions import ConfigurationError
from ninasdk.models.constants import (
    CLUSTER_RPC_ENDPOINTS,
    DEFAULT_API_ENDPOINT,
    NINA_PROGRAM_ID,
    Cluster,
)

from .yaml import load_yaml


# getMultipleAccounts hard limit per request.
MAX_BATCH_SIZE = 100


class RetryConfig(BaseModel):
    """Retry strategy for transient ledger failures.

    Note:
        Exponential backoff doubles the delay each attempt
        (``initial_delay * 2^attempt``), linear backoff grows by
        ``initial_delay`` per attempt. Both are capped at ``max_delay``.
    """

    max_attempts: int = Field(default=3, ge=1, le=10, description="Max attempts per request")
    initial_delay: float = Field(default=0.5, ge=0.0, description="Initial retry delay")
    max_delay: float = Field(default=8.0, ge=0.0, description="Maximum retry delay")
    exponential_backoff: bool = Field(default=True, description="Use exponential backoff")

    @field_validator("max_delay")
    @classmethod
    def validate_max_delay(cls, v: float, info: ValidationInfo) -> float:
        """Ensure max_delay >= initial_delay."""
        initial_delay = info.data.get("initial_delay", 0.5)
        if v < initial_delay:
            raise ValueError(f"max_delay ({v}) must be >= initial_delay ({initial_delay})")
        return v

    def delay_for(self, attempt: int) -> float:
        """Backoff delay before retrying after the zero-based *attempt*."""
        if self.exponential_backoff:
            delay = self.initial_delay * (2**attempt)
        else:
            delay = self.initial_delay * (attempt + 1)
        return float(min(delay, self.max_delay))


class ApiConfig(BaseModel):
    """Nina JSON API connection settings.

    The key is optional: public endpoints work without one. When
    ``api_key`` is absent from the input, it is looked up in the
    environment variable named by ``api_key_env``.
    """

    endpoint: str = Field(default=DEFAULT_API_ENDPOINT, min_length=1)
    api_key_env: str = Field(default="NINA_API_KEY", min_length=1)
    api_key: SecretStr | None = Field(default=None, description="Loaded from api_key_env")
    timeout: float = Field(default=30.0, gt=0.0, description="Request timeout in seconds")
    max_response_size: int = Field(
        default=10 * 1024 * 1024, ge=1024, description="Maximum response body in bytes"
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_api_key(cls, data: Any) -> Any:
        """Resolve the API key from the environment variable."""
        if isinstance(data, dict) and data.get("api_key") is None:
            env_var = data.get("api_key_env", "NINA_API_KEY")
            value = os.getenv(env_var)
            if value:
                data = {**data, "api_key": SecretStr(value)}
        return data

    @field_validator("endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class LedgerConfig(BaseModel):
    """Ledger RPC settings.

    ``rpc_endpoint`` left empty is filled from the cluster by
    [ClientConfig][ninasdk.core.config.ClientConfig].
    """

    rpc_endpoint: str = Field(default="", description="JSON-RPC URL; empty means cluster default")
    program_id: str = Field(default=NINA_PROGRAM_ID, description="Owning program address")
    commitment: Literal["processed", "confirmed", "finalized"] = "confirmed"
    batch_size: int = Field(default=MAX_BATCH_SIZE, ge=1, le=MAX_BATCH_SIZE)
    timeout: float = Field(default=30.0, gt=0.0, description="Per-request timeout in seconds")
    max_response_size: int = Field(
        default=32 * 1024 * 1024, ge=1024, description="Maximum RPC response body in bytes"
    )
    retry: RetryConfig = Field(default_factory=RetryConfig)

    @field_validator("program_id")
    @classmethod
    def validate_program_id(cls, v: str) -> str:
        try:
            Pubkey.from_string(v)
        except ValueError as e:
            raise ValueError(f"program_id is not a valid address: {v}") from e
        return v


class LoggingConfig(BaseModel):
    """Log level and output format for the ``ninasdk`` logger hierarchy."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = False
    max_value_length: int = Field(default=1000, ge=16)


class ClientConfig(BaseModel):
    """Root configuration for the [Nina][ninasdk.client.Nina] facade."""

    cluster: Cluster = Cluster.MAINNET
    api: ApiConfig = Field(default_factory=ApiConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def fill_rpc_endpoint(self) -> ClientConfig:
        if not self.ledger.rpc_endpoint:
            self.ledger = self.ledger.model_copy(
                update={"rpc_endpoint": CLUSTER_RPC_ENDPOINTS[self.cluster]}
            )
        return self

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> ClientConfig:
        """Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the YAML is malformed or fails validation.
        """
        return cls.from_dict(load_yaml(config_path))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientConfig:
        """Build configuration from a dictionary.

        Raises:
            ConfigurationError: If validation fails.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid client configuration: {e}") from e
