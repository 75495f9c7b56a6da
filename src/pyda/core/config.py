from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ServerConfig(BaseModel):
    """Configuration of the DA service process.

    This model loads configuration from environment variables and defaults.
    Backend-specific settings live in the file named by da_config_file and
    are handed to the client's init as raw bytes.
    """
    # Listener Configuration
    host: str = Field(
        default="127.0.0.1",
        description="Interface the DA service listens on"
    )
    port: int = Field(
        default=1234,
        description="TCP port the DA service listens on"
    )

    # Backend Configuration
    backend: str = Field(
        default="avail",
        description="Name of the DA backend to serve"
    )
    namespace: str = Field(
        default="0000000000000000",
        description="Namespace ID (16 hex characters) or namespace name"
    )
    da_config_file: Optional[Path] = Field(
        default=None,
        description="Path to the JSON backend configuration"
    )
    kv_path: Path = Field(
        default=Path.home() / ".pyda" / "kv.db",
        description="Path to the SQLite key-value store"
    )

    # Request Handling
    request_timeout: float = Field(
        default=60.0,
        description="Default timeout in seconds for one served request"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level for the service"
    )

    @field_validator('port')
    def validate_port(cls, value):
        """Validate port is in the TCP range (0 picks a free port)."""
        if not 0 <= value <= 65535:
            raise ValueError("Port must be between 0 and 65535")
        return value

    @field_validator('request_timeout')
    def validate_request_timeout(cls, value):
        """Validate request timeout is positive."""
        if value <= 0:
            raise ValueError("Request timeout must be greater than 0")
        return value

    model_config = {
        "validate_assignment": True,
    }

    def read_da_config(self) -> bytes:
        """Raw backend configuration bytes, empty when no file is set."""
        if self.da_config_file is None:
            return b""
        return self.da_config_file.read_bytes()


def load_config_from_env() -> ServerConfig:
    """Load configuration from environment variables.

    Returns:
        ServerConfig: Configuration instance with values from environment
    """
    import os

    env_settings = {}

    env_mappings = {
        "PYDA_HOST": "host",
        "PYDA_PORT": "port",
        "PYDA_BACKEND": "backend",
        "PYDA_NAMESPACE": "namespace",
        "PYDA_DA_CONFIG_FILE": "da_config_file",
        "PYDA_KV_PATH": "kv_path",
        "PYDA_REQUEST_TIMEOUT": "request_timeout",
        "PYDA_LOG_LEVEL": "log_level",
    }

    for env_var, field_name in env_mappings.items():
        if env_var in os.environ:
            value = os.environ[env_var]

            if field_name in ["da_config_file", "kv_path"]:
                value = Path(value)
            elif field_name == "port":
                value = int(value)
            elif field_name == "request_timeout":
                value = float(value)

            env_settings[field_name] = value

    return ServerConfig(**env_settings)
