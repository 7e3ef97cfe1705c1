"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import List, Optional, Protocol

DISCOVERY_MODES = ("standalone", "sentinel", "cluster")


@dataclass
class GridConfig:
    """Data grid configuration."""
    cluster_name: str
    discovery: str
    host: str
    port: int
    port_count: int
    db: int
    password: Optional[str]

    def __post_init__(self):
        if self.discovery not in DISCOVERY_MODES:
            raise ValueError(
                f"GRID_DISCOVERY must be one of {', '.join(DISCOVERY_MODES)}, got '{self.discovery}'"
            )
        if self.port_count < 1:
            raise ValueError(f"GRID_PORT_COUNT must be at least 1, got {self.port_count}")


@dataclass
class SanitizerConfig:
    """Session attribute sanitizer configuration."""
    internal_prefix: str
    framework_prefix: str
    allowed_keys: List[str]


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_grid_config(self) -> GridConfig:
        """Get data grid configuration."""
        ...

    def get_sanitizer_config(self) -> SanitizerConfig:
        """Get sanitizer configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_grid_config(self) -> GridConfig:
        """Get data grid configuration from environment variables."""
        # Port might be in tcp://host:port format from K8s service links
        port_env = os.getenv("GRID_PORT", "6379")
        port = int(port_env.split(":")[-1]) if port_env.startswith("tcp://") else int(port_env)

        return GridConfig(
            cluster_name=os.getenv("GRID_CLUSTER_NAME", "session-cluster"),
            discovery=os.getenv("GRID_DISCOVERY", "standalone").lower(),
            host=os.getenv("GRID_HOST", "localhost"),
            port=port,
            port_count=int(os.getenv("GRID_PORT_COUNT", "1")),
            db=int(os.getenv("GRID_DB", "0")),
            password=os.getenv("GRID_PASSWORD") or None,
        )

    def get_sanitizer_config(self) -> SanitizerConfig:
        """Get sanitizer configuration from environment variables."""
        allowed_keys = os.getenv("SANITIZER_ALLOWED_KEYS", "userMessage,saveTime").split(",")

        return SanitizerConfig(
            internal_prefix=os.getenv("SANITIZER_INTERNAL_PREFIX", "app.session."),
            framework_prefix=os.getenv("SANITIZER_FRAMEWORK_PREFIX", "sessiongrid.session"),
            allowed_keys=[key.strip() for key in allowed_keys if key.strip()],
        )
