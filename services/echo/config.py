"""
Echo service configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

import sys
from typing import Literal, Tuple

from pydantic import Field, field_validator

from services.common.core.config import BaseAppConfig


class EchoConfig(BaseAppConfig):
    """
    Configuration management for the Echo service.
    """

    # Server settings
    BIND_ADDR: str = Field(default="0.0.0.0:3000", description="Listen address")
    LOG_CONFIG_PATH: str = Field(
        default="config/echo_log.yaml", description="YAML logging definition file path"
    )

    # Basic auth (read-only, shared by every request)
    BASIC_AUTH_PASSWORD: str = Field(default="passwd", description="Expected Basic password")
    AUTH_REALM: str = Field(default="Fake Realm", description="Realm in the Basic challenge")

    # "pairs" repeats a header name as a duplicate JSON key per value.
    # "lists" maps each header name to an array of its values.
    HEADER_LAYOUT: Literal["pairs", "lists"] = Field(
        default="pairs", description="Echoed header object layout"
    )

    # FastAPI settings
    root_path: str = Field(default="", description="API root path (for proxy)")

    @field_validator("BIND_ADDR")
    @classmethod
    def _check_bind_addr(cls, value: str) -> str:
        split_bind_addr(value)
        return value

    def host_port(self) -> Tuple[str, int]:
        return split_bind_addr(self.BIND_ADDR)

    @property
    def basic_challenge(self) -> str:
        """WWW-Authenticate value sent with every Basic rejection."""
        return f'Basic realm="{self.AUTH_REALM}"'


def split_bind_addr(value: str) -> Tuple[str, int]:
    """
    Split "host:port" (or "[v6]:port") into its parts.

    Raises:
        ValueError: when the port is missing or out of range
    """
    host, sep, port_str = value.rpartition(":")
    if not sep or not port_str.isdigit():
        raise ValueError(f"Invalid bind address: {value!r}")
    port = int(port_str)
    if not 0 <= port <= 65535:
        raise ValueError(f"Port out of range in bind address: {value!r}")
    return host.strip("[]") or "0.0.0.0", port


def load_config() -> EchoConfig:
    """
    Load config from the environment, failing fast on invalid values.
    """
    try:
        return EchoConfig()
    except Exception as e:
        sys.stderr.write(f"Failed to load configuration: {e}\n")
        raise
