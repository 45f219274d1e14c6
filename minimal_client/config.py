"""
Configuration settings for the AddTwoInts client and server
"""
import os
from typing import Dict, Any, Mapping, Optional
from dataclasses import dataclass

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ClientConfig:
    """Runtime configuration shared by the client and server entry points

    The ENDPOINTS directory is not part of it; it is read when the endpoint
    name is resolved.
    """
    server_address: str = "tcp://localhost:5555"
    bind_address: str = "tcp://*:5555"
    timeout_ms: int = 5000
    wait_interval_s: float = 1.0
    log_level: str = "INFO"

    # Tracing configuration
    enable_telemetry: bool = False
    otlp_endpoint: str = "localhost:4317"
    service_name: str = "minimal_client"

    def __post_init__(self):
        self.log_level = (self.log_level or "INFO").upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """Create config from environment variables"""
        if environ is None:
            environ = os.environ
        return cls(
            server_address=environ.get("MINIMAL_CLIENT_SERVER_ADDRESS", "tcp://localhost:5555"),
            bind_address=environ.get("MINIMAL_SERVER_BIND_ADDRESS", "tcp://*:5555"),
            timeout_ms=_env_int(environ, "MINIMAL_CLIENT_TIMEOUT_MS", 5000),
            wait_interval_s=_env_float(environ, "MINIMAL_CLIENT_WAIT_INTERVAL_S", 1.0),
            log_level=environ.get("LOG_LEVEL", "INFO"),
            enable_telemetry=_env_bool(environ, "MINIMAL_CLIENT_TELEMETRY", False),
            otlp_endpoint=environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", "localhost:4317"),
            service_name=environ.get("OTEL_SERVICE_NAME", "minimal_client"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging"""
        return {
            "server_address": self.server_address,
            "bind_address": self.bind_address,
            "timeout_ms": self.timeout_ms,
            "wait_interval_s": self.wait_interval_s,
            "log_level": self.log_level,
            "enable_telemetry": self.enable_telemetry,
            "otlp_endpoint": self.otlp_endpoint,
            "service_name": self.service_name,
        }
