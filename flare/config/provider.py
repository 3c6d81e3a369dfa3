"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Protocol


@dataclass
class RunConfig:
    """Run configuration."""
    file: str
    output: str
    default_kubeconfig: str
    command_timeout: int
    log_level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_run_config(self) -> RunConfig:
        """Get run configuration."""
        ...


def default_kubeconfig_path() -> str:
    """Well-known local kubeconfig location ($HOME/.kube/config)."""
    return os.path.join(os.path.expanduser("~"), ".kube", "config")


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_run_config(self) -> RunConfig:
        """Get run configuration from environment variables."""
        timeout = os.getenv("FLARE_COMMAND_TIMEOUT", "30")
        try:
            command_timeout = int(timeout)
        except ValueError:
            raise ValueError(
                f"FLARE_COMMAND_TIMEOUT must be an integer number of seconds, got {timeout!r}"
            )
        if command_timeout <= 0:
            raise ValueError("FLARE_COMMAND_TIMEOUT must be positive")

        return RunConfig(
            file=os.getenv("FLARE_FILE", "flare.file"),
            output=os.getenv("FLARE_OUTPUT", "out.tar.gz"),
            default_kubeconfig=os.getenv("FLARE_DEFAULT_KUBECONFIG") or default_kubeconfig_path(),
            command_timeout=command_timeout,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
