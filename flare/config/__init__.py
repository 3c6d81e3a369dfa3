"""Configuration provider for flare runs."""

from .provider import ConfigProvider, EnvConfigProvider, RunConfig

__all__ = ["ConfigProvider", "EnvConfigProvider", "RunConfig"]
