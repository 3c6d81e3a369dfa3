"""
Builtins Module - Black Box Interface

Purpose: Runtime operations callable from a flare.file
Interface: default_registry(), BuiltinRegistry, unpack_args(),
           resolve_config(), get_effective_config()
Hidden: Argument coercion rules, command execution details

Built-ins share defaults through the execution context only.
"""

from .capture import DEFAULT_COMMAND_TIMEOUT, capture_builtins
from .kube_config import (
    CAPV_PROVIDER,
    KUBE_CONFIG,
    KUBE_CONFIG_BUILTIN,
    add_default_kube_config,
    get_effective_config,
    resolve_config,
)
from .providers import CAPV_PROVIDER_BUILTIN, STRUCT_BUILTIN
from .registry import Builtin, BuiltinRegistry, unpack_args
from .values import Evidence, ProviderObject, Struct


def default_registry(command_timeout: int = DEFAULT_COMMAND_TIMEOUT) -> BuiltinRegistry:
    """Registry populated with every shipped built-in."""
    return BuiltinRegistry(
        [KUBE_CONFIG_BUILTIN, CAPV_PROVIDER_BUILTIN, STRUCT_BUILTIN]
        + capture_builtins(command_timeout)
    )


__all__ = [
    "Builtin",
    "BuiltinRegistry",
    "CAPV_PROVIDER",
    "Evidence",
    "KUBE_CONFIG",
    "ProviderObject",
    "Struct",
    "add_default_kube_config",
    "default_registry",
    "get_effective_config",
    "resolve_config",
    "unpack_args",
]
