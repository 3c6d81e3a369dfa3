"""
kube_config built-in: resolves which kubeconfig file a run talks to.

A script establishes the kubeconfig either from an explicit path or from a
cluster-lifecycle provider object:

    kube_config(path="/home/me/.kube/config")
    kube_config(capi_provider=capv_provider(kubeconfig="/tmp/wc.kubeconfig"))

The resolved value is stored in the execution context under "kube_config"
and becomes the run-wide default. Directives that need a kubeconfig call
get_effective_config(), which prefers a value attached to the directive
itself and falls back to the run-wide default.
"""

import logging
from typing import Any, Optional

from flare.errors import (
    AmbiguousSource,
    ConfigSourceError,
    InvalidAttributeType,
    InvalidDefaultConfiguration,
    MissingSource,
    NoConfigurationAvailable,
    UnsupportedProvider,
)
from flare.modules.context import ExecutionContext

from .registry import Builtin, Kwargs, unpack_args
from .values import ProviderObject, Struct

logger = logging.getLogger("flare.builtins.kube_config")

KUBE_CONFIG = "kube_config"
CAPV_PROVIDER = "capv_provider"
PATH_ATTR = "path"


def resolve_config(
    path: Optional[str],
    provider: Optional[ProviderObject],
    context: ExecutionContext,
) -> Struct:
    """
    Resolve a kubeconfig source and register it as the run default.

    Args:
        path: Explicit kubeconfig path, used verbatim (no existence check)
        provider: Provider object exposing a kubeconfig path
        context: Execution context of the current run

    Returns:
        Struct tagged kube_config with a path field

    Raises:
        AmbiguousSource: both path and provider supplied
        MissingSource: neither supplied
        UnsupportedProvider: provider tag is not capv_provider
        AttributeNotFound / InvalidAttributeType: provider kubeconfig missing or not a string
    """
    if path and provider is not None:
        raise AmbiguousSource(f"{KUBE_CONFIG}: need either path or capi_provider, not both")
    if not path and provider is None:
        raise MissingSource(f"{KUBE_CONFIG}: need either path or capi_provider")

    if provider is not None:
        tag = provider.type_tag()
        if tag is not None and tag != CAPV_PROVIDER:
            raise UnsupportedProvider(tag)
        path = provider.kubeconfig_path()
        logger.debug(f"kubeconfig {path} supplied by provider {tag}")

    resolved = Struct(KUBE_CONFIG, {PATH_ATTR: path})
    context.set(KUBE_CONFIG, resolved)
    logger.info(f"Using kubeconfig {path}")
    return resolved


def kube_config_fn(context: ExecutionContext, args, kwargs: Kwargs) -> Struct:
    """Starlark-style entry point: kube_config(path=..., capi_provider=...)."""
    params = unpack_args(
        KUBE_CONFIG,
        args,
        kwargs,
        [("path?", str), ("capi_provider?", ProviderObject)],
        allow_positional=False,
    )
    return resolve_config(params["path"], params["capi_provider"], context)


def add_default_kube_config(context: ExecutionContext, path: str) -> Struct:
    """Seed the run-wide kubeconfig default before any directive runs."""
    return resolve_config(path, None, context)


def _path_from(value: Any) -> str:
    if not isinstance(value, Struct):
        raise InvalidAttributeType(KUBE_CONFIG, "struct", type(value).__name__)
    path = value.attr(PATH_ATTR)
    if not isinstance(path, str):
        raise InvalidAttributeType(PATH_ATTR, "str", type(path).__name__)
    return path


def get_effective_config(override: Any, context: ExecutionContext) -> str:
    """
    Get the kubeconfig path a directive should use.

    An override attached to the directive wins when a path can be read from
    it; otherwise the run-wide default from the context is used. A malformed
    override is not an error, it falls through to the default.

    Raises:
        NoConfigurationAvailable: no override and no run default
        InvalidDefaultConfiguration: run default is malformed
    """
    if override is not None:
        try:
            return _path_from(override)
        except ConfigSourceError as e:
            logger.debug(f"Ignoring inline kube_config ({e}), using run default")

    default = context.get(KUBE_CONFIG)
    if default is None:
        raise NoConfigurationAvailable(
            "no kube_config established for this run; call kube_config() first"
        )
    try:
        return _path_from(default)
    except ConfigSourceError as e:
        raise InvalidDefaultConfiguration(f"run default kube_config is malformed: {e}") from e


KUBE_CONFIG_BUILTIN = Builtin(KUBE_CONFIG, kube_config_fn, "Resolve and register the kubeconfig")
