"""
Struct-producing built-ins used to describe targets in a flare.file.
"""

from flare.errors import InvalidArguments
from flare.modules.context import ExecutionContext

from .kube_config import CAPV_PROVIDER
from .registry import Builtin, Kwargs, kwarg_pairs, unpack_args
from .values import Struct

STRUCT = "struct"


def capv_provider_fn(context: ExecutionContext, args, kwargs: Kwargs) -> Struct:
    """capv_provider(kubeconfig=..., workload_cluster=...) for Cluster API vSphere."""
    params = unpack_args(
        CAPV_PROVIDER,
        args,
        kwargs,
        [("kubeconfig", str), ("workload_cluster?", str)],
        allow_positional=False,
    )
    fields = {name: value for name, value in params.items() if value is not None}
    return Struct(CAPV_PROVIDER, fields)


def struct_fn(context: ExecutionContext, args, kwargs: Kwargs) -> Struct:
    """struct(**fields) builds a generic record."""
    if args:
        raise InvalidArguments(STRUCT, None, "unexpected positional arguments")
    fields = {}
    for key, value in kwarg_pairs(kwargs):
        if key in fields:
            raise InvalidArguments(STRUCT, key, f"got multiple values for parameter {key!r}")
        fields[key] = value
    return Struct(STRUCT, fields)


CAPV_PROVIDER_BUILTIN = Builtin(CAPV_PROVIDER, capv_provider_fn, "Cluster API vSphere provider")
STRUCT_BUILTIN = Builtin(STRUCT, struct_fn, "Generic record")
