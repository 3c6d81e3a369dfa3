"""
Built-in registry and invocation protocol.

Every built-in has the same calling convention:

    fn(context, args, kwargs) -> value

where args is a tuple of positional values and kwargs a sequence of
(name, value) pairs in call order. unpack_args() performs the argument
validation shared by all built-ins.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from flare.errors import InvalidArguments, UnknownBuiltin
from flare.modules.context import ExecutionContext

logger = logging.getLogger("flare.builtins")

Kwargs = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]
BuiltinFn = Callable[[ExecutionContext, Tuple[Any, ...], Kwargs], Any]
ParamSpec = Tuple[str, Any]


@dataclass(frozen=True)
class Builtin:
    """A named runtime operation callable from a flare.file."""

    name: str
    fn: BuiltinFn
    doc: str = ""

    def __call__(self, context: ExecutionContext, args=(), kwargs: Kwargs = ()) -> Any:
        return self.fn(context, tuple(args), kwargs)


class BuiltinRegistry:
    """Maps built-in names to Builtin records."""

    def __init__(self, builtins: Optional[Iterable[Builtin]] = None):
        self._builtins: Dict[str, Builtin] = {}
        for builtin in builtins or ():
            self.register(builtin)

    def register(self, builtin: Builtin) -> None:
        """
        Register a built-in.

        Raises:
            ValueError: If a built-in with the same name is already registered
        """
        if builtin.name in self._builtins:
            raise ValueError(f"built-in {builtin.name!r} already registered")
        self._builtins[builtin.name] = builtin
        logger.debug(f"Registered built-in {builtin.name}")

    def get(self, name: str) -> Builtin:
        try:
            return self._builtins[name]
        except KeyError:
            raise UnknownBuiltin(name) from None

    def names(self) -> List[str]:
        return sorted(self._builtins)

    def __contains__(self, name: object) -> bool:
        return name in self._builtins

    def __len__(self) -> int:
        return len(self._builtins)


def kwarg_pairs(kwargs: Kwargs) -> List[Tuple[str, Any]]:
    if isinstance(kwargs, Mapping):
        return list(kwargs.items())
    return list(kwargs)


def _type_name(typ: Any) -> str:
    if isinstance(typ, tuple):
        return " or ".join(t.__name__ for t in typ)
    return typ.__name__


def _coerce(fn_name: str, name: str, value: Any, typ: Any) -> Any:
    """Check value against typ, applying the few coercions allowed."""
    if typ is None:
        return value
    types = typ if isinstance(typ, tuple) else (typ,)

    # bool is an int subclass but never accepted where a number is wanted
    if isinstance(value, bool) and bool not in types:
        raise InvalidArguments(
            fn_name, name, f"for parameter {name}: got bool, want {_type_name(typ)}"
        )
    if float in types and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if list in types and isinstance(value, tuple):
        return list(value)
    if not isinstance(value, types):
        raise InvalidArguments(
            fn_name,
            name,
            f"for parameter {name}: got {type(value).__name__}, want {_type_name(typ)}",
        )
    return value


def unpack_args(
    fn_name: str,
    args: Sequence[Any],
    kwargs: Kwargs,
    params: Sequence[ParamSpec],
    allow_positional: bool = True,
) -> Dict[str, Any]:
    """
    Unpack and validate built-in arguments.

    Args:
        fn_name: Built-in name used in error messages
        args: Positional values
        kwargs: Keyword values as a mapping or (name, value) pairs
        params: (name, type) pairs; a trailing "?" on the name marks the
            parameter optional, type None accepts any value
        allow_positional: False for keyword-only built-ins

    Returns:
        Dictionary of parameter name to value; optional parameters that
        were not supplied map to None

    Raises:
        InvalidArguments: naming the offending parameter
    """
    declared = [(param.rstrip("?"), param.endswith("?"), typ) for param, typ in params]
    names = [name for name, _, _ in declared]

    if args and not allow_positional:
        raise InvalidArguments(
            fn_name, names[0] if names else None,
            f"got {len(args)} positional arguments, want keyword arguments only",
        )
    if len(args) > len(declared):
        raise InvalidArguments(
            fn_name, None, f"got {len(args)} arguments, want at most {len(declared)}"
        )

    supplied: Dict[str, Any] = {}
    for name, value in zip(names, args):
        supplied[name] = value

    for key, value in kwarg_pairs(kwargs):
        if key not in names:
            raise InvalidArguments(fn_name, key, f"unexpected keyword argument {key!r}")
        if key in supplied:
            raise InvalidArguments(fn_name, key, f"got multiple values for parameter {key!r}")
        supplied[key] = value

    result: Dict[str, Any] = {}
    for name, optional, typ in declared:
        value = supplied.get(name)
        if value is None:
            if not optional:
                raise InvalidArguments(fn_name, name, f"missing argument for {name}")
            result[name] = None
            continue
        result[name] = _coerce(fn_name, name, value, typ)
    return result
