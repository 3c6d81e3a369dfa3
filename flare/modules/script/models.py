"""
Script data model.

A Script is the immutable, ordered list of Directives produced by the
parser. Argument values are literals, References to names bound by an
earlier directive, or nested Directives evaluated before their caller.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class Reference:
    """A name bound by an earlier directive's assignment."""

    name: str
    line: int = 0


@dataclass(frozen=True)
class Directive:
    """One call in a flare.file."""

    name: str
    args: Tuple[Any, ...] = ()
    kwargs: Tuple[Tuple[str, Any], ...] = ()
    position: int = 0  # source line
    target: Optional[str] = None

    def describe(self) -> str:
        parts = [_describe_value(a) for a in self.args]
        parts += [f"{k}={_describe_value(v)}" for k, v in self.kwargs]
        call = f"{self.name}({', '.join(parts)})"
        return f"{self.target} = {call}" if self.target else call


def _describe_value(value: Any) -> str:
    if isinstance(value, Directive):
        return value.describe()
    if isinstance(value, Reference):
        return value.name
    if isinstance(value, ListValue):
        return "[" + ", ".join(_describe_value(v) for v in value.items) + "]"
    if isinstance(value, DictValue):
        return "{" + ", ".join(f"{k!r}: {_describe_value(v)}" for k, v in value.items) + "}"
    return repr(value)


@dataclass(frozen=True)
class ListValue:
    """List literal whose items may still contain references or calls."""

    items: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class DictValue:
    """Dict literal whose values may still contain references or calls."""

    items: Tuple[Tuple[Any, Any], ...] = ()


@dataclass(frozen=True)
class Script:
    """Ordered sequence of directives plus the source it was parsed from."""

    directives: Tuple[Directive, ...] = ()
    source: str = field(default="", repr=False)

    def __iter__(self) -> Iterator[Directive]:
        return iter(self.directives)

    def __len__(self) -> int:
        return len(self.directives)

    def names(self) -> List[str]:
        return [d.name for d in self.directives]
