"""
Value types exchanged between built-ins.

Struct is the record type built-ins return: a constructor tag plus named,
read-only fields. It also implements the ProviderObject capability so a
provider built by a script can be handed to kube_config directly.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, runtime_checkable

from flare.errors import AttributeNotFound, InvalidAttributeType

KUBECONFIG_ATTR = "kubeconfig"


@runtime_checkable
class ProviderObject(Protocol):
    """Capability a cluster-lifecycle provider must expose to kube_config."""

    def type_tag(self) -> Optional[str]:
        """Provider identifier, or None if the object carries no tag."""
        ...

    def kubeconfig_path(self) -> str:
        """
        Path of the kubeconfig the provider points at.

        Raises:
            AttributeNotFound: provider has no kubeconfig attribute
            InvalidAttributeType: kubeconfig attribute is not a string
        """
        ...


class Struct:
    """Immutable record with a constructor tag and named fields."""

    __slots__ = ("_constructor", "_fields")

    def __init__(self, constructor: Optional[str], fields: Mapping[str, Any]):
        self._constructor = constructor
        self._fields = MappingProxyType(dict(fields))

    @property
    def constructor(self) -> Optional[str]:
        return self._constructor

    def attr(self, name: str) -> Any:
        """Get a field value, raising AttributeNotFound if it is absent."""
        if name not in self._fields:
            raise AttributeNotFound(name, owner=self._constructor)
        return self._fields[name]

    def attr_names(self) -> Iterable[str]:
        return sorted(self._fields)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._fields)

    # ProviderObject capability

    def type_tag(self) -> Optional[str]:
        return self._constructor if isinstance(self._constructor, str) else None

    def kubeconfig_path(self) -> str:
        value = self.attr(KUBECONFIG_ATTR)
        if not isinstance(value, str):
            raise InvalidAttributeType(KUBECONFIG_ATTR, "str", type(value).__name__)
        return value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Struct):
            return NotImplemented
        return self._constructor == other._constructor and dict(self._fields) == dict(other._fields)

    def __hash__(self) -> int:
        return hash((self._constructor, tuple(sorted(self._fields))))

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={self._fields[k]!r}" for k in sorted(self._fields))
        return f"{self._constructor}({body})"


@dataclass(frozen=True)
class Evidence:
    """One item of collected output destined for the archive."""

    file_name: str
    content: bytes
    description: str = ""
    exit_code: Optional[int] = None
