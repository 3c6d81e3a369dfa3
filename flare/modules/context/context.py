"""
Execution context for a single flare run.

Built-ins use the context as an implicit side channel: a built-in writes
its last resolved value under its own identity (e.g. "kube_config") and
later directives that omit the value read it back as the run-wide default.
The engine owns the context exclusively; no concurrent run may share one.
"""

from typing import Any, Dict, Iterator


class ExecutionContext:
    """Mutable key/value store scoped to one run."""

    def __init__(self):
        self._entries: Dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        """Set the current value for key, replacing any earlier one."""
        self._entries[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get the last value set for key, or default if never set."""
        return self._entries.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._entries

    def snapshot(self) -> Dict[str, Any]:
        """Shallow copy of the current entries."""
        return dict(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ExecutionContext(keys={sorted(self._entries)})"
