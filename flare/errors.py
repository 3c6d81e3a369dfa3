"""
Error taxonomy for flare runs.

All errors derive from FlareError so the CLI can report them uniformly.
Configuration source errors are unrecoverable at the point of detection
and are surfaced through the engine unchanged (wrapped once in
DirectiveError so the failing directive can be identified).
"""

from typing import Optional


class FlareError(Exception):
    pass


class ConfigSourceError(FlareError):
    """Base for kube_config resolution failures."""


class AmbiguousSource(ConfigSourceError):
    pass


class MissingSource(ConfigSourceError):
    pass


class UnsupportedProvider(ConfigSourceError):
    def __init__(self, tag: str):
        super().__init__(f"unknown capi provider: {tag}")
        self.tag = tag


class AttributeNotFound(ConfigSourceError):
    def __init__(self, name: str, owner: Optional[str] = None):
        where = f" on {owner}" if owner else ""
        super().__init__(f"attribute {name!r} not found{where}")
        self.name = name


class InvalidAttributeType(ConfigSourceError):
    def __init__(self, name: str, expected: str, actual: str):
        super().__init__(f"attribute {name!r} must be {expected}, got {actual}")
        self.name = name


class NoConfigurationAvailable(ConfigSourceError):
    pass


class InvalidDefaultConfiguration(ConfigSourceError):
    pass


class InvalidArguments(FlareError):
    """A built-in received malformed arguments."""

    def __init__(self, fn_name: str, param: Optional[str], message: str):
        super().__init__(f"{fn_name}: {message}")
        self.fn_name = fn_name
        self.param = param


class UnknownBuiltin(FlareError):
    def __init__(self, name: str):
        super().__init__(f"undefined built-in: {name}")
        self.name = name


class ScriptParseError(FlareError):
    def __init__(self, message: str, line: Optional[int] = None):
        prefix = f"line {line}: " if line else ""
        super().__init__(f"{prefix}{message}")
        self.line = line


class ActionError(FlareError):
    """A diagnostic action could not be carried out."""


class RunCancelled(FlareError):
    pass


class DirectiveError(FlareError):
    """Wraps the first fatal error of a run with the failing directive."""

    def __init__(self, name: str, position: int, cause: Exception):
        super().__init__(f"directive {name!r} (line {position}) failed: {cause}")
        self.name = name
        self.position = position
        self.cause = cause
