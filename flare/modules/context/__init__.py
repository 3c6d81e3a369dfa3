"""
Context Module - Black Box Interface

Purpose: Carry run-scoped state between built-in invocations
Interface: ExecutionContext.set(), get(), has(), snapshot()
Hidden: Storage of entries

One context exists per run and is discarded when the run ends.
"""

from .context import ExecutionContext

__all__ = ["ExecutionContext"]
