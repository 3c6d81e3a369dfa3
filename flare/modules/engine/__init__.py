"""
Engine Module - Black Box Interface

Purpose: Execute a parsed flare.file and hand results to the archive writer
Interface: ExecutionEngine.execute(), default_script_body()
Hidden: Reference resolution, evidence collection, manifest assembly

Runs are sequential and fail fast; each run gets its own execution context.
"""

from .defaults import DEFAULT_SCRIPT_TEMPLATE, default_script_body
from .engine import ExecutionEngine, ExecutionResult, StepRecord

__all__ = [
    "DEFAULT_SCRIPT_TEMPLATE",
    "ExecutionEngine",
    "ExecutionResult",
    "StepRecord",
    "default_script_body",
]
