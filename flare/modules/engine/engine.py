"""
Execution engine for flare scripts.

Runs the directives of a Script strictly in declaration order against a
single ExecutionContext created for the run. The first failing directive
aborts the run: its error is raised as DirectiveError and no archive is
written. When every directive succeeds, the collected evidence and a run
manifest are handed to the archive writer.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from flare import __version__
from flare.errors import DirectiveError, InvalidArguments, RunCancelled
from flare.modules.archive import ArchiveWriter, DirectiveRecord, RunManifest
from flare.modules.builtins import (
    KUBE_CONFIG,
    BuiltinRegistry,
    Evidence,
    Struct,
    add_default_kube_config,
    default_registry,
)
from flare.modules.context import ExecutionContext
from flare.modules.script import DictValue, Directive, ListValue, Reference, Script

logger = logging.getLogger("flare.engine")


@dataclass
class StepRecord:
    """State after one top-level directive."""

    index: int
    name: str
    position: int
    context: Dict[str, Any]


@dataclass
class ExecutionResult:
    """Outcome of a successful run."""

    archive_path: str
    steps: List[StepRecord] = field(default_factory=list)
    evidence: List[Evidence] = field(default_factory=list)
    bindings: Dict[str, Any] = field(default_factory=dict)


def _collect_evidence(value: Any) -> List[Evidence]:
    if isinstance(value, Evidence):
        return [value]
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, Evidence)]
    return []


class ExecutionEngine:
    """Drives a parsed Script to completion."""

    def __init__(
        self,
        script: Script,
        registry: Optional[BuiltinRegistry] = None,
        archive_writer: Optional[ArchiveWriter] = None,
        default_kube_config: Optional[str] = None,
    ):
        """
        Initialize engine.

        Args:
            script: Parsed script to run
            registry: Built-ins available to the script (default: all shipped built-ins)
            archive_writer: Packager for collected evidence
            default_kube_config: If set, seeded as the run-wide kubeconfig
                before the first directive
        """
        self.script = script
        self.registry = registry if registry is not None else default_registry()
        self.archive_writer = archive_writer if archive_writer is not None else ArchiveWriter()
        self.default_kube_config = default_kube_config

    def execute(
        self,
        output_path: str,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> ExecutionResult:
        """
        Run every directive and write the archive.

        Args:
            output_path: Archive destination
            cancel_event: Set to abort the run before the next directive
            deadline: time.monotonic() value after which the run aborts

        Returns:
            ExecutionResult with the archive path and per-step trace

        Raises:
            DirectiveError: first directive failure
            RunCancelled: cancellation or deadline observed between directives
        """
        started_at = datetime.now(UTC)
        context = ExecutionContext()
        if self.default_kube_config:
            add_default_kube_config(context, self.default_kube_config)

        bindings: Dict[str, Any] = {}
        steps: List[StepRecord] = []
        evidence: List[Evidence] = []
        records: List[DirectiveRecord] = []

        logger.info(f"Running {len(self.script)} directive(s)")
        for index, directive in enumerate(self.script):
            self._check_cancelled(cancel_event, deadline, directive)

            logger.debug(f"[{index}] line {directive.position}: {directive.describe()}")
            try:
                value = self._call(directive, context, bindings)
            except Exception as e:
                logger.error(f"Directive {directive.name} at line {directive.position} failed: {e}")
                raise DirectiveError(directive.name, directive.position, e) from e

            if directive.target:
                bindings[directive.target] = value
            evidence.extend(_collect_evidence(value))
            records.append(
                DirectiveRecord(position=directive.position, name=directive.name, call=directive.describe())
            )
            steps.append(StepRecord(index, directive.name, directive.position, context.snapshot()))

        manifest = RunManifest(
            version=__version__,
            started_at=started_at,
            finished_at=datetime.now(UTC),
            kubeconfig=self._run_kubeconfig(context),
            script=self.script.source,
            directives=records,
        )
        archive_path = self.archive_writer.write(output_path, evidence, manifest)
        return ExecutionResult(archive_path, steps, evidence, bindings)

    def _check_cancelled(
        self,
        cancel_event: Optional[threading.Event],
        deadline: Optional[float],
        directive: Directive,
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise RunCancelled(f"run cancelled before {directive.name} (line {directive.position})")
        if deadline is not None and time.monotonic() >= deadline:
            raise RunCancelled(f"deadline exceeded before {directive.name} (line {directive.position})")

    def _call(self, directive: Directive, context: ExecutionContext, bindings: Dict[str, Any]) -> Any:
        builtin = self.registry.get(directive.name)
        args = tuple(self._evaluate(arg, directive, context, bindings) for arg in directive.args)
        kwargs = tuple(
            (name, self._evaluate(value, directive, context, bindings)) for name, value in directive.kwargs
        )
        return builtin(context, args, kwargs)

    def _evaluate(
        self, value: Any, directive: Directive, context: ExecutionContext, bindings: Dict[str, Any]
    ) -> Any:
        """Resolve references and nested calls, depth first."""
        if isinstance(value, Directive):
            return self._call(value, context, bindings)
        if isinstance(value, Reference):
            if value.name not in bindings:
                raise InvalidArguments(directive.name, None, f"undefined name: {value.name}")
            return bindings[value.name]
        if isinstance(value, ListValue):
            return [self._evaluate(item, directive, context, bindings) for item in value.items]
        if isinstance(value, DictValue):
            return {
                self._evaluate(k, directive, context, bindings): self._evaluate(v, directive, context, bindings)
                for k, v in value.items
            }
        return value

    @staticmethod
    def _run_kubeconfig(context: ExecutionContext) -> Optional[str]:
        value = context.get(KUBE_CONFIG)
        if isinstance(value, Struct):
            path = value.to_dict().get("path")
            return path if isinstance(path, str) else None
        return None
