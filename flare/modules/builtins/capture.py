"""
Diagnostic capture actions.

capture_local runs a command on the local machine; kube_capture runs
kubectl against the cluster selected by the effective kube_config. Both
return Evidence for the archive. A command that exits non-zero is still
evidence: its exit code and stderr are recorded rather than raised.
"""

import logging
import posixpath
import re
import shlex
import subprocess
from functools import partial
from typing import List, Optional, Sequence

from flare.errors import ActionError, InvalidArguments
from flare.modules.context import ExecutionContext

from .kube_config import get_effective_config
from .registry import Builtin, Kwargs, unpack_args
from .values import Evidence

logger = logging.getLogger("flare.actions")

KUBECTL = "kubectl"
DEFAULT_COMMAND_TIMEOUT = 30
KUBE_CAPTURE_KINDS = ("objects", "logs")

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_name(text: str) -> str:
    return _UNSAFE_NAME_CHARS.sub("_", text).strip("_") or "output"


def run_command(argv: Sequence[str], timeout: int) -> subprocess.CompletedProcess:
    """
    Run a command without a shell and capture its output.

    Raises:
        ActionError: executable missing or command timed out
    """
    logger.debug(f"Running: {' '.join(argv)}")
    try:
        return subprocess.run(
            list(argv),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise ActionError(f"command not found: {argv[0]}") from None
    except subprocess.TimeoutExpired:
        raise ActionError(f"command timed out after {timeout}s: {' '.join(argv)}") from None


def _to_evidence(result: subprocess.CompletedProcess, file_name: str, desc: str) -> Evidence:
    output = result.stdout or ""
    if result.returncode != 0:
        logger.warning(f"{file_name}: command exited with {result.returncode}")
        output += f"\n--- exit code {result.returncode} ---\n{result.stderr or ''}"
    return Evidence(
        file_name=file_name,
        content=output.encode("utf-8"),
        description=desc,
        exit_code=result.returncode,
    )


def capture_local_fn(
    context: ExecutionContext, args, kwargs: Kwargs, timeout: int = DEFAULT_COMMAND_TIMEOUT
) -> Evidence:
    """capture_local(cmd, file_name=None, desc=None)"""
    params = unpack_args(
        "capture_local",
        args,
        kwargs,
        [("cmd", str), ("file_name?", str), ("desc?", str)],
    )
    cmd = params["cmd"]
    try:
        argv = shlex.split(cmd)
    except ValueError as e:
        raise InvalidArguments("capture_local", "cmd", f"cannot split command: {e}") from e
    if not argv:
        raise InvalidArguments("capture_local", "cmd", "command is empty")

    file_name = params["file_name"] or f"{_safe_name(cmd)}.txt"
    normalized = posixpath.normpath(file_name)
    if posixpath.isabs(normalized) or normalized == ".." or normalized.startswith("../"):
        raise InvalidArguments(
            "capture_local", "file_name", f"file_name must stay inside the archive, got {file_name!r}"
        )
    result = run_command(argv, timeout)
    return _to_evidence(result, file_name, params["desc"] or cmd)


def _capture_objects(
    kubeconfig: str, kinds: List[str], namespaces: List[str], timeout: int
) -> List[Evidence]:
    evidence = []
    for namespace in namespaces:
        for kind in kinds:
            argv = [KUBECTL, "--kubeconfig", kubeconfig, "get", kind, "-n", namespace, "-o", "yaml"]
            result = run_command(argv, timeout)
            evidence.append(
                _to_evidence(
                    result,
                    f"objects/{_safe_name(namespace)}/{_safe_name(kind)}.yaml",
                    f"{kind} in {namespace}",
                )
            )
    return evidence


def _capture_logs(kubeconfig: str, namespaces: List[str], timeout: int) -> List[Evidence]:
    evidence = []
    for namespace in namespaces:
        listing = run_command(
            [
                KUBECTL, "--kubeconfig", kubeconfig, "get", "pods", "-n", namespace,
                "-o", "jsonpath={.items[*].metadata.name}",
            ],
            timeout,
        )
        if listing.returncode != 0:
            evidence.append(
                _to_evidence(listing, f"logs/{_safe_name(namespace)}/error.txt", f"pods in {namespace}")
            )
            continue

        for pod in listing.stdout.split():
            result = run_command(
                [KUBECTL, "--kubeconfig", kubeconfig, "logs", pod, "-n", namespace, "--all-containers"],
                timeout,
            )
            evidence.append(
                _to_evidence(
                    result,
                    f"logs/{_safe_name(namespace)}/{_safe_name(pod)}.log",
                    f"logs of {namespace}/{pod}",
                )
            )
    return evidence


def kube_capture_fn(
    context: ExecutionContext, args, kwargs: Kwargs, timeout: int = DEFAULT_COMMAND_TIMEOUT
) -> List[Evidence]:
    """kube_capture(what, kinds=None, namespaces=None, kube_config=None)"""
    params = unpack_args(
        "kube_capture",
        args,
        kwargs,
        [("what", str), ("kinds?", list), ("namespaces?", list), ("kube_config?", None)],
    )
    what = params["what"]
    if what not in KUBE_CAPTURE_KINDS:
        raise InvalidArguments(
            "kube_capture", "what", f"what must be one of {', '.join(KUBE_CAPTURE_KINDS)}, got {what!r}"
        )
    kinds = _string_list("kinds", params["kinds"]) or ["pods"]
    namespaces = _string_list("namespaces", params["namespaces"]) or ["default"]

    kubeconfig = get_effective_config(params["kube_config"], context)
    logger.info(f"Capturing {what} from {len(namespaces)} namespace(s) using {kubeconfig}")

    if what == "objects":
        return _capture_objects(kubeconfig, kinds, namespaces, timeout)
    return _capture_logs(kubeconfig, namespaces, timeout)


def _string_list(name: str, values: Optional[list]) -> List[str]:
    if values is None:
        return []
    for value in values:
        if not isinstance(value, str):
            raise InvalidArguments(
                "kube_capture", name, f"{name} must contain strings, got {type(value).__name__}"
            )
    return list(values)


def capture_builtins(timeout: int = DEFAULT_COMMAND_TIMEOUT) -> List[Builtin]:
    """Capture built-ins bound to a command timeout."""
    return [
        Builtin("capture_local", partial(capture_local_fn, timeout=timeout), "Run a local command"),
        Builtin("kube_capture", partial(kube_capture_fn, timeout=timeout), "Capture cluster objects or logs"),
    ]
