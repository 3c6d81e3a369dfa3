"""
Shared pytest fixtures for flare tests.

This module provides common fixtures including:
- KubectlMocker: Mock kubectl subprocess calls with canned responses
- Fresh execution contexts and built-in registries
- Script helpers writing flare.file sources to a temp directory
"""

import os
import subprocess
import sys
import tarfile
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple, Union
from unittest.mock import MagicMock, patch

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flare.modules.builtins import default_registry
from flare.modules.context import ExecutionContext

_real_run = subprocess.run


# =============================================================================
# Kubectl Mocking Infrastructure
# =============================================================================

@dataclass
class KubectlResponse:
    """Represents a mocked kubectl command response."""
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    def to_completed_process(self) -> MagicMock:
        """Convert to a subprocess.CompletedProcess-like mock."""
        result = MagicMock()
        result.stdout = self.stdout
        result.stderr = self.stderr
        result.returncode = self.returncode
        return result


class KubectlMocker:
    """
    Mock kubectl subprocess calls with pattern-matched responses.

    Usage:
        def test_capture(kubectl_mocker):
            kubectl_mocker.register("get pods", KubectlResponse(stdout="kind: List"))
            ...
            assert kubectl_mocker.was_called_with("get pods")
    """

    def __init__(self):
        self._responses: List[Tuple[Union[str, Pattern], KubectlResponse]] = []
        self.calls: List[List[str]] = []
        self._default_response = KubectlResponse(
            stderr="Error: mock not configured for this command",
            returncode=1
        )

    def register(self, pattern: Union[str, Pattern], response: KubectlResponse) -> "KubectlMocker":
        """Register a response for commands matching the pattern (first match wins)."""
        self._responses.append((pattern, response))
        return self

    def mock_run(self, cmd: List[str], capture_output: bool = True, text: bool = True,
                 timeout: Optional[int] = None, **kwargs):
        """side_effect for subprocess.run; non-kubectl commands run for real."""
        if cmd[0] != "kubectl":
            return _real_run(cmd, capture_output=capture_output, text=text, timeout=timeout, **kwargs)

        self.calls.append(list(cmd))
        kubectl_args = " ".join(cmd[1:])
        for pattern, response in self._responses:
            if isinstance(pattern, str):
                if pattern in kubectl_args:
                    return response.to_completed_process()
            elif pattern.search(kubectl_args):
                return response.to_completed_process()
        return self._default_response.to_completed_process()

    def was_called_with(self, fragment: str) -> bool:
        return any(fragment in " ".join(call) for call in self.calls)


@pytest.fixture
def kubectl_mocker():
    """Patch subprocess.run with a KubectlMocker for the duration of a test."""
    mocker = KubectlMocker()
    with patch("flare.modules.builtins.capture.subprocess.run", side_effect=mocker.mock_run):
        yield mocker


# =============================================================================
# Runtime fixtures
# =============================================================================

@pytest.fixture
def context():
    """A fresh execution context, as the engine creates per run."""
    return ExecutionContext()


@pytest.fixture
def registry():
    return default_registry(command_timeout=5)


@pytest.fixture
def write_script(tmp_path):
    """Write a flare.file into tmp_path and return its path."""
    def _write(source: str, name: str = "flare.file") -> str:
        path = tmp_path / name
        path.write_text(source)
        return str(path)
    return _write


def archive_members(path: str) -> List[str]:
    """Names of the files inside a written archive."""
    with tarfile.open(path, "r:gz") as tar:
        return sorted(tar.getnames())


def archive_file(path: str, name: str) -> bytes:
    with tarfile.open(path, "r:gz") as tar:
        return tar.extractfile(name).read()
