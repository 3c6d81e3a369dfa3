"""
Flare archive manifest models.

The manifest is written into every archive so a reader can see which
script produced it and which directive each file came from.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class DirectiveRecord(BaseModel):
    """One executed directive."""

    position: int = Field(..., description="Source line of the directive", ge=0)
    name: str = Field(..., description="Built-in name")
    call: str = Field(..., description="Directive as written")


class EvidenceRecord(BaseModel):
    """One archived evidence file."""

    file_name: str = Field(..., description="Path inside the archive", min_length=1)
    description: str = Field(default="", description="What was captured")
    exit_code: Optional[int] = Field(None, description="Exit code of the capturing command")
    size: int = Field(..., description="Content size in bytes", ge=0)


class RunManifest(BaseModel):
    """Summary of a completed run."""

    version: str = Field(..., description="Flare version")
    started_at: datetime
    finished_at: datetime
    kubeconfig: Optional[str] = Field(None, description="Run-wide kubeconfig at the end of the run")
    script: str = Field(default="", description="Script source")
    directives: List[DirectiveRecord] = Field(default_factory=list)
    evidence: List[EvidenceRecord] = Field(default_factory=list)
