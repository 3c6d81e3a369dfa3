"""
Archive Module - Black Box Interface

Purpose: Package collected evidence into a compressed tar archive
Interface: ArchiveWriter.write(), RunManifest
Hidden: Archive layout, name de-duplication, atomic file replacement

Can be replaced with different packaging (zip, object storage upload).
"""

from .models import DirectiveRecord, EvidenceRecord, RunManifest
from .writer import ARCHIVE_ROOT, MANIFEST_NAME, ArchiveWriter

__all__ = [
    "ARCHIVE_ROOT",
    "ArchiveWriter",
    "DirectiveRecord",
    "EvidenceRecord",
    "MANIFEST_NAME",
    "RunManifest",
]
