"""
Archive writer producing the flare .tar.gz output.

Layout:
    flare/manifest.json
    flare/<evidence file name>...

The archive is written to a temporary file next to the destination and
moved into place only once complete, so a failed write leaves no partial
archive behind.
"""

import io
import logging
import os
import posixpath
import tarfile
import time
from typing import Dict, Iterable, List

from flare.modules.builtins import Evidence

from .models import EvidenceRecord, RunManifest

logger = logging.getLogger("flare.archive")

ARCHIVE_ROOT = "flare"
MANIFEST_NAME = "manifest.json"


def archive_name(name: str) -> str:
    """
    Normalise an evidence name to a path confined under the archive root.

    Leading slashes and ".." components are dropped, so "../../x.txt" and
    "/etc/x.txt" become "x.txt" and "etc/x.txt".
    """
    parts = [p for p in posixpath.normpath(name.replace("\\", "/")).split("/") if p not in ("", ".", "..")]
    return "/".join(parts) or "output"


def _unique_name(name: str, used: Dict[str, int]) -> str:
    """Suffix repeated names: pods.yaml, pods-1.yaml, pods-2.yaml..."""
    if name not in used:
        used[name] = 0
        return name
    base, ext = os.path.splitext(name)
    while True:
        used[name] += 1
        candidate = f"{base}-{used[name]}{ext}"
        if candidate not in used:
            used[candidate] = 0
            return candidate


def _add_bytes(tar: tarfile.TarFile, name: str, data: bytes, mtime: float) -> None:
    info = tarfile.TarInfo(name=f"{ARCHIVE_ROOT}/{name}")
    info.size = len(data)
    info.mtime = int(mtime)
    info.mode = 0o644
    tar.addfile(info, io.BytesIO(data))


class ArchiveWriter:
    """Writes evidence and the run manifest into a gzip-compressed tar."""

    def write(self, output_path: str, evidence: Iterable[Evidence], manifest: RunManifest) -> str:
        """
        Write the archive.

        Args:
            output_path: Destination .tar.gz path
            evidence: Collected evidence in directive order
            manifest: Run manifest; its evidence list is filled in here

        Returns:
            Absolute path of the written archive
        """
        output_path = os.path.abspath(output_path)
        parent = os.path.dirname(output_path)
        os.makedirs(parent, exist_ok=True)

        now = time.time()
        used: Dict[str, int] = {MANIFEST_NAME: 0}
        records: List[EvidenceRecord] = []
        tmp_path = f"{output_path}.tmp"

        try:
            with tarfile.open(tmp_path, "w:gz") as tar:
                for item in evidence:
                    name = _unique_name(archive_name(item.file_name), used)
                    _add_bytes(tar, name, item.content, now)
                    records.append(
                        EvidenceRecord(
                            file_name=name,
                            description=item.description,
                            exit_code=item.exit_code,
                            size=len(item.content),
                        )
                    )

                manifest = manifest.model_copy(update={"evidence": records})
                _add_bytes(tar, MANIFEST_NAME, manifest.model_dump_json(indent=2).encode("utf-8"), now)
            os.replace(tmp_path, output_path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.info(f"Wrote archive {output_path} ({len(records)} evidence files)")
        return output_path
