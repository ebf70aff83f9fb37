"""Content-addressed JSON artifacts and change-aware file writes.

Layout under the output directory::

    classes/<ClassName>.<sha12>.json   one record per class
    index.json                         navigation index
    classIndex.json                    class name -> page location

Every write goes through :func:`write_if_changed`, so re-running on an
unchanged schema touches nothing on disk.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .config import HASH_LENGTH
from .models import ArtifactRecord, ClassDeclaration, ClassGraphView, NameIndex

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def safe_name(name: str) -> str:
    """Replace characters that are unsafe in file names with ``_``."""
    return _UNSAFE_CHARS.sub("_", name)


def page_slug(name: str) -> str:
    return safe_name(name).lower()


def serialize(payload: Any, pretty: bool = False) -> str:
    if pretty:
        return json.dumps(payload, indent=2, ensure_ascii=False)
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def content_hash(text: str, length: int = HASH_LENGTH) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:length]


def artifact_file_name(name: str, digest: str) -> str:
    return f"{safe_name(name)}.{digest}.json"


def write_if_changed(path: Path, contents: str) -> bool:
    """Write ``contents`` unless the file already holds exactly that text.

    Returns True when the file was written.
    """
    try:
        if path.read_text(encoding="utf-8") == contents:
            return False
    except (OSError, UnicodeDecodeError):
        pass
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    logger.debug("Wrote %s", path)
    return True


def cleanup_stale(directory: Path, keep: Iterable[str], suffix: str = ".mdx") -> List[Path]:
    """Delete ``*suffix`` files in ``directory`` whose names are not in ``keep``.

    A missing or unreadable directory means there is nothing to clean.
    """
    keep_names = set(keep)
    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return []

    deleted: List[Path] = []
    for entry in entries:
        if entry.name.endswith(suffix) and entry.name not in keep_names and entry.is_file():
            entry.unlink()
            logger.info("Deleted stale %s", entry)
            deleted.append(entry)
    return deleted


@dataclass(frozen=True)
class PreparedArtifact:
    """A fully serialized record, ready to be written."""
    record: ArtifactRecord
    contents: str
    digest: str
    file_name: str
    path: Path
    url: str

    @property
    def name(self) -> str:
        return self.record.name


class ArtifactWriter:
    """Serialize, hash and write class records plus the two index files."""

    def __init__(self, out_dir: Path, pretty: bool = False, public_prefix: str = "/db") -> None:
        self.out_dir = Path(out_dir)
        self.classes_dir = self.out_dir / "classes"
        self.pretty = pretty
        self.public_prefix = public_prefix.rstrip("/")

    @staticmethod
    def build_record(decl: ClassDeclaration, view: ClassGraphView) -> ArtifactRecord:
        return ArtifactRecord(
            name=decl.name,
            bases=list(decl.bases),
            fields=list(decl.fields),
            ancestors=list(view.ancestors),
            descendants=list(view.descendants),
            direct_children=list(view.direct_children),
        )

    def prepare(self, record: ArtifactRecord) -> PreparedArtifact:
        contents = serialize(record.to_dict(), self.pretty)
        digest = content_hash(contents)
        file_name = artifact_file_name(record.name, digest)
        return PreparedArtifact(
            record=record,
            contents=contents,
            digest=digest,
            file_name=file_name,
            path=self.classes_dir / file_name,
            url=f"{self.public_prefix}/classes/{file_name}",
        )

    def write(self, artifact: PreparedArtifact) -> bool:
        return write_if_changed(artifact.path, artifact.contents)

    @staticmethod
    def index_entry(artifact: PreparedArtifact) -> Dict[str, Any]:
        return {
            "name": artifact.record.name,
            "file": artifact.url,
            "bases": list(artifact.record.bases),
            "propCount": len(artifact.record.fields),
        }

    @property
    def index_path(self) -> Path:
        return self.out_dir / "index.json"

    @property
    def class_index_path(self) -> Path:
        return self.out_dir / "classIndex.json"

    def write_index(self, artifacts: Iterable[PreparedArtifact], now: Optional[datetime] = None) -> bool:
        """Write ``index.json``.

        ``generatedAt`` is only refreshed when the class listing changed, so an
        unchanged schema leaves the index untouched.
        """
        entries = [self.index_entry(a) for a in artifacts]
        generated_at = self._previous_timestamp(entries) or _iso_timestamp(now)
        payload = {"generatedAt": generated_at, "total": len(entries), "classes": entries}
        return write_if_changed(self.index_path, serialize(payload, self.pretty))

    def write_class_index(self, name_index: NameIndex) -> bool:
        return write_if_changed(self.class_index_path, serialize(name_index.to_dict(), self.pretty))

    def prune(self, current: Iterable[PreparedArtifact]) -> List[Path]:
        """Remove class records that the current run no longer references."""
        return cleanup_stale(self.classes_dir, (a.file_name for a in current), suffix=".json")

    def _previous_timestamp(self, entries: List[Dict[str, Any]]) -> Optional[str]:
        try:
            previous = json.loads(self.index_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        if not isinstance(previous, dict):
            return None
        if previous.get("classes") != entries or previous.get("total") != len(entries):
            return None
        return previous.get("generatedAt")


def _iso_timestamp(now: Optional[datetime] = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
