"""Generation pipeline: schema text -> class records, index files and pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .artifacts import ArtifactWriter, PreparedArtifact, cleanup_stale, write_if_changed
from .config import Settings
from .errors import SchemaReadError
from .graph import InheritanceGraph, unique_classes
from .models import ClassDeclaration, ClassGraphView, NameIndex
from .pages import PAGE_SUFFIX, page_file_name, render_page
from .parser import parse_schema

logger = logging.getLogger(__name__)


def read_schema(path: Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SchemaReadError(f"Cannot read schema file {path}: {exc}") from exc


@dataclass
class Schema:
    """Parsed classes with their graph and name index, built once per run."""
    classes: List[ClassDeclaration]
    graph: InheritanceGraph
    name_index: NameIndex
    parsed_count: int = 0

    @classmethod
    def from_text(cls, text: str, source: str = "<schema>", link_prefix: str = "/classes") -> "Schema":
        parsed = parse_schema(text, source=source)
        classes = unique_classes(parsed)
        return cls(
            classes=classes,
            graph=InheritanceGraph.build(classes),
            name_index=NameIndex.from_classes(classes, link_prefix=link_prefix),
            parsed_count=len(parsed),
        )

    @classmethod
    def load(cls, settings: Settings) -> "Schema":
        return cls.from_text(read_schema(settings.input), source=Path(settings.input).name, link_prefix=settings.link_prefix)

    def get(self, name: str) -> Optional[ClassDeclaration]:
        return self.graph.classes.get(name)


@dataclass
class GenerationReport:
    classes: int
    out_dir: Path
    pages_dir: Path
    json_changed: int = 0
    pages_changed: int = 0
    pages_deleted: int = 0
    json_pruned: int = 0
    index_changed: bool = False
    class_index_changed: bool = False
    deleted_pages: List[Path] = field(default_factory=list)

    def summary_lines(self) -> List[str]:
        lines = [
            f"[ok] Parsed {self.classes} classes",
            f"     - JSON: {self.json_changed} changed, wrote to {self.out_dir}",
            f"     - MDX:  {self.pages_changed} changed, {self.pages_deleted} deleted, wrote to {self.pages_dir}",
        ]
        if self.json_pruned:
            lines.append(f"     - Pruned {self.json_pruned} stale class records")
        return lines


class Generator:
    """Turns a :class:`Schema` into artifacts on disk.

    All records and pages are rendered before the first write, so a failure
    while preparing leaves the output tree untouched.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.writer = ArtifactWriter(settings.out_dir, pretty=settings.pretty, public_prefix=settings.public_prefix)

    def prepare(self, schema: Schema) -> List[PreparedArtifact]:
        views: Dict[str, ClassGraphView] = schema.graph.views()
        return [self.writer.prepare(self.writer.build_record(decl, views[decl.name])) for decl in schema.classes]

    def render_pages(self, schema: Schema, artifacts: List[PreparedArtifact]) -> Dict[str, str]:
        return {
            page_file_name(decl.name): render_page(decl, artifact.url, self.settings)
            for decl, artifact in zip(schema.classes, artifacts)
        }

    def run(self, schema: Schema) -> GenerationReport:
        artifacts = self.prepare(schema)
        pages = self.render_pages(schema, artifacts)

        report = GenerationReport(
            classes=len(schema.classes),
            out_dir=self.settings.out_dir,
            pages_dir=self.settings.pages_dir,
        )

        for artifact in artifacts:
            if self.writer.write(artifact):
                report.json_changed += 1

        pages_dir = Path(self.settings.pages_dir)
        for file_name, contents in pages.items():
            if write_if_changed(pages_dir / file_name, contents):
                report.pages_changed += 1

        report.deleted_pages = cleanup_stale(pages_dir, pages.keys(), suffix=PAGE_SUFFIX)
        report.pages_deleted = len(report.deleted_pages)

        if self.settings.prune_json:
            report.json_pruned = len(self.writer.prune(artifacts))

        report.index_changed = self.writer.write_index(artifacts)
        report.class_index_changed = self.writer.write_class_index(schema.name_index)
        logger.debug(
            "index.json %s, classIndex.json %s",
            "written" if report.index_changed else "unchanged",
            "written" if report.class_index_changed else "unchanged",
        )
        return report


def generate(settings: Settings) -> GenerationReport:
    """Run a full generation pass for ``settings``."""
    schema = Schema.load(settings)
    return Generator(settings).run(schema)
