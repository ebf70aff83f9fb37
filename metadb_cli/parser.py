"""Line-oriented parser for the meta class database text format.

The database is a Python-looking text file that is never executed::

    #!python
    class TypeName(Base1, Base2):
        FieldName: (ft, kt, vt, kh)
        ...
        pass

Class and field names are either resolved identifiers or raw hashes
(``0x...``).  The parser is deliberately permissive: lines it does not
recognise are skipped rather than reported as errors.  A diagnostics mode
records what was skipped without changing the parse result.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from .models import ClassDeclaration, FieldDeclaration

logger = logging.getLogger(__name__)

MARKER = "#!python"

CLASS_LINE = re.compile(r"^class\s+([^\s(]+)\s*\(([^)]*)\)\s*:\s*$")
FIELD_LINE = re.compile(
    r"^\s{4}([A-Za-z0-9_]+|0x[0-9a-fA-F]+):"
    r"\s*\(\s*([^,\s]+)\s*,\s*([^,\s]+)\s*,\s*([^,\s]+)\s*,\s*([^)\s]+)\s*\)\s*$"
)
PASS_LINE = re.compile(r"^\s*pass\s*$")

OUTSIDE = "outside"
IN_CLASS = "in_class"


@dataclass(frozen=True)
class SkippedLine:
    line_no: int
    text: str
    reason: str


def has_marker(text: str) -> bool:
    return text.startswith(MARKER)


def parse_bases(raw: str) -> List[str]:
    """Split a header's base list, dropping empty entries."""
    return [b.strip() for b in raw.split(",") if b.strip()]


class SchemaParser:
    """Two-state parser: outside a class, or inside one awaiting fields/``pass``."""

    def __init__(self, diagnostics: bool = False) -> None:
        self.diagnostics = diagnostics
        self.skipped: List[SkippedLine] = []
        self._classes: List[ClassDeclaration] = []
        self._current: Optional[ClassDeclaration] = None

    def parse(self, text: str) -> List[ClassDeclaration]:
        self.skipped = []
        self._classes = []
        self._current = None

        for line_no, raw in enumerate(text.replace("\r\n", "\n").split("\n"), start=1):
            self._consume(line_no, raw.rstrip())

        # Last class without a closing ``pass``.
        self._close()
        return self._classes

    def _consume(self, line_no: int, line: str) -> None:
        header = CLASS_LINE.match(line)
        if header:
            self._close()
            self._current = ClassDeclaration(
                name=header.group(1).strip(),
                bases=parse_bases(header.group(2)),
                line=line_no,
            )
            return

        if self._current is None:
            self._skip(line_no, line, "outside class")
            return

        field_match = FIELD_LINE.match(line)
        if field_match:
            name, ft, kt, vt, kh = field_match.groups()
            self._current.fields.append(FieldDeclaration(name, ft, kt, vt, kh))
            return

        if PASS_LINE.match(line):
            self._close()
            return

        self._skip(line_no, line, "unrecognized line")

    def _close(self) -> None:
        if self._current is not None:
            self._classes.append(self._current)
            self._current = None

    def _skip(self, line_no: int, line: str, reason: str) -> None:
        if not self.diagnostics or not line.strip():
            return
        if line_no == 1 and line.startswith(MARKER):
            return
        self.skipped.append(SkippedLine(line_no, line, reason))


def parse_schema(text: str, source: str = "<schema>") -> List[ClassDeclaration]:
    """Parse schema text, warning (not failing) when the marker line is missing."""
    if not has_marker(text):
        logger.warning("%s doesn't start with '%s'. Continuing anyway...", source, MARKER)
    return SchemaParser().parse(text)
