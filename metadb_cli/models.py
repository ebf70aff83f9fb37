"""Core data models shared by the parser, graph builder and artifact writer."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping

# Sentinel used by the schema for "no type".
ABSENT = "0x0"


@dataclass(frozen=True)
class FieldDeclaration:
    name: str
    field_type: str
    aux_key_type: str = ABSENT
    aux_value_type: str = ABSENT
    referenced_type: str = ABSENT

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "ft": self.field_type,
            "kt": self.aux_key_type,
            "vt": self.aux_value_type,
            "kh": self.referenced_type,
        }


@dataclass
class ClassDeclaration:
    """One ``class Name(Base, ...):`` block of the schema."""
    name: str
    bases: List[str] = field(default_factory=list)
    fields: List[FieldDeclaration] = field(default_factory=list)
    line: int = 0


@dataclass
class ClassGraphView:
    ancestors: List[str] = field(default_factory=list)
    descendants: List[str] = field(default_factory=list)
    direct_children: List[str] = field(default_factory=list)


@dataclass
class ArtifactRecord:
    """The persisted per-class document."""
    name: str
    bases: List[str]
    fields: List[FieldDeclaration]
    ancestors: List[str]
    descendants: List[str]
    direct_children: List[str]

    def to_dict(self) -> Dict[str, object]:
        # Key order is part of the content hash.
        return {
            "name": self.name,
            "bases": list(self.bases),
            "fields": [f.to_dict() for f in self.fields],
            "ancestors": list(self.ancestors),
            "descendants": list(self.descendants),
            "directChildren": list(self.direct_children),
        }


class NameIndex(Mapping[str, str]):
    """Read-only map of class name to its published page location."""

    def __init__(self, locations: Mapping[str, str] | None = None) -> None:
        self._locations = MappingProxyType(dict(locations or {}))

    @classmethod
    def from_classes(cls, classes: Iterable[ClassDeclaration], link_prefix: str = "/classes") -> "NameIndex":
        from .artifacts import page_slug

        prefix = link_prefix.rstrip("/")
        return cls({c.name: f"{prefix}/{page_slug(c.name)}" for c in classes})

    def __getitem__(self, name: str) -> str:
        return self._locations[name]

    def __iter__(self):
        return iter(self._locations)

    def __len__(self) -> int:
        return len(self._locations)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._locations)
