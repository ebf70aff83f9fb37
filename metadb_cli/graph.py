"""Inheritance graph over parsed class declarations."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, Iterator, List, Sequence

from .models import ClassDeclaration, ClassGraphView

logger = logging.getLogger(__name__)


def unique_classes(classes: Iterable[ClassDeclaration]) -> List[ClassDeclaration]:
    """Collapse duplicate names: last declaration wins, first position is kept."""
    by_name: Dict[str, ClassDeclaration] = {}
    for decl in classes:
        if decl.name in by_name:
            logger.warning(
                "Duplicate class '%s' (line %d) replaces earlier declaration (line %d)",
                decl.name,
                decl.line,
                by_name[decl.name].line,
            )
        by_name[decl.name] = decl
    return list(by_name.values())


class InheritanceGraph:
    """Ancestor/descendant lookups with cycle-safe traversal.

    Base names that have no declaration of their own still get a reverse
    lookup entry so their children are discoverable; they simply have no
    ancestors.
    """

    def __init__(self, classes: Dict[str, ClassDeclaration], children: Dict[str, List[str]]) -> None:
        self.classes = classes
        self.children = children

    @classmethod
    def build(cls, classes: Iterable[ClassDeclaration]) -> "InheritanceGraph":
        class_map: Dict[str, ClassDeclaration] = {}
        for decl in classes:
            class_map[decl.name] = decl

        children: Dict[str, Dict[str, None]] = {name: {} for name in class_map}
        for decl in class_map.values():
            for base in decl.bases:
                children.setdefault(base, {})[decl.name] = None

        return cls(class_map, {name: list(kids) for name, kids in children.items()})

    def _bases_of(self, name: str) -> Sequence[str]:
        decl = self.classes.get(name)
        return decl.bases if decl else ()

    def _children_of(self, name: str) -> Sequence[str]:
        return self.children.get(name, ())

    def ancestors(self, name: str) -> List[str]:
        return _closure(name, self._bases_of)

    def descendants(self, name: str) -> List[str]:
        return _closure(name, self._children_of)

    def direct_children(self, name: str) -> List[str]:
        return list(self._children_of(name))

    def view(self, name: str) -> ClassGraphView:
        return ClassGraphView(
            ancestors=self.ancestors(name),
            descendants=self.descendants(name),
            direct_children=self.direct_children(name),
        )

    def views(self) -> Dict[str, ClassGraphView]:
        return {name: self.view(name) for name in self.classes}


def _closure(start: str, neighbours: Callable[[str], Sequence[str]]) -> List[str]:
    """Depth-first, pre-order transitive closure from ``start``.

    ``visited`` belongs to this call only. A node is reported the first time
    it is reached and expanded at most once, so cycles and diamonds terminate.
    """
    result: List[str] = []
    reported = set()
    visited = {start}
    stack: List[Iterator[str]] = [iter(neighbours(start))]

    while stack:
        try:
            name = next(stack[-1])
        except StopIteration:
            stack.pop()
            continue
        if name not in reported:
            reported.add(name)
            result.append(name)
        if name not in visited:
            visited.add(name)
            stack.append(iter(neighbours(name)))

    return result
