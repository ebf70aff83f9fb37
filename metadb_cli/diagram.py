"""Mermaid inheritance diagrams for class pages.

Only direct relationships are drawn: the class's own bases and its direct
children, so diagrams stay readable for classes with huge subtrees.
"""

from __future__ import annotations

import re
from typing import Dict, Iterator, List, Mapping, Sequence

MAX_CHILDREN_IN_DIAGRAM = 8

_UNSAFE_ID = re.compile(r"[^A-Za-z0-9_]")

CURRENT_STYLE = "classDef current fill:#4f46e5,stroke:#3730a3,stroke-width:3px,color:#fff,font-weight:bold"
MORE_STYLE = "classDef more fill:transparent,stroke:#9ca3af,stroke-dasharray:5 5,color:#6b7280"
MORE_ID = "__more__"


def mermaid_id(name: str) -> str:
    return _UNSAFE_ID.sub("_", name)


def mermaid_text(text: str) -> str:
    """Escape label text with Mermaid entity codes."""
    return (
        text.replace("&", "#amp;")
        .replace("<", "#lt;")
        .replace(">", "#gt;")
        .replace('"', "#quot;")
    )


class _NodeIds:
    """Unique node ids per diagram; later names that sanitize alike get a suffix."""

    def __init__(self) -> None:
        self._ids: Dict[str, str] = {}
        self._taken = {MORE_ID}

    def __contains__(self, name: str) -> bool:
        return name in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __getitem__(self, name: str) -> str:
        return self._ids[name]

    def add(self, name: str) -> str:
        base = mermaid_id(name)
        node_id, n = base, 2
        while node_id in self._taken:
            node_id = f"{base}_{n}"
            n += 1
        self._taken.add(node_id)
        self._ids[name] = node_id
        return node_id


def _node(node_id: str, name: str, current: bool = False) -> str:
    label = mermaid_text(name)
    if current:
        return f'{node_id}["<b>{label}</b><br/><i>current</i>"]:::current'
    return f'{node_id}["{label}"]'


def generate_inheritance_diagram(
    name: str,
    bases: Sequence[str],
    direct_children: Sequence[str],
    name_index: Mapping[str, str],
    max_children: int = MAX_CHILDREN_IN_DIAGRAM,
) -> str:
    """Return a ``flowchart TB`` for one class, or '' when it has no relatives."""
    if not bases and not direct_children:
        return ""

    shown_children = list(direct_children[:max_children])
    hidden = len(direct_children) - len(shown_children)

    ids = _NodeIds()
    current_id = ids.add(name)
    lines: List[str] = ["flowchart TB", f"  {_node(current_id, name, current=True)}"]

    for base in bases:
        if base not in ids:
            lines.append(f"  {_node(ids.add(base), base)}")
        lines.append(f"  {ids[base]} --> {current_id}")

    for child in shown_children:
        if child not in ids:
            lines.append(f"  {_node(ids.add(child), child)}")
        lines.append(f"  {current_id} --> {ids[child]}")

    if hidden > 0:
        lines.append(f'  {MORE_ID}["... and {hidden} more"]:::more')
        lines.append(f"  {current_id} -.-> {MORE_ID}")

    for other in ids:
        location = name_index.get(other)
        if other != name and location:
            lines.append(f'  click {ids[other]} href "{location}" "View {mermaid_text(other)}"')

    lines.append(f"  {CURRENT_STYLE}")
    lines.append(f"  {MORE_STYLE}")
    return "\n".join(lines)


def mermaid_block(code: str) -> str:
    """Wrap diagram code in a fenced ``mermaid`` block."""
    return "```mermaid\n" + code.rstrip() + "\n```\n"
