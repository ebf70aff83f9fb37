"""Render field types as linked, HTML-escaped type chips.

Type expressions are either a bare tag (``I32``, ``SomeClass``, ``0x1a2b``)
or a tag with one container parameter list (``Map<Hash, Foo>``), possibly
nested.  Tags that name a known class become links to its page; primitive
tags never do, even if a class of the same name exists.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import List, Mapping

from .models import ABSENT, ClassDeclaration

PRIMITIVES = frozenset({
    "Bool",
    "I8",
    "I16",
    "I32",
    "I64",
    "U8",
    "U16",
    "U32",
    "U64",
    "F32",
    "F64",
    "String",
    "Hash",
    "Link",
    "Embed",
    "Flag",
    "Vec2",
    "Vec3",
    "Vec4",
    "Color",
    ABSENT,
})

PRIMITIVE_DESCRIPTIONS = {
    "Bool": "Boolean (true / false)",
    "I8": "Signed 8-bit integer",
    "I16": "Signed 16-bit integer",
    "I32": "Signed 32-bit integer",
    "I64": "Signed 64-bit integer",
    "U8": "Unsigned 8-bit integer",
    "U16": "Unsigned 16-bit integer",
    "U32": "Unsigned 32-bit integer",
    "U64": "Unsigned 64-bit integer",
    "F32": "32-bit floating point number",
    "F64": "64-bit floating point number",
    "String": "UTF-8 text",
    "Hash": "32-bit FNV-1a name hash",
    "Flag": "Bit flag",
    "Vec2": "2D vector of F32",
    "Vec3": "3D vector of F32",
    "Vec4": "4D vector of F32",
    "Color": "RGBA color, one U8 per channel",
}

# Tags whose referenced-type slot names the class they carry.
POINTER_TAGS = frozenset({"Link", "Embed", "Pointer"})
CONTAINER_TAGS = frozenset({"List", "List2", "Option"})
MAP_TAG = "Map"
REFERENCE_TAGS = POINTER_TAGS | CONTAINER_TAGS | {MAP_TAG}

_TYPE_EXPR = re.compile(r"^([A-Za-z0-9_]+)(?:<(.+)>)?$")

LT = "&lt;"
GT = "&gt;"


def is_absent(value: str) -> bool:
    return not value or value == ABSENT


def split_type_args(inner: str) -> List[str]:
    """Split a parameter list on commas that are not inside nested ``<...>``."""
    parts: List[str] = []
    depth = 0
    current = ""
    for char in inner:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        elif char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        current += char
    if current.strip():
        parts.append(current.strip())
    return parts


def _render_tag(tag: str, name_index: Mapping[str, str]) -> str:
    if tag in PRIMITIVES:
        description = PRIMITIVE_DESCRIPTIONS.get(tag)
        if description:
            return f'<abbr title="{html.escape(description)}">{tag}</abbr>'
        return tag
    location = name_index.get(tag)
    if location:
        return f'<a href="{html.escape(location)}" class="type-link">{tag}</a>'
    return tag


def link_type(type_expr: str, name_index: Mapping[str, str]) -> str:
    """Link every class name in ``type_expr``; the absent sentinel renders as ''."""
    if is_absent(type_expr):
        return ""

    match = _TYPE_EXPR.match(type_expr)
    if not match:
        return html.escape(type_expr)

    tag, inner = match.groups()
    result = _render_tag(tag, name_index)
    if inner:
        linked = ", ".join(link_type(part, name_index) for part in split_type_args(inner))
        result += f"{LT}{linked}{GT}"
    return result


def _wrap(outer: str, inner: str) -> str:
    return f"{outer}{LT}{inner}{GT}"


def type_chip(
    field_type: str,
    aux_key_type: str,
    aux_value_type: str,
    referenced_type: str,
    name_index: Mapping[str, str],
) -> str:
    """Compose the visible type chip for one field's type tuple.

    Only one rendering wins, in this order: reference-carrying tag with a
    referenced type, referenced type alone, aux value type alone, bare tag.
    """
    display = link_type(field_type, name_index)
    has_ref = not is_absent(referenced_type)
    has_value = not is_absent(aux_value_type)

    if field_type in REFERENCE_TAGS and has_ref:
        ref = link_type(referenced_type, name_index)
        if field_type in POINTER_TAGS:
            display = _wrap(display, ref)
        else:
            if has_value and aux_value_type in POINTER_TAGS:
                ref = _wrap(link_type(aux_value_type, name_index), ref)
            if field_type == MAP_TAG and not is_absent(aux_key_type):
                ref = f"{link_type(aux_key_type, name_index)}, {ref}"
            display = _wrap(display, ref)
    elif has_ref:
        ref = link_type(referenced_type, name_index)
        if has_value:
            ref = _wrap(link_type(aux_value_type, name_index), ref)
        display = _wrap(display, ref)
    elif has_value and "<" not in field_type:
        display = _wrap(display, link_type(aux_value_type, name_index))

    return f'<span class="type-chip">{display}</span>'


def ref_chip(ref_class: str, name_index: Mapping[str, str]) -> str:
    """Chip for a referenced class; a link when the class is known."""
    label = html.escape(ref_class)
    location = name_index.get(ref_class)
    if location:
        return f'<a href="{html.escape(location)}" class="chip chip-link">{label}</a>'
    return f'<span class="chip">{label}</span>'


_TAGS = re.compile(r"<[^>]+>")


def strip_markup(rendered: str) -> str:
    """Plain-text form of a rendered chip, for terminal output."""
    return html.unescape(_TAGS.sub("", rendered))


@dataclass(frozen=True)
class FieldRow:
    name: str
    chip: str
    reference: str

    @property
    def plain_type(self) -> str:
        return strip_markup(self.chip)


def describe_fields(decl: ClassDeclaration, name_index: Mapping[str, str]) -> List[FieldRow]:
    rows = []
    for f in decl.fields:
        chip = type_chip(f.field_type, f.aux_key_type, f.aux_value_type, f.referenced_type, name_index)
        reference = "" if is_absent(f.referenced_type) else ref_chip(f.referenced_type, name_index)
        rows.append(FieldRow(name=f.name, chip=chip, reference=reference))
    return rows
