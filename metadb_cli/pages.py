"""MDX companion pages, one per class, rendered by the documentation site."""

from __future__ import annotations

from typing import List

from .artifacts import page_slug
from .config import Settings, doc_edit_url
from .models import ClassDeclaration

PAGE_SUFFIX = ".mdx"


def display_name(name: str) -> str:
    return f"Class {name}" if name.startswith("0x") else name


def page_file_name(name: str) -> str:
    return f"{page_slug(name)}{PAGE_SUFFIX}"


def bases_line(bases: List[str], link_prefix: str = "/classes") -> str:
    prefix = link_prefix.rstrip("/")
    links = [f"[{base}]({prefix}/{page_slug(base)})" for base in bases]
    return f"**Inherits from:** {', '.join(links)}" if links else ""


def render_page(decl: ClassDeclaration, artifact_url: str, settings: Settings) -> str:
    title = display_name(decl.name)
    front_matter = [
        "---",
        f"title: {title}",
        f"description: Reference documentation for {title} meta class",
    ]
    edit_url = doc_edit_url(decl.name, settings)
    if edit_url:
        front_matter.append(f"editUrl: {edit_url}")
    front_matter.append("---")

    return "\n".join(front_matter) + f"""

import ClassDetails from '{settings.component_import}';

# {title}

{bases_line(decl.bases, settings.link_prefix)}

<ClassDetails file="{artifact_url}" />
"""
