"""Helpers for building sectioned diagnostic messages."""

from __future__ import annotations

import typing as t
from textwrap import indent

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from collections.abc import Sequence


def numbered(entries: Sequence[str], *, start: int = 1) -> str:
    """Return *entries* as a numbered list, continuation lines indented."""
    if not entries:
        return "(none)"
    lines: list[str] = []
    for index, entry in enumerate(entries, start=start):
        entry_lines = entry.splitlines() or [""]
        lines.append(f"{index}. {entry_lines[0]}")
        lines.extend(f"   {extra}" for extra in entry_lines[1:])
    return "\n".join(lines)


def format_sections(title: str, sections: Sequence[tuple[str, str]]) -> str:
    """Return *title* followed by indented ``label:`` sections.

    Sections with an empty body are skipped.
    """
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)
