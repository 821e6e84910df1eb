"""
Markdown helpers for specification documents.

Pure functions used by the step assessor (checklist progress) and the drift
detector (sections and content hashes). No parsing library is needed: only
ATX headings and task-list markers are significant.
"""

import hashlib
import re

from deliveryguard.domain.models import DocumentSection

_CHECKBOX = re.compile(r"^\s*[-*] \[[ xX]\]", re.MULTILINE)
_COMPLETED_CHECKBOX = re.compile(r"^\s*[-*] \[[xX]\]", re.MULTILINE)
_HEADING = re.compile(r"^(#{1,6})\s+(.+?)(?:\s+#+)?\s*$")
_FENCE = re.compile(r"^\s*(```|~~~)")


def count_checkboxes(content: str) -> tuple[int, int]:
    """
    Count task-list items.

    Returns:
        (total, completed) where completed counts `- [x]` / `- [X]`
    """
    total = len(_CHECKBOX.findall(content))
    completed = len(_COMPLETED_CHECKBOX.findall(content))
    return total, completed


def toggle_checkbox(content: str, item_text: str, completed: bool) -> str:
    """
    Mark the checklist item with the given text as done or not done.

    Matching is case-insensitive on the trimmed item text. Content is
    returned unchanged when nothing matches.
    """
    escaped = re.escape(item_text.strip())
    pattern = re.compile(
        rf"^(\s*[-*] \[)[ xX](\] {escaped})", re.MULTILINE | re.IGNORECASE
    )
    mark = "x" if completed else " "
    return pattern.sub(lambda m: f"{m.group(1)}{mark}{m.group(2)}", content)


def extract_sections(content: str) -> list[DocumentSection]:
    """
    Split a document on ATX headings.

    Each section's content runs to the next heading of any level, trimmed.
    Headings inside fenced code blocks are ignored. Text before the first
    heading belongs to no section.
    """
    sections: list[DocumentSection] = []
    header: str | None = None
    level = 0
    body: list[str] = []
    in_fence = False

    def flush() -> None:
        if header is not None:
            sections.append(DocumentSection(header, level, "\n".join(body).strip()))

    for line in content.splitlines():
        if _FENCE.match(line):
            in_fence = not in_fence
            body.append(line)
            continue
        match = None if in_fence else _HEADING.match(line)
        if match:
            flush()
            header = match.group(2).strip()
            level = len(match.group(1))
            body = []
        else:
            body.append(line)
    flush()
    return sections


def find_section(content: str, header: str) -> DocumentSection | None:
    """First section whose header matches case-insensitively."""
    wanted = header.strip().casefold()
    for section in extract_sections(content):
        if section.header.casefold() == wanted:
            return section
    return None


def compute_hash(content: str) -> str:
    """SHA-256 of section content, with line endings normalized."""
    normalized = content.replace("\r\n", "\n").strip()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()
