"""Digest text rendering.

Two representations are built from grouped messages:

* the flat digest: message texts per template, one per line, sections
  separated by a blank line;
* the heading digest: messages of the form ``Something new: <a href="…">New
  stuff</a>`` collected under the heading ``Something new`` as bullet items
  holding only the link.  Messages not led by a link are left out.
"""
from __future__ import annotations

import re

from loop_notifications.notification.matching import GroupedMessages

HEADING_PATTERN = re.compile(r"^(?P<heading>[^<]+?)(:\s*)?(?P<content><a.+</a>)")


def split_heading(text: str | None) -> tuple[str, str] | None:
    """Split *text* into ``(heading, link)``; ``None`` if it is not link-led."""
    if text is None:
        return None
    match = HEADING_PATTERN.match(text)
    if match is None:
        return None
    return match.group("heading"), match.group("content")


def _first_text(message, langcode: str, default_langcode: str) -> str | None:
    texts = message.get_text(langcode, default_langcode)
    return texts[0] if texts else None


def build_sections(
    grouped: GroupedMessages,
    langcode: str,
    default_langcode: str = "en",
) -> dict[str, str]:
    """Return one newline separated text section per message template."""
    sections: dict[str, str] = {}
    for template, messages in grouped.items():
        texts = [_first_text(m, langcode, default_langcode) or "" for m in messages.values()]
        sections[template] = "\n".join(texts)
    return sections


def build_flat_digest(sections: dict[str, str]) -> str:
    return "\n\n".join(section for section in sections.values() if section)


def build_heading_digest(
    grouped: GroupedMessages,
    langcode: str,
    default_langcode: str = "en",
) -> str:
    """Collect link-led messages under their headings, in first-seen order."""
    headings: dict[str, list[str]] = {}
    for messages in grouped.values():
        for message in messages.values():
            parts = split_heading(_first_text(message, langcode, default_langcode))
            if parts is None:
                continue
            heading, content = parts
            headings.setdefault(heading, []).append(content)

    return "".join(
        f"{heading}\n\n* " + "\n* ".join(contents) + "\n\n"
        for heading, contents in headings.items()
    )
