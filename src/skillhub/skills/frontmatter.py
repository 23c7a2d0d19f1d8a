"""
Frontmatter parsing for SKILL.md entrypoints.

This is deliberately a narrow sub-grammar rather than a YAML parser:
a block opened and closed by ``---`` lines holding flat ``key: value``
pairs. Anything outside that grammar is rejected with the offending line.
"""

from __future__ import annotations

import dataclasses as _dataclasses

import skillhub.errors as errors

FRONTMATTER_DELIMITER = "---"

_QUOTE_CHARS = "\"'"


@_dataclasses.dataclass(frozen=True)
class ParsedEntrypoint:
    """An entrypoint document split into its frontmatter and body."""

    fields: dict[str, str]
    """Frontmatter keys (lowercased) mapped to their unquoted values."""

    body: str
    """Everything after the closing delimiter."""


def parse_frontmatter(text: str) -> ParsedEntrypoint:
    """
    Split an entrypoint document into frontmatter fields and body.

    Rules:
    - The first non-empty line must be exactly ``---``.
    - Each following line up to the closing ``---`` is either blank,
      a ``#`` comment, or ``key: value`` split on the first colon.
    - Keys are lowercased; surrounding whitespace and quote characters
      are stripped from values.

    Args:
        text: Full entrypoint contents.

    Returns:
        ParsedEntrypoint with the field map and the raw body.

    Raises:
        ValidationError: If the block is missing or unterminated, a line
            is not ``key: value``, a key is empty, or a key repeats.
    """
    lines = text.split("\n")

    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1

    if start >= len(lines) or lines[start].strip() != FRONTMATTER_DELIMITER:
        raise errors.ValidationError(
            "entrypoint must start with a frontmatter block delimited by '---'"
        )

    fields: dict[str, str] = {}
    index = start + 1
    closed = False
    while index < len(lines):
        raw_line = lines[index]
        stripped = raw_line.strip()

        if stripped == FRONTMATTER_DELIMITER:
            closed = True
            break

        if stripped and not stripped.startswith("#"):
            key, sep, value = raw_line.partition(":")
            if not sep:
                raise errors.ValidationError(
                    f"invalid frontmatter line {index + 1}: {raw_line!r}"
                )

            key = key.strip().lower()
            if not key:
                raise errors.ValidationError(
                    f"frontmatter key cannot be empty (line {index + 1})"
                )
            if key in fields:
                raise errors.ValidationError(
                    f"duplicate frontmatter key '{key}' (line {index + 1})"
                )
            fields[key] = value.strip().strip(_QUOTE_CHARS)

        index += 1

    if not closed:
        raise errors.ValidationError("frontmatter block must end with '---'")

    return ParsedEntrypoint(fields=fields, body="\n".join(lines[index + 1 :]))
