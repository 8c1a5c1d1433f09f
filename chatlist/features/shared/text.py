from __future__ import annotations

import logging
import re
from dataclasses import dataclass

_SURROGATE_RE = re.compile("[\ud800-\udfff]")
_LINE_BREAK_RE = re.compile(r"\r\n?")
_WHITESPACE_RUN_RE = re.compile(r"\s+")


@dataclass
class TextCleanupStats:
    nul_removed: int = 0
    surrogates_replaced: int = 0
    line_breaks_normalized: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.nul_removed or self.surrogates_replaced or self.line_breaks_normalized)


def clean_text(
    value: str,
    *,
    strip: bool = True,
    single_line: bool = False,
) -> tuple[str, TextCleanupStats]:
    """Drop NULs, replace lone surrogates and normalize line breaks.

    With ``single_line`` every whitespace run, line breaks included, collapses
    to one space.
    """
    stats = TextCleanupStats(nul_removed=value.count("\x00"))
    cleaned = value.replace("\x00", "")
    cleaned, stats.surrogates_replaced = _SURROGATE_RE.subn("\ufffd", cleaned)
    cleaned, stats.line_breaks_normalized = _LINE_BREAK_RE.subn("\n", cleaned)
    if single_line:
        cleaned = _WHITESPACE_RUN_RE.sub(" ", cleaned)
    if strip:
        cleaned = cleaned.strip()
    return cleaned, stats


def clean_optional_text(
    value: str | None,
    *,
    strip: bool = True,
    single_line: bool = False,
) -> tuple[str | None, TextCleanupStats]:
    if value is None:
        return None, TextCleanupStats()
    return clean_text(value, strip=strip, single_line=single_line)


def truncate_text(value: str, *, max_length: int) -> str:
    if len(value) <= max_length:
        return value
    return f"{value[: max_length - 3].rstrip()}..."


def log_cleanup_stats(
    logger: logging.Logger,
    *,
    location: str,
    stats: TextCleanupStats,
) -> None:
    if not stats.changed:
        return
    logger.debug(
        "Cleaned text for %s (nul_removed=%d, surrogates_replaced=%d, line_breaks_normalized=%d).",
        location,
        stats.nul_removed,
        stats.surrogates_replaced,
        stats.line_breaks_normalized,
    )


__all__ = [
    "TextCleanupStats",
    "clean_optional_text",
    "clean_text",
    "log_cleanup_stats",
    "truncate_text",
]
