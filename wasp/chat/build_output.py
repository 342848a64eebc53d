"""Filtering of cargo/rustc chatter out of the build script's output."""

from __future__ import annotations

import re

IGNORE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern)
    for pattern in (
        r"Finished.*profile",
        r"Compiling.*",
        r"Running.*",
        r"warning: profiles for the non root package will be ignored",
        r"warning: virtual workspace defaulting to",
        r"note: to keep the current resolver",
        r"note: to use the edition 2021 resolver",
        r"note: for more details see",
    )
)


def filter_build_messages(text: str | None) -> str | None:
    """Drop known build noise and blank lines from *text*.

    Returns:
        The remaining lines joined with ``\\n`` in their original order, or
        ``None`` when nothing worth printing is left.
    """
    if not text:
        return None

    kept = [
        line
        for line in text.split("\n")
        if line.strip() and not any(pattern.search(line) for pattern in IGNORE_PATTERNS)
    ]
    return "\n".join(kept) if kept else None
