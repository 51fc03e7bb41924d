"""Masking of provider credentials in strings bound for logs and telemetry.

TMDB takes `api_key=`, OMDb `apikey=` and Gemini `key=` as query parameters,
and TMDB v4 tokens travel as bearer headers; all of them can surface in
httpx error messages.
"""

from __future__ import annotations

import re

MASK = "***"

_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?i)\b([a-z][a-z0-9+.-]*://)[^@/\s]+@"), rf"\1{MASK}@"),
    (
        re.compile(r"(?i)\b(api_key|apikey|key|access_token|token|secret|password)=[^&\s'\"]+"),
        rf"\1={MASK}",
    ),
    (re.compile(r"(?i)\b(bearer\s+)[\w.~-]+"), rf"\1{MASK}"),
)


def redact_secrets(text: str) -> str:
    if not text:
        return text
    for pattern, replacement in _PATTERNS:
        text = pattern.sub(replacement, text)
    return text
