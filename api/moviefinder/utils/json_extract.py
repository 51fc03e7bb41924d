"""Best-effort recovery of JSON arrays embedded in generative model output."""

from __future__ import annotations

import json
from typing import Any

_DECODER = json.JSONDecoder()


def extract_json_array(text: str | None) -> list[Any]:
    """Return the first JSON array found in `text`, or an empty list.

    Models wrap their answer in prose, markdown fences or citation markers
    such as `[1]`, so every `[` is tried as the start of an array. The first
    array holding an object wins; otherwise the first array decoded is
    returned. Never raises.
    """
    if not text or not isinstance(text, str):
        return []
    first: list[Any] | None = None
    start = text.find("[")
    while start != -1:
        try:
            parsed, end = _DECODER.raw_decode(text, start)
        except ValueError:
            start = text.find("[", start + 1)
            continue
        if isinstance(parsed, list):
            if any(isinstance(entry, dict) for entry in parsed):
                return parsed
            if first is None:
                first = parsed
        start = text.find("[", end)
    return first if first is not None else []
