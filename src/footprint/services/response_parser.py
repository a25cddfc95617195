"""
Best-effort structured-response parser.

Model backends answer in free text that usually, but not always, wraps a
single JSON object in prose or markdown fences. This module locates and
decodes the first JSON object in such text.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterator, Optional

from ..logger import get_logger

logger = get_logger(__name__)

# Last resort: everything between the first '{' and the last '}'
_GREEDY_OBJECT = re.compile(r'\{[\s\S]*\}')


def _balanced_candidates(text: str) -> Iterator[str]:
    """
    Yield balanced {...} substrings, one per opening brace position.

    Braces inside JSON string literals are ignored. An opening brace that
    never closes ends the scan: every later brace sits inside it.
    """
    start = text.find('{')
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        closed = False

        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == '\\':
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue

            if ch == '"':
                in_string = True
            elif ch == '{':
                depth += 1
            elif ch == '}':
                depth -= 1
                if depth == 0:
                    closed = True
                    yield text[start:i + 1]
                    break

        if not closed:
            return
        start = text.find('{', start + 1)


def extract_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Find and decode the first JSON object in free text.

    Args:
        text: Raw backend output

    Returns:
        The decoded object, or None when no complete object is present.
        Objects nested inside a truncated one are not returned.

    Examples:
        >>> extract_json_object('Sure! {"entities": []} Hope this helps.')
        {'entities': []}
        >>> extract_json_object('{"entities": [') is None
        True
    """
    if not text or '{' not in text:
        return None

    for candidate in _balanced_candidates(text):
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    match = _GREEDY_OBJECT.search(text)
    if match:
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError:
            data = None
        if isinstance(data, dict):
            return data

    logger.debug("No decodable JSON object in backend response")
    return None
