"""
Text cleaning and normalization utilities.
"""
import re
from html import unescape


def normalize_whitespace(text: str) -> str:
    """
    Normalize whitespace in text.

    Args:
        text: Text to normalize

    Returns:
        Text with normalized whitespace

    Examples:
        >>> normalize_whitespace("hello    world\\n\\ntest")
        'hello world test'
    """
    if not text:
        return ""

    return re.sub(r'\s+', ' ', text).strip()


def strip_html_tags(text: str) -> str:
    """
    Remove HTML tags from text.

    Script and style bodies are dropped along with their tags.

    Examples:
        >>> strip_html_tags("<p>Hello <strong>world</strong></p>")
        'Hello world'
    """
    if not text:
        return ""

    text = re.sub(r'<(script|style)\b[^>]*>.*?</\1\s*>', ' ', text, flags=re.IGNORECASE | re.DOTALL)
    text = re.sub(r'<[^>]+>', ' ', text)

    return unescape(text)


def clean_text(
    text: str,
    strip_html: bool = True,
    normalize_ws: bool = True,
) -> str:
    """
    Clean and normalize text.

    Args:
        text: Text to clean
        strip_html: Remove HTML tags
        normalize_ws: Normalize whitespace

    Returns:
        Cleaned text

    Examples:
        >>> clean_text("<p>Hello  world</p>")
        'Hello world'
    """
    if not text:
        return ""

    if strip_html:
        text = strip_html_tags(text)

    if normalize_ws:
        text = normalize_whitespace(text)

    return text


def truncate_text(text: str, max_length: int, suffix: str = "") -> str:
    """
    Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length, suffix included
        suffix: Suffix to add if truncated

    Examples:
        >>> truncate_text("Hello world", 8, "...")
        'Hello...'
    """
    if not text or len(text) <= max_length:
        return text

    truncate_at = max(max_length - len(suffix), 0)

    return text[:truncate_at] + suffix
