"""
Utility modules for Footprint.
"""
from .validators import is_valid_url
from .text_cleaning import clean_text, normalize_whitespace, strip_html_tags, truncate_text

__all__ = [
    "is_valid_url",
    "clean_text",
    "normalize_whitespace",
    "strip_html_tags",
    "truncate_text",
]
