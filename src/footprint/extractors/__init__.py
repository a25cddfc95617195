"""
Content extractors for raw markup.
"""

from .html_preprocessor import ContentPreprocessor, PreprocessedContent

__all__ = [
    'ContentPreprocessor',
    'PreprocessedContent',
]
