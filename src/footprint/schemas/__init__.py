"""
Pydantic schemas for API validation and backend data contracts.
"""

from .intelligence import (
    AnalysisOptions,
    ContentAnalysisRequest,
    ExtractedEntityRow,
    ProductClassificationRow,
    EntityExtractionEnvelope,
    ClassificationEnvelope,
    AnalyzeContentPayload,
    DEFAULT_ENTITY_TYPES,
)

__all__ = [
    'AnalysisOptions',
    'ContentAnalysisRequest',
    'ExtractedEntityRow',
    'ProductClassificationRow',
    'EntityExtractionEnvelope',
    'ClassificationEnvelope',
    'AnalyzeContentPayload',
    'DEFAULT_ENTITY_TYPES',
]
