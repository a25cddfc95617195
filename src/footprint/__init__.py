"""
Footprint - Business Content Intelligence.

Extracts typed business entities (businesses, products, locations,
contacts, people, services) from web content by fusing a rule-based
recognizer with a generative model, then classifies products and scores
confidence.
"""

__version__ = "1.0.0"
__author__ = "Footprint"

from .models import (
    AnalyzedEntity,
    Classification,
    ContentAnalysisResponse,
    EntityType,
    SourceType,
    TextContext,
)
from .schemas import AnalysisOptions, ContentAnalysisRequest

__all__ = [
    "AnalyzedEntity",
    "Classification",
    "ContentAnalysisResponse",
    "EntityType",
    "SourceType",
    "TextContext",
    "AnalysisOptions",
    "ContentAnalysisRequest",
]
