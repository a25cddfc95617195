"""
Business logic services for content analysis.

Provides modular components for:
- Rule-based entity recognition and extraction
- Model-based entity extraction and product classification
- Entity fusion and confidence scoring
- Pipeline orchestration and profile assembly
"""

from .recognizer import EntityRecognizer, RecognizedSpan, DEFAULT_GAZETTEERS
from .entity_rules import RuleBasedExtractor
from .llm_backend import CompletionBackend, OpenAIBackend
from .response_parser import extract_json_object
from .entity_llm import ModelBasedExtractor
from .entity_merge import EntityFuser
from .product_classifier import ProductClassifier
from .confidence import ConfidenceScorer, ScoringWeights
from .intelligence import ContentAnalyzer
from .profile_builder import build_profile

__all__ = [
    'EntityRecognizer',
    'RecognizedSpan',
    'DEFAULT_GAZETTEERS',
    'RuleBasedExtractor',
    'CompletionBackend',
    'OpenAIBackend',
    'extract_json_object',
    'ModelBasedExtractor',
    'EntityFuser',
    'ProductClassifier',
    'ConfidenceScorer',
    'ScoringWeights',
    'ContentAnalyzer',
    'build_profile',
]
