"""
Deterministic rule-based entity extraction.

Runs the trained recognizer over normalized text and turns each match
into an AnalyzedEntity. Best-effort: failures yield an empty list.
"""
from __future__ import annotations

from typing import List

from ..logger import get_logger
from ..models import AnalyzedEntity, EntityType, TextContext
from .recognizer import EntityRecognizer

logger = get_logger(__name__)

SOURCE_NAME = "rules"
CONTEXT_IMPORTANCE = 1.0


class RuleBasedExtractor:
    """
    Entity extraction backed by a shared EntityRecognizer.

    The recognizer is owned by the caller and must be initialized before
    extraction is useful; this class never mutates it.
    """

    def __init__(self, recognizer: EntityRecognizer):
        self.recognizer = recognizer

    def extract(self, text: str) -> List[AnalyzedEntity]:
        """
        Extract entities from text.

        Args:
            text: Normalized text payload

        Returns:
            Entities in match order; empty on any internal error
        """
        if not text or not text.strip():
            return []

        try:
            spans = self.recognizer.process(text)
        except Exception as e:
            logger.warning(f"Rule-based extraction failed: {e}")
            return []

        entities: List[AnalyzedEntity] = []
        dropped = 0

        for span in spans:
            entity_type = EntityType.parse(span.label)
            if entity_type is None:
                dropped += 1
                continue

            entities.append(AnalyzedEntity(
                type=entity_type,
                name=span.text,
                attributes={"subtype": span.subtype},
                raw_text=span.text,
                confidence=span.accuracy,
                contexts=[TextContext(text=span.text, importance=CONTEXT_IMPORTANCE)],
                sources=[SOURCE_NAME],
            ))

        if dropped:
            logger.debug(f"Dropped {dropped} matches with unsupported labels")

        logger.info(f"Rules extraction complete: {len(entities)} entities")
        return entities
