"""
Confidence scoring.

Applies per-type evidence boosts to entity confidences and computes the
weighted aggregate confidence of a result.

Boosts (multiplicative, clamped to 1.0):
- business: longer names are more specific, up to +30%
- product: +20% when a category or export code is known
- location: +10% when a country code or postal code is known
- contact, person, service: unchanged
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from ..logger import get_logger
from ..models import AnalyzedEntity, EntityType, has_attribute

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScoringWeights:
    """Per-type weight of an entity in the aggregate confidence."""
    business: float = 1.0
    product: float = 0.8
    service: float = 0.8
    location: float = 0.7
    contact: float = 0.6
    person: float = 0.5

    def __post_init__(self) -> None:
        for entity_type in EntityType:
            weight = getattr(self, entity_type.value, None)
            if weight is None:
                raise ValueError(f"No scoring weight for entity type '{entity_type.value}'")
            if weight < 0:
                raise ValueError(f"Scoring weight for '{entity_type.value}' must be non-negative")

    def for_type(self, entity_type: EntityType) -> float:
        return getattr(self, entity_type.value)


def _business_factor(entity: AnalyzedEntity) -> float:
    return 1 + min(len(entity.name) / 50, 0.3)


def _product_factor(entity: AnalyzedEntity) -> float:
    if has_attribute(entity.attributes, "category") or has_attribute(entity.attributes, "code"):
        return 1.2
    return 1.0


def _location_factor(entity: AnalyzedEntity) -> float:
    if has_attribute(entity.attributes, "country_code") or has_attribute(entity.attributes, "postal_code"):
        return 1.1
    return 1.0


def _unchanged(entity: AnalyzedEntity) -> float:
    return 1.0


ADJUSTMENTS: Dict[EntityType, Callable[[AnalyzedEntity], float]] = {
    EntityType.BUSINESS: _business_factor,
    EntityType.PRODUCT: _product_factor,
    EntityType.LOCATION: _location_factor,
    EntityType.CONTACT: _unchanged,
    EntityType.PERSON: _unchanged,
    EntityType.SERVICE: _unchanged,
}


class ConfidenceScorer:
    """Adjust entity confidences and compute result-level confidence."""

    def __init__(
        self,
        weights: Optional[ScoringWeights] = None,
        adjustments: Optional[Dict[EntityType, Callable[[AnalyzedEntity], float]]] = None,
    ):
        self.weights = weights or ScoringWeights()
        self.adjustments = dict(adjustments or ADJUSTMENTS)

        missing = [t.value for t in EntityType if t not in self.adjustments]
        if missing:
            raise ValueError(f"No confidence adjustment for entity types: {missing}")

    def score(self, entities: Sequence[AnalyzedEntity]) -> List[AnalyzedEntity]:
        """
        Return adjusted copies of entities; inputs are left untouched.

        Resulting confidences are clamped to [0, 1].
        """
        scored = []
        for entity in entities:
            factor = self.adjustments[entity.type](entity)
            confidence = max(0.0, min(1.0, entity.confidence * factor))
            scored.append(dataclasses.replace(entity.clone(), confidence=confidence))

        logger.debug(f"Scored {len(scored)} entities")
        return scored

    def overall_confidence(self, entities: Sequence[AnalyzedEntity]) -> float:
        """
        Weighted mean of entity confidences.

        Returns:
            0.0 for an empty list (or when all weights are zero)
        """
        if not entities:
            return 0.0

        total_weight = 0.0
        weighted_sum = 0.0
        for entity in entities:
            weight = self.weights.for_type(entity.type)
            weighted_sum += entity.confidence * weight
            total_weight += weight

        if total_weight == 0:
            return 0.0

        return max(0.0, min(1.0, weighted_sum / total_weight))
