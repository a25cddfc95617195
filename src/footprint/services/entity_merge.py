"""
Entity fusion for combining rule-based and model-based extraction results.

Handles:
- Deduplication by (type, normalized name)
- Attribute union (later sightings win per key)
- Context and source accumulation
- Max-confidence reconciliation
"""
from __future__ import annotations

from typing import Dict, List, Sequence

from ..logger import get_logger
from ..models import AnalyzedEntity

logger = get_logger(__name__)


class EntityFuser:
    """
    Merge two entity lists into one deduplicated list.

    Inputs are never mutated: every output entity is a fresh deep copy,
    so two results never share an entity by reference.
    """

    @staticmethod
    def make_key(entity: AnalyzedEntity) -> str:
        """Create deduplication key from entity."""
        return f"{entity.type.value}:{entity.name.lower().strip()}"

    def fuse(
        self,
        first: Sequence[AnalyzedEntity],
        second: Sequence[AnalyzedEntity],
    ) -> List[AnalyzedEntity]:
        """
        Fuse two entity lists.

        Output order is first-sight order over ``first`` then ``second``.

        Args:
            first: Usually the rule-based entities
            second: Usually the model-based entities

        Returns:
            Deduplicated entities
        """
        merged: Dict[str, AnalyzedEntity] = {}

        for entity in list(first) + list(second):
            key = self.make_key(entity)
            existing = merged.get(key)

            if existing is None:
                merged[key] = entity.clone()
                continue

            incoming = entity.clone()
            existing.attributes.update(incoming.attributes)
            existing.contexts.extend(incoming.contexts)
            for source in incoming.sources:
                if source not in existing.sources:
                    existing.sources.append(source)
            existing.confidence = max(existing.confidence, incoming.confidence)

        result = list(merged.values())

        logger.info(
            f"Fusion complete: {len(first)} + {len(second)} -> {len(result)} entities"
        )
        return result
