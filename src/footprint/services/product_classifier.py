"""
Product classification.

Asks the model backend, in one batched call, for a category, optional
subcategory and optional export code (HS code) per product entity.
Classification is split in two steps so a slow backend can be abandoned
without leaving half-patched entities behind:

- ``classify()`` talks to the backend and returns plain records
- ``apply()`` folds those records into the entities
"""
from __future__ import annotations

import json
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from ..config import Config
from ..logger import get_logger
from ..models import AnalyzedEntity, Classification, EntityType
from ..schemas import ClassificationEnvelope, ProductClassificationRow
from .llm_backend import CompletionBackend
from .response_parser import extract_json_object

logger = get_logger(__name__)

CLASSIFICATION_PROMPT_TEMPLATE = """Classify each product below for trade purposes.

For every product return its category, a subcategory if one applies, and
the 6-digit Harmonized System (HS) code if you can determine it.

PRODUCTS
{products_json}

OUTPUT
Return a single JSON object with this shape and nothing else:
{{"classifications": [{{"name": "product name exactly as given", "category": "...", "subcategory": "...", "code": "...", "confidence": 0.0}}]}}"""


def _match_key(name: str) -> str:
    return name.lower().strip()


class ProductClassifier:
    """
    Classify product entities through a CompletionBackend.

    Fails soft: any backend or response problem yields no classifications.
    """

    def __init__(
        self,
        backend: CompletionBackend,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        self.backend = backend
        self.temperature = Config.AI_MODEL_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or Config.AI_MODEL_MAX_TOKENS

    @staticmethod
    def blend_confidence(current: float, returned: float) -> float:
        """Combine an entity's confidence with the classifier's (arithmetic mean)."""
        return max(0.0, min(1.0, (current + returned) / 2))

    def build_prompt(self, products: Sequence[AnalyzedEntity]) -> str:
        items = []
        for product in products:
            item = {"name": product.name}
            description = product.get("description")
            if description:
                item["description"] = str(description)
            items.append(item)

        return CLASSIFICATION_PROMPT_TEMPLATE.format(
            products_json=json.dumps(items, indent=2, ensure_ascii=False)
        )

    def classify(
        self,
        products: Sequence[AnalyzedEntity],
        model: Optional[str] = None,
    ) -> List[Classification]:
        """
        Classify products with a single backend call.

        Args:
            products: Entities to classify (non-product entities are ignored)
            model: Backend model override

        Returns:
            Classification records; empty on any failure
        """
        products = [p for p in products if p.type == EntityType.PRODUCT]
        if not products:
            return []

        try:
            raw = self.backend.complete(
                self.build_prompt(products),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                model=model,
            )
        except Exception as e:
            logger.warning(f"Product classification call failed: {e}")
            return []

        data = extract_json_object(raw)
        if data is None:
            logger.warning("Classification response contained no JSON object")
            return []

        try:
            envelope = ClassificationEnvelope.model_validate(data)
        except ValidationError:
            logger.warning("Classification response has no classification list")
            return []

        classifications: List[Classification] = []
        for item in envelope.classifications:
            try:
                row = ProductClassificationRow.model_validate(item)
            except ValidationError:
                logger.debug(f"Skipping invalid classification row: {item!r}")
                continue

            classifications.append(Classification(
                name=row.name,
                category=row.category,
                subcategory=row.subcategory,
                code=row.code,
                confidence=row.confidence,
            ))

        logger.info(f"Classified {len(classifications)} of {len(products)} products")
        return classifications

    def apply(
        self,
        entities: List[AnalyzedEntity],
        classifications: Sequence[Classification],
    ) -> int:
        """
        Fold classifications into matching product entities, in place.

        Matching is by lowercase-trimmed name; the first record per name wins.

        Returns:
            Number of entities updated
        """
        by_name: Dict[str, Classification] = {}
        for record in classifications:
            by_name.setdefault(_match_key(record.name), record)

        if not by_name:
            return 0

        updated = 0
        for entity in entities:
            if entity.type != EntityType.PRODUCT:
                continue

            record = by_name.get(_match_key(entity.name))
            if record is None:
                continue

            entity.attributes["category"] = record.category
            if record.subcategory:
                entity.attributes["subcategory"] = record.subcategory
            if record.code:
                entity.attributes["code"] = record.code
            if record.confidence is not None:
                entity.confidence = self.blend_confidence(entity.confidence, record.confidence)
            updated += 1

        return updated
