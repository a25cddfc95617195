"""
Generative-model entity extraction.

Prompts the model backend for a JSON list of entities, then validates the
answer row by row. Rows that fail validation or carry a type outside the
requested set are skipped, never fatal.
"""
from __future__ import annotations

import json
from typing import AbstractSet, Iterable, List, Optional

from pydantic import ValidationError

from ..config import Config
from ..exceptions import BackendError
from ..logger import get_logger
from ..models import AnalyzedEntity, EntityType, TextContext
from ..schemas import EntityExtractionEnvelope, ExtractedEntityRow
from ..utils.text_cleaning import truncate_text
from .llm_backend import CompletionBackend
from .response_parser import extract_json_object

logger = get_logger(__name__)

SOURCE_NAME = "model"
CONTEXT_IMPORTANCE = 0.8
DEFAULT_CONFIDENCE = 0.5

OUTPUT_SCHEMA = {
    "entities": [
        {
            "type": "one of the requested entity types",
            "name": "entity name as written in the content",
            "attributes": {"key": "value"},
            "confidence": "number between 0 and 1",
            "context": "short quote from the content",
        }
    ]
}

EXTRACTION_PROMPT_TEMPLATE = """Extract business entities from the content below.

ENTITY TYPES
Only return entities of these types: {entity_types}

GUIDANCE
- business: company or brand names; attributes may include business_type, description
- product: products sold; attributes may include category, description, price
- location: addresses or places; attributes may include address, city, province, country, country_code, postal_code
- contact: e-mail addresses, phone numbers, social accounts; attributes may include contact_type, platform
- person: named people; attributes may include role
- service: services offered; attributes may include description
- Only include entities that appear in the content.

OUTPUT
Return a single JSON object with this shape and nothing else:
{schema}

CONTENT
{content}"""


class ModelBasedExtractor:
    """
    Entity extraction through a CompletionBackend.

    Backend failures raise BackendError; the orchestrator decides how to degrade.
    """

    def __init__(
        self,
        backend: CompletionBackend,
        max_content_chars: Optional[int] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        """
        Args:
            backend: Completion backend
            max_content_chars: Content is truncated to this many characters
            temperature: Sampling temperature (low for consistency)
            max_tokens: Response token budget
        """
        self.backend = backend
        self.max_content_chars = max_content_chars or Config.MAX_CONTENT_CHARS
        self.temperature = Config.AI_MODEL_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or Config.AI_MODEL_MAX_TOKENS

    def build_prompt(self, text: str, entity_types: Iterable[EntityType]) -> str:
        """Build the extraction prompt; identical inputs give identical prompts."""
        type_names = sorted({t.value for t in entity_types})
        return EXTRACTION_PROMPT_TEMPLATE.format(
            entity_types=", ".join(type_names),
            schema=json.dumps(OUTPUT_SCHEMA, indent=2),
            content=truncate_text(text, self.max_content_chars),
        )

    def extract(
        self,
        text: str,
        entity_types: AbstractSet[EntityType],
        model: Optional[str] = None,
    ) -> List[AnalyzedEntity]:
        """
        Extract entities of the requested types.

        Args:
            text: Normalized text payload
            entity_types: Types to keep
            model: Backend model override

        Returns:
            Validated entities in response order

        Raises:
            BackendError: If the backend call fails
        """
        if not text or not text.strip() or not entity_types:
            return []

        prompt = self.build_prompt(text, entity_types)

        try:
            raw = self.backend.complete(
                prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                model=model,
            )
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Model extraction call failed: {e}") from e

        data = extract_json_object(raw)
        if data is None:
            logger.warning("Model extraction response contained no JSON object")
            return []

        try:
            envelope = EntityExtractionEnvelope.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Model extraction response has no entity list: {e.error_count()} errors")
            return []

        entities: List[AnalyzedEntity] = []
        skipped = 0

        for item in envelope.entities:
            try:
                row = ExtractedEntityRow.model_validate(item)
            except ValidationError as e:
                skipped += 1
                logger.debug(f"Skipping invalid entity row: {e.errors()[0]['msg']}")
                continue

            entity_type = EntityType.parse(row.type)
            if entity_type is None or entity_type not in entity_types:
                skipped += 1
                continue

            confidence = DEFAULT_CONFIDENCE if row.confidence is None else row.confidence

            entities.append(AnalyzedEntity(
                type=entity_type,
                name=row.name,
                attributes=dict(row.attributes),
                raw_text=row.context or row.name,
                confidence=confidence,
                contexts=[TextContext(text=row.context or row.name, importance=CONTEXT_IMPORTANCE)],
                sources=[SOURCE_NAME],
            ))

        if skipped:
            logger.info(f"Skipped {skipped} model entity rows (invalid or unrequested type)")

        logger.info(f"Model extraction complete: {len(entities)} entities")
        return entities
