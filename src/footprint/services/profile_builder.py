"""
Business profile assembly.

Groups the entities of an analysis response into a read-only profile view:
the main business, its products, contact channels and locations.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models import AnalyzedEntity, ContentAnalysisResponse, EntityType
from ..utils.validators import is_valid_url
from .entity_llm import SOURCE_NAME as MODEL_SOURCE

# Rule-only hits on these subtypes are trigger words, not names or values
TRIGGER_SUBTYPES = {
    EntityType.BUSINESS: {"legal_suffix", "business_kind"},
    EntityType.CONTACT: {"channel"},
}


def _is_trigger_only(entity: AnalyzedEntity) -> bool:
    if MODEL_SOURCE in entity.sources:
        return False
    return entity.attributes.get("subtype") in TRIGGER_SUBTYPES.get(entity.type, ())


def _business_rank(entity: AnalyzedEntity) -> int:
    if entity.attributes.get("subtype") == "legal_name" or MODEL_SOURCE in entity.sources:
        return 1
    return 0


def _business_info(entities: List[AnalyzedEntity]) -> Optional[Dict[str, Any]]:
    candidates = [e for e in entities if not _is_trigger_only(e)]
    if not candidates:
        return None

    # Named entities outrank bare rule hits, then highest confidence; first sight breaks ties
    business = max(candidates, key=lambda e: (_business_rank(e), e.confidence))
    return {
        "name": business.name,
        "business_type": business.get("business_type"),
        "description": business.get("description"),
        "confidence": business.confidence,
    }


def _product(entity: AnalyzedEntity) -> Dict[str, Any]:
    return {
        "name": entity.name,
        "category": entity.get("category"),
        "subcategory": entity.get("subcategory"),
        "code": entity.get("code"),
        "description": entity.get("description"),
        "price": entity.get("price"),
        "confidence": entity.confidence,
    }


def _contact(entity: AnalyzedEntity) -> Dict[str, Any]:
    return {
        "value": entity.name,
        "contact_type": entity.get("contact_type"),
        "platform": entity.get("platform"),
        "confidence": entity.confidence,
    }


def _location(entity: AnalyzedEntity) -> Dict[str, Any]:
    return {
        "name": entity.name,
        "address": entity.get("address", entity.name),
        "city": entity.get("city"),
        "province": entity.get("province"),
        "country": entity.get("country"),
        "country_code": entity.get("country_code"),
        "postal_code": entity.get("postal_code"),
        "confidence": entity.confidence,
    }


def build_profile(response: ContentAnalysisResponse, source_url: str = "") -> Dict[str, Any]:
    """
    Build a profile view from an analysis response.

    Args:
        response: Completed analysis response
        source_url: Where the analyzed content came from

    Returns:
        Dictionary with business_info, products, contacts and locations
    """
    return {
        "source_url": source_url,
        "website": source_url if is_valid_url(source_url) else None,
        "business_info": _business_info(response.by_type(EntityType.BUSINESS)),
        "products": [_product(e) for e in response.by_type(EntityType.PRODUCT)],
        "contacts": [
            _contact(e) for e in response.by_type(EntityType.CONTACT) if not _is_trigger_only(e)
        ],
        "locations": [_location(e) for e in response.by_type(EntityType.LOCATION)],
        "confidence": response.confidence,
    }
