"""
Data models for Footprint content analysis.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple


class EntityType(str, Enum):
    """Closed set of entity types the pipeline produces."""

    BUSINESS = "business"
    PRODUCT = "product"
    LOCATION = "location"
    CONTACT = "contact"
    PERSON = "person"
    SERVICE = "service"

    @classmethod
    def parse(cls, value: Any) -> Optional[EntityType]:
        """Return the member for a loose string tag, or None if unsupported."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class SourceType(str, Enum):
    """Kind of source the content was acquired from."""

    WEBSITE = "website"
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    DOCUMENT = "document"
    PDF = "pdf"
    LINKEDIN = "linkedin"


# ============================================================================
# ATTRIBUTE RESOLUTION
# ============================================================================

# Canonical attribute name -> accepted keys, in lookup order
ATTRIBUTE_ALIASES: Dict[str, Tuple[str, ...]] = {
    "category": ("category",),
    "subcategory": ("subcategory", "subCategory", "sub_category"),
    "code": ("code", "hsCode", "hs_code"),
    "country_code": ("country_code", "countryCode"),
    "postal_code": ("postal_code", "postalCode", "zip", "zipCode", "zip_code"),
    "description": ("description",),
    "address": ("address",),
    "city": ("city",),
    "province": ("province", "state", "region"),
    "country": ("country",),
    "contact_type": ("contact_type", "contactType", "subtype"),
    "platform": ("platform",),
    "price": ("price",),
    "business_type": ("business_type", "businessType"),
}


def resolve_attribute(attributes: Dict[str, Any], name: str, default: Any = None) -> Any:
    """
    Resolve a known attribute through its aliases.

    Empty strings and None count as absent.

    Args:
        attributes: Entity attribute mapping
        name: Canonical attribute name (key of ATTRIBUTE_ALIASES)
        default: Value returned when no alias holds a value

    Returns:
        The first populated value, or default
    """
    for key in ATTRIBUTE_ALIASES.get(name, (name,)):
        value = attributes.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return default


def has_attribute(attributes: Dict[str, Any], name: str) -> bool:
    """Check whether a known attribute is populated under any alias."""
    return resolve_attribute(attributes, name) is not None


# ============================================================================
# ENTITY MODELS
# ============================================================================

@dataclass
class TextContext:
    """A span of source text an entity was found in."""
    text: str
    importance: float = 1.0
    section: Optional[str] = None
    page: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data: Dict[str, Any] = {"text": self.text, "importance": self.importance}
        if self.section is not None:
            data["section"] = self.section
        if self.page is not None:
            data["page"] = self.page
        return data


@dataclass
class AnalyzedEntity:
    """
    Typed entity with confidence and provenance.

    Attributes:
        type: Entity type
        name: Identifier/label of the entity (e.g., "Acme Exports Ltd")
        attributes: Open attribute mapping
        raw_text: Source span the entity was derived from
        confidence: Extraction reliability in [0, 1]
        contexts: Source contexts, append-only
        sources: Extraction methods that produced the entity ("rules", "model")
    """
    type: EntityType
    name: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    raw_text: str = ""
    confidence: float = 0.5
    contexts: List[TextContext] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)

    def clone(self) -> AnalyzedEntity:
        """Deep copy, so no state is shared with the original."""
        return copy.deepcopy(self)

    def get(self, name: str, default: Any = None) -> Any:
        """Resolve a known attribute (see ATTRIBUTE_ALIASES)."""
        return resolve_attribute(self.attributes, name, default)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type.value,
            "name": self.name,
            "attributes": self.attributes,
            "raw_text": self.raw_text,
            "confidence": self.confidence,
            "contexts": [c.to_dict() for c in self.contexts],
            "sources": self.sources,
        }


@dataclass
class Classification:
    """Transient classification of a product, folded into the entity then discarded."""
    name: str
    category: str
    subcategory: Optional[str] = None
    code: Optional[str] = None
    confidence: Optional[float] = None


@dataclass
class ContentAnalysisResponse:
    """
    Final result of one content analysis.

    Attributes:
        entities: Final entities, in fusion order
        confidence: Aggregate confidence of the result
        processing_time: Wall time in milliseconds
    """
    entities: List[AnalyzedEntity] = field(default_factory=list)
    confidence: float = 0.0
    processing_time: int = 0

    def by_type(self, entity_type: EntityType) -> List[AnalyzedEntity]:
        """Entities of a single type."""
        return [e for e in self.entities if e.type == entity_type]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "entities": [e.to_dict() for e in self.entities],
            "confidence": self.confidence,
            "processing_time": self.processing_time,
        }
