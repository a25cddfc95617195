"""
Pydantic schemas for content analysis requests and backend responses.

Validates input at the service boundary and each row a model backend
returns, while the pipeline itself works on the dataclass models.
"""
from __future__ import annotations

from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from ..models import EntityType, SourceType

DEFAULT_ENTITY_TYPES = frozenset({
    EntityType.BUSINESS,
    EntityType.PRODUCT,
    EntityType.LOCATION,
    EntityType.CONTACT,
})


def _clamp_confidence(v: Any) -> Optional[float]:
    """Coerce a self-reported confidence into [0, 1]; non-numeric values count as missing."""
    if v is None or isinstance(v, bool):
        return None
    try:
        value = float(v)
    except (TypeError, ValueError):
        return None
    if value != value:  # NaN
        return None
    return max(0.0, min(1.0, value))


def _parse_entity_types(v: Any) -> Any:
    if v is None:
        return DEFAULT_ENTITY_TYPES
    if isinstance(v, str):
        v = [v]
    return [t.strip().lower() if isinstance(t, str) else t for t in v]


class AnalysisOptions(BaseModel):
    """Optional tuning for a single analysis."""
    model_config = ConfigDict(frozen=True)

    confidence_threshold: Optional[float] = Field(
        default=None, ge=0.0, le=1.0,
        description="Drop entities whose final confidence is below this value"
    )
    max_entities: Optional[int] = Field(
        default=None, ge=1,
        description="Keep at most this many entities (highest confidence first)"
    )
    language_model: Optional[str] = Field(
        default=None, description="Backend model override for this request"
    )
    extract_structured: bool = Field(
        default=True, description="Include JSON-LD and meta tags when preprocessing HTML"
    )


class ContentAnalysisRequest(BaseModel):
    """Immutable input of one pipeline invocation."""
    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="Normalized text payload")
    source_url: str = Field(default="", description="Where the content came from")
    source_type: SourceType = Field(default=SourceType.WEBSITE)
    entity_types: FrozenSet[EntityType] = Field(default=DEFAULT_ENTITY_TYPES)
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)

    @field_validator('entity_types', mode='before')
    @classmethod
    def parse_entity_types(cls, v):
        return _parse_entity_types(v)

    @field_validator('entity_types')
    @classmethod
    def require_entity_types(cls, v: FrozenSet[EntityType]) -> FrozenSet[EntityType]:
        if not v:
            raise ValueError("entity_types must not be empty")
        return v

    @field_validator('source_type', mode='before')
    @classmethod
    def normalize_source_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


# =============================================================================
# Backend response rows
# =============================================================================

class ExtractedEntityRow(BaseModel):
    """One row of {"entities": [...]} as returned by the model backend."""
    model_config = ConfigDict(extra="ignore")

    type: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    attributes: Dict[str, Any] = Field(default_factory=dict)
    confidence: Optional[float] = None
    context: Optional[str] = None

    @field_validator('name', 'type', mode='before')
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator('attributes', mode='before')
    @classmethod
    def default_attributes(cls, v):
        return {} if v is None else v

    @field_validator('confidence', mode='before')
    @classmethod
    def clamp_confidence(cls, v):
        return _clamp_confidence(v)

    @field_validator('context', mode='before')
    @classmethod
    def context_as_text(cls, v):
        if v is None:
            return None
        return v if isinstance(v, str) else str(v)


class ProductClassificationRow(BaseModel):
    """One row of {"classifications": [...]} as returned by the model backend."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    subcategory: Optional[str] = None
    code: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("code", "hsCode", "hs_code")
    )
    confidence: Optional[float] = None

    @field_validator('name', 'category', mode='before')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('subcategory', 'code', mode='before')
    @classmethod
    def optional_text(cls, v):
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            v = str(v)
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator('confidence', mode='before')
    @classmethod
    def clamp_confidence(cls, v):
        return _clamp_confidence(v)


class EntityExtractionEnvelope(BaseModel):
    """Top-level {"entities": [...]} object; rows are validated one by one."""
    entities: List[Any]


class ClassificationEnvelope(BaseModel):
    """Top-level {"classifications": [...]} object; rows are validated one by one."""
    classifications: List[Any]


# =============================================================================
# HTTP payload
# =============================================================================

class AnalyzeContentPayload(BaseModel):
    """Request body for POST /api/analyze."""
    content: Optional[str] = Field(default=None, description="Already-normalized text")
    html: Optional[str] = Field(default=None, description="Raw markup to preprocess")
    source_url: str = Field(default="")
    source_type: SourceType = Field(default=SourceType.WEBSITE)
    entity_types: FrozenSet[EntityType] = Field(default=DEFAULT_ENTITY_TYPES)
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)

    @field_validator('entity_types', mode='before')
    @classmethod
    def parse_entity_types(cls, v):
        return _parse_entity_types(v)

    @field_validator('source_type', mode='before')
    @classmethod
    def normalize_source_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @model_validator(mode='after')
    def require_content_or_html(self):
        if self.content is None and self.html is None:
            raise ValueError("Either 'content' or 'html' is required")
        return self
