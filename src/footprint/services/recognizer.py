"""
Trained rule-based entity recognizer.

Wraps a blank spaCy pipeline with an ``entity_ruler``. Gazetteers (named
lists of trigger terms per entity type and subtype) are registered first,
then compiled once by ``initialize()``. After that the recognizer is
read-only and can be shared by any number of request threads.

Two kinds of patterns are compiled:
- phrase patterns, one per gazetteer term, matched case-insensitively
- token patterns anchored on gazetteer terms (legal names ending in a
  legal suffix, numbered street addresses, e-mail and phone tokens)
"""
from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import spacy

from ..config import Config
from ..exceptions import InitializationError, NotReadyError
from ..logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# Default gazetteers: entity type -> subtype -> terms
# =============================================================================

DEFAULT_GAZETTEERS: Dict[str, Dict[str, List[str]]] = {
    "business": {
        "legal_suffix": [
            "Company", "Inc", "Ltd", "LLC", "Corporation", "Co",
            "Enterprise", "Enterprises", "Pty Ltd", "GmbH", "PLC",
        ],
        "business_kind": [
            "retailer", "manufacturer", "wholesaler", "service provider",
            "exporter", "importer", "distributor", "supplier",
        ],
    },
    "product": {
        "product_kind": [
            "laptop", "smartphone", "device", "tool", "software", "solution",
            "machine", "equipment", "furniture", "apparel",
        ],
        "product_quality": [
            "premium", "lightweight", "durable", "fast", "reliable",
            "efficient", "handmade", "organic",
        ],
        "material": [
            "cotton", "leather", "wool", "silk", "bamboo", "timber",
            "stainless steel", "aluminium", "ceramic",
        ],
        "unit": [
            "carton", "pallet", "bulk pack", "kilogram", "litre",
        ],
    },
    "service": {
        "service_kind": [
            "consulting", "installation", "maintenance", "repair",
            "logistics", "freight forwarding",
        ],
    },
    "location": {
        "street_suffix": [
            "Street", "Avenue", "Boulevard", "Lane", "Road", "Drive",
            "Court", "Plaza", "Square", "Highway",
        ],
    },
    "contact": {
        "channel": [
            "Email", "Phone", "Contact", "Call", "Telephone", "Mobile",
            "Fax", "WhatsApp",
        ],
    },
}

# Prefix of pattern ids that are token patterns rather than gazetteer terms
TOKEN_PATTERN_PREFIX = "pattern:"

# Fixed accuracy per token pattern
TOKEN_PATTERN_ACCURACY: Dict[str, float] = {
    "legal_name": 0.85,
    "street_address": 0.8,
    "email": 0.95,
    "phone": 0.75,
}

EXACT_MATCH_ACCURACY = 1.0
CASE_INSENSITIVE_ACCURACY = 0.9

# The tokenizer splits digit groups on hyphens, so phones span several tokens
PHONE_SEPARATOR = {"TEXT": {"REGEX": r"^[-.]$"}, "OP": "?"}
PHONE_PATTERN = [
    {"TEXT": {"REGEX": r"^\+?\d{1,4}$"}},
    PHONE_SEPARATOR,
    {"TEXT": {"REGEX": r"^\d{2,4}$"}},
    PHONE_SEPARATOR,
    {"TEXT": {"REGEX": r"^\d{3,4}$"}},
]


@dataclass(frozen=True)
class RecognizedSpan:
    """A single recognizer match."""
    label: str
    subtype: str
    text: str
    start_char: int
    end_char: int
    accuracy: float


def load_gazetteer_file(path: str) -> Dict[str, Dict[str, List[str]]]:
    """
    Load extra gazetteers from a JSON file.

    Expected shape: {"<type>": {"<subtype>": ["term", ...]}}.

    Raises:
        InitializationError: If the file cannot be read or has the wrong shape
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise InitializationError(f"Cannot load gazetteer file {path}: {e}") from e

    if not isinstance(data, dict):
        raise InitializationError(f"Gazetteer file {path} must contain a JSON object")

    gazetteers: Dict[str, Dict[str, List[str]]] = {}
    for entity_type, subtypes in data.items():
        if not isinstance(subtypes, dict):
            raise InitializationError(f"Gazetteer '{entity_type}' must map subtypes to term lists")
        for subtype, terms in subtypes.items():
            if not isinstance(terms, list) or not all(isinstance(t, str) for t in terms):
                raise InitializationError(f"Gazetteer '{entity_type}/{subtype}' must be a list of strings")
            gazetteers.setdefault(entity_type, {})[subtype] = terms

    return gazetteers


class EntityRecognizer:
    """
    Lifecycle object around the compiled spaCy pipeline.

    Usage:
        recognizer = EntityRecognizer()
        recognizer.add_gazetteer("business", "legal_suffix", ["Ltd"])
        recognizer.initialize()
        spans = recognizer.process("Acme Exports Ltd sells premium cotton")
    """

    def __init__(
        self,
        language: Optional[str] = None,
        *,
        use_defaults: bool = True,
        gazetteer_path: Optional[str] = None,
        recycle_after: Optional[int] = None,
    ) -> None:
        """
        Args:
            language: spaCy language code for the blank pipeline (default from config)
            use_defaults: Register DEFAULT_GAZETTEERS
            gazetteer_path: Optional JSON file with extra gazetteers (default from config)
            recycle_after: Rebuild the pipeline after this many texts, 0 to never (default from config)
        """
        self.language = language or Config.NLP_LANGUAGE
        self.gazetteer_path = gazetteer_path if gazetteer_path is not None else Config.GAZETTEER_PATH
        self.recycle_after = Config.RECOGNIZER_RECYCLE_AFTER if recycle_after is None else recycle_after
        self.generation = 0
        self._processed = 0

        self._gazetteers: Dict[Tuple[str, str], Set[str]] = {}
        self._nlp: Optional[Any] = None
        self._ready = False
        self._lock = threading.Lock()

        if use_defaults:
            for entity_type, subtypes in DEFAULT_GAZETTEERS.items():
                for subtype, terms in subtypes.items():
                    self.add_gazetteer(entity_type, subtype, terms)

    # -------------------------------------------------------------------------
    # Training
    # -------------------------------------------------------------------------

    def add_gazetteer(self, entity_type: str, subtype: str, terms: Iterable[str]) -> None:
        """
        Register trigger terms for an entity type/subtype.

        Raises:
            InitializationError: If called after initialize()
        """
        if self._ready:
            raise InitializationError("Gazetteers are frozen once the recognizer is initialized")

        key = (entity_type.strip().lower(), subtype.strip())
        bucket = self._gazetteers.setdefault(key, set())
        bucket.update(t.strip() for t in terms if t and t.strip())

    def initialize(self) -> None:
        """
        Compile all gazetteers into the pipeline. Idempotent.

        Raises:
            InitializationError: If training fails for any reason
        """
        with self._lock:
            if self._ready:
                return

            try:
                if self.gazetteer_path:
                    for entity_type, subtypes in load_gazetteer_file(self.gazetteer_path).items():
                        for subtype, terms in subtypes.items():
                            self.add_gazetteer(entity_type, subtype, terms)

                nlp = self._build_pipeline()

            except InitializationError:
                raise
            except Exception as e:
                logger.error(f"Recognizer training failed: {e}", exc_info=True)
                raise InitializationError(f"Recognizer training failed: {e}") from e

            self._nlp = nlp
            self._processed = 0
            self.generation += 1
            self._ready = True

            logger.info(
                f"Recognizer initialized ({self.language}): "
                f"{len(self._gazetteers)} gazetteers, "
                f"{sum(len(t) for t in self._gazetteers.values())} terms"
            )

    def is_ready(self) -> bool:
        """Check whether initialize() has completed."""
        return self._ready

    def shutdown(self) -> None:
        """Release the compiled pipeline."""
        with self._lock:
            self._nlp = None
            self._ready = False
        logger.info("Recognizer shut down")

    def gazetteers(self) -> Dict[Tuple[str, str], Set[str]]:
        """Copy of the registered gazetteers keyed by (type, subtype)."""
        return {key: set(terms) for key, terms in self._gazetteers.items()}

    def _build_pipeline(self) -> Any:
        nlp = spacy.blank(self.language)
        ruler = nlp.add_pipe(
            "entity_ruler",
            config={"phrase_matcher_attr": "LOWER", "overwrite_ents": True},
        )
        ruler.add_patterns(self._phrase_patterns() + self._token_patterns())
        return nlp

    def _note_processed(self) -> None:
        """Count a processed text and swap in a fresh pipeline when due."""
        if self.recycle_after <= 0:
            return

        with self._lock:
            if not self._ready:
                return
            self._processed += 1
            if self._processed < self.recycle_after:
                return
            self._processed = 0

            try:
                nlp = self._build_pipeline()
            except Exception as e:
                logger.error(f"Recognizer rebuild failed, keeping current pipeline: {e}", exc_info=True)
                return

            self._nlp = nlp
            self.generation += 1

        logger.info(f"Recognizer pipeline rebuilt (generation {self.generation})")

    # -------------------------------------------------------------------------
    # Processing
    # -------------------------------------------------------------------------

    def process(self, text: str) -> List[RecognizedSpan]:
        """
        Run the recognizer over text.

        Raises:
            NotReadyError: If initialize() has not completed
        """
        nlp = self._nlp
        if not self._ready or nlp is None:
            raise NotReadyError("Recognizer is not initialized")

        if not text or not text.strip():
            return []

        # Every unseen token string is interned in nlp.vocab for the life of the
        # pipeline; recycle_after bounds that growth in long-running servers.
        doc = nlp(text)
        spans: List[RecognizedSpan] = []

        for ent in doc.ents:
            pattern_id = ent.ent_id_ or ""
            label = ent.label_.lower()

            if pattern_id.startswith(TOKEN_PATTERN_PREFIX):
                subtype = pattern_id[len(TOKEN_PATTERN_PREFIX):]
                accuracy = TOKEN_PATTERN_ACCURACY.get(subtype, CASE_INSENSITIVE_ACCURACY)
            else:
                subtype = pattern_id
                terms = self._gazetteers.get((label, subtype), set())
                accuracy = EXACT_MATCH_ACCURACY if ent.text in terms else CASE_INSENSITIVE_ACCURACY

            spans.append(RecognizedSpan(
                label=label,
                subtype=subtype,
                text=ent.text,
                start_char=ent.start_char,
                end_char=ent.end_char,
                accuracy=accuracy,
            ))

        self._note_processed()
        return spans

    # -------------------------------------------------------------------------
    # Pattern compilation
    # -------------------------------------------------------------------------

    def _phrase_patterns(self) -> List[Dict[str, Any]]:
        patterns = []
        for (entity_type, subtype), terms in sorted(self._gazetteers.items()):
            for term in sorted(terms):
                patterns.append({"label": entity_type.upper(), "pattern": term, "id": subtype})
        return patterns

    def _token_patterns(self) -> List[Dict[str, Any]]:
        """Token patterns anchored on the legal-suffix and street-suffix gazetteers."""
        patterns: List[Dict[str, Any]] = []

        legal_suffixes = self._single_token_terms("business", "legal_suffix")
        if legal_suffixes:
            patterns.append({
                "label": "BUSINESS",
                "id": TOKEN_PATTERN_PREFIX + "legal_name",
                "pattern": [
                    {"IS_TITLE": True, "OP": "+"},
                    {"LOWER": {"IN": legal_suffixes}},
                ],
            })

        street_suffixes = self._single_token_terms("location", "street_suffix")
        if street_suffixes:
            patterns.append({
                "label": "LOCATION",
                "id": TOKEN_PATTERN_PREFIX + "street_address",
                "pattern": [
                    {"LIKE_NUM": True},
                    {"IS_TITLE": True, "OP": "+"},
                    {"LOWER": {"IN": street_suffixes}},
                ],
            })

        patterns.append({
            "label": "CONTACT",
            "id": TOKEN_PATTERN_PREFIX + "email",
            "pattern": [{"LIKE_EMAIL": True}],
        })
        patterns.append({
            "label": "CONTACT",
            "id": TOKEN_PATTERN_PREFIX + "phone",
            "pattern": PHONE_PATTERN,
        })

        return patterns

    def _single_token_terms(self, entity_type: str, subtype: str) -> List[str]:
        """Lowercased one-word terms of a gazetteer, with and without a trailing period."""
        terms: Set[str] = set()
        for term in self._gazetteers.get((entity_type, subtype), set()):
            if ' ' in term:
                continue
            lowered = term.lower()
            terms.add(lowered)
            terms.add(lowered + ".")
        return sorted(terms)
