"""
Unit tests for product classification.
"""
import json

import pytest

from conftest import FakeBackend, make_entity
from footprint.exceptions import BackendError
from footprint.models import Classification, EntityType
from footprint.services.confidence import ConfidenceScorer
from footprint.services.product_classifier import ProductClassifier


def classification_response(*rows):
    return json.dumps({"classifications": list(rows)})


class TestClassify:
    """Backend call and response parsing."""

    def test_single_batched_call(self):
        backend = FakeBackend(classification=classification_response(
            {"name": "Oxford Shirt", "category": "Apparel"},
        ))
        products = [
            make_entity("product", "Oxford Shirt"),
            make_entity("product", "Linen Shirt"),
            make_entity("product", "Wool Scarf"),
        ]

        ProductClassifier(backend).classify(products)

        assert len(backend.calls) == 1
        prompt = backend.calls[0]["prompt"]
        assert "Oxford Shirt" in prompt and "Linen Shirt" in prompt and "Wool Scarf" in prompt

    def test_records(self):
        backend = FakeBackend(classification=classification_response(
            {"name": "Oxford Shirt", "category": "Apparel", "subcategory": "Shirts", "code": "620520", "confidence": 0.9},
            {"name": "Wool Scarf", "category": "Accessories", "hsCode": 611710},
        ))

        records = ProductClassifier(backend).classify([
            make_entity("product", "Oxford Shirt"),
            make_entity("product", "Wool Scarf"),
        ])

        assert records == [
            Classification(name="Oxford Shirt", category="Apparel", subcategory="Shirts", code="620520", confidence=0.9),
            Classification(name="Wool Scarf", category="Accessories", subcategory=None, code="611710", confidence=None),
        ]

    def test_invalid_rows_are_skipped(self):
        backend = FakeBackend(classification=classification_response(
            {"name": "Oxford Shirt"},
            {"category": "Apparel"},
            {"name": "Wool Scarf", "category": "Accessories"},
        ))

        records = ProductClassifier(backend).classify([make_entity("product", "Wool Scarf")])

        assert [r.name for r in records] == ["Wool Scarf"]

    def test_non_products_are_not_sent(self):
        backend = FakeBackend()

        records = ProductClassifier(backend).classify([make_entity("business", "Acme")])

        assert records == []
        assert backend.calls == []

    def test_model_override(self):
        backend = FakeBackend()

        ProductClassifier(backend).classify([make_entity("product", "Shirt")], model="custom-model")

        assert backend.calls[0]["model"] == "custom-model"

    @pytest.mark.parametrize("backend", [
        FakeBackend(classification_error=BackendError("timeout")),
        FakeBackend(classification_error=RuntimeError("boom")),
        FakeBackend(classification="no classifications today"),
        FakeBackend(classification='{"classifications": "Apparel"}'),
        FakeBackend(classification='{"classifications": [{"name": "Shirt", "categ'),
    ])
    def test_fails_soft(self, backend):
        records = ProductClassifier(backend).classify([make_entity("product", "Shirt")])

        assert records == []


class TestApply:
    """Folding classifications into entities."""

    @pytest.fixture
    def classifier(self):
        return ProductClassifier(FakeBackend())

    def test_patches_matching_products(self, classifier):
        entities = [make_entity("product", "Oxford Shirt", 0.6)]

        updated = classifier.apply(entities, [
            Classification(name=" oxford shirt", category="Apparel", subcategory="Shirts", code="620520", confidence=0.8),
        ])

        assert updated == 1
        assert entities[0].attributes == {"category": "Apparel", "subcategory": "Shirts", "code": "620520"}
        assert entities[0].confidence == pytest.approx(0.7)

    def test_without_returned_confidence_keeps_confidence(self, classifier):
        entities = [make_entity("product", "Oxford Shirt", 0.6)]

        classifier.apply(entities, [Classification(name="Oxford Shirt", category="Apparel")])

        assert entities[0].confidence == 0.6
        assert entities[0].attributes == {"category": "Apparel"}

    def test_non_products_untouched(self, classifier):
        entities = [make_entity("business", "Oxford Shirt", 0.6)]

        updated = classifier.apply(entities, [Classification(name="Oxford Shirt", category="Apparel", confidence=1.0)])

        assert updated == 0
        assert entities[0].attributes == {}
        assert entities[0].confidence == 0.6

    def test_no_classifications_is_noop(self, classifier):
        entities = [make_entity("product", "Oxford Shirt", 0.6)]

        assert classifier.apply(entities, []) == 0
        assert entities[0].attributes == {}

    def test_blend_confidence_is_mean(self):
        assert ProductClassifier.blend_confidence(0.4, 0.8) == pytest.approx(0.6)
        assert ProductClassifier.blend_confidence(1.0, 1.0) == 1.0


class TestScenario:
    """Three products, two classified."""

    def test_two_boosted_one_unchanged(self):
        backend = FakeBackend(classification=classification_response(
            {"name": "Oxford Shirt", "category": "Apparel", "confidence": 0.8},
            {"name": "Wool Scarf", "category": "Accessories", "code": "611710"},
        ))
        classifier = ProductClassifier(backend)
        products = [
            make_entity("product", "Oxford Shirt", 0.6),
            make_entity("product", "Wool Scarf", 0.5),
            make_entity("product", "Mystery Item", 0.5),
        ]

        classifier.apply(products, classifier.classify(products))
        scored = {e.name: e for e in ConfidenceScorer().score(products)}

        assert len(backend.calls) == 1
        assert scored["Oxford Shirt"].attributes["category"] == "Apparel"
        assert scored["Oxford Shirt"].confidence == pytest.approx(0.84)
        assert scored["Wool Scarf"].attributes["category"] == "Accessories"
        assert scored["Wool Scarf"].confidence == pytest.approx(0.6)
        assert "category" not in scored["Mystery Item"].attributes
        assert scored["Mystery Item"].confidence == 0.5
