"""
Pytest configuration and fixtures for Footprint tests.
"""
import sys
import threading
import time
from pathlib import Path

# Add src to path for imports
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

import pytest
from footprint.models import AnalyzedEntity, EntityType, TextContext
from footprint.services.intelligence import ContentAnalyzer
from footprint.services.recognizer import EntityRecognizer


CLASSIFICATION_MARKER = "Classify each product"


class FakeBackend:
    """
    In-process CompletionBackend.

    Extraction and classification prompts are answered separately; each
    answer can be delayed or replaced by an exception.
    """

    def __init__(
        self,
        extraction='{"entities": []}',
        classification='{"classifications": []}',
        extraction_error=None,
        classification_error=None,
        extraction_delay=0.0,
        classification_delay=0.0,
    ):
        self.extraction = extraction
        self.classification = classification
        self.extraction_error = extraction_error
        self.classification_error = classification_error
        self.extraction_delay = extraction_delay
        self.classification_delay = classification_delay
        self.calls = []
        self._lock = threading.Lock()

    def complete(self, prompt, *, temperature, max_tokens, model=None):
        is_classification = CLASSIFICATION_MARKER in prompt
        with self._lock:
            self.calls.append({
                "kind": "classification" if is_classification else "extraction",
                "prompt": prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "model": model,
            })

        if is_classification:
            delay, error, answer = self.classification_delay, self.classification_error, self.classification
        else:
            delay, error, answer = self.extraction_delay, self.extraction_error, self.extraction

        if delay:
            time.sleep(delay)
        if error is not None:
            raise error
        return answer

    def calls_of(self, kind):
        return [c for c in self.calls if c["kind"] == kind]


def make_entity(entity_type, name, confidence=0.5, attributes=None, sources=None, context=None):
    """Build an AnalyzedEntity with a single context."""
    return AnalyzedEntity(
        type=EntityType(entity_type),
        name=name,
        attributes=dict(attributes or {}),
        raw_text=context or name,
        confidence=confidence,
        contexts=[TextContext(text=context or name)],
        sources=list(sources or ["model"]),
    )


@pytest.fixture
def fake_backend():
    """Backend that finds nothing."""
    return FakeBackend()


@pytest.fixture
def recognizer():
    """Recognizer trained on the default gazetteers only."""
    rec = EntityRecognizer(language="en", gazetteer_path="")
    rec.initialize()
    yield rec
    rec.shutdown()


@pytest.fixture
def untrained_recognizer():
    return EntityRecognizer(language="en", gazetteer_path="")


@pytest.fixture
def make_analyzer():
    """Factory for initialized analyzers; all are shut down after the test."""
    created = []

    def _make(backend=None, backend_timeout=2.0, initialize=True):
        analyzer = ContentAnalyzer(
            recognizer=EntityRecognizer(language="en", gazetteer_path=""),
            backend=backend or FakeBackend(),
            backend_timeout=backend_timeout,
            max_workers=4,
        )
        if initialize:
            analyzer.initialize()
        created.append(analyzer)
        return analyzer

    yield _make

    for analyzer in created:
        analyzer.shutdown()


SAMPLE_TEXT = (
    "Acme Exports Ltd is a leading exporter of premium cotton shirts. "
    "Email sales@acme.com or visit 12 Harbour Street."
)


@pytest.fixture
def sample_text():
    """Business text the default gazetteers recognize."""
    return SAMPLE_TEXT


@pytest.fixture
def sample_html():
    """Business home page with JSON-LD, navigation, products and a footer."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Acme Exports Ltd - Cotton Apparel</title>
        <meta name="description" content="Exporter of premium cotton shirts">
        <meta property="og:site_name" content="Acme Exports">
        <script type="application/ld+json">
        {"@context": "https://schema.org", "@type": "Organization", "name": "Acme Exports Ltd"}
        </script>
        <script type="application/ld+json">{ this is not json </script>
        <style>body { color: red; }</style>
    </head>
    <body>
        <header>
            <nav>
                <a href="/">Home</a>
                <a href="/products">Products</a>
                <a href="/contact">Contact</a>
            </nav>
        </header>
        <main>
            <h1>Acme Exports Ltd</h1>
            <p>We are a leading exporter of premium cotton shirts.</p>
            <div class="products">
                <div class="product-card">
                    <h3 class="product-title">Oxford Shirt</h3>
                    <p class="description">Classic cotton oxford shirt</p>
                    <img src="/img/oxford.jpg">
                </div>
                <div class="product-card">
                    <h3 class="product-title">Linen Shirt</h3>
                    <p class="description">Breathable linen shirt</p>
                </div>
            </div>
        </main>
        <script>var tracking = "should not appear";</script>
        <footer>
            Email sales@acme.com or visit 12 Harbour Street, Sydney
        </footer>
    </body>
    </html>
    """
