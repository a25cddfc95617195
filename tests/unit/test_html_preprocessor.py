"""
Unit tests for HTML preprocessing.

Tests:
- JSON-LD and meta tag extraction
- Main content selection and script stripping
- Navigation, contact and product block heuristics
- Failure isolation
"""
import json

import pytest

from footprint.extractors.html_preprocessor import ContentPreprocessor, PreprocessedContent


@pytest.fixture
def preprocessor():
    return ContentPreprocessor()


class TestStructuredData:
    """JSON-LD and meta tags."""

    def test_json_ld_read_before_scripts_are_stripped(self, preprocessor, sample_html):
        result = preprocessor.preprocess(sample_html)

        assert result.method == "structured"
        assert result.structured_data == [{
            "@context": "https://schema.org",
            "@type": "Organization",
            "name": "Acme Exports Ltd",
        }]

    def test_bad_json_ld_block_is_skipped_alone(self, preprocessor, sample_html):
        result = preprocessor.preprocess(sample_html)

        # The unparsable block is dropped, the valid one survives
        assert len(result.structured_data) == 1

    def test_graph_container_is_flattened(self, preprocessor):
        html = """
        <html><head><script type="application/ld+json">
        {"@context": "https://schema.org", "@graph": [
            {"@type": "Organization", "name": "Acme"},
            {"@type": "Product", "name": "Oxford Shirt"}
        ]}
        </script></head><body><p>Hi</p></body></html>
        """
        result = preprocessor.preprocess(html)

        assert [r["@type"] for r in result.structured_data] == ["Organization", "Product"]

    def test_meta_tags(self, preprocessor, sample_html):
        result = preprocessor.preprocess(sample_html)

        assert result.meta_tags["description"] == "Exporter of premium cotton shirts"
        assert result.meta_tags["og:site_name"] == "Acme Exports"

    def test_structured_extraction_can_be_disabled(self, preprocessor, sample_html):
        result = preprocessor.preprocess(sample_html, extract_structured=False)

        assert result.structured_data == []
        assert result.meta_tags == {}
        assert "leading exporter" in result.main_content


class TestMainContent:
    """Main content selection."""

    def test_main_element_preferred(self, preprocessor, sample_html):
        result = preprocessor.preprocess(sample_html)

        assert "leading exporter of premium cotton shirts" in result.main_content
        assert "Oxford Shirt" in result.main_content
        # Footer lives outside <main>
        assert "Harbour Street" not in result.main_content

    def test_scripts_and_styles_never_leak(self, preprocessor, sample_html):
        result = preprocessor.preprocess(sample_html)

        assert "should not appear" not in result.main_content
        assert "color: red" not in result.main_content

    def test_title_and_h1(self, preprocessor, sample_html):
        result = preprocessor.preprocess(sample_html)

        assert result.title == "Acme Exports Ltd - Cotton Apparel"
        assert result.h1 == "Acme Exports Ltd"

    def test_body_fallback(self, preprocessor):
        result = preprocessor.preprocess("<html><body><div>Just   some text</div></body></html>")

        assert result.main_content == "Just some text"

    def test_selector_order(self, preprocessor):
        html = """
        <html><body>
            <article>Article text</article>
            <div id="content">Content div text</div>
        </body></html>
        """
        result = preprocessor.preprocess(html)

        assert result.main_content == "Content div text"


class TestPageSections:
    """Navigation, contact and product heuristics."""

    def test_navigation_links(self, preprocessor, sample_html):
        result = preprocessor.preprocess(sample_html)

        assert result.navigation_links == [
            {"text": "Home", "href": "/"},
            {"text": "Products", "href": "/products"},
            {"text": "Contact", "href": "/contact"},
        ]

    def test_contact_text_from_footer(self, preprocessor, sample_html):
        result = preprocessor.preprocess(sample_html)

        assert "sales@acme.com" in result.contact_text
        assert "12 Harbour Street" in result.contact_text

    def test_item_level_product_blocks(self, preprocessor, sample_html):
        result = preprocessor.preprocess(sample_html)

        assert result.product_blocks == [
            {"name": "Oxford Shirt", "description": "Classic cotton oxford shirt", "image": "/img/oxford.jpg"},
            {"name": "Linen Shirt", "description": "Breathable linen shirt", "image": None},
        ]

    def test_microdata_products_are_deduplicated(self, preprocessor):
        html = """
        <html><body>
            <div itemscope itemtype="https://schema.org/Product" class="product">
                <span itemprop="name">Oxford Shirt</span>
                <span itemprop="description">Cotton</span>
            </div>
        </body></html>
        """
        result = preprocessor.preprocess(html)

        assert result.product_blocks == [
            {"name": "Oxford Shirt", "description": "Cotton", "image": None},
        ]

    def test_container_fallback(self, preprocessor):
        html = """
        <html><body>
            <section class="product-list">
                <h2>Spring Range</h2>
                <p class="description">New season shirts</p>
            </section>
        </body></html>
        """
        result = preprocessor.preprocess(html)

        assert result.product_blocks == [
            {"name": "Spring Range", "description": "New season shirts", "image": None},
        ]


class TestPayload:
    """Serialized payload and degraded modes."""

    def test_payload_is_json(self, preprocessor, sample_html):
        payload = json.loads(preprocessor.to_payload(sample_html))

        assert payload["structured_data"]["json_ld"][0]["name"] == "Acme Exports Ltd"
        assert payload["structured_data"]["meta_tags"]["description"] == "Exporter of premium cotton shirts"
        assert payload["main_content"]["title"] == "Acme Exports Ltd - Cotton Apparel"
        assert len(payload["main_content"]["product_blocks"]) == 2

    @pytest.mark.parametrize("html", ["", "   \n  "])
    def test_empty_markup(self, preprocessor, html):
        result = preprocessor.preprocess(html)

        assert result.method == "empty"
        assert result.to_payload() == ""

    def test_parsing_failure_degrades_to_document_text(self, preprocessor, sample_html, monkeypatch):
        def broken(self, soup):
            raise RuntimeError("selector engine exploded")

        monkeypatch.setattr(ContentPreprocessor, "_extract_main_content", broken)

        result = preprocessor.preprocess(sample_html)

        assert result.method == "fallback"
        assert "leading exporter of premium cotton shirts" in result.main_content
        assert "should not appear" not in result.main_content
        assert result.to_payload() == result.main_content

    def test_fallback_payload_is_plain_text(self):
        content = PreprocessedContent(main_content="plain words", method="fallback")

        assert content.to_payload() == "plain words"
