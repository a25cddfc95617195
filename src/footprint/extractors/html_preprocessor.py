"""
Markup preprocessing for content analysis.

Turns raw HTML into a single normalized text payload: embedded JSON-LD
records, meta tags, main-content text, navigation links, the contact
section and candidate product blocks.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from bs4 import BeautifulSoup, Tag

from ..logger import get_logger
from ..utils.text_cleaning import clean_text, normalize_whitespace

logger = get_logger(__name__)


@dataclass
class PreprocessedContent:
    """
    Normalized view of a page.

    Attributes:
        title: Contents of <title>
        h1: First top-level heading
        main_content: Best-effort main-content text
        structured_data: JSON-LD records found on the page
        meta_tags: Meta tag name/property -> content
        navigation_links: Navigation anchors as {text, href}
        contact_text: Text of the contact section (or footer)
        product_blocks: Candidate products as {name, description, image}
        method: "structured", "fallback" (whole-document text only) or "empty"
    """
    title: str = ""
    h1: str = ""
    main_content: str = ""
    structured_data: List[Dict[str, Any]] = field(default_factory=list)
    meta_tags: Dict[str, str] = field(default_factory=dict)
    navigation_links: List[Dict[str, str]] = field(default_factory=list)
    contact_text: str = ""
    product_blocks: List[Dict[str, Optional[str]]] = field(default_factory=list)
    method: str = "structured"

    def to_payload(self) -> str:
        """Serialize into the text payload handed to the extractors."""
        if self.method != "structured":
            return self.main_content

        return json.dumps({
            "structured_data": {
                "json_ld": self.structured_data,
                "meta_tags": self.meta_tags,
            },
            "main_content": {
                "title": self.title,
                "h1": self.h1,
                "text": self.main_content,
                "navigation_links": self.navigation_links,
                "contact_text": self.contact_text,
                "product_blocks": self.product_blocks,
            },
        }, ensure_ascii=False)


class ContentPreprocessor:
    """
    Extract normalized content from raw markup.

    Never fails wholesale: bad JSON-LD fragments are skipped one by one,
    and any other parsing error degrades to whole-document text.
    """

    # Tried in order; the first selector with text wins
    CONTENT_SELECTORS = ['main', '#content', '.content', 'article', '.main', '#main']

    NAVIGATION_SELECTOR = 'nav a, .nav a, .menu a, #menu a, header a'
    CONTACT_SELECTOR = '.contact, #contact, .contact-us, #contact-us, footer'

    # Item-level product blocks first, whole product sections as fallback
    PRODUCT_ITEM_SELECTOR = '[itemtype*="Product"], .product, .product-item, .product-card'
    PRODUCT_CONTAINER_SELECTOR = '.products, .product-list'
    PRODUCT_NAME_SELECTOR = '[itemprop="name"], .product-title, .product-name, .name, h2, h3, h4'
    PRODUCT_DESCRIPTION_SELECTOR = '[itemprop="description"], .description, .product-description'

    NON_CONTENT_TAGS = ['script', 'style', 'iframe', 'noscript']

    def __init__(
        self,
        *,
        max_navigation_links: int = 100,
        max_product_blocks: int = 50,
        parser: str = "html.parser",
    ) -> None:
        """
        Initialize the preprocessor.

        Args:
            max_navigation_links: Cap on collected navigation links
            max_product_blocks: Cap on collected product blocks
            parser: BeautifulSoup parser name
        """
        self.max_navigation_links = max_navigation_links
        self.max_product_blocks = max_product_blocks
        self.parser = parser

    def preprocess(self, html: str, *, extract_structured: bool = True) -> PreprocessedContent:
        """
        Preprocess raw markup.

        Args:
            html: Raw markup
            extract_structured: Include JSON-LD records and meta tags

        Returns:
            PreprocessedContent (method="fallback" when only whole-document text is available)
        """
        if not html or not html.strip():
            return PreprocessedContent(method="empty")

        try:
            soup = BeautifulSoup(html, self.parser)

            # JSON-LD lives in <script>, so read it before stripping scripts
            structured_data = self._extract_json_ld(soup) if extract_structured else []
            meta_tags = self._extract_meta_tags(soup) if extract_structured else {}

            for tag in soup(self.NON_CONTENT_TAGS):
                tag.decompose()

            result = PreprocessedContent(
                title=self._text_of(soup.find('title')),
                h1=self._text_of(soup.find('h1')),
                main_content=self._extract_main_content(soup),
                structured_data=structured_data,
                meta_tags=meta_tags,
                navigation_links=self._extract_navigation_links(soup),
                contact_text=self._extract_contact_text(soup),
                product_blocks=self._extract_product_blocks(soup),
            )

        except Exception as e:
            logger.warning(f"Structured preprocessing failed, using whole-document text: {e}")
            return PreprocessedContent(main_content=clean_text(html), method="fallback")

        logger.debug(
            "Preprocessed page: %d JSON-LD records, %d meta tags, %d nav links, %d product blocks",
            len(result.structured_data), len(result.meta_tags),
            len(result.navigation_links), len(result.product_blocks),
        )
        return result

    def to_payload(self, html: str, *, extract_structured: bool = True) -> str:
        """Preprocess and serialize in one step."""
        return self.preprocess(html, extract_structured=extract_structured).to_payload()

    # ------------------------------------------------------------------

    def _extract_json_ld(self, soup: BeautifulSoup) -> List[Dict[str, Any]]:
        """Parse every JSON-LD block; unparsable blocks are skipped."""
        records: List[Dict[str, Any]] = []

        for script in soup.find_all('script', attrs={'type': 'application/ld+json'}):
            raw = (script.string or script.get_text() or '').strip()
            if not raw:
                continue

            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping unparsable JSON-LD block: {e}")
                continue

            records.extend(self._iterate_jsonld(data))

        return records

    def _iterate_jsonld(self, data: Any) -> Iterator[Dict[str, Any]]:
        """Flatten JSON-LD lists and @graph containers into records."""
        if isinstance(data, dict):
            graph = data.get('@graph')
            if isinstance(graph, list):
                for item in graph:
                    yield from self._iterate_jsonld(item)
            else:
                yield data
        elif isinstance(data, list):
            for item in data:
                yield from self._iterate_jsonld(item)

    def _extract_meta_tags(self, soup: BeautifulSoup) -> Dict[str, str]:
        meta_tags: Dict[str, str] = {}
        for tag in soup.find_all('meta'):
            name = tag.get('name') or tag.get('property')
            content = tag.get('content')
            if name and content and content.strip():
                meta_tags[name] = content.strip()
        return meta_tags

    def _extract_main_content(self, soup: BeautifulSoup) -> str:
        """Text of the first matching content region, else the body, else everything."""
        for selector in self.CONTENT_SELECTORS:
            elements = soup.select(selector)
            if not elements:
                continue
            text = normalize_whitespace(' '.join(el.get_text(' ') for el in elements))
            if text:
                logger.debug("Main content found via selector %s", selector)
                return text

        body = soup.body
        if body is not None:
            text = normalize_whitespace(body.get_text(' '))
            if text:
                return text

        return normalize_whitespace(soup.get_text(' '))

    def _extract_navigation_links(self, soup: BeautifulSoup) -> List[Dict[str, str]]:
        links: List[Dict[str, str]] = []
        seen = set()

        for anchor in soup.select(self.NAVIGATION_SELECTOR):
            text = self._text_of(anchor)
            href = (anchor.get('href') or '').strip()
            if not text or not href or (text, href) in seen:
                continue
            seen.add((text, href))
            links.append({'text': text, 'href': href})
            if len(links) >= self.max_navigation_links:
                break

        return links

    def _extract_contact_text(self, soup: BeautifulSoup) -> str:
        return normalize_whitespace(' '.join(el.get_text(' ') for el in soup.select(self.CONTACT_SELECTOR)))

    def _extract_product_blocks(self, soup: BeautifulSoup) -> List[Dict[str, Optional[str]]]:
        """Collect candidate products using loose structural heuristics."""
        elements = soup.select(self.PRODUCT_ITEM_SELECTOR)
        if not elements:
            elements = soup.select(self.PRODUCT_CONTAINER_SELECTOR)

        blocks: List[Dict[str, Optional[str]]] = []
        seen_names = set()

        for element in elements:
            name = self._text_of(element.select_one(self.PRODUCT_NAME_SELECTOR))
            if not name or name.lower() in seen_names:
                continue
            seen_names.add(name.lower())

            image = element.find('img')
            blocks.append({
                'name': name,
                'description': self._text_of(element.select_one(self.PRODUCT_DESCRIPTION_SELECTOR)),
                'image': (image.get('src') or image.get('data-src')) if image else None,
            })
            if len(blocks) >= self.max_product_blocks:
                break

        return blocks

    @staticmethod
    def _text_of(element: Optional[Tag]) -> str:
        if element is None:
            return ""
        return normalize_whitespace(element.get_text(' '))
