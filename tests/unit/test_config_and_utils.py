"""
Unit tests for configuration validation and text utilities.
"""
import pytest

from footprint.config import Config
from footprint.utils import clean_text, is_valid_url, normalize_whitespace, strip_html_tags, truncate_text


class TestConfig:

    @pytest.fixture
    def valid_config(self, monkeypatch):
        monkeypatch.setattr(Config, "AI_MODEL_API_KEY", "sk-test")
        monkeypatch.setattr(Config, "MAX_CONTENT_CHARS", 15000)
        monkeypatch.setattr(Config, "BACKEND_TIMEOUT_S", 60.0)
        monkeypatch.setattr(Config, "AI_MODEL_TEMPERATURE", 0.1)
        monkeypatch.setattr(Config, "GAZETTEER_PATH", None)

    def test_valid(self, valid_config):
        assert Config.validate() == []
        assert Config.is_valid()

    def test_missing_api_key(self, valid_config, monkeypatch):
        monkeypatch.setattr(Config, "AI_MODEL_API_KEY", None)

        errors = Config.validate()
        assert len(errors) == 1
        assert "AI_MODEL_API_KEY" in errors[0]

    def test_invalid_limits(self, valid_config, monkeypatch):
        monkeypatch.setattr(Config, "MAX_CONTENT_CHARS", 0)
        monkeypatch.setattr(Config, "BACKEND_TIMEOUT_S", -1.0)

        assert len(Config.validate()) == 2

    def test_missing_gazetteer_file(self, valid_config, monkeypatch, tmp_path):
        monkeypatch.setattr(Config, "GAZETTEER_PATH", str(tmp_path / "missing.json"))

        assert not Config.is_valid()

    @pytest.mark.parametrize("raw,expected", [
        ("*", ["*"]),
        ("https://a.example.com, https://b.example.com", ["https://a.example.com", "https://b.example.com"]),
        (" , ", ["*"]),
    ])
    def test_cors_origins(self, monkeypatch, raw, expected):
        monkeypatch.setattr(Config, "CORS_ORIGINS", raw)

        assert Config.get_cors_origins() == expected

    def test_summary_hides_api_key(self, valid_config):
        summary = Config.get_summary()

        assert summary["ai_model_configured"] is True
        assert "sk-test" not in str(summary)


class TestTextCleaning:

    def test_normalize_whitespace(self):
        assert normalize_whitespace("hello    world\n\ntest") == "hello world test"

    def test_strip_html_drops_script_bodies(self):
        text = strip_html_tags("<p>Hi</p><script>var x = 1;</script><style>p {}</style>")

        assert "var x" not in text
        assert "p {}" not in text
        assert "Hi" in text

    def test_clean_text_unescapes(self):
        assert clean_text("<p>Fish &amp; Chips</p>") == "Fish & Chips"

    def test_truncate(self):
        assert truncate_text("Hello world", 8, "...") == "Hello..."
        assert truncate_text("Hello", 8) == "Hello"
        assert truncate_text("Hello world", 5) == "Hello"

    @pytest.mark.parametrize("url,expected", [
        ("https://acme.example.com", True),
        ("http://acme.example.com/about", True),
        ("ftp://acme.example.com", False),
        ("acme.example.com", False),
        ("", False),
    ])
    def test_is_valid_url(self, url, expected):
        assert is_valid_url(url) is expected
