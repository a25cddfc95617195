"""
Configuration management for Footprint.
"""
import os
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration."""

    # Project paths
    PROJECT_ROOT = Path(__file__).parent.parent.parent
    SRC_DIR = PROJECT_ROOT / "src"

    # Extraction backend (OpenAI-compatible chat completions)
    AI_MODEL_API_KEY: Optional[str] = os.getenv("AI_MODEL_API_KEY") or os.getenv("OPENAI_API_KEY")
    AI_MODEL_URL: Optional[str] = os.getenv("AI_MODEL_URL") or None
    AI_MODEL_NAME: str = os.getenv("AI_MODEL_NAME", "gpt-4o-mini")
    AI_MODEL_MAX_TOKENS: int = int(os.getenv("AI_MODEL_MAX_TOKENS", "2000"))
    AI_MODEL_TEMPERATURE: float = float(os.getenv("AI_MODEL_TEMPERATURE", "0.1"))
    # Ask for response_format=json_object; not every compatible server accepts it
    AI_MODEL_JSON_MODE: bool = os.getenv("AI_MODEL_JSON_MODE", "False").lower() == "true"

    # Pipeline limits
    MAX_CONTENT_CHARS: int = int(os.getenv("MAX_CONTENT_CHARS", "15000"))
    BACKEND_TIMEOUT_S: float = float(os.getenv("BACKEND_TIMEOUT_S", "60"))
    ANALYZER_MAX_WORKERS: int = int(os.getenv("ANALYZER_MAX_WORKERS", "4"))

    # Recognizer
    NLP_LANGUAGE: str = os.getenv("NLP_LANGUAGE", "en")
    GAZETTEER_PATH: Optional[str] = os.getenv("GAZETTEER_PATH") or None
    # Rebuild the pipeline after this many texts (0 = never); the spaCy vocab only grows
    RECOGNIZER_RECYCLE_AFTER: int = int(os.getenv("RECOGNIZER_RECYCLE_AFTER", "0"))

    # Flask settings
    FLASK_ENV: str = os.getenv("FLASK_ENV", "development")
    FLASK_DEBUG: bool = os.getenv("FLASK_DEBUG", "True").lower() == "true"
    FLASK_HOST: str = os.getenv("FLASK_HOST", "0.0.0.0")
    FLASK_PORT: int = int(os.getenv("FLASK_PORT", "5000"))
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def validate(cls) -> list[str]:
        """
        Validate configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not cls.AI_MODEL_API_KEY:
            errors.append("AI_MODEL_API_KEY not set (model-based extraction and classification will degrade)")

        if cls.MAX_CONTENT_CHARS <= 0:
            errors.append(f"Invalid MAX_CONTENT_CHARS: {cls.MAX_CONTENT_CHARS}. Must be positive")

        if cls.BACKEND_TIMEOUT_S <= 0:
            errors.append(f"Invalid BACKEND_TIMEOUT_S: {cls.BACKEND_TIMEOUT_S}. Must be positive")

        if not 0.0 <= cls.AI_MODEL_TEMPERATURE <= 2.0:
            errors.append(f"Invalid AI_MODEL_TEMPERATURE: {cls.AI_MODEL_TEMPERATURE}")

        if cls.GAZETTEER_PATH and not Path(cls.GAZETTEER_PATH).exists():
            errors.append(f"Gazetteer file not found: {cls.GAZETTEER_PATH}")

        return errors

    @classmethod
    def is_valid(cls) -> bool:
        """Check if configuration is valid."""
        return len(cls.validate()) == 0

    @classmethod
    def get_cors_origins(cls) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        origins = [o.strip() for o in cls.CORS_ORIGINS.split(",") if o.strip()]
        return origins or ["*"]

    @classmethod
    def get_summary(cls) -> dict:
        """Get configuration summary (safe for logging)."""
        return {
            "flask_env": cls.FLASK_ENV,
            "flask_debug": cls.FLASK_DEBUG,
            "ai_model_name": cls.AI_MODEL_NAME,
            "ai_model_url": cls.AI_MODEL_URL or "default",
            "ai_model_configured": cls.AI_MODEL_API_KEY is not None,
            "ai_model_json_mode": cls.AI_MODEL_JSON_MODE,
            "max_content_chars": cls.MAX_CONTENT_CHARS,
            "backend_timeout_s": cls.BACKEND_TIMEOUT_S,
            "nlp_language": cls.NLP_LANGUAGE,
            "log_level": cls.LOG_LEVEL,
        }
