"""
API routes for the Footprint content analyzer.
"""
from typing import Any, Dict, Tuple

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from ..exceptions import AnalysisCancelled, EmptyContentError, NotReadyError
from ..extractors.html_preprocessor import ContentPreprocessor
from ..logger import get_logger
from ..schemas import AnalyzeContentPayload, ContentAnalysisRequest
from ..services.intelligence import ContentAnalyzer
from ..services.profile_builder import build_profile

logger = get_logger(__name__)

ANALYZER_EXTENSION = 'footprint.analyzer'

# Create blueprint
api_bp = Blueprint('api', __name__, url_prefix='/api')


def get_analyzer() -> ContentAnalyzer:
    """Get the analyzer registered on the current app."""
    return current_app.extensions[ANALYZER_EXTENSION]


def _error(message: str, status: int, **extra: Any) -> Tuple[Any, int]:
    body: Dict[str, Any] = {'status': 'error', 'message': message}
    body.update(extra)
    return jsonify(body), status


@api_bp.route('/analyze', methods=['POST'])
def analyze_content():
    """
    Analyze business content.

    Expected JSON:
    {
        "content": "normalized text"       (or "html": "<html>...</html>"),
        "source_url": "https://example.com",
        "source_type": "website",
        "entity_types": ["business", "product"],
        "options": {"confidence_threshold": 0.5, "max_entities": 20}
    }

    Returns:
    {
        "status": "success",
        "result": {"entities": [...], "confidence": 0.8, "processing_time": 120},
        "profile": {...}
    }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error('JSON object body is required', 400)

    try:
        payload = AnalyzeContentPayload.model_validate(data)

        content = payload.content
        if content is None:
            content = ContentPreprocessor().to_payload(
                payload.html,
                extract_structured=payload.options.extract_structured,
            )

        analysis_request = ContentAnalysisRequest(
            content=content,
            source_url=payload.source_url,
            source_type=payload.source_type,
            entity_types=payload.entity_types,
            options=payload.options,
        )
    except ValidationError as e:
        errors = [
            {'loc': [str(part) for part in err['loc']], 'message': err['msg']}
            for err in e.errors()
        ]
        return _error('Invalid request', 400, errors=errors)

    logger.info(
        f"Analyzing content from {payload.source_url or 'inline payload'} "
        f"({len(content)} chars, types={sorted(t.value for t in payload.entity_types)})"
    )

    try:
        response = get_analyzer().analyze(analysis_request)

    except EmptyContentError as e:
        return _error(str(e), 422)

    except NotReadyError as e:
        return _error(str(e), 503)

    except AnalysisCancelled as e:
        return _error(str(e), 503)

    except Exception as e:
        logger.error(f"Error in analyze endpoint: {e}", exc_info=True)
        return _error(str(e), 500)

    return jsonify({
        'status': 'success',
        'result': response.to_dict(),
        'profile': build_profile(response, payload.source_url),
    })
