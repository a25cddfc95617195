"""
Content analysis orchestrator.

Runs the full pipeline for one request:

    content -> {rule-based, model-based} extraction (concurrent)
            -> type filter -> fusion -> product classification -> scoring

Every backend call is bounded by a timeout. A timeout is handled exactly
like a backend error: extraction degrades to an empty list and
classification to a no-op. Only blank content, a not-ready analyzer and
caller cancellation raise.
"""
from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, List, Optional

from ..config import Config
from ..exceptions import AnalysisCancelled, EmptyContentError, NotReadyError
from ..logger import get_logger
from ..models import AnalyzedEntity, ContentAnalysisResponse, EntityType
from ..schemas import AnalysisOptions, ContentAnalysisRequest
from .confidence import ConfidenceScorer
from .entity_llm import ModelBasedExtractor
from .entity_merge import EntityFuser
from .entity_rules import RuleBasedExtractor
from .llm_backend import CompletionBackend, OpenAIBackend
from .product_classifier import ProductClassifier
from .recognizer import EntityRecognizer

logger = get_logger(__name__)

# How often a waiting request checks its cancel event
CANCEL_POLL_INTERVAL_S = 0.05


class ContentAnalyzer:
    """
    Lifecycle object for the analysis pipeline.

    Usage:
        analyzer = ContentAnalyzer()
        analyzer.initialize()
        response = analyzer.analyze(ContentAnalysisRequest(content="..."))
        analyzer.shutdown()

    Safe to share across request threads once initialized: the recognizer
    is read-only and every request works on its own entity copies.
    """

    def __init__(
        self,
        recognizer: Optional[EntityRecognizer] = None,
        backend: Optional[CompletionBackend] = None,
        *,
        scorer: Optional[ConfidenceScorer] = None,
        backend_timeout: Optional[float] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Args:
            recognizer: Rule-based recognizer (built with default gazetteers if omitted)
            backend: Model backend (OpenAI from config if omitted)
            scorer: Confidence scorer (default weights if omitted)
            backend_timeout: Seconds to wait for each backend stage
            max_workers: Size of the shared worker pool
        """
        self.recognizer = recognizer or EntityRecognizer()
        self.backend = backend or OpenAIBackend()
        self.backend_timeout = backend_timeout or Config.BACKEND_TIMEOUT_S
        self.max_workers = max_workers or Config.ANALYZER_MAX_WORKERS

        self.rule_extractor = RuleBasedExtractor(self.recognizer)
        self.model_extractor = ModelBasedExtractor(self.backend)
        self.fuser = EntityFuser()
        self.classifier = ProductClassifier(self.backend)
        self.scorer = scorer or ConfidenceScorer()

        self._executor: Optional[ThreadPoolExecutor] = None
        self._ready = False
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def initialize(self) -> None:
        """
        Train the recognizer and start the worker pool.

        Raises:
            InitializationError: If the recognizer cannot be trained
        """
        with self._lock:
            if self._ready:
                return

            self.recognizer.initialize()
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="footprint-analyzer",
            )
            self._ready = True

        logger.info(f"Content analyzer ready (workers={self.max_workers}, timeout={self.backend_timeout}s)")

    def is_ready(self) -> bool:
        return self._ready and self.recognizer.is_ready()

    def shutdown(self) -> None:
        """Stop the worker pool and release the recognizer."""
        with self._lock:
            self._ready = False
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None
            self.recognizer.shutdown()

        logger.info("Content analyzer shut down")

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    def analyze(
        self,
        request: ContentAnalysisRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> ContentAnalysisResponse:
        """
        Analyze one piece of content.

        Args:
            request: Validated analysis request
            cancel_event: Set it to abandon the analysis

        Returns:
            ContentAnalysisResponse with scored entities

        Raises:
            NotReadyError: If initialize() has not completed
            EmptyContentError: If the request has no content
            AnalysisCancelled: If cancel_event is set before the analysis completes
        """
        executor = self._executor
        if not self.is_ready() or executor is None:
            raise NotReadyError("Content analyzer is not initialized")

        if not request.content or not request.content.strip():
            raise EmptyContentError("No content to analyze")

        started = time.monotonic()
        options = request.options
        entity_types = request.entity_types
        model = options.language_model

        self._check_cancelled(cancel_event)

        # 1. Extraction, both strategies concurrently
        rule_future = executor.submit(self.rule_extractor.extract, request.content)
        model_future = executor.submit(
            self.model_extractor.extract, request.content, entity_types, model
        )
        deadline = time.monotonic() + self.backend_timeout

        rule_entities = self._await(rule_future, deadline, [], "rule-based extraction", cancel_event)
        model_entities = self._await(model_future, deadline, [], "model-based extraction", cancel_event)

        rule_entities = self._filter_types(rule_entities, entity_types)
        model_entities = self._filter_types(model_entities, entity_types)

        # 2. Fusion
        entities = self.fuser.fuse(rule_entities, model_entities)

        # 3. Product classification, computed in a worker and folded in here
        products = [e.clone() for e in entities if e.type == EntityType.PRODUCT]
        if products:
            self._check_cancelled(cancel_event)
            classify_future = executor.submit(self.classifier.classify, products, model)
            classifications = self._await(
                classify_future,
                time.monotonic() + self.backend_timeout,
                [],
                "product classification",
                cancel_event,
            )
            self.classifier.apply(entities, classifications)

        # 4. Scoring and request options
        entities = self.scorer.score(entities)
        entities = self._apply_options(entities, options)

        response = ContentAnalysisResponse(
            entities=entities,
            confidence=self.scorer.overall_confidence(entities),
            processing_time=int((time.monotonic() - started) * 1000),
        )

        logger.info(
            f"Analysis complete: {len(rule_entities)} rule + {len(model_entities)} model -> "
            f"{len(response.entities)} entities, confidence={response.confidence:.2f}, "
            f"{response.processing_time}ms"
        )
        return response

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise AnalysisCancelled("Analysis cancelled by caller")

    def _await(
        self,
        future: Future,
        deadline: float,
        fallback: Any,
        stage: str,
        cancel_event: Optional[threading.Event],
    ) -> Any:
        """
        Wait for a stage result until the deadline.

        Errors and timeouts return the fallback; cancellation raises.
        """
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                future.cancel()
                logger.warning(f"{stage} timed out after {self.backend_timeout}s")
                return fallback

            wait_for = remaining if cancel_event is None else min(remaining, CANCEL_POLL_INTERVAL_S)
            try:
                return future.result(timeout=wait_for)
            except FutureTimeoutError as e:
                if future.done():
                    # The stage itself raised a TimeoutError
                    logger.warning(f"{stage} failed: {e}")
                    return fallback
                if cancel_event is not None and cancel_event.is_set():
                    future.cancel()
                    raise AnalysisCancelled(f"Analysis cancelled during {stage}")
            except Exception as e:
                logger.warning(f"{stage} failed: {e}")
                return fallback

    @staticmethod
    def _filter_types(entities: List[AnalyzedEntity], entity_types) -> List[AnalyzedEntity]:
        return [e for e in entities if e.type in entity_types]

    @staticmethod
    def _apply_options(entities: List[AnalyzedEntity], options: AnalysisOptions) -> List[AnalyzedEntity]:
        if options.confidence_threshold is not None:
            entities = [e for e in entities if e.confidence >= options.confidence_threshold]

        if options.max_entities is not None and len(entities) > options.max_entities:
            ranked = sorted(range(len(entities)), key=lambda i: entities[i].confidence, reverse=True)
            keep = set(ranked[:options.max_entities])
            entities = [e for i, e in enumerate(entities) if i in keep]

        return entities
