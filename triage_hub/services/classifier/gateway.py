"""
Classifier Gateway - external classification with rule-based fallback.

DESIGN PRINCIPLES:
- Triage never blocks past the timeout and never fails outward
- One outbound attempt per call, no retries
- Timeout, connection errors and malformed answers are all treated the same:
  the matching fallback answers instead
- Every call is logged as "external" or "fallback" (with the failure reason)
"""

from collections import Counter
from datetime import datetime
from threading import Lock
from typing import Any, Callable, Dict, List, Optional
import logging
import math

from pydantic import BaseModel, Field, ValidationError, field_validator

from triage_hub.core.settings import Settings, settings as default_settings
from triage_hub.models.triage import (
    MAX_SUGGESTED_ACTIONS,
    ChatContext,
    ChatReply,
    ClassificationResult,
    HistoricalContext,
    Priority,
    ResourcePrediction,
    TriageRequest,
    cap_score,
    utcnow,
)
from triage_hub.services import fallback
from triage_hub.services.classifier.client import ClassifierClient
from triage_hub.services.classifier.errors import ClassifierError, MalformedExternalResponse
from triage_hub.services.classifier.outcome import ClassifierOutcome
from triage_hub.services.fallback.resources import normalize_population

logger = logging.getLogger(__name__)

PRIORITIZE_PATH = "/api/prioritize"
PREDICT_RESOURCES_PATH = "/api/predict-resources"
CHAT_PATH = "/api/chat"

DISABLED_REASON = "classifier disabled"

# Fields a flat /api/predict-resources answer may echo back that are not resources
NON_RESOURCE_KEYS = frozenset({
    "affected_population",
    "population",
    "confidence",
    "timestamp",
    "generated_at",
    "processing_time_ms",
})


class ExternalPriorityResponse(BaseModel):
    """Answer of POST /api/prioritize."""
    priority: Priority
    score: float = Field(..., ge=0.0, le=1.0)
    reason: str = ""
    suggested_category: Optional[str] = None

    @field_validator("priority", mode="before")
    @classmethod
    def _upper_priority(cls, value):
        return value.upper() if isinstance(value, str) else value


class ExternalChatResponse(BaseModel):
    """Answer of POST /api/chat."""
    response: str = Field(..., min_length=1)
    confidence: float = Field(..., ge=0.0, le=1.0)
    sources: List[str] = Field(default_factory=list)
    suggested_actions: List[str] = Field(default_factory=list)
    timestamp: Optional[datetime] = None


def parse_quantities(data: Dict[str, Any]) -> Dict[str, int]:
    """
    Extract resource quantities from a /api/predict-resources answer.

    Accepts either {"predictions": {...}} or a flat mapping. Non-numeric
    entries and echoed metadata (NON_RESOURCE_KEYS) of a flat mapping are
    ignored.
    """
    predictions = data.get("predictions")
    if predictions is not None and not isinstance(predictions, dict):
        raise MalformedExternalResponse("'predictions' is not an object")

    candidates = predictions if predictions is not None else data
    quantities = {}
    for name, value in candidates.items():
        if predictions is None and name in NON_RESOURCE_KEYS:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            if predictions is not None:
                raise MalformedExternalResponse(f"quantity for {name!r} is not a number")
            continue
        if value < 0 or math.isnan(value) or math.isinf(value):
            raise MalformedExternalResponse(f"quantity for {name!r} is invalid: {value}")
        quantities[name] = int(math.ceil(value))

    if not quantities:
        raise MalformedExternalResponse("no resource quantities in response")
    return quantities


class ClassifierGateway:
    """
    Arbitrates between the external classifier service and the fallbacks.

    All public methods return a value; none of them raise.
    """

    def __init__(
        self,
        client: Optional[ClassifierClient] = None,
        settings: Settings = default_settings
    ):
        self.settings = settings
        self.enabled = settings.AI_ENABLED
        self.client = client or ClassifierClient(
            timeout_seconds=settings.AI_TIMEOUT_SECONDS,
            max_workers=settings.AI_MAX_WORKERS,
        )
        self._counts: Counter = Counter()
        self._counts_lock = Lock()

        if self.enabled:
            logger.info(
                f"✅ Classifier gateway initialized: {settings.AI_PRIORITIZATION_URL}, "
                f"{settings.AI_CHATBOT_URL} (timeout {settings.AI_TIMEOUT_SECONDS}s)"
            )
        else:
            logger.info("⚠️ Classifier disabled (AI_ENABLED=false), using rule-based fallback only")

    # ------------------------------------------------------------------
    # Priority classification
    # ------------------------------------------------------------------

    def classify_priority(
        self,
        request: TriageRequest,
        historical_context: Optional[HistoricalContext] = None
    ) -> ClassificationResult:
        return self.classify_priority_outcome(request, historical_context).payload

    def classify_priority_outcome(
        self,
        request: TriageRequest,
        historical_context: Optional[HistoricalContext] = None
    ) -> ClassifierOutcome:
        body = {
            "title": request.title,
            "description": request.description,
            "category": request.category,
            "location": request.location,
            "timestamp": utcnow().isoformat(),
            "historical_data": historical_context.model_dump() if historical_context else None,
        }

        def call_external() -> ClassificationResult:
            data = self.client.post(self.settings.AI_PRIORITIZATION_URL, PRIORITIZE_PATH, body)
            parsed = self._validate(ExternalPriorityResponse, data)
            return ClassificationResult(
                priority=parsed.priority,
                score=cap_score(parsed.score),
                reason=parsed.reason,
                suggested_category=parsed.suggested_category or request.category,
            )

        return self._arbitrate(
            "classify_priority",
            call_external,
            lambda: fallback.classify(request.title, request.description, request.category),
        )

    # ------------------------------------------------------------------
    # Resource prediction
    # ------------------------------------------------------------------

    def predict_resources(
        self,
        disaster_type: str,
        affected_population: int,
        location: Optional[str] = None
    ) -> ResourcePrediction:
        return self.predict_resources_outcome(disaster_type, affected_population, location).payload

    def predict_resources_outcome(
        self,
        disaster_type: str,
        affected_population: int,
        location: Optional[str] = None
    ) -> ClassifierOutcome:
        population = normalize_population(affected_population)
        body = {
            "disaster_type": disaster_type,
            "affected_population": population,
            "location": location,
            "historical_patterns": True,
            "timestamp": utcnow().isoformat(),
        }

        def call_external() -> ResourcePrediction:
            data = self.client.post(self.settings.AI_PRIORITIZATION_URL, PREDICT_RESOURCES_PATH, body)
            return ResourcePrediction(
                disaster_type=disaster_type,
                affected_population=population,
                quantities=parse_quantities(data),
                status=str(data.get("status", "success")),
            )

        return self._arbitrate(
            "predict_resources",
            call_external,
            lambda: fallback.predict_resources(disaster_type, affected_population),
        )

    # ------------------------------------------------------------------
    # Help chat
    # ------------------------------------------------------------------

    def chat(self, message: str, context: Optional[ChatContext] = None) -> ChatReply:
        return self.chat_outcome(message, context).payload

    def chat_outcome(self, message: str, context: Optional[ChatContext] = None) -> ClassifierOutcome:
        context = context or ChatContext()
        body = {
            "message": message,
            "context": {
                "user_id": context.user_id,
                "user_role": context.user_role,
                "language": context.language,
                "timestamp": utcnow().isoformat(),
            },
        }

        def call_external() -> ChatReply:
            data = self.client.post(self.settings.AI_CHATBOT_URL, CHAT_PATH, body)
            parsed = self._validate(ExternalChatResponse, data)
            return ChatReply(
                response=parsed.response,
                confidence=parsed.confidence,
                sources=parsed.sources,
                suggested_actions=parsed.suggested_actions[:MAX_SUGGESTED_ACTIONS],
                timestamp=parsed.timestamp or utcnow(),
            )

        return self._arbitrate("chat", call_external, lambda: fallback.match(message))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(model, data: Dict[str, Any]):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise MalformedExternalResponse(f"{e.error_count()} validation error(s)")

    def _arbitrate(
        self,
        operation: str,
        call_external: Callable[[], Any],
        call_fallback: Callable[[], Any]
    ) -> ClassifierOutcome:
        if not self.enabled:
            outcome = ClassifierOutcome.fallback(operation, call_fallback(), DISABLED_REASON)
        else:
            try:
                outcome = ClassifierOutcome.external(operation, call_external())
            except ClassifierError as e:
                outcome = ClassifierOutcome.fallback(operation, call_fallback(), str(e))
            except Exception as e:
                # Conversion errors on an otherwise valid answer end up here
                outcome = ClassifierOutcome.fallback(
                    operation, call_fallback(), f"{type(e).__name__}: {e}"
                )

        self._record(outcome)
        return outcome

    def _record(self, outcome: ClassifierOutcome) -> None:
        with self._counts_lock:
            self._counts[(outcome.operation, outcome.source)] += 1

        if outcome.used_fallback:
            logger.warning(
                f"⚠️ {outcome.operation} classified via fallback: {outcome.failure_reason}",
                extra=outcome.log_fields(),
            )
        else:
            logger.info(
                f"✅ {outcome.operation} classified via external service",
                extra=outcome.log_fields(),
            )

    def stats(self) -> Dict[str, Dict[str, int]]:
        """Counts of external vs fallback outcomes per operation."""
        with self._counts_lock:
            counts = dict(self._counts)
        result: Dict[str, Dict[str, int]] = {}
        for (operation, source), count in counts.items():
            result.setdefault(operation, {"external": 0, "fallback": 0})[source] = count
        return result

    def close(self) -> None:
        self.client.close()


# Default gateway used by the API routes
_gateway: Optional[ClassifierGateway] = None


def get_classifier_gateway() -> ClassifierGateway:
    """Get the application's classifier gateway, creating it on first use."""
    global _gateway
    if _gateway is None:
        _gateway = ClassifierGateway()
    return _gateway
