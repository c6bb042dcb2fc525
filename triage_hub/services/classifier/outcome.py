"""
Tagged result of a gateway call: either the external service answered, or
the fallback did (with the reason it was needed).
"""

from typing import Any, Dict, Optional


EXTERNAL = "external"
FALLBACK = "fallback"


class ClassifierOutcome:
    """
    Result of one gateway operation.

    Callers normally only see `payload`; the tag and failure reason feed the
    observability record.
    """

    def __init__(
        self,
        operation: str,
        source: str,
        payload: Any,
        failure_reason: Optional[str] = None
    ):
        self.operation = operation
        self.source = source
        self.payload = payload
        self.failure_reason = failure_reason

    @classmethod
    def external(cls, operation: str, payload: Any) -> "ClassifierOutcome":
        return cls(operation, EXTERNAL, payload)

    @classmethod
    def fallback(cls, operation: str, payload: Any, failure_reason: str) -> "ClassifierOutcome":
        return cls(operation, FALLBACK, payload, failure_reason)

    @property
    def used_fallback(self) -> bool:
        return self.source == FALLBACK

    def log_fields(self) -> Dict[str, Optional[str]]:
        """Fields attached to the log record as `extra`."""
        return {
            "classifier_operation": self.operation,
            "classifier_source": self.source,
            "classifier_failure_reason": self.failure_reason,
        }
