"""
Failures of the external classifier service.

Raised by ClassifierClient and always caught by ClassifierGateway, which
answers with the rule-based fallback instead.
"""


class ClassifierError(Exception):
    """Base class for external classifier failures."""

    reason = "classifier error"

    def __str__(self) -> str:
        detail = super().__str__()
        return f"{self.reason}: {detail}" if detail else self.reason


class ExternalServiceTimeout(ClassifierError):
    reason = "timeout"


class ExternalServiceUnavailable(ClassifierError):
    reason = "unavailable"


class MalformedExternalResponse(ClassifierError):
    reason = "malformed response"
