"""
External classifier integration.

Calls the remote prioritization, resource-prediction and chat endpoints
under a hard timeout and falls back to the rules in services.fallback.
"""

from triage_hub.services.classifier.client import ClassifierClient
from triage_hub.services.classifier.errors import (
    ClassifierError,
    ExternalServiceTimeout,
    ExternalServiceUnavailable,
    MalformedExternalResponse,
)
from triage_hub.services.classifier.gateway import ClassifierGateway, get_classifier_gateway
from triage_hub.services.classifier.outcome import ClassifierOutcome

__all__ = [
    "ClassifierClient",
    "ClassifierError",
    "ClassifierGateway",
    "ClassifierOutcome",
    "ExternalServiceTimeout",
    "ExternalServiceUnavailable",
    "MalformedExternalResponse",
    "get_classifier_gateway",
]
