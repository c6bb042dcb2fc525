"""
Deterministic fallbacks for the external classifier service.

No network access; every function here is total and returns the same shape
as the corresponding external call.
"""

from triage_hub.services.fallback.chat_matcher import match
from triage_hub.services.fallback.heuristics import classify
from triage_hub.services.fallback.resources import predict_resources

__all__ = [
    "classify",
    "match",
    "predict_resources",
]
