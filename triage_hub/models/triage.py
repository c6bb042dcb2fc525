"""
Pydantic models for request triage, resource prediction and the help chat.

These are the shapes returned to callers regardless of whether the external
classifier answered or the rule-based fallback was used.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional
from enum import Enum


MAX_SUGGESTED_ACTIONS = 3
SCORE_CAP = 0.99


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Priority(str, Enum):
    """Priority levels, most urgent first."""
    URGENT = "URGENT"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class DisasterType(str, Enum):
    """Disaster types with a dedicated resource table."""
    FLOOD = "FLOOD"
    EARTHQUAKE = "EARTHQUAKE"
    FIRE = "FIRE"
    TYPHOON = "TYPHOON"
    MEDICAL = "MEDICAL"


def cap_score(score: float) -> float:
    """Clamp a score to [0, SCORE_CAP] and round it to 2 decimals."""
    return round(max(0.0, min(float(score), SCORE_CAP)), 2)


class TriageRequest(BaseModel):
    """An incoming community service request to be prioritized."""
    title: str = Field(..., max_length=200, description="Short title of the request")
    description: str = Field("", max_length=5000, description="Free-text description")
    category: str = Field("OTHER", max_length=50, description="Request category, e.g. MEDICAL, FOOD")
    location: Optional[str] = Field(None, max_length=500, description="Where help is needed")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Flooded street",
                "description": "Water is rising near the chapel, elderly neighbours need help",
                "category": "EMERGENCY",
                "location": "Purok 3",
            }
        }


class HistoricalContext(BaseModel):
    """Requester history sent along with a prioritization call."""
    total_requests: int = 0
    recent_category: Optional[str] = None
    avg_resolution_time: Optional[float] = None  # milliseconds


class PastRequest(BaseModel):
    """One of the requester's earlier requests, as stored by the request service."""
    category: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def build_historical_context(requests: Iterable[Dict]) -> HistoricalContext:
    """
    Summarize a requester's previous requests, newest first.

    Average resolution time is taken over RESOLVED requests only, as the
    difference between updated_at and created_at.
    """
    requests = list(requests)
    resolution_times = []
    for request in requests:
        created_at = request.get("created_at")
        updated_at = request.get("updated_at")
        if request.get("status") == "RESOLVED" and created_at and updated_at:
            resolution_times.append((updated_at - created_at).total_seconds() * 1000)

    avg_resolution_time = None
    if resolution_times:
        avg_resolution_time = sum(resolution_times) / len(resolution_times)

    return HistoricalContext(
        total_requests=len(requests),
        recent_category=requests[0].get("category") if requests else None,
        avg_resolution_time=avg_resolution_time,
    )


class ClassificationResult(BaseModel):
    """Priority classification for one request. Immutable once produced."""
    priority: Priority
    score: float = Field(..., ge=0.0, le=SCORE_CAP)
    reason: str
    suggested_category: str

    class Config:
        frozen = True


class ResourcePrediction(BaseModel):
    """Predicted resource quantities for a disaster-type event."""
    disaster_type: str
    affected_population: int = Field(..., ge=0)
    quantities: Dict[str, int]
    status: str = "success"
    note: Optional[str] = None  # Set when the guideline fallback was used
    timestamp: datetime = Field(default_factory=utcnow)


class ChatContext(BaseModel):
    """Who is asking the help chat, and in which language."""
    user_id: Optional[str] = None
    user_role: Optional[str] = None
    language: str = "en"


class ChatReply(BaseModel):
    """Answer from the help chat."""
    response: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    sources: List[str] = Field(default_factory=list)
    suggested_actions: List[str] = Field(default_factory=list, max_length=MAX_SUGGESTED_ACTIONS)
    timestamp: datetime = Field(default_factory=utcnow)
