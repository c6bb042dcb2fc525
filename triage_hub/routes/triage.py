"""
Triage endpoints - priority classification, resource prediction and help chat.

These routes are plain `def` so FastAPI runs them in its threadpool; the
gateway call may wait up to AI_TIMEOUT_SECONDS on the external service.
They never fail because the classifier is down: the gateway falls back.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from triage_hub.models.triage import (
    ChatContext,
    ChatReply,
    ClassificationResult,
    HistoricalContext,
    PastRequest,
    ResourcePrediction,
    TriageRequest,
    build_historical_context,
)
from triage_hub.routes.dependencies import get_gateway
from triage_hub.services.classifier import ClassifierGateway

router = APIRouter(prefix="/triage", tags=["Triage"])


class PrioritizeBody(TriageRequest):
    historical_context: Optional[HistoricalContext] = None
    # Raw past requests, newest first; summarized when historical_context is not given
    history: List[PastRequest] = Field(default_factory=list)


class PredictResourcesBody(BaseModel):
    disaster_type: str = Field(..., min_length=1, max_length=50)
    affected_population: int = Field(..., ge=0)
    location: Optional[str] = Field(None, max_length=500)


class ChatBody(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    context: Optional[ChatContext] = None


@router.post("/prioritize", response_model=ClassificationResult)
def prioritize(body: PrioritizeBody, gateway: ClassifierGateway = Depends(get_gateway)):
    """Classify the priority of an incoming request."""
    request = TriageRequest(
        title=body.title,
        description=body.description,
        category=body.category,
        location=body.location,
    )
    historical_context = body.historical_context
    if historical_context is None and body.history:
        historical_context = build_historical_context(past.model_dump() for past in body.history)
    return gateway.classify_priority(request, historical_context)


@router.post("/predict-resources", response_model=ResourcePrediction)
def predict_resources(body: PredictResourcesBody, gateway: ClassifierGateway = Depends(get_gateway)):
    """Predict resource needs for a disaster-type event."""
    return gateway.predict_resources(body.disaster_type, body.affected_population, body.location)


@router.post("/chat", response_model=ChatReply)
def chat(body: ChatBody, gateway: ClassifierGateway = Depends(get_gateway)):
    """Answer a help-chat message."""
    return gateway.chat(body.message, body.context)
