from datetime import datetime, timedelta, timezone

from triage_hub.core.settings import Settings
from triage_hub.models.triage import build_historical_context, cap_score


def test_historical_context_averages_resolved_requests():
    start = datetime(2026, 10, 1, tzinfo=timezone.utc)
    history = [
        {"category": "FOOD", "status": "PENDING", "created_at": start},
        {"category": "MEDICAL", "status": "RESOLVED", "created_at": start, "updated_at": start + timedelta(hours=1)},
        {"category": "MEDICAL", "status": "RESOLVED", "created_at": start, "updated_at": start + timedelta(hours=3)},
    ]

    context = build_historical_context(history)

    assert context.total_requests == 3
    assert context.recent_category == "FOOD"
    assert context.avg_resolution_time == 2 * 3600 * 1000


def test_historical_context_for_new_requester():
    context = build_historical_context([])
    assert context.total_requests == 0
    assert context.recent_category is None
    assert context.avg_resolution_time is None


def test_cap_score():
    assert cap_score(1.4) == 0.99
    assert cap_score(-0.2) == 0.0
    assert cap_score(0.456) == 0.46


def test_dev_tokens_parsing():
    settings = Settings(REALTIME_DEV_TOKENS="abc:u1:admin, broken, def:u2:RESIDENT,::")
    assert settings.dev_tokens() == {"abc": ("u1", "ADMIN"), "def": ("u2", "RESIDENT")}


def test_cors_origins_list():
    settings = Settings(CORS_ORIGINS="http://a.test, ,http://b.test")
    assert settings.cors_origins_list() == ["http://a.test", "http://b.test"]
