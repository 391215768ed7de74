"""Shared fixtures: a scripted model client and a file-backed dispatcher."""
import pytest

from travel_planner.config import Settings
from travel_planner.services.dispatcher import ActionDispatcher
from travel_planner.services.plan_store import LocalPlanStore
from travel_planner.services.relay import GenerationRelay


SAMPLE_PLAN = {
    "tripTitle": "Osaka food and Kyoto temples",
    "tripOverview": "Four days between Osaka and Kyoto.",
    "estimatedCost": "About 1,200,000 KRW per person",
    "dailyItinerary": [
        {
            "day": "Day 1",
            "date": "2025-10-01",
            "theme": "Arrival",
            "schedule": [
                {
                    "time": "15:00",
                    "activity": "Arrive at KIX",
                    "description": "Take the train downtown.",
                    "transportation": "Haruka express, 50 min",
                }
            ],
        }
    ],
    "hotelRecommendations": [
        {"name": "Namba Hotel", "area": "Namba", "priceRange": "150,000 KRW", "rating": 4.5, "notes": "Near the station."}
    ],
    "restaurantRecommendations": [
        {"name": "Kuromon Sushi", "area": "Kuromon Market", "rating": 4.7, "notes": "Fresh fish."}
    ],
    "transportationGuide": [
        {"method": "JR Special Rapid", "tips": "Use ICOCA.", "duration": "30 min", "cost": "580 JPY", "recommended": True}
    ],
}


class FakeLLM:
    """Scripted stand-in for LLMClient."""

    def __init__(self, text: str = "", chunks: list = None, fail_on_start: bool = False, fail_after: int = None):
        self.text = text
        self.chunks = chunks if chunks is not None else [text]
        self.fail_on_start = fail_on_start
        self.fail_after = fail_after
        self.prompts = []
        self.pulled = 0
        self.closed = False

    async def generate(self, prompt: str, json_mode: bool = False) -> str:
        self.prompts.append(prompt)
        if self.fail_on_start:
            raise RuntimeError("upstream unavailable")
        return self.text

    async def stream(self, prompt: str, json_mode: bool = False):
        self.prompts.append(prompt)
        try:
            if self.fail_on_start:
                raise RuntimeError("upstream unavailable")
            for index, chunk in enumerate(self.chunks):
                if self.fail_after is not None and index >= self.fail_after:
                    raise RuntimeError("connection reset")
                self.pulled += 1
                yield chunk
        finally:
            self.closed = True


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "llm_api_key": "test-key",
        "blob_read_write_token": "",
        "local_plans_path": tmp_path / "local-data" / "plans.json",
        "default_country": "Japan",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_dispatcher(settings: Settings, llm: FakeLLM = None) -> ActionDispatcher:
    store = LocalPlanStore(settings.local_plans_path, settings.default_country)
    relay = GenerationRelay(llm) if llm is not None else None
    return ActionDispatcher(settings, store, relay=relay)


def saved_plan_payload(plan_id: int, title: str = None, **extra) -> dict:
    plan = dict(SAMPLE_PLAN)
    if title:
        plan["tripTitle"] = title
    payload = {
        "id": plan_id,
        "plan": plan,
        "country": "Japan",
        "destination": "Osaka & Kyoto",
        "startDate": "2025-10-01",
        "endDate": "2025-10-04",
        "mustVisitPlaces": ["Fushimi Inari"],
    }
    payload.update(extra)
    return payload


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def plan_payload():
    return {
        "country": "Japan",
        "destination": "Osaka & Kyoto",
        "startDate": "2025-10-01",
        "endDate": "2025-10-04",
        "mustVisitPlaces": ["Fushimi Inari"],
    }
