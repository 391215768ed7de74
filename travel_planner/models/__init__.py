"""Data models for travel planner."""
from .plan import (
    Country,
    DailyPlan,
    HotelRecommendation,
    PartialTravelPlan,
    PlaceRecommendation,
    Recommendation,
    SavedPlan,
    ScheduleItem,
    TransportationGuideItem,
    TravelPlan,
)
from .action import ActionName, ActionRequest, ActionResult, PlanRequest, SearchRequest

__all__ = [
    "Country",
    "DailyPlan",
    "HotelRecommendation",
    "PartialTravelPlan",
    "PlaceRecommendation",
    "Recommendation",
    "SavedPlan",
    "ScheduleItem",
    "TransportationGuideItem",
    "TravelPlan",
    "ActionName",
    "ActionRequest",
    "ActionResult",
    "PlanRequest",
    "SearchRequest",
]
