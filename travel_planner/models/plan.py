"""
Travel plan models - the structured document the model is asked to produce.
Wire keys are camelCase; attributes are snake_case.
"""
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel
from typing import Annotated, Any, Literal, Optional, Union
from enum import Enum


class Country(str, Enum):
    """Countries the planner knows prompts for."""
    JAPAN = "Japan"
    VIETNAM = "Vietnam"
    KOREA = "Korea"


class PlanModel(BaseModel):
    """Base for plan documents: camelCase aliases, numbers accepted as text."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        frozen=True,
    )


class ScheduleItem(PlanModel):
    """One slot of a day's schedule."""
    time: str = Field(..., description="Start time, e.g. '09:00'")
    activity: str = Field(..., description="What happens in this slot")
    description: str = Field(default="", description="Detailed description and tips")
    transportation: str = Field(default="", description="How to get there, duration and fare")


class DailyPlan(PlanModel):
    """Plan for a single day, in itinerary order."""
    day: str = Field(..., description="Day label, e.g. 'Day 1'")
    date: str = Field(default="", description="Date for this day (YYYY-MM-DD)")
    theme: str = Field(default="", description="Theme or focus for the day")
    schedule: list[ScheduleItem] = Field(default_factory=list)


class PlaceRecommendation(PlanModel):
    """A recommended place (restaurant, sight)."""
    kind: Literal["place"] = "place"
    name: str
    area: str = ""
    notes: str = ""
    rating: float = 0.0


class HotelRecommendation(PlanModel):
    """A recommended hotel."""
    kind: Literal["hotel"] = "hotel"
    name: str
    area: str = ""
    notes: str = ""
    rating: float = 0.0
    price_range: str = Field(default="", description="Estimated nightly price range")


Recommendation = Annotated[
    Union[PlaceRecommendation, HotelRecommendation],
    Field(discriminator="kind"),
]


class TransportationGuideItem(PlanModel):
    """One transport option between the cities of the trip."""
    method: str
    tips: str = ""
    duration: str = ""
    cost: str = ""
    recommended: bool = False


def _tag_entries(value: Any, kind: str) -> Any:
    # Model output carries no tag; the list an entry arrives in decides it.
    if not isinstance(value, list):
        return value
    return [
        {"kind": kind, **entry} if isinstance(entry, dict) and "kind" not in entry else entry
        for entry in value
    ]


class TravelPlan(PlanModel):
    """Complete generated travel plan."""
    trip_title: str
    trip_overview: str = ""
    estimated_cost: str = ""
    daily_itinerary: list[DailyPlan] = Field(default_factory=list)
    hotel_recommendations: list[HotelRecommendation] = Field(default_factory=list)
    restaurant_recommendations: list[PlaceRecommendation] = Field(default_factory=list)
    transportation_guide: Union[list[TransportationGuideItem], str, None] = None

    @field_validator("hotel_recommendations", mode="before")
    @classmethod
    def _tag_hotels(cls, value: Any) -> Any:
        return _tag_entries(value, "hotel")

    @field_validator("restaurant_recommendations", mode="before")
    @classmethod
    def _tag_places(cls, value: Any) -> Any:
        return _tag_entries(value, "place")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class SavedPlan(PlanModel):
    """A generated plan persisted together with the trip parameters."""
    model_config = ConfigDict(frozen=False)

    id: StrictInt = Field(..., description="Creation timestamp in milliseconds")
    plan: TravelPlan
    country: Optional[str] = None
    destination: str
    start_date: str
    end_date: str
    must_visit_places: list[str] = Field(default_factory=list)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class PartialTravelPlan(PlanModel):
    """
    Best-effort view of a plan that is still being generated.
    Every field is optional; composite fields are only present once the
    whole document parses.
    """
    model_config = ConfigDict(frozen=False)

    trip_title: Optional[str] = None
    trip_overview: Optional[str] = None
    estimated_cost: Optional[str] = None
    daily_itinerary: Optional[list[Any]] = None
    hotel_recommendations: Optional[list[Any]] = None
    restaurant_recommendations: Optional[list[Any]] = None
    transportation_guide: Optional[Union[list[Any], str]] = None
    is_complete: bool = False

    def recovered_fields(self) -> set[str]:
        """Names of the plan fields recovered so far."""
        return {
            name for name in PLAN_FIELDS
            if getattr(self, name) is not None
        }

    def merged_with(self, newer: "PartialTravelPlan") -> "PartialTravelPlan":
        """Overlay a newer reconstruction without losing recovered fields."""
        values = {
            name: getattr(newer, name) if getattr(newer, name) is not None else getattr(self, name)
            for name in PLAN_FIELDS
        }
        return PartialTravelPlan(**values, is_complete=self.is_complete or newer.is_complete)


PLAN_FIELDS = (
    "trip_title",
    "trip_overview",
    "estimated_cost",
    "daily_itinerary",
    "hotel_recommendations",
    "restaurant_recommendations",
    "transportation_guide",
)
