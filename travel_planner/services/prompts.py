"""
Prompt templates for plan generation and travel search.
"""
from ..models.action import PlanRequest
from ..models.plan import Country


PLAN_OUTPUT_EXAMPLE = """{
  "tripTitle": "Lively cities and quiet temples, 4 days",
  "tripOverview": "A 3-4 sentence summary of the trip concept and main activities.",
  "estimatedCost": "About 1,200,000 KRW per person (excluding flights)",
  "dailyItinerary": [{
    "day": "Day 1",
    "date": "2025-10-01",
    "theme": "Arrival and first impressions",
    "schedule": [{
      "time": "15:00",
      "activity": "Arrive at the airport and head downtown",
      "description": "At least five sentences of concrete detail, duration and tips.",
      "transportation": "Airport express, about 45 min, 15,000 KRW"
    }]
  }],
  "hotelRecommendations": [{"name": "City Center Hotel", "area": "Downtown", "priceRange": "150,000 - 250,000 KRW", "rating": 4.5, "notes": "Directly connected to the main station."}],
  "transportationGuide": [{"method": "KTX", "tips": "Book ahead on weekends.", "duration": "About 2h 30m", "cost": "About 59,800 KRW one way", "recommended": true}],
  "restaurantRecommendations": [{"name": "Central Market Diner", "area": "Central Market", "rating": 4.4, "notes": "Fresh seafood, expect a queue at peak hours."}]
}"""


def build_plan_prompt(request: PlanRequest, default_country: str) -> str:
    """Build the generation prompt for a trip."""
    country = request.country or default_country
    is_domestic = country == Country.KOREA.value

    if request.must_visit_places:
        places = "\n- ".join(request.must_visit_places)
        must_visit = (
            f"The traveller must visit the following places:\n- {places}\n"
            "Every one of them has to appear in the schedule."
        )
    else:
        must_visit = "The traveller has no must-visit places."

    cost_basis = "including transportation" if is_domestic else "excluding flights"
    timing = (
        "Use the real timetables of the chosen transport (e.g. KTX schedules)."
        if is_domestic
        else "Keep international flight times realistic (departure after 09:00, arrival before 20:00)."
    )

    return f"""You are an expert travel planner for {country}. Plan a detailed trip to {request.destination}, {country} from {request.start_date} to {request.end_date}.
{must_visit}

Accommodation: recommend a balanced mix of 2-3 good-value hotels and 2-3 luxury five-star hotels in central, well-connected areas.

Transportation guide: compare the ways to travel between the main cities or areas of {request.destination} (trains, buses, flights, driving), with pros and cons, duration and cost, and mark the recommended option.

Rules:
1. tripTitle: one attractive sentence that names the destination.
2. tripOverview: 3-4 sentences summarising the trip.
3. estimatedCost: total cost per person {cost_basis}, in KRW.
4. Recommend at least 5 real hotels and 5 real restaurants, each with a rating out of 5, best rated first.
5. Split every day into at least 5 time slots including breakfast, lunch and dinner.
6. {timing}
7. Fill 'transportation' of every schedule item with the concrete route, duration and fare.
8. Describe every activity in at least five sentences.
9. Keep the route logical and efficient.
10. transportationGuide is an array of objects with method, tips, duration, cost and recommended (boolean); use null when there is nothing to compare.

Return only JSON, with no commentary and no markdown, shaped like this example:
{PLAN_OUTPUT_EXAMPLE}"""


def build_search_prompt(query: str) -> str:
    """Build the prompt for a short travel question."""
    return f'Give a concise, useful answer to the following travel question: "{query}"'
