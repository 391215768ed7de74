"""
Partial plan reconstruction for progressive rendering of a streamed plan.
Nothing in here raises: malformed input just yields fewer fields.
"""
import json
import re
from typing import Any, Optional

from ..models.plan import PartialTravelPlan

SCALAR_KEYS = {
    "trip_title": "tripTitle",
    "trip_overview": "tripOverview",
    "estimated_cost": "estimatedCost",
}
LIST_KEYS = {
    "daily_itinerary": "dailyItinerary",
    "hotel_recommendations": "hotelRecommendations",
    "restaurant_recommendations": "restaurantRecommendations",
}

_LEADING_FENCE = re.compile(r"^\s*```(?:json)?[ \t]*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```\s*$")
# Trailing \u escape whose hex digits have not all arrived yet.
_PARTIAL_UNICODE = re.compile(r"(\\+)u[0-9a-fA-F]{0,3}$")


def _scalar_pattern(key: str) -> re.Pattern:
    # Captures up to the closing quote, or to the end of the text while the
    # value is still being generated. Group 2 is a dangling escape backslash.
    return re.compile(
        r'"' + re.escape(key) + r'"\s*:\s*"((?:[^"\\]|\\.)*)(\\?)',
        re.DOTALL,
    )


_SCALAR_PATTERNS = {name: _scalar_pattern(key) for name, key in SCALAR_KEYS.items()}


def reconstruct_partial(text: str) -> PartialTravelPlan:
    """
    Recover as much of the plan as ``text`` allows.

    A document that strict-parses is returned whole (``is_complete=True``).
    Otherwise only the scalar fields are recovered, each independently;
    list fields stay absent until the whole document parses.
    """
    if not text:
        return PartialTravelPlan()

    document = _strict_parse(text)
    if isinstance(document, dict):
        return _from_document(document)

    values = {}
    for name, pattern in _SCALAR_PATTERNS.items():
        match = pattern.search(text)
        if match:
            values[name] = _decode_partial_string(match.group(1))
    return PartialTravelPlan(**values)


def _strict_parse(text: str) -> Optional[Any]:
    body = _TRAILING_FENCE.sub("", _LEADING_FENCE.sub("", text, count=1), count=1)
    try:
        return json.loads(body)
    except (ValueError, RecursionError):
        return None


def _from_document(document: dict) -> PartialTravelPlan:
    values = {}
    for name, key in SCALAR_KEYS.items():
        if isinstance(document.get(key), str):
            values[name] = document[key]
    for name, key in LIST_KEYS.items():
        if isinstance(document.get(key), list):
            values[name] = document[key]
    guide = document.get("transportationGuide")
    if isinstance(guide, (list, str)):
        values["transportation_guide"] = guide
    return PartialTravelPlan(**values, is_complete=True)


def _decode_partial_string(raw: str) -> str:
    match = _PARTIAL_UNICODE.search(raw)
    if match and len(match.group(1)) % 2 == 1:
        raw = raw[:match.end(1) - 1]
    try:
        return json.loads(f'"{raw}"', strict=False)
    except ValueError:
        return raw


class PartialPlanAccumulator:
    """
    Feeds streamed chunks through ``reconstruct_partial`` and merges the
    results, so a field recovered once is never lost again.
    """

    def __init__(self):
        self._chunks: list[str] = []
        self.current = PartialTravelPlan()

    @property
    def text(self) -> str:
        return "".join(self._chunks)

    def feed(self, chunk: str) -> PartialTravelPlan:
        """Append a chunk and return the merged partial plan."""
        if chunk:
            self._chunks.append(chunk)
            self.current = self.current.merged_with(reconstruct_partial(self.text))
        return self.current
