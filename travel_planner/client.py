"""
Async client for the travel action endpoint.
Streams generated plans through the partial reconstructor.
"""
import logging
import time
from typing import Any, AsyncIterator, Optional

import httpx

from .models.action import ActionName, PlanRequest
from .models.plan import PartialTravelPlan, SavedPlan, TravelPlan
from .services.partial_plan import PartialPlanAccumulator

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """The server answered with an error status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DuplicatePlanError(Exception):
    """A plan with the same title is already saved."""


def build_saved_plan(plan: TravelPlan, request: PlanRequest, default_country: str = "Japan") -> SavedPlan:
    """Wrap a generated plan for saving; the id is the current time in ms."""
    return SavedPlan(
        id=int(time.time() * 1000),
        plan=plan,
        country=request.country or default_country,
        destination=request.destination,
        start_date=request.start_date,
        end_date=request.end_date,
        must_visit_places=list(request.must_visit_places),
    )


class TravelPlannerClient:
    """Speaks the {action, payload, stream} protocol of ``/api/travel``."""

    def __init__(self, base_url: str, http_client: Optional[httpx.AsyncClient] = None, path: str = "/api/travel"):
        self.url = base_url.rstrip("/") + path
        self.http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(30.0, read=None))

    async def aclose(self) -> None:
        await self.http.aclose()

    async def _call(self, action: ActionName, payload: Any = None) -> Any:
        response = await self.http.post(self.url, json={"action": action.value, "payload": payload})
        if response.is_error:
            raise ApiError(_error_message(response), response.status_code)
        return response.json()

    async def get_plans(self) -> list[SavedPlan]:
        """All saved plans, newest first."""
        return [SavedPlan.model_validate(p) for p in await self._call(ActionName.GET_PLANS)]

    async def save_plan(self, plan: SavedPlan) -> list[SavedPlan]:
        """Save (or overwrite) a plan; returns the updated list."""
        data = await self._call(ActionName.SAVE_PLAN, plan.to_wire())
        return [SavedPlan.model_validate(p) for p in data]

    async def save_new_plan(
        self,
        plan: TravelPlan,
        request: PlanRequest,
        existing: list[SavedPlan],
    ) -> list[SavedPlan]:
        """
        Save a freshly generated plan unless one with the same title is saved.

        Raises:
            DuplicatePlanError: if ``existing`` already holds the title.
        """
        if any(saved.plan.trip_title == plan.trip_title for saved in existing):
            raise DuplicatePlanError(f"'{plan.trip_title}' is already saved")
        return await self.save_plan(build_saved_plan(plan, request))

    async def delete_plan(self, plan_id: int) -> list[SavedPlan]:
        """Delete a plan by id; returns the updated list."""
        data = await self._call(ActionName.DELETE_PLAN, {"planId": plan_id})
        return [SavedPlan.model_validate(p) for p in data]

    async def generate_plan(self, request: PlanRequest) -> TravelPlan:
        """Generate a plan and wait for the whole document."""
        data = await self._call(ActionName.GENERATE_PLAN, request.model_dump(by_alias=True))
        return TravelPlan.model_validate(data)

    async def search(self, query: str) -> str:
        """Ask a short travel question."""
        data = await self._call(ActionName.SEARCH_INFO, {"query": query})
        return data["result"]

    async def stream_plan(self, request: PlanRequest) -> AsyncIterator[PartialTravelPlan]:
        """
        Generate a plan as a stream, yielding the partial plan after every chunk.

        The last partial has ``is_complete`` set if the finished text parsed.
        """
        accumulator = PartialPlanAccumulator()
        body = {
            "action": ActionName.GENERATE_PLAN.value,
            "payload": request.model_dump(by_alias=True),
            "stream": True,
        }
        async with self.http.stream("POST", self.url, json=body) as response:
            if response.is_error:
                await response.aread()
                raise ApiError(_error_message(response), response.status_code)
            async for chunk in response.aiter_text():
                yield accumulator.feed(chunk)

        if not accumulator.current.is_complete:
            logger.warning(f"Plan stream ended before the document was complete ({len(accumulator.text)} chars)")


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return data["error"]
    return f"Server error: {response.status_code}"
