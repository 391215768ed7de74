"""
Action Dispatcher - routes a symbolic action and its payload to a handler.
Every outcome, including failures, comes back as an ActionResult.
"""
import logging
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, ValidationError

from .llm_client import LLMClient
from .plan_store import PlanStore
from .prompts import build_plan_prompt, build_search_prompt
from .relay import GenerationRelay, RelayMode
from ..config import Settings
from ..exceptions import (
    ConfigurationError,
    PayloadValidationError,
    TravelPlannerError,
    UNKNOWN_ERROR_MESSAGE,
    UpstreamGenerationError,
)
from ..models.action import ActionName, ActionResult, PlanRequest, SearchRequest
from ..models.plan import SavedPlan, TravelPlan

logger = logging.getLogger(__name__)

Handler = Callable[[Any, bool], Awaitable[ActionResult]]


def _validate(model: type[BaseModel], payload: Any) -> Any:
    try:
        return model.model_validate(payload if payload is not None else {})
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) or "payload" for err in e.errors()})
        raise PayloadValidationError(f"Invalid or missing fields: {', '.join(fields)}") from e


class ActionDispatcher:
    """
    Dispatches actions for the single travel endpoint.

    Store-backed actions always answer with the full, freshly re-read plan
    list. Model-backed actions require a configured credential.
    """

    def __init__(
        self,
        settings: Settings,
        store: PlanStore,
        relay: Optional[GenerationRelay] = None,
    ):
        self.settings = settings
        self.store = store
        self._relay = relay
        self._handlers: dict[str, Handler] = {
            ActionName.GET_PLANS.value: self._get_plans,
            ActionName.SAVE_PLAN.value: self._save_plan,
            ActionName.DELETE_PLAN.value: self._delete_plan,
            ActionName.GENERATE_PLAN.value: self._generate_plan,
            ActionName.SEARCH_INFO.value: self._search_info,
        }

    @property
    def relay(self) -> GenerationRelay:
        if not self.settings.has_llm_credentials:
            raise ConfigurationError()
        if self._relay is None:
            self._relay = GenerationRelay(LLMClient(self.settings))
        return self._relay

    async def dispatch(self, action: str, payload: Any = None, streaming: bool = False) -> ActionResult:
        """
        Run ``action`` and return its result.

        Unknown actions give 400; errors of the taxonomy give their own
        status; anything else degrades to a generic 500.
        """
        handler = self._handlers.get(action)
        if handler is None:
            return ActionResult(status=400, body={"error": "Invalid action"})

        try:
            return await handler(payload, streaming)
        except TravelPlannerError as e:
            logger.warning(f"Action {action} failed with {e.status_code}: {e.message}")
            return ActionResult(status=e.status_code, body=e.to_body())
        except Exception:
            logger.exception(f"Unexpected error while handling action {action}")
            return ActionResult(status=500, body={"error": UNKNOWN_ERROR_MESSAGE})

    async def _plans_result(self) -> ActionResult:
        plans = await self.store.list_plans()
        return ActionResult(status=200, body=[plan.to_wire() for plan in plans])

    async def _get_plans(self, payload: Any, streaming: bool) -> ActionResult:
        return await self._plans_result()

    async def _save_plan(self, payload: Any, streaming: bool) -> ActionResult:
        plan = _validate(SavedPlan, payload)
        await self.store.put(plan)
        return await self._plans_result()

    async def _delete_plan(self, payload: Any, streaming: bool) -> ActionResult:
        plan_id = payload.get("planId") if isinstance(payload, dict) else None
        if not isinstance(plan_id, int) or isinstance(plan_id, bool):
            raise PayloadValidationError("planId must be an integer")
        await self.store.delete(plan_id)
        return await self._plans_result()

    async def _generate_plan(self, payload: Any, streaming: bool) -> ActionResult:
        relay = self.relay
        request = _validate(PlanRequest, payload)
        prompt = build_plan_prompt(request, self.settings.default_country)

        if streaming:
            return await relay.relay(prompt, RelayMode.FORWARD)

        result = await relay.relay(prompt, RelayMode.MATERIALIZE)
        if not result.ok:
            return result
        try:
            plan = TravelPlan.model_validate(result.body)
        except ValidationError as e:
            logger.error(f"Generated document is not a valid travel plan: {e}\nDocument: {result.body}")
            raise UpstreamGenerationError() from e
        return ActionResult(status=200, body=plan.to_wire())

    async def _search_info(self, payload: Any, streaming: bool) -> ActionResult:
        relay = self.relay
        request = _validate(SearchRequest, payload)
        answer = await relay.answer(build_search_prompt(request.query))
        return ActionResult(status=200, body={"result": answer})
