"""
Action protocol models - requests into and results out of the dispatcher.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ActionName(str, Enum):
    """The closed set of actions the endpoint understands."""
    GET_PLANS = "getPlans"
    SAVE_PLAN = "savePlan"
    DELETE_PLAN = "deletePlan"
    GENERATE_PLAN = "generatePlan"
    SEARCH_INFO = "searchInfo"


class ActionRequest(BaseModel):
    """Body of a POST to the action endpoint."""
    action: str
    payload: Any = None
    stream: bool = False


@dataclass
class ActionResult:
    """
    Uniform dispatcher result.

    When ``stream`` is true, ``body`` is an async iterator of text chunks that
    the transport writes out in order; otherwise it is a JSON-serializable value.
    """
    status: int
    body: Union[Any, AsyncIterator[str]]
    stream: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class PlanRequest(BaseModel):
    """Trip parameters for plan generation."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    country: Optional[str] = None
    destination: str = Field(..., min_length=1)
    start_date: str = Field(..., min_length=1)
    end_date: str = Field(..., min_length=1)
    must_visit_places: list[str] = Field(default_factory=list)

    @field_validator("must_visit_places", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class SearchRequest(BaseModel):
    """A free-form travel question."""
    query: str = Field(..., min_length=1)
