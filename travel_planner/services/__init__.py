"""Services for travel planner."""
from .dispatcher import ActionDispatcher
from .json_extractor import extract_json, parse_model_json
from .llm_client import LLMClient
from .partial_plan import PartialPlanAccumulator, reconstruct_partial
from .plan_store import BlobPlanStore, LocalPlanStore, PlanStore, get_plan_store
from .relay import GenerationRelay, RelayMode

__all__ = [
    "ActionDispatcher",
    "extract_json",
    "parse_model_json",
    "LLMClient",
    "PartialPlanAccumulator",
    "reconstruct_partial",
    "BlobPlanStore",
    "LocalPlanStore",
    "PlanStore",
    "get_plan_store",
    "GenerationRelay",
    "RelayMode",
]
