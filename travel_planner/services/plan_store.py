"""
Plan Store - persistence for saved plans.
Two interchangeable backends: a local JSON file and Vercel Blob storage.
"""
import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import httpx
from pydantic import ValidationError

from ..config import Settings, VERCEL_BLOB_API_URL
from ..exceptions import StoreError
from ..models.plan import SavedPlan

logger = logging.getLogger(__name__)

READ_ERROR_MESSAGE = "Failed to load saved plans."
WRITE_ERROR_MESSAGE = "Failed to save the plan."


class PlanStore(ABC):
    """list / put / delete over saved plans, keyed by plan id."""

    def __init__(self, default_country: str):
        self.default_country = default_country

    @abstractmethod
    async def list_plans(self) -> list[SavedPlan]:
        """All saved plans, newest (highest id) first."""

    @abstractmethod
    async def put(self, plan: SavedPlan) -> None:
        """Create or overwrite the plan with ``plan.id``."""

    @abstractmethod
    async def delete(self, plan_id: int) -> None:
        """Remove the plan with ``plan_id`` if it exists."""

    async def close(self) -> None:
        pass

    def _normalize(self, entries: list) -> list[SavedPlan]:
        plans = []
        for entry in entries:
            try:
                plan = SavedPlan.model_validate(entry)
            except ValidationError as e:
                logger.warning(f"Skipping malformed saved plan: {e}")
                continue
            # Plans saved before country existed get the fallback on read
            if plan.country is None:
                plan = plan.model_copy(update={"country": self.default_country})
            plans.append(plan)
        plans.sort(key=lambda p: p.id, reverse=True)
        return plans


class LocalPlanStore(PlanStore):
    """All plans in one JSON array file, rewritten on every change."""

    def __init__(self, path: Path, default_country: str):
        super().__init__(default_country)
        self.path = Path(path)

    def _read_entries(self) -> list:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error(f"Failed to read {self.path}: {e}")
            raise StoreError(READ_ERROR_MESSAGE) from e

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.error(f"Plan file {self.path} is not valid JSON: {e}")
            raise StoreError(READ_ERROR_MESSAGE) from e
        if not isinstance(data, list):
            logger.error(f"Plan file {self.path} does not hold a JSON array")
            raise StoreError(READ_ERROR_MESSAGE)
        return data

    def _write_entries(self, entries: list) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(entries, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write {self.path}: {e}")
            raise StoreError(WRITE_ERROR_MESSAGE) from e

    async def list_plans(self) -> list[SavedPlan]:
        return self._normalize(self._read_entries())

    async def put(self, plan: SavedPlan) -> None:
        entries = self._read_entries()
        document = plan.to_wire()
        for index, entry in enumerate(entries):
            if isinstance(entry, dict) and entry.get("id") == plan.id:
                entries[index] = document
                break
        else:
            entries.append(document)
        self._write_entries(entries)

    async def delete(self, plan_id: int) -> None:
        try:
            entries = self._read_entries()
        except StoreError:
            return
        remaining = [e for e in entries if not (isinstance(e, dict) and e.get("id") == plan_id)]
        if len(remaining) != len(entries):
            self._write_entries(remaining)


class BlobPlanStore(PlanStore):
    """
    One public JSON object per plan under ``plans/<id>.json``.

    The blob API has no multi-get: listing enumerates the prefix and then
    fetches every object on its own.
    """

    PREFIX = "plans/"

    def __init__(
        self,
        token: str,
        default_country: str,
        api_url: str = VERCEL_BLOB_API_URL,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(default_country)
        self.token = token
        self.api_url = api_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=30.0)

    @property
    def _headers(self) -> dict:
        return {"authorization": f"Bearer {self.token}"}

    @classmethod
    def pathname(cls, plan_id: int) -> str:
        return f"{cls.PREFIX}{plan_id}.json"

    async def _list_blobs(self) -> list[dict]:
        blobs = []
        params = {"prefix": self.PREFIX}
        while True:
            response = await self.client.get(self.api_url, params=params, headers=self._headers)
            response.raise_for_status()
            data = response.json()
            blobs.extend(data.get("blobs", []))
            cursor = data.get("cursor")
            if not data.get("hasMore") or not cursor:
                return blobs
            params = {"prefix": self.PREFIX, "cursor": cursor}

    async def _fetch(self, blob: dict) -> Optional[dict]:
        url = blob.get("url")
        if not url:
            logger.warning(f"Listing entry {blob.get('pathname')} has no url, skipping")
            return None
        response = await self.client.get(url)
        if response.status_code == 404:
            # Deleted between listing and fetching
            logger.warning(f"Saved plan {blob.get('pathname')} disappeared before it could be read")
            return None
        response.raise_for_status()
        return response.json()

    async def list_plans(self) -> list[SavedPlan]:
        try:
            blobs = await self._list_blobs()
            documents = await asyncio.gather(*(self._fetch(blob) for blob in blobs))
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to list saved plans from blob storage: {e}")
            raise StoreError(READ_ERROR_MESSAGE) from e
        return self._normalize([doc for doc in documents if doc is not None])

    async def put(self, plan: SavedPlan) -> None:
        body = json.dumps(plan.to_wire(), ensure_ascii=False).encode("utf-8")
        headers = {
            **self._headers,
            "x-content-type": "application/json",
            "x-add-random-suffix": "0",
            "x-allow-overwrite": "1",
        }
        try:
            response = await self.client.put(
                f"{self.api_url}/{self.pathname(plan.id)}",
                content=body,
                headers=headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to upload plan {plan.id}: {e}")
            raise StoreError(WRITE_ERROR_MESSAGE) from e

    async def delete(self, plan_id: int) -> None:
        pathname = self.pathname(plan_id)
        try:
            blobs = await self._list_blobs()
            target = next((blob for blob in blobs if blob.get("pathname") == pathname), None)
            if target is None or not target.get("url"):
                return
            response = await self.client.post(
                f"{self.api_url}/delete",
                json={"urls": [target["url"]]},
                headers=self._headers,
            )
            response.raise_for_status()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error while deleting {pathname}: {e}")

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()


def get_plan_store(settings: Settings) -> PlanStore:
    """Blob storage when a token is configured, the local file otherwise."""
    if settings.use_blob_store:
        logger.info("Using blob storage for saved plans")
        return BlobPlanStore(
            token=settings.blob_read_write_token,
            default_country=settings.default_country,
            api_url=settings.blob_api_url,
        )
    logger.info(f"Using local file {settings.local_plans_path} for saved plans")
    return LocalPlanStore(settings.local_plans_path, settings.default_country)
