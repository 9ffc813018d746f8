from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from compass.core.config import get_settings
from compass.opendata.adapters import SourceAdapter, transform_records
from compass.opendata.registry import CategoryRegistry, default_registry
from compass.schemas.open_data import OpenDataService, Rejection

logger = logging.getLogger(__name__)


class SourceFetchError(Exception):
    pass


@dataclass
class FetchResult:
    services: List[OpenDataService] = field(default_factory=list)
    errors: Optional[List[str]] = None
    rejections: List[Rejection] = field(default_factory=list)


@dataclass
class _SourceOutcome:
    adapter: SourceAdapter
    services: List[OpenDataService] = field(default_factory=list)
    rejections: List[Rejection] = field(default_factory=list)
    error: Optional[str] = None


def _no_data_message(category: str, subcategory: Optional[str]) -> str:
    suffix = f" - {subcategory}" if subcategory else ""
    return f"No data available for {category}{suffix} services"


async def _fetch_source(
    client: httpx.AsyncClient, adapter: SourceAdapter, base_url: str
) -> _SourceOutcome:
    outcome = _SourceOutcome(adapter)
    try:
        r = await client.get(adapter.url(base_url))
        if r.status_code != 200:
            raise SourceFetchError(f"HTTP error! status: {r.status_code}")
        try:
            payload = r.json()
        except ValueError as exc:
            raise SourceFetchError("response is not valid JSON") from exc
        if not isinstance(payload, list):
            raise SourceFetchError("expected a JSON array")
    except (httpx.HTTPError, SourceFetchError) as exc:
        outcome.error = f"Error fetching {adapter.key}: {str(exc) or type(exc).__name__}"
        logger.error(outcome.error)
        return outcome

    outcome.services, outcome.rejections = transform_records(adapter, payload)
    logger.info(
        "%s: received=%d kept=%d rejected=%d",
        adapter.key, len(payload), len(outcome.services), len(outcome.rejections),
    )
    return outcome


def _build_client() -> httpx.AsyncClient:
    settings = get_settings()
    headers = {"Accept": "application/json"}
    if settings.open_data_app_token:
        headers["X-App-Token"] = settings.open_data_app_token
    return httpx.AsyncClient(timeout=settings.open_data_timeout_seconds, headers=headers)


async def fetch_services(
    category: str,
    subcategory: Optional[str] = None,
    *,
    registry: CategoryRegistry = default_registry,
    client: Optional[httpx.AsyncClient] = None,
    base_url: Optional[str] = None,
) -> FetchResult:
    """
    Fetch and normalize every feed registered for (category, subcategory).

    Feeds run concurrently. A failing feed adds one entry to ``errors``
    and never drops services gathered from the others.
    """
    logger.info("Fetching open-data services category=%s subcategory=%s", category, subcategory)

    adapters = registry.resolve(category, subcategory)
    if not adapters:
        message = _no_data_message(category, subcategory)
        logger.warning(message)
        return FetchResult(errors=[message])

    base_url = base_url or get_settings().open_data_base_url
    owns_client = client is None
    if owns_client:
        client = _build_client()

    try:
        outcomes = await asyncio.gather(
            *(_fetch_source(client, adapter, base_url) for adapter in adapters)
        )
    except Exception as exc:
        logger.exception("Open-data fetch failed for category=%s", category)
        return FetchResult(errors=[str(exc) or type(exc).__name__])
    finally:
        if owns_client:
            await client.aclose()

    result = FetchResult()
    errors: List[str] = []
    for outcome in outcomes:
        result.services.extend(outcome.services)
        result.rejections.extend(outcome.rejections)
        if outcome.error:
            errors.append(outcome.error)
    result.errors = errors or None
    return result
