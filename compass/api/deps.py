from typing import Iterable, Optional

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from compass.services.query_engine import ListingQuery


def build_listing_query(
    *,
    category: Optional[str],
    subcategory: Optional[str],
    search: Optional[str],
    latitude: Optional[float],
    longitude: Optional[float],
    radius: float,
    status: Optional[str],
    default_statuses: Optional[Iterable[str]],
    page: int,
    limit: int,
) -> ListingQuery:
    """Query params -> ListingQuery; contract violations surface as 400s."""
    statuses = frozenset({status}) if status else (
        frozenset(default_statuses) if default_statuses is not None else None
    )
    try:
        return ListingQuery(
            category=category or None,
            subcategory=subcategory or None,
            search=search,
            latitude=latitude,
            longitude=longitude,
            radius=radius,
            statuses=statuses,
            page=page,
            limit=limit,
        )
    except ValidationError as exc:
        raise RequestValidationError(exc.errors())
