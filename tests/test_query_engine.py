import math

import pytest
from pydantic import ValidationError

from compass.schemas.open_data import OpenDataService
from compass.services.query_engine import (
    ListingQuery,
    build_pagination,
    filter_open_data,
    matches,
    open_data_coordinates,
)
from compass.utils.geo import haversine_miles

ORIGIN = (41.8781, -87.6298)
MILES_PER_DEGREE_LAT = 69.09


def north_of_origin(miles):
    return ORIGIN[0] + miles / MILES_PER_DEGREE_LAT, ORIGIN[1]


def svc(name, category="food", subcategory="grocery", lat=None, lng=None, **kw):
    if lat is None:
        lat, lng = ORIGIN
    return OpenDataService(
        id=f"test:{name}",
        name=name,
        description=kw.pop("description", f"{name} description"),
        category=category,
        subcategory=subcategory,
        coordinates=(lng, lat),
        address=kw.pop("address", "1 Main St, Chicago, IL"),
        **kw,
    )


@pytest.fixture
def catalogue():
    return [
        svc("Near Grocer", lat=north_of_origin(2)[0], lng=ORIGIN[1]),
        svc("Far Grocer", lat=north_of_origin(8)[0], lng=ORIGIN[1]),
        svc("Loop Clinic", category="healthcare", subcategory="clinics", description="Free flu shots"),
        svc("Pantry", subcategory="pantry", address="77 W Food Ave"),
        svc("Edge Grocer", lat=north_of_origin(4.5)[0], lng=ORIGIN[1]),
    ]


def test_radius_keeps_only_nearby_food(catalogue):
    query = ListingQuery(category="food", latitude=ORIGIN[0], longitude=ORIGIN[1], radius=5)

    result = filter_open_data(catalogue[:2], query)

    assert [s.name for s in result.records] == ["Near Grocer"]
    assert result.items[0].distance == pytest.approx(2.0, abs=0.05)


def test_radius_partition_holds(catalogue):
    query = ListingQuery(latitude=ORIGIN[0], longitude=ORIGIN[1], radius=5)
    kept = {s.id for s in filter_open_data(catalogue, query).records}

    for service in catalogue:
        lat, lng = open_data_coordinates(service)
        d = haversine_miles(ORIGIN[0], ORIGIN[1], lat, lng)
        if service.id in kept:
            assert d <= 5
        else:
            assert d > 5


def test_radius_sorts_nearest_first(catalogue):
    query = ListingQuery(category="food", latitude=ORIGIN[0], longitude=ORIGIN[1], radius=50)

    distances = [r.distance for r in filter_open_data(catalogue, query).items]

    assert distances == sorted(distances)


def test_records_without_coordinates_trail_radius_results():
    class Bare:
        category = "food"
        subcategory = "grocery"
        name = "No Location"
        description = ""
        address = ""
        coordinates = None

    near = svc("Near", lat=north_of_origin(1)[0], lng=ORIGIN[1])
    query = ListingQuery(latitude=ORIGIN[0], longitude=ORIGIN[1], radius=3)

    result = filter_open_data([Bare(), near], query)

    assert [getattr(r.record, "name") for r in result.items] == ["Near", "No Location"]
    assert result.items[1].distance is None


def test_all_means_no_restriction(catalogue):
    assert len(filter_open_data(catalogue, ListingQuery(category="all", subcategory="all")).records) == 5


def test_subcategory_filter(catalogue):
    result = filter_open_data(catalogue, ListingQuery(category="food", subcategory="pantry"))
    assert [s.name for s in result.records] == ["Pantry"]


@pytest.mark.parametrize(
    "term, expected",
    [
        ("grocer", ["Near Grocer", "Far Grocer", "Edge Grocer"]),
        ("FLU", ["Loop Clinic"]),
        ("food ave", ["Pantry"]),
        ("   ", ["Near Grocer", "Far Grocer", "Loop Clinic", "Pantry", "Edge Grocer"]),
        ("nothing like this", []),
    ],
)
def test_search_is_case_insensitive_substring(catalogue, term, expected):
    result = filter_open_data(catalogue, ListingQuery(search=term))
    assert [s.name for s in result.records] == expected


def test_status_filter_only_when_requested():
    rows = [{"name": "a", "status": "active"}, {"name": "b", "status": "pending"}, {"name": "c"}]

    assert [r["name"] for r in rows if matches(r, ListingQuery())] == ["a", "b", "c"]
    picked = [r["name"] for r in rows if matches(r, ListingQuery(statuses=frozenset({"active"})))]
    assert picked == ["a"]


@pytest.mark.parametrize("limit", [1, 2, 3, 5, 7])
def test_pages_concatenate_to_the_full_result(catalogue, limit):
    base = dict(latitude=ORIGIN[0], longitude=ORIGIN[1], radius=100)
    full = filter_open_data(catalogue, ListingQuery(**base, limit=1000)).records

    first = filter_open_data(catalogue, ListingQuery(**base, limit=limit))
    assert first.pagination.total == len(full)
    assert first.pagination.total_pages == math.ceil(len(full) / limit)

    pages = []
    for page in range(1, first.pagination.total_pages + 1):
        pages.extend(filter_open_data(catalogue, ListingQuery(**base, page=page, limit=limit)).records)

    assert [s.id for s in pages] == [s.id for s in full]


def test_page_past_the_end_is_empty(catalogue):
    result = filter_open_data(catalogue, ListingQuery(page=9, limit=2))
    assert result.items == []
    assert result.pagination.total == 5


def test_filtering_is_idempotent(catalogue):
    query = ListingQuery(category="food", search="grocer", latitude=ORIGIN[0], longitude=ORIGIN[1], radius=6)

    first = filter_open_data(catalogue, query)
    second = filter_open_data(catalogue, query)

    assert first == second
    assert len(catalogue) == 5


def test_pagination_wire_names():
    assert build_pagination(11, 2, 5).model_dump(by_alias=True) == {
        "page": 2,
        "limit": 5,
        "total": 11,
        "totalPages": 3,
    }


@pytest.mark.parametrize(
    "kwargs",
    [
        {"latitude": 41.9},
        {"longitude": -87.6},
        {"latitude": 95, "longitude": 0},
        {"latitude": 0, "longitude": 0, "radius": 0},
        {"page": 0},
        {"limit": 0},
    ],
)
def test_bad_queries_are_refused(kwargs):
    with pytest.raises(ValidationError):
        ListingQuery(**kwargs)


def test_queries_are_immutable():
    query = ListingQuery(category="food")

    with pytest.raises(ValidationError):
        query.category = "shelter"
    assert hash(query) == hash(ListingQuery(category="food"))
