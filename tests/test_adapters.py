import pytest

from compass.opendata.adapters import CHICAGO_ADAPTERS, canonical_id, format_address, transform_records
from compass.opendata.registry import default_registry
from compass.schemas.open_data import HOURS_NOT_AVAILABLE, PHONE_NOT_AVAILABLE


def adapter(key):
    return default_registry.get(key)


def workforce_record(**overrides):
    raw = {
        "site_name": "A",
        "address": "1 Main St",
        "city": "Chicago",
        "state": "IL",
        "location": {"latitude": "41.88", "longitude": "-87.63"},
    }
    raw.update(overrides)
    return raw


def test_nested_location_record_normalizes():
    result = adapter("workforceCenters").transform(workforce_record())

    assert result.rejection is None
    service = result.service
    assert service.coordinates == (-87.63, 41.88)
    assert service.address == "1 Main St, Chicago, IL"
    assert service.id == canonical_id("workforceCenters", "A", "1 Main St, Chicago, IL", 41.88, -87.63)
    assert service.id.startswith("workforceCenters:")
    assert service.category == "employment"
    assert service.subcategory == "workforce"
    assert service.hours == HOURS_NOT_AVAILABLE
    assert service.phone == PHONE_NOT_AVAILABLE
    assert service.website is None


def test_wire_shape_uses_lng_lat_list():
    service = adapter("workforceCenters").transform(workforce_record()).service
    assert service.model_dump(by_alias=True, mode="json")["coordinates"] == [-87.63, 41.88]


@pytest.mark.parametrize("missing", ["site_name", "address", "location"])
def test_missing_required_field_is_rejected(missing):
    raw = workforce_record()
    raw.pop(missing)

    result = adapter("workforceCenters").transform(raw)

    assert result.service is None
    assert result.rejection.source == "workforceCenters"
    assert missing in result.rejection.reason


def test_blank_required_field_is_rejected():
    result = adapter("workforceCenters").transform(workforce_record(site_name=""))
    assert result.service is None


@pytest.mark.parametrize(
    "location",
    [
        {"latitude": "abc", "longitude": "-87.63"},
        {"latitude": "95", "longitude": "-87.63"},
        {"latitude": "41.88", "longitude": "-200"},
        {"latitude": "41.88"},
        "41.88,-87.63",
    ],
)
def test_bad_nested_coordinates_are_rejected(location):
    result = adapter("workforceCenters").transform(workforce_record(location=location))

    assert result.service is None
    assert result.rejection.reason.startswith("invalid coordinates for A")


def test_pair_location_reads_lng_first():
    raw = {
        "store_name": "Corner Market",
        "address": "200 N State St",
        "zip": "60601",
        "location": {"type": "Point", "coordinates": [-87.6278, 41.8857]},
    }

    service = adapter("groceryStores").transform(raw).service

    assert service.coordinates == (-87.6278, 41.8857)
    # grocery feed has no city/state columns
    assert service.address == "200 N State St, Chicago, IL, 60601"
    assert service.hours == HOURS_NOT_AVAILABLE


@pytest.mark.parametrize(
    "coordinates",
    [[-87.6, "north"], [41.8, -87.6, 0], [-87.6], "oops", None, [-87.6, 91]],
)
def test_bad_pair_is_rejected(coordinates):
    raw = {
        "site_name": "Warm Room",
        "address": "1 Heat Ave",
        "location": {"type": "Point", "coordinates": coordinates},
    }
    assert adapter("warmingCenters").transform(raw).service is None


def test_flu_shot_fields():
    raw = {
        "facility_name": "Clinic X",
        "street1": "5 Health Way",
        "city": "Chicago",
        "state": "IL",
        "postal_code": "60612",
        "begin_time": "9:00 AM",
        "end_time": "5:00 PM",
        "notes": "https://example.org/flu",
        "phone": "312-555-0100",
        "location": {"coordinates": [-87.67, 41.87]},
    }

    service = adapter("fluShots").transform(raw).service

    assert service.address == "5 Health Way, Chicago, IL, 60612"
    assert service.hours == "9:00 AM - 5:00 PM"
    assert service.website == "https://example.org/flu"
    assert service.phone == "312-555-0100"


def test_library_website_object_and_hours():
    raw = {
        "branch_": "Harold Washington",
        "address": "400 S State St",
        "city": "Chicago",
        "state": "IL",
        "zip": "60605",
        "service_hours": "Mon-Thu 9-8",
        "website": {"url": "https://www.chipublib.org/hw"},
        "location": {"latitude": "41.876", "longitude": "-87.628"},
    }

    service = adapter("libraries").transform(raw).service

    assert service.name == "Harold Washington"
    assert service.hours == "Mon-Thu 9-8"
    assert service.website == "https://www.chipublib.org/hw"


def test_warming_center_description_uses_site_type():
    raw = {
        "site_name": "Garfield",
        "site_type": "Community Service Center",
        "address": "10 S Kedzie Ave",
        "location": {"coordinates": [-87.70, 41.88]},
    }
    service = adapter("warmingCenters").transform(raw).service
    assert service.description == "Community Service Center Warming Center"


def test_non_object_record_is_rejected():
    result = adapter("seniorCenters").transform(["not", "a", "dict"])
    assert result.service is None
    assert result.rejection.reason == "record is not an object"


def test_transform_records_splits_kept_and_rejected():
    records = [workforce_record(), workforce_record(site_name="B", location=None), 42]

    services, rejections = transform_records(adapter("workforceCenters"), records)

    assert [s.name for s in services] == ["A"]
    assert len(rejections) == 2
    assert rejections[0].record["site_name"] == "B"


def test_same_name_in_two_feeds_gets_distinct_ids():
    nested = {"site_name": "Uptown", "address": "1 Broadway", "location": {"latitude": "41.9", "longitude": "-87.6"}}

    senior = adapter("seniorCenters").transform(nested).service
    health = adapter("healthCenters").transform(nested).service

    assert senior.id != health.id


def test_format_address_skips_empty_parts():
    assert format_address("1 Main St", None, "  ", "IL", None) == "1 Main St, IL"
    assert format_address(None, "") == ""


def test_adapter_keys_are_unique():
    keys = [a.key for a in CHICAGO_ADAPTERS]
    assert len(keys) == len(set(keys))


def test_adapter_url():
    assert adapter("libraries").url("https://data.example.com/resource/") == (
        "https://data.example.com/resource/x8fc-8rcq.json"
    )


def grocery(name, address, lng, lat):
    return {"store_name": name, "address": address, "location": {"coordinates": [lng, lat]}}


def test_chain_stores_with_one_name_get_distinct_ids():
    records = [grocery("ALDI", "1 A St", -87.65, 41.90), grocery("ALDI", "9 B Ave", -87.70, 41.80)]

    services, rejections = transform_records(adapter("groceryStores"), records)

    assert rejections == []
    assert len({s.id for s in services}) == 2
    assert all(s.id.startswith("groceryStores:") for s in services)


def test_ids_are_stable_across_fetches():
    raw = grocery("Jewel-Osco", "1 W Division St", -87.63, 41.90)

    first = adapter("groceryStores").transform(raw).service
    again = adapter("groceryStores").transform(dict(raw)).service

    assert first.id == again.id
