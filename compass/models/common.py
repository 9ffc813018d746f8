# compass/models/common.py
from __future__ import annotations

from typing import Annotated

from bson import ObjectId
from pydantic import AfterValidator, BaseModel, ConfigDict, HttpUrl, TypeAdapter
from pydantic.alias_generators import to_camel


def oid_str(x) -> str | None:
    if x is None:
        return None
    return str(x)


def parse_oid(x: str | None) -> ObjectId | None:
    if not x:
        return None
    x = x.strip()
    if not ObjectId.is_valid(x):
        return None
    return ObjectId(x)


_http_url = TypeAdapter(HttpUrl)


def _checked_url(v: str) -> str:
    return str(_http_url.validate_python(v))


# validated as an http(s) URL, stored and returned as a plain string
WebUrl = Annotated[str, AfterValidator(_checked_url)]


class CompassBaseModel(BaseModel):
    """
    Base for API shapes: snake_case in Python and Mongo,
    camelCase on the wire (organizationName, viewCount, totalPages ...).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )
