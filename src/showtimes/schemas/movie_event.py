"""Pydantic schemas for stored movie events."""

import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class MovieEventResponse(BaseModel):
    """One film's showtimes at one theatre on one day, in the published camelCase shape."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    date: datetime.date
    title: str
    original_title: str
    times: list[str]
    format: str
    theatre: str
    image_url: str = ""
    accessibility: list[str] = []
    discount: list[str] = []
