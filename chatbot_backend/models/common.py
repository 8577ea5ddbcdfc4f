"""Shared Pydantic building blocks"""
from datetime import datetime, timezone
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Annotated


def _as_utc(value: datetime) -> datetime:
    # MongoDB hands back naive datetimes that are already UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


ObjectIdStr = Annotated[str, BeforeValidator(str)]
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire and in MongoDB"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
