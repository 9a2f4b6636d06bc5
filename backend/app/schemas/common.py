"""
Field types shared by several request schemas.
"""

from datetime import date, datetime, timezone
from typing import Annotated, Literal

from pydantic import AfterValidator, Field

Gender = Literal["male", "female", "other"]


def _not_in_future(value: date) -> date:
    if value > datetime.now(timezone.utc).date():
        raise ValueError("Date of birth cannot be in the future")
    return value


BirthDate = Annotated[date, AfterValidator(_not_in_future)]

PersonName = Annotated[str, Field(min_length=2, max_length=50)]

PHONE_PATTERN = r"^\+?[\d\s\-()]+$"
