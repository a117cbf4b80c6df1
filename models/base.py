"""
Shared schema base and constrained string types.
"""

from typing import Annotated
from pydantic import BaseModel, ConfigDict, Field


# Wire formats shared by rule sets and statuses
LocalTime = Annotated[str, Field(pattern=r"^\d{2}:\d{2}$", examples=["15:30"])]
DateKey = Annotated[str, Field(pattern=r"^\d{4}-\d{2}-\d{2}$", examples=["2026-07-03"])]


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Strings are trimmed, assignments re-validated and ORM rows accepted.
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )
