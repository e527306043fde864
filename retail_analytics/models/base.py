"""
Shared pydantic base and field types for analytics records
"""
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def zero_if_missing(value):
    """Missing numeric fields count as zero"""
    return 0 if value is None else value


def id_to_str(value):
    """Normalise integer and string ids so they compare equal"""
    return None if value is None else str(value)


Money = Annotated[float, BeforeValidator(zero_if_missing)]
Quantity = Annotated[int, BeforeValidator(zero_if_missing)]
Identifier = Annotated[Optional[str], BeforeValidator(id_to_str)]


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase keys, dumps camelCase with by_alias=True"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )
