"""
Shared schema building blocks.

Every request and response model on the public API uses camelCase field names
on the wire while keeping snake_case attributes in Python. Money amounts are
accepted as numbers or numeric strings and always emitted as two-decimal
strings.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


def format_money(value: Decimal) -> str:
    return f"{Decimal(value):.2f}"


Money = Annotated[Decimal, PlainSerializer(format_money, return_type=str)]


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )
