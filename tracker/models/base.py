"""엔티티 공통 베이스 모델.

Common base model for stored entities.
Attributes are snake_case in Python and camelCase as stored and on the
wire (``created_by`` <-> ``createdBy``). Unknown attributes, including the
PK/SK/GSI key attributes of stored items, are ignored on load.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase 별칭을 사용하는 베이스 모델 (Base model with camelCase aliases)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )
