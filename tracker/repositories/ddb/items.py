"""엔티티 ↔ DynamoDB 아이템 변환.

Conversion between entity models and stored items.
An item carries the entity's camelCase attributes next to its key
attributes; loading ignores the key attributes.
"""

from typing import Any

from tracker.models.base import CamelModel


def to_item(model: CamelModel, keys: dict[str, str], **extra: Any) -> dict[str, Any]:
    """모델을 키 속성이 포함된 아이템으로 변환합니다.

    Build the stored item: JSON-mode camelCase attributes (``None`` omitted)
    merged with the key attributes and any extra identifier attributes.
    """
    item: dict[str, Any] = model.model_dump(mode="json", by_alias=True, exclude_none=True)
    item.update(extra)
    item.update(keys)
    return item


def creation_order(model: Any) -> tuple[str, str]:
    """생성 순서 정렬 키 — 스캔 결과를 삽입 순서로 정렬.

    Scan results come back in hash order; creation timestamps are strictly
    increasing, so sorting on them restores insertion order.
    """
    return (model.created_at or "", model.id)
