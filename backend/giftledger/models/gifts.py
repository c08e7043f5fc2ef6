from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..time_utils import to_utc_z, parse_iso_datetime, utcnow


@dataclass
class Gift:
    """
    A distributable item type.

    code is unique and stable. Deactivating a gift hides it from selection
    lists; ledger entries already written for it stay valid.
    """

    id: int
    code: str
    name: str
    category: str | None = None
    description: str | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)

    def __repr__(self) -> str:
        return f"<Gift id={self.id} code={self.code!r} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Gift":
        return cls(
            id=data["id"],
            code=data["code"],
            name=data["name"],
            category=data.get("category"),
            description=data.get("description"),
            is_active=data.get("is_active", True),
            created_at=parse_iso_datetime(data.get("created_at")) or utcnow(),
        )
