from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..time_utils import to_utc_z, parse_iso_datetime, utcnow


ROLE_EMPLOYEE = "employee"
ROLE_MANAGER = "manager"
ROLES = (ROLE_EMPLOYEE, ROLE_MANAGER)


@dataclass
class Store:
    """Physical store a holder is affiliated with."""

    id: int
    name: str
    code: str
    address: str | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "address": self.address,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Store":
        return cls(
            id=data["id"],
            name=data["name"],
            code=data["code"],
            address=data.get("address"),
            is_active=data.get("is_active", True),
            created_at=parse_iso_datetime(data.get("created_at")) or utcnow(),
        )


@dataclass
class Holder:
    """
    A user who can own gift inventory.

    role gates which operations the API layer lets the holder invoke;
    the engine itself only records ids.
    """

    id: int
    username: str
    full_name: str
    employee_code: str
    store_id: int | None
    role: str = ROLE_EMPLOYEE
    password_hash: str | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_manager(self) -> bool:
        return self.role == ROLE_MANAGER

    def __repr__(self) -> str:
        return f"<Holder id={self.id} username={self.username!r} role={self.role}>"

    def to_dict(self, *, include_secret: bool = False) -> dict:
        data = {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "employee_code": self.employee_code,
            "store_id": self.store_id,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_secret:
            data["password_hash"] = self.password_hash
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Holder":
        return cls(
            id=data["id"],
            username=data["username"],
            full_name=data["full_name"],
            employee_code=data["employee_code"],
            store_id=data.get("store_id"),
            role=data.get("role", ROLE_EMPLOYEE),
            password_hash=data.get("password_hash"),
            is_active=data.get("is_active", True),
            created_at=parse_iso_datetime(data.get("created_at")) or utcnow(),
            updated_at=parse_iso_datetime(data.get("updated_at")) or utcnow(),
        )
