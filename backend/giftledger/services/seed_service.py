# Overview: Deterministic fixture dataset written on first start.

"""
Seed data materialized when no data file exists.

Creates:
- Store: Taipei Flagship (TPE001)
- Holders: emp001, emp002 (employees), mgr001 (manager), all in store 1
- Gifts: G001-G005
- Six opening inventory records, each backed by an "adjust" ledger entry
  so that quantity == SUM(ledger) holds from the first load
- Two pending requests (one increase, one transfer)

All fixture accounts share the configured SEED_PASSWORD.
SECURITY: Change passwords immediately in production!
"""
from __future__ import annotations

from datetime import datetime

from ..models import (
    Dataset,
    Holder,
    Store,
    Gift,
    InventoryRecord,
    LedgerEntry,
    GiftRequest,
    KIND_ADJUST,
    ROLE_EMPLOYEE,
    ROLE_MANAGER,
    REQUEST_TYPE_INCREASE,
    REQUEST_TYPE_TRANSFER,
)
from ..time_utils import utcnow
from .auth_service import hash_password


SEED_STORES = [
    ("Taipei Flagship", "TPE001", "No. 7, Sec. 5, Xinyi Rd., Xinyi Dist., Taipei"),
]

SEED_HOLDERS = [
    ("emp001", "Wang Xiaoming", "E001", ROLE_EMPLOYEE),
    ("emp002", "Li Xiaohua", "E002", ROLE_EMPLOYEE),
    ("mgr001", "Zhang Manager", "M001", ROLE_MANAGER),
]

SEED_GIFTS = [
    ("G001", "Classic Wristwatch", "Accessories", "Business wristwatch"),
    ("G002", "Coffee Gift Box", "Food", "Selected coffee bean gift box"),
    ("G003", "Insulated Tumbler", "Household", "316 stainless steel tumbler"),
    ("G004", "Bluetooth Earphones", "Electronics", "Wireless stereo earphones"),
    ("G005", "Perfume Set", "Beauty", "Three-piece perfume set"),
]

# (holder_id, gift_id, quantity)
SEED_INVENTORY = [
    (1, 1, 5),
    (1, 2, 10),
    (1, 3, 8),
    (2, 1, 3),
    (2, 4, 6),
    (2, 5, 4),
]

SEED_MANAGER_ID = 3


def build_seed_dataset(
    *,
    password: str,
    rounds: int = 12,
    now: datetime | None = None,
) -> Dataset:
    """Build the fixture dataset. Ids come from the dataset's own counters."""
    now = now or utcnow()
    data = Dataset()

    for name, code, address in SEED_STORES:
        data.stores.append(
            Store(id=data.next_id("stores"), name=name, code=code, address=address, created_at=now)
        )

    password_hash = hash_password(password, rounds=rounds)
    for username, full_name, employee_code, role in SEED_HOLDERS:
        data.holders.append(
            Holder(
                id=data.next_id("holders"),
                username=username,
                full_name=full_name,
                employee_code=employee_code,
                store_id=1,
                role=role,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
        )

    for code, name, category, description in SEED_GIFTS:
        data.gifts.append(
            Gift(
                id=data.next_id("gifts"),
                code=code,
                name=name,
                category=category,
                description=description,
                created_at=now,
            )
        )

    for holder_id, gift_id, quantity in SEED_INVENTORY:
        data.inventory.append(
            InventoryRecord(
                id=data.next_id("inventory"),
                holder_id=holder_id,
                gift_id=gift_id,
                quantity=quantity,
                last_updated=now,
            )
        )
        data.ledger.append(
            LedgerEntry(
                id=data.next_id("ledger"),
                holder_id=holder_id,
                gift_id=gift_id,
                kind=KIND_ADJUST,
                quantity=quantity,
                reason="Opening balance",
                actor_id=SEED_MANAGER_ID,
                created_at=now,
            )
        )

    data.requests.append(
        GiftRequest(
            id=data.next_id("requests"),
            requester_id=1,
            gift_id=2,
            request_type=REQUEST_TYPE_INCREASE,
            requested_quantity=5,
            purpose="Customer event",
            created_at=now,
        )
    )
    data.requests.append(
        GiftRequest(
            id=data.next_id("requests"),
            requester_id=2,
            gift_id=1,
            request_type=REQUEST_TYPE_TRANSFER,
            requested_quantity=2,
            target_holder_id=1,
            purpose="Store rebalancing",
            created_at=now,
        )
    )
    return data
