# Overview: Aggregates gift ledger record types for convenient imports.

from .holders import Holder, Store, ROLE_EMPLOYEE, ROLE_MANAGER, ROLES
from .gifts import Gift
from .inventory import (
    InventoryRecord,
    LedgerEntry,
    KIND_SEND,
    KIND_ADJUST,
    KIND_RECEIVE,
    KIND_TRANSFER_OUT,
    KIND_DELETE_CLEANUP,
    LEDGER_KINDS,
)
from .requests import (
    GiftRequest,
    REQUEST_TYPE_INCREASE,
    REQUEST_TYPE_TRANSFER,
    REQUEST_TYPES,
    REQUEST_STATUS_PENDING,
    REQUEST_STATUS_APPROVED,
    REQUEST_STATUS_REJECTED,
)
from .dataset import Dataset, ID_COUNTERS

__all__ = [
    "Holder",
    "Store",
    "Gift",
    "InventoryRecord",
    "LedgerEntry",
    "GiftRequest",
    "Dataset",
    "ID_COUNTERS",
    "ROLE_EMPLOYEE",
    "ROLE_MANAGER",
    "ROLES",
    "KIND_SEND",
    "KIND_ADJUST",
    "KIND_RECEIVE",
    "KIND_TRANSFER_OUT",
    "KIND_DELETE_CLEANUP",
    "LEDGER_KINDS",
    "REQUEST_TYPE_INCREASE",
    "REQUEST_TYPE_TRANSFER",
    "REQUEST_TYPES",
    "REQUEST_STATUS_PENDING",
    "REQUEST_STATUS_APPROVED",
    "REQUEST_STATUS_REJECTED",
]
