"""
Inventory service tests.

Covers credit/debit validation, transfer atomicity, manual adjustments,
record removal and the quantity == SUM(ledger) invariant.
"""

import random

import pytest

from giftledger.exceptions import InsufficientBalance, InvalidAmount, NotFound, UnknownTarget, ValidationError
from giftledger.extensions import store
from giftledger.services import holder_service, inventory_service

from conftest import COFFEE, EARPHONES, EMP1, EMP2, MANAGER, PERFUME, TUMBLER, WATCH, balance


def _ledger_len():
    return len(store.snapshot().ledger)


class TestCreditDebit:
    def test_credit_creates_record_lazily(self, data_store):
        assert data_store.snapshot().inventory_record(MANAGER, PERFUME) is None

        record = inventory_service.credit(MANAGER, PERFUME, 4, reason="Restock", actor_id=MANAGER)

        assert record.quantity == 4
        entries = data_store.snapshot().ledger_for(MANAGER, PERFUME)
        assert [(e.kind, e.quantity, e.reason) for e in entries] == [("receive", 4, "Restock")]

    def test_debit_appends_negative_entry(self, data_store):
        inventory_service.debit(EMP1, COFFEE, 3, reason="Event", actor_id=EMP1)

        assert balance(EMP1, COFFEE) == 7
        last = data_store.snapshot().ledger[-1]
        assert (last.kind, last.quantity, last.actor_id) == ("send", -3, EMP1)

    @pytest.mark.parametrize("amount", [0, -1, True, 1.5, "2"])
    def test_non_positive_or_non_integer_amounts_rejected(self, data_store, amount):
        before = _ledger_len()
        with pytest.raises(InvalidAmount):
            inventory_service.credit(EMP1, WATCH, amount)
        with pytest.raises(InvalidAmount):
            inventory_service.debit(EMP1, WATCH, amount)
        assert _ledger_len() == before
        assert balance(EMP1, WATCH) == 5

    def test_debit_beyond_balance_raises_and_changes_nothing(self, data_store):
        before = _ledger_len()

        with pytest.raises(InsufficientBalance) as exc_info:
            inventory_service.debit(EMP1, WATCH, 6)

        assert exc_info.value.on_hand == 5
        assert exc_info.value.requested == 6
        assert balance(EMP1, WATCH) == 5
        assert _ledger_len() == before

    def test_debit_without_record_is_insufficient(self, data_store):
        with pytest.raises(InsufficientBalance):
            inventory_service.debit(MANAGER, WATCH, 1)
        assert data_store.snapshot().inventory_record(MANAGER, WATCH) is None

    def test_debit_to_zero_keeps_record(self, data_store):
        inventory_service.debit(EMP1, WATCH, 5)
        assert data_store.snapshot().inventory_record(EMP1, WATCH).quantity == 0

    def test_wrong_kind_for_direction_rejected(self, data_store):
        with pytest.raises(ValidationError):
            inventory_service.credit(EMP1, WATCH, 1, kind="send")
        with pytest.raises(ValidationError):
            inventory_service.debit(EMP1, WATCH, 1, kind="receive")

    def test_unknown_holder_or_gift(self, data_store):
        with pytest.raises(NotFound):
            inventory_service.credit(999, WATCH, 1)
        with pytest.raises(NotFound):
            inventory_service.credit(EMP1, 999, 1)

    def test_send_gift_defaults(self, data_store):
        inventory_service.send_gift(EMP2, EARPHONES, 2)

        last = data_store.snapshot().ledger[-1]
        assert last.kind == "send"
        assert last.actor_id == EMP2
        assert last.reason == inventory_service.DEFAULT_SEND_REASON
        assert balance(EMP2, EARPHONES) == 4


class TestTransfer:
    def test_transfer_moves_units_and_cross_references(self, data_store):
        source, target = inventory_service.transfer(EMP1, EMP2, TUMBLER, 3, reason="Rebalance", actor_id=MANAGER)

        assert (source.quantity, target.quantity) == (5, 3)
        out_entry, in_entry = data_store.snapshot().ledger[-2:]
        assert (out_entry.kind, out_entry.holder_id, out_entry.quantity) == ("transfer-out", EMP1, -3)
        assert (in_entry.kind, in_entry.holder_id, in_entry.quantity) == ("receive", EMP2, 3)
        assert out_entry.counterparty_holder_id == EMP2
        assert in_entry.counterparty_holder_id == EMP1
        assert out_entry.created_at == in_entry.created_at

    def test_transfer_to_self_is_unknown_target(self, data_store):
        with pytest.raises(UnknownTarget):
            inventory_service.transfer(EMP1, EMP1, WATCH, 1)

    def test_transfer_to_missing_or_inactive_target(self, data_store):
        with pytest.raises(UnknownTarget):
            inventory_service.transfer(EMP1, 999, WATCH, 1)

        holder_service.set_holder_active(EMP2, False)
        with pytest.raises(UnknownTarget):
            inventory_service.transfer(EMP1, EMP2, WATCH, 1)
        assert balance(EMP1, WATCH) == 5

    def test_insufficient_source_changes_neither_side(self, data_store):
        before = _ledger_len()
        with pytest.raises(InsufficientBalance):
            inventory_service.transfer(EMP2, EMP1, PERFUME, 10)
        assert balance(EMP2, PERFUME) == 4
        assert balance(EMP1, PERFUME) == 0
        assert _ledger_len() == before

    def test_failed_credit_rolls_back_debit(self, data_store, monkeypatch):
        before = _ledger_len()

        def failing_credit(*args, **kwargs):
            raise RuntimeError("credit side failed")

        monkeypatch.setattr(inventory_service, "_credit_inner", failing_credit)

        with pytest.raises(RuntimeError):
            inventory_service.transfer(EMP1, EMP2, WATCH, 2)

        assert balance(EMP1, WATCH) == 5
        assert balance(EMP2, WATCH) == 3
        assert _ledger_len() == before
        assert data_store.reload().inventory_record(EMP1, WATCH).quantity == 5


class TestManualAdjust:
    def test_adjust_records_signed_delta(self, data_store):
        inventory_service.manual_adjust(EMP1, COFFEE, 4, reason="Stock count", actor_id=MANAGER)
        inventory_service.manual_adjust(EMP1, COFFEE, 9, actor_id=MANAGER)

        deltas = [e.quantity for e in data_store.snapshot().ledger_for(EMP1, COFFEE)]
        assert deltas == [10, -6, 5]
        assert balance(EMP1, COFFEE) == 9

    def test_zero_delta_is_recorded(self, data_store):
        before = _ledger_len()
        inventory_service.manual_adjust(EMP1, WATCH, 5, actor_id=MANAGER)

        assert _ledger_len() == before + 1
        last = data_store.snapshot().ledger[-1]
        assert (last.kind, last.quantity) == ("adjust", 0)

    def test_adjust_creates_missing_record(self, data_store):
        record = inventory_service.manual_adjust(MANAGER, COFFEE, 2, actor_id=MANAGER)
        assert record.quantity == 2
        assert inventory_service.reconcile() == []

    def test_negative_quantity_rejected(self, data_store):
        with pytest.raises(InvalidAmount):
            inventory_service.manual_adjust(EMP1, WATCH, -1)
        assert balance(EMP1, WATCH) == 5


class TestRemoveRecord:
    def test_remove_writes_cleanup_entry(self, data_store):
        removed = inventory_service.remove_record(EMP1, COFFEE, actor_id=MANAGER)

        assert removed.quantity == 10
        data = data_store.snapshot()
        assert data.inventory_record(EMP1, COFFEE) is None
        last = data.ledger[-1]
        assert (last.kind, last.quantity, last.actor_id) == ("delete-cleanup", -10, MANAGER)
        assert sum(e.quantity for e in data.ledger_for(EMP1, COFFEE)) == 0
        assert inventory_service.reconcile() == []

    def test_remove_missing_record(self, data_store):
        with pytest.raises(NotFound):
            inventory_service.remove_record(MANAGER, WATCH)


class TestReconcile:
    def test_seed_dataset_reconciles(self, data_store):
        assert inventory_service.reconcile() == []

    def test_reports_tampered_balance(self, data_store):
        with data_store.transaction() as data:
            data.inventory_record(EMP2, WATCH).quantity = 30

        assert inventory_service.reconcile() == [
            {"holder_id": EMP2, "gift_id": WATCH, "quantity": 30, "ledger_sum": 3},
        ]

    def test_random_operation_sequence_keeps_invariant(self, data_store):
        rng = random.Random(20240601)
        holders = [EMP1, EMP2, MANAGER]
        gifts = [WATCH, COFFEE, TUMBLER, EARPHONES, PERFUME]

        for _ in range(60):
            op = rng.choice(["credit", "debit", "transfer", "adjust"])
            holder = rng.choice(holders)
            gift = rng.choice(gifts)
            amount = rng.randint(1, 6)
            try:
                if op == "credit":
                    inventory_service.credit(holder, gift, amount)
                elif op == "debit":
                    inventory_service.debit(holder, gift, amount)
                elif op == "transfer":
                    inventory_service.transfer(holder, rng.choice(holders), gift, amount)
                else:
                    inventory_service.manual_adjust(holder, gift, rng.randint(0, 12))
            except (InsufficientBalance, UnknownTarget):
                pass

        data = data_store.snapshot()
        assert inventory_service.reconcile(data) == []
        assert all(record.quantity >= 0 for record in data.inventory)
        assert inventory_service.reconcile(data_store.reload()) == []
