"""
Test suite for the ledger store

Covers validated adds, deletes, filtered views, and balance derivation.
"""

import threading
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ledger_core.exceptions import (
    InvalidAmountError,
    InvalidCategoryError,
    InvalidKindError,
    RecordNotFoundError,
    ValidationError,
)
from ledger_core.models import EntryFilter, EntryKind
from ledger_core.services import LedgerStore, compute_balance


FIXED_NOW = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return LedgerStore(clock=lambda: FIXED_NOW)


def _expected_balance(store):
    income = sum((e.amount for e in store.entries if e.kind is EntryKind.INCOME), Decimal("0"))
    expense = sum((e.amount for e in store.entries if e.kind is EntryKind.EXPENSE), Decimal("0"))
    return income - expense


class TestAddEntry:
    """Validated creation of entries"""

    def test_valid_candidate_appends_one_entry(self, store):
        balance = store.add_entry({
            "kind": "income",
            "category": "Salary",
            "amount": 1000,
            "description": "October pay",
        })

        assert len(store) == 1
        entry = store.entries[0]
        assert entry.kind is EntryKind.INCOME
        assert entry.category == "Salary"
        assert entry.amount == Decimal("1000.00")
        assert entry.description == "October pay"
        assert entry.created_at == FIXED_NOW
        assert balance == Decimal("1000.00")

    def test_missing_description_defaults_to_empty(self, store):
        store.add_entry({"kind": "expense", "category": "Food", "amount": "12.5"})

        assert store.entries[0].description == ""
        assert store.entries[0].amount == Decimal("12.50")

    def test_ids_are_unique(self, store):
        for _ in range(20):
            store.add_entry({"kind": "expense", "category": "Transport", "amount": 3})

        ids = [entry.id for entry in store.entries]
        assert len(set(ids)) == 20

    def test_insertion_order_preserved(self, store):
        store.add_entry({"kind": "expense", "category": "Food", "amount": 1})
        store.add_entry({"kind": "income", "category": "Freelance", "amount": 2})
        store.add_entry({"kind": "expense", "category": "Housing", "amount": 3})

        assert [e.category for e in store.entries] == ["Food", "Freelance", "Housing"]

    @pytest.mark.parametrize(
        "candidate",
        [
            {"kind": "expense", "category": "Food", "amount": 0},
            {"kind": "expense", "category": "Food", "amount": -5},
            {"kind": "expense", "category": "Food", "amount": "abc"},
            {"kind": "expense", "category": "Food", "amount": None},
            {"kind": "expense", "category": "Food", "amount": float("nan")},
            {"kind": "expense", "category": "Food", "amount": float("inf")},
            {"kind": "expense", "category": "Food", "amount": True},
            {"kind": "expense", "category": "", "amount": 50},
            {"kind": "expense", "category": None, "amount": 50},
            {"kind": "expense", "category": "Salary", "amount": 50},
            {"kind": "income", "category": "Food", "amount": 50},
            {"kind": "transfer", "category": "Other", "amount": 50},
        ],
    )
    def test_invalid_candidate_is_silently_rejected(self, store, candidate):
        store.add_entry({"kind": "income", "category": "Salary", "amount": 100})
        before_entries = store.entries
        before_balance = store.balance

        balance = store.add_entry(candidate)

        assert store.entries == before_entries
        assert store.balance == before_balance
        assert balance == before_balance

    def test_strict_mode_raises_typed_errors(self, store):
        with pytest.raises(InvalidAmountError):
            store.add_entry({"kind": "expense", "category": "Food", "amount": 0}, strict=True)
        with pytest.raises(InvalidCategoryError):
            store.add_entry({"kind": "expense", "category": "", "amount": 5}, strict=True)
        with pytest.raises(InvalidKindError):
            store.add_entry({"kind": "gift", "category": "Other", "amount": 5}, strict=True)
        assert len(store) == 0

    def test_other_is_allowed_for_both_kinds(self, store):
        store.add_entry({"kind": "income", "category": "Other", "amount": 10})
        store.add_entry({"kind": "expense", "category": "Other", "amount": 4})

        assert len(store) == 2
        assert store.balance == Decimal("6.00")

    def test_record_entry_returns_stored_entry(self, store):
        entry = store.record_entry({"kind": "expense", "category": "Utilities", "amount": "40"})

        assert store.entries == (entry,)
        assert store.get_entry(entry.id) is entry

    def test_record_entry_raises_on_invalid(self, store):
        with pytest.raises(ValidationError):
            store.record_entry({"kind": "expense", "category": "Rent", "amount": 40})
        assert len(store) == 0

    def test_sub_cent_amount_is_accepted(self, store):
        balance = store.add_entry({"kind": "income", "category": "Salary", "amount": 0.004})

        assert len(store) == 1
        assert store.entries[0].amount == Decimal("0.004")
        assert balance == Decimal("0.004")

    def test_amount_is_stored_unrounded(self, store):
        store.add_entry({"kind": "expense", "category": "Food", "amount": "10.555"})

        entry = store.entries[0]
        assert entry.amount == Decimal("10.555")
        assert entry.to_dict()["amount"] == "10.56"

    def test_very_large_amount_is_accepted(self, store):
        store.add_entry({"kind": "income", "category": "Investments", "amount": 10**27})

        assert len(store) == 1
        assert store.balance == Decimal(10**27)

    def test_description_is_kept_verbatim(self, store):
        store.add_entry({"kind": "income", "category": "Salary", "amount": 5, "description": "  pay  "})

        assert store.entries[0].description == "  pay  "


class TestDeleteEntry:
    """Removal of entries by id"""

    def test_delete_removes_only_that_entry(self, store):
        store.add_entry({"kind": "income", "category": "Salary", "amount": 100})
        store.add_entry({"kind": "expense", "category": "Food", "amount": 20})
        store.add_entry({"kind": "expense", "category": "Housing", "amount": 30})
        first, middle, last = store.entries

        balance = store.delete_entry(middle.id)

        assert store.entries == (first, last)
        assert balance == Decimal("70.00")

    def test_delete_unknown_id_is_noop(self, store):
        store.add_entry({"kind": "income", "category": "Salary", "amount": 100})
        before = store.entries

        balance = store.delete_entry("does-not-exist")

        assert store.entries == before
        assert balance == Decimal("100.00")

    def test_get_entry_raises_for_unknown_id(self, store):
        with pytest.raises(RecordNotFoundError):
            store.get_entry("missing")


class TestFilterEntries:
    """Filtered, read-only views"""

    @pytest.fixture
    def populated(self, store):
        store.add_entry({"kind": "income", "category": "Salary", "amount": 1000})
        store.add_entry({"kind": "expense", "category": "Food", "amount": 200})
        store.add_entry({"kind": "income", "category": "Investments", "amount": 50})
        store.add_entry({"kind": "expense", "category": "Entertainment", "amount": 25})
        return store

    def test_all_returns_everything_in_order(self, populated):
        assert populated.filter_entries("all") == list(populated.entries)
        assert populated.filter_entries() == list(populated.entries)

    def test_income_only(self, populated):
        result = populated.filter_entries("income")

        assert [e.category for e in result] == ["Salary", "Investments"]

    def test_expense_only(self, populated):
        result = populated.filter_entries(EntryFilter.EXPENSE)

        assert [e.category for e in result] == ["Food", "Entertainment"]

    def test_accepts_entry_kind(self, populated):
        assert populated.filter_entries(EntryKind.INCOME) == populated.filter_entries("income")

    def test_repeated_calls_are_equal_and_do_not_mutate(self, populated):
        before = populated.entries

        first = populated.filter_entries("expense")
        first.clear()
        second = populated.filter_entries("expense")

        assert len(second) == 2
        assert populated.filter_entries("expense") == second
        assert populated.entries == before

    def test_unknown_filter_raises(self, populated):
        with pytest.raises(ValidationError):
            populated.filter_entries("transfers")


class TestBalance:
    """Balance derivation"""

    def test_empty_ledger_balance_is_zero(self, store):
        assert store.balance == Decimal("0.00")
        assert compute_balance([]) == Decimal("0.00")

    def test_salary_food_scenario(self, store):
        assert store.add_entry({"kind": "income", "category": "Salary", "amount": 1000}) == Decimal("1000.00")
        assert store.add_entry({"kind": "expense", "category": "Food", "amount": 200}) == Decimal("800.00")

        food = store.filter_entries("expense")[0]
        assert store.delete_entry(food.id) == Decimal("1000.00")
        assert store.balance == Decimal("1000.00")

    def test_zero_amount_scenario(self, store):
        store.add_entry({"kind": "income", "category": "Salary", "amount": 1000})

        store.add_entry({"kind": "expense", "category": "Food", "amount": 0})

        assert len(store) == 1
        assert store.balance == Decimal("1000.00")

    def test_empty_category_scenario(self, store):
        store.add_entry({"kind": "expense", "category": "", "amount": 50})

        assert len(store) == 0
        assert store.balance == Decimal("0.00")

    def test_balance_tracks_signed_sum_through_mixed_operations(self, store):
        amounts = ["10.10", "3.33", "7", "0.01", "250.5", "99.99"]
        kinds = ["income", "expense", "expense", "income", "income", "expense"]
        categories = ["Freelance", "Food", "Transport", "Other", "Salary", "Utilities"]
        for kind, category, amount in zip(kinds, categories, amounts):
            store.add_entry({"kind": kind, "category": category, "amount": amount})
            assert store.balance == _expected_balance(store)

        for entry in list(store.entries)[::2]:
            store.delete_entry(entry.id)
            assert store.balance == _expected_balance(store)

        assert store.balance == compute_balance(store.entries)

    def test_totals(self, store):
        store.add_entry({"kind": "income", "category": "Salary", "amount": 500})
        store.add_entry({"kind": "expense", "category": "Food", "amount": 120})
        store.add_entry({"kind": "expense", "category": "Housing", "amount": 80})

        assert store.totals() == {"income": Decimal("500.00"), "expense": Decimal("200.00")}

    def test_balance_can_go_negative(self, store):
        store.add_entry({"kind": "expense", "category": "Housing", "amount": "750.25"})

        assert store.balance == Decimal("-750.25")


class TestConcurrentMutations:
    """Writers on several threads leave a consistent ledger"""

    def test_concurrent_adds_and_deletes(self, store):
        workers = 8
        per_worker = 50
        start = threading.Barrier(workers)

        def churn(index):
            start.wait()
            for n in range(per_worker):
                entry = store.record_entry({
                    "kind": "income" if n % 2 else "expense",
                    "category": "Other",
                    "amount": f"{index + 1}.{n:02d}",
                })
                # Every third entry is removed again by the thread that added it.
                if n % 3 == 0:
                    store.delete_entry(entry.id)

        threads = [threading.Thread(target=churn, args=(i,)) for i in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        kept_per_worker = sum(1 for n in range(per_worker) if n % 3 != 0)
        assert len(store) == workers * kept_per_worker
        assert len({entry.id for entry in store.entries}) == len(store)
        assert store.balance == compute_balance(store.entries)
        assert store.balance == _expected_balance(store)
