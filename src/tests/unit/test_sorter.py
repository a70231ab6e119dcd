# src/tests/unit/test_sorter.py

import pytest
from datetime import date
from decimal import Decimal

from src.core.enums.transaction_type import TransactionType
from src.core.models.transaction import BonusEvent, TransactionEvent
from src.logic.sorter import TransactionSorter, merge_sort_key

@pytest.fixture
def sorter():
    return TransactionSorter()

def txn(record_id, event_date, sequence_id=0, category=TransactionType.BUY):
    return TransactionEvent(
        record_id=record_id,
        account_id="8800046",
        security_name="Astral Ltd.",
        event_date=event_date,
        sequence_id=sequence_id,
        category=category,
        quantity=Decimal("10"),
        price=Decimal("10")
    )

def bonus(record_id, effective_date, sequence_id=0, undated=False):
    return BonusEvent(
        record_id=record_id,
        company_name="Astral Ltd.",
        ex_date=None if undated else effective_date,
        effective_date=effective_date,
        quantity=Decimal("5"),
        sequence_id=sequence_id
    )

def test_sort_by_date(sorter):
    events = sorter.sort_transactions(
        [txn("t2", date(2023, 2, 1)), txn("t1", date(2023, 1, 1))],
        [bonus("b1", date(2023, 1, 15))]
    )
    assert [e.record_id for e in events] == ["t1", "b1", "t2"]

def test_transactions_before_bonuses_on_same_date(sorter):
    day = date(2023, 1, 15)
    events = sorter.sort_transactions(
        [txn("t1", day, sequence_id=9)],
        [bonus("b1", day, sequence_id=0)]
    )
    assert [e.record_id for e in events] == ["t1", "b1"]

def test_sequence_id_breaks_same_date_ties(sorter):
    day = date(2023, 1, 15)
    events = sorter.sort_transactions(
        [txn("t3", day, 3), txn("t1", day, 1), txn("t2", day, 2)],
        [bonus("b1", day, 1), bonus("b0", day, 0)]
    )
    assert [e.record_id for e in events] == ["t1", "t2", "t3", "b0", "b1"]

def test_identical_keys_keep_input_order(sorter):
    day = date(2023, 1, 15)
    events = sorter.sort_transactions([txn("first", day, 1), txn("second", day, 1)], [])
    assert [e.record_id for e in events] == ["first", "second"]

def test_sentinel_dated_bonus_sorts_first(sorter):
    sentinel = date(1900, 1, 1)
    events = sorter.sort_transactions(
        [txn("t1", date(2020, 5, 5))],
        [bonus("undated", sentinel, undated=True)]
    )
    assert events[0].record_id == "undated"

def test_inputs_are_not_mutated(sorter):
    transactions = [txn("t2", date(2023, 2, 1)), txn("t1", date(2023, 1, 1))]
    sorter.sort_transactions(transactions, [])
    assert [t.record_id for t in transactions] == ["t2", "t1"]

def test_empty_inputs(sorter):
    assert sorter.sort_transactions([], []) == []

def test_merge_sort_key():
    assert merge_sort_key(txn("t", date(2023, 1, 1), 4)) == (date(2023, 1, 1), 0, 4)
    assert merge_sort_key(bonus("b", date(2023, 1, 1), 2)) == (date(2023, 1, 1), 1, 2)
