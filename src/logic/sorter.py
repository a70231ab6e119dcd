# src/logic/sorter.py

from datetime import date
from typing import Union

from src.core.models.transaction import BonusEvent, TransactionEvent

LedgerEvent = Union[TransactionEvent, BonusEvent]

_TRANSACTION_RANK = 0
_BONUS_RANK = 1


def merge_sort_key(event: LedgerEvent) -> tuple[date, int, int]:
    """(effective date, kind rank, sequence id) for one ledger event."""
    if isinstance(event, BonusEvent):
        return (event.effective_date, _BONUS_RANK, event.sequence_id)
    return (event.event_date, _TRANSACTION_RANK, event.sequence_id)


class TransactionSorter:
    """
    Responsible for merging the trade events and the bonus events of one
    (account, security) pair into a single replay order.
    """

    def sort_transactions(
        self,
        transactions: list[TransactionEvent],
        bonuses: list[BonusEvent]
    ) -> list[LedgerEvent]:
        """
        Merges transaction and bonus events and sorts them.

        Sorting Rules:
        1. Primary sort: effective date ascending (bonus ex-date, or its sentinel date).
        2. Secondary sort: transactions before bonuses on the same date.
        3. Tertiary sort: source sequence id for transactions, insertion order for bonuses.

        Args:
            transactions: Normalized transaction events of one security.
            bonuses: Bonus events already matched to that security.

        Returns:
            A single, sorted list of ledger events.
        """
        all_events: list[LedgerEvent] = [*transactions, *bonuses]

        # Python's sort is stable, so events with identical keys keep their input order
        all_events.sort(key=merge_sort_key)

        return all_events
