# src/logic/cost_calculator.py

from decimal import Decimal
from typing import Protocol

from src.core.enums.transaction_type import TransactionType
from src.core.models.ledger import Snapshot
from src.core.models.transaction import BonusEvent, TransactionEvent
from src.logic.fifo_ledger import FIFOLedger
from src.logic.sorter import LedgerEvent


class LedgerEventStrategy(Protocol):
    """
    Protocol (interface) for applying one kind of ledger event.
    Each strategy mutates the ledger as its event kind requires and returns
    the snapshot taken right after the event.
    """
    def apply(self, event: LedgerEvent, ledger: FIFOLedger) -> Snapshot:
        ...


class BuyStrategy:
    """Strategy for BUY events: a new lot at the resolved price."""
    def apply(self, event: TransactionEvent, ledger: FIFOLedger) -> Snapshot:
        ledger.add_lot(event.record_id, event.quantity, event.price)
        return ledger.snapshot()


class BonusStrategy:
    """Strategy for bonus issues: a new lot at zero cost."""
    def apply(self, event: BonusEvent, ledger: FIFOLedger) -> Snapshot:
        ledger.add_lot(event.record_id, event.quantity, Decimal(0))
        return ledger.snapshot()


class SellStrategy:
    """Strategy for SELL events: FIFO consumption and realized profit/loss."""
    def apply(self, event: TransactionEvent, ledger: FIFOLedger) -> Snapshot:
        """
        Realized P/L = quantity x price - cost of the lots consumed. Quantity
        sold beyond the open lots contributes sale value but no cost.
        """
        if event.quantity == Decimal(0):
            return ledger.snapshot(
                realized_pl=Decimal(0),
                cost_consumed=Decimal(0),
                unmatched_qty=Decimal(0)
            )

        sale_value = event.quantity * event.price
        cost_consumed, _, unmatched_qty = ledger.consume_sell_quantity(event.quantity)
        return ledger.snapshot(
            realized_pl=sale_value - cost_consumed,
            cost_consumed=cost_consumed,
            unmatched_qty=unmatched_qty
        )


class CarryForwardStrategy:
    """
    Strategy for DIVIDEND and OTHER events. The lot queue is left untouched;
    the snapshot repeats the prior state.
    """
    def apply(self, event: TransactionEvent, ledger: FIFOLedger) -> Snapshot:
        return ledger.snapshot()


class CostCalculator:
    """
    Applies the appropriate strategy based on the event kind: one fold step
    process(ledger, event) -> snapshot.
    """

    def __init__(self):
        self._strategies: dict[TransactionType, LedgerEventStrategy] = {
            TransactionType.BUY: BuyStrategy(),
            TransactionType.SELL: SellStrategy(),
            TransactionType.DIVIDEND: CarryForwardStrategy(),
            TransactionType.OTHER: CarryForwardStrategy(),
        }
        self._bonus_strategy = BonusStrategy()
        self._default_strategy = CarryForwardStrategy()

    def process(self, event: LedgerEvent, ledger: FIFOLedger) -> Snapshot:
        """
        Delegates the event to its strategy and returns the resulting snapshot.
        """
        if isinstance(event, BonusEvent):
            return self._bonus_strategy.apply(event, ledger)
        strategy = self._strategies.get(event.category, self._default_strategy)
        return strategy.apply(event, ledger)
