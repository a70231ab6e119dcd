# src/logic/fifo_ledger.py

import logging
from collections import deque
from decimal import Decimal
from typing import Deque, Optional, Tuple

from src.core.models.ledger import Snapshot
from src.logic.cost_objects import Lot

logger = logging.getLogger(__name__)


class FIFOLedger:
    """
    Open-lot queue of one (account, security) replay, oldest lot first.
    This queue is the only mutable state of the engine; a ledger is created
    empty for every replay and discarded afterwards.
    """
    def __init__(self, label: str = ""):
        self._label = label
        self._open_lots: Deque[Lot] = deque()

    @property
    def open_lots(self) -> Tuple[Lot, ...]:
        return tuple(self._open_lots)

    @property
    def holding_qty(self) -> Decimal:
        return sum((lot.quantity for lot in self._open_lots), Decimal(0))

    @property
    def cost_basis(self) -> Decimal:
        return sum((lot.cost for lot in self._open_lots), Decimal(0))

    def add_lot(self, source_id: str, quantity: Decimal, unit_cost: Decimal):
        """
        Appends a lot to the back of the queue. Zero quantities are ignored.
        """
        if quantity <= Decimal(0):
            logger.debug(f"FIFO [{self._label}]: Skipping zero quantity lot from {source_id}.")
            return
        self._open_lots.append(Lot(source_id=source_id, quantity=quantity, unit_cost=unit_cost))
        logger.debug(f"FIFO [{self._label}]: Added lot {source_id} (Qty: {quantity}, Unit cost: {unit_cost}). Open lots: {len(self._open_lots)}.")

    def consume_sell_quantity(self, sell_quantity: Decimal) -> Tuple[Decimal, Decimal, Decimal]:
        """
        Consumes quantity from the front of the queue for a sale.
        Returns (cost consumed, quantity consumed, unmatched quantity). The
        unmatched quantity is whatever the open lots could not cover; it adds
        no cost and leaves the holding at zero.
        """
        remaining = sell_quantity
        cost_consumed = Decimal(0)
        consumed_quantity = Decimal(0)

        while remaining > 0 and self._open_lots:
            current_lot = self._open_lots[0]
            taken, cost = current_lot.consume(remaining)
            cost_consumed += cost
            consumed_quantity += taken
            remaining -= taken
            logger.debug(f"  FIFO [{self._label}]: Took {taken} from lot {current_lot.source_id} at {current_lot.unit_cost}. Lot remaining: {current_lot.quantity}.")
            if current_lot.is_exhausted:
                self._open_lots.popleft()

        if remaining > 0:
            logger.warning(
                f"FIFO [{self._label}]: Sale of {sell_quantity} exceeds tracked holdings by {remaining}; "
                f"excess treated as sold from an untracked opening balance at zero cost."
            )
        return cost_consumed, consumed_quantity, remaining

    def snapshot(
        self,
        realized_pl: Optional[Decimal] = None,
        cost_consumed: Optional[Decimal] = None,
        unmatched_qty: Optional[Decimal] = None
    ) -> Snapshot:
        """
        Captures holding, cost basis and weighted average price of the open lots.
        """
        holding_qty = self.holding_qty
        cost_basis = self.cost_basis
        weighted_avg_price = cost_basis / holding_qty if holding_qty > 0 else Decimal(0)
        return Snapshot(
            holding_qty=holding_qty,
            cost_basis=cost_basis,
            weighted_avg_price=weighted_avg_price,
            avg_cost_of_holdings=holding_qty * weighted_avg_price,
            realized_pl=realized_pl,
            cost_consumed=cost_consumed,
            unmatched_qty=unmatched_qty
        )
