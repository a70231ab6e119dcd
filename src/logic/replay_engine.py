# src/logic/replay_engine.py

import logging
from dataclasses import dataclass, field
from decimal import Decimal, localcontext
from typing import Iterable, Optional

from src.core.config.settings import settings
from src.core.enums.output_mode import OutputMode
from src.core.enums.transaction_type import TransactionType
from src.core.models.ledger import HoldingSummary, LedgerEntry, Snapshot
from src.core.models.transaction import BonusEvent
from src.logic.cost_calculator import CostCalculator
from src.logic.fifo_ledger import FIFOLedger
from src.logic.sorter import LedgerEvent

logger = logging.getLogger(__name__)


def build_entry(event: LedgerEvent, snapshot: Snapshot) -> LedgerEntry:
    """Pairs an event with the snapshot taken after it, as one history row."""
    is_bonus = isinstance(event, BonusEvent)
    price = event.price
    return LedgerEntry(
        event_date=event.event_date,
        type=event.display_type,
        category=None if is_bonus else event.category,
        is_bonus=is_bonus,
        sequence_id=event.sequence_id,
        quantity=event.quantity,
        price=price,
        total_amount=event.quantity * price,
        holding=snapshot.holding_qty,
        cost_basis=snapshot.cost_basis,
        weighted_avg_price=snapshot.weighted_avg_price,
        avg_cost_of_holdings=snapshot.avg_cost_of_holdings,
        realized_pl=snapshot.realized_pl,
        unmatched_qty=snapshot.unmatched_qty
    )


@dataclass
class HoldingAccumulator:
    """
    Running totals of one replay. Fed with every (event, snapshot) pair in both
    output modes, so the summary never depends on how the replay was consumed.
    """
    total_buy_qty: Decimal = Decimal(0)
    total_sell_qty: Decimal = Decimal(0)
    total_bonus_qty: Decimal = Decimal(0)
    total_buy_amount: Decimal = Decimal(0)
    total_sell_amount: Decimal = Decimal(0)
    profit: Decimal = Decimal(0)
    unmatched_sell_qty: Decimal = Decimal(0)
    last_snapshot: Optional[Snapshot] = None

    def add(self, event: LedgerEvent, snapshot: Snapshot):
        self.last_snapshot = snapshot
        if isinstance(event, BonusEvent):
            self.total_bonus_qty += event.quantity
        elif event.category == TransactionType.BUY:
            self.total_buy_qty += event.quantity
            self.total_buy_amount += event.quantity * event.price
        elif event.category == TransactionType.SELL:
            self.total_sell_qty += event.quantity
            self.total_sell_amount += event.quantity * event.price
            self.profit += snapshot.realized_pl or Decimal(0)
            self.unmatched_sell_qty += snapshot.unmatched_qty or Decimal(0)

    def summary(self, account_id: str, security_name: str, security_code: Optional[str]) -> HoldingSummary:
        final = self.last_snapshot or FIFOLedger().snapshot()
        avg_sell_price = (
            self.total_sell_amount / self.total_sell_qty if self.total_sell_qty > 0 else Decimal(0)
        )
        return HoldingSummary(
            account_id=account_id,
            security_name=security_name,
            security_code=security_code,
            current_holding=final.holding_qty,
            total_buy_qty=self.total_buy_qty,
            total_sell_qty=self.total_sell_qty,
            total_bonus_qty=self.total_bonus_qty,
            total_buy_amount=self.total_buy_amount,
            total_sell_amount=self.total_sell_amount,
            cost_basis=final.cost_basis,
            weighted_average_buy_price=final.weighted_avg_price,
            avg_sell_price=avg_sell_price,
            profit=self.profit,
            unmatched_sell_qty=self.unmatched_sell_qty
        )


@dataclass
class ReplayResult:
    summary: HoldingSummary
    entries: list[LedgerEntry] = field(default_factory=list)


class LedgerReplayEngine:
    """
    Replays a merged, ordered event sequence through a fresh FIFO ledger.
    This is the one implementation behind the history stream, the holdings
    summary and the weighted average cost report.
    """
    def __init__(self, cost_calculator: Optional[CostCalculator] = None, precision: Optional[int] = None):
        self._cost_calculator = cost_calculator or CostCalculator()
        self._precision = precision or settings.DECIMAL_PRECISION

    def replay(
        self,
        events: Iterable[LedgerEvent],
        account_id: str,
        security_name: str,
        security_code: Optional[str] = None,
        mode: OutputMode = OutputMode.EMIT_STREAM
    ) -> ReplayResult:
        """
        Folds the events into snapshots starting from an empty lot queue.
        EMIT_STREAM keeps one LedgerEntry per event; EMIT_SUMMARY_ONLY keeps
        only the running totals.
        """
        label = f"{account_id}/{security_name}"
        ledger = FIFOLedger(label=label)
        accumulator = HoldingAccumulator()
        entries: list[LedgerEntry] = []
        event_count = 0

        with localcontext() as ctx:
            ctx.prec = self._precision
            for event in events:
                snapshot = self._cost_calculator.process(event, ledger)
                accumulator.add(event, snapshot)
                if mode == OutputMode.EMIT_STREAM:
                    entries.append(build_entry(event, snapshot))
                event_count += 1
            summary = accumulator.summary(account_id, security_name, security_code)

        logger.debug(f"LedgerReplayEngine: Replayed {event_count} events for {label}. Holding: {summary.current_holding}, Profit: {summary.profit}.")
        return ReplayResult(summary=summary, entries=entries)
