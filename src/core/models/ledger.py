# src/core/models/ledger.py

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.core.enums.transaction_type import TransactionType

_OUTPUT_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True
)


class Snapshot(BaseModel):
    """
    Point-in-time state of one security's ledger, emitted after every event.
    Sell-only fields are None for every other event kind.
    """
    holding_qty: Decimal = Field(..., description="Sum of open lot quantities")
    cost_basis: Decimal = Field(..., description="Sum of quantity x unit cost over open lots")
    weighted_avg_price: Decimal = Field(..., description="cost_basis / holding_qty, 0 when nothing is held")
    avg_cost_of_holdings: Decimal = Field(..., description="holding_qty x weighted_avg_price")
    realized_pl: Optional[Decimal] = Field(None, description="Sale value minus FIFO cost consumed (SELL only)")
    cost_consumed: Optional[Decimal] = Field(None, description="Cost of lots consumed by the sale (SELL only)")
    unmatched_qty: Optional[Decimal] = Field(None, description="Sold quantity with no open lot behind it (SELL only)")

    model_config = _OUTPUT_CONFIG


class LedgerEntry(BaseModel):
    """
    One row of the transaction-history stream: the event as displayed plus the
    ledger snapshot taken right after it.
    """
    event_date: date = Field(..., alias="date")
    type: str = Field(..., description="Broker type code as displayed, BONUS for bonus issues")
    category: Optional[TransactionType] = Field(None, description="Ledger category, None for bonus issues")
    is_bonus: bool = False
    sequence_id: int = 0
    quantity: Decimal
    price: Decimal
    total_amount: Decimal
    holding: Decimal
    cost_basis: Decimal
    weighted_avg_price: Decimal
    avg_cost_of_holdings: Decimal
    realized_pl: Optional[Decimal] = None
    unmatched_qty: Optional[Decimal] = None

    model_config = _OUTPUT_CONFIG


class HoldingSummary(BaseModel):
    """
    Per-security roll-up of a full ledger replay.
    """
    account_id: str
    security_name: str
    security_code: Optional[str] = None
    current_holding: Decimal = Decimal(0)
    total_buy_qty: Decimal = Decimal(0)
    total_sell_qty: Decimal = Decimal(0)
    total_bonus_qty: Decimal = Decimal(0)
    total_buy_amount: Decimal = Decimal(0)
    total_sell_amount: Decimal = Decimal(0)
    cost_basis: Decimal = Decimal(0)
    weighted_average_buy_price: Decimal = Field(default=Decimal(0), description="FIFO weighted average price of the open lots")
    avg_sell_price: Decimal = Decimal(0)
    profit: Decimal = Field(default=Decimal(0), description="Sum of realized profit/loss over all sales")
    unmatched_sell_qty: Decimal = Field(default=Decimal(0), description="Quantity sold beyond tracked lots")

    model_config = _OUTPUT_CONFIG

    @property
    def has_activity(self) -> bool:
        return (
            self.total_buy_qty > 0 or
            self.total_sell_qty > 0 or
            self.total_bonus_qty > 0
        )


class WeightedAverageCost(BaseModel):
    """Cost report line for one security."""
    account_id: str
    security_name: str
    security_code: Optional[str] = None
    holding: Decimal
    cost_basis: Decimal
    weighted_avg_price: Decimal

    model_config = _OUTPUT_CONFIG


class SecurityHolder(BaseModel):
    """An account currently holding a given security."""
    account_id: str
    security_name: str
    current_holding: Decimal
    weighted_avg_price: Decimal

    model_config = _OUTPUT_CONFIG
