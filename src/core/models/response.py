# src/core/models/response.py

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.core.models.ledger import HoldingSummary, LedgerEntry, SecurityHolder, WeightedAverageCost
from src.core.models.transaction import RawBonusRecord

_RESPONSE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErroredRecord(BaseModel):
    """
    Represents an input record that could not be used, along with the reason.
    """
    record_id: str = Field(..., description="Identifier of the input record that failed.")
    error_reason: str = Field(..., description="The reason why the record was rejected.")

    model_config = _RESPONSE_CONFIG


class ErroredGroup(BaseModel):
    """
    Represents an (account, security) ledger whose replay failed. Other groups
    in the same request are unaffected.
    """
    account_id: str
    security_name: str
    error_reason: str

    model_config = _RESPONSE_CONFIG


class ErrorsMixin(BaseModel):
    errored_records: List[ErroredRecord] = Field(
        default_factory=list,
        description="Input records that failed parsing or were rejected."
    )
    errored_groups: List[ErroredGroup] = Field(
        default_factory=list,
        description="Securities whose ledger replay failed."
    )

    model_config = _RESPONSE_CONFIG


class TransactionHistoryResponse(ErrorsMixin):
    """
    Snapshot stream for one security plus the summary of the same replay.
    """
    account_id: str
    security_name: str
    security_code: Optional[str] = None
    entries: List[LedgerEntry] = Field(default_factory=list)
    summary: Optional[HoldingSummary] = None

    model_config = _RESPONSE_CONFIG


class HoldingsSummaryResponse(ErrorsMixin):
    account_id: str
    holdings: List[HoldingSummary] = Field(default_factory=list)

    model_config = _RESPONSE_CONFIG


class WeightedAverageCostResponse(ErrorsMixin):
    account_id: str
    costs: List[WeightedAverageCost] = Field(default_factory=list)

    model_config = _RESPONSE_CONFIG


class SecurityHoldersResponse(ErrorsMixin):
    security_name: str
    holders: List[SecurityHolder] = Field(default_factory=list)
    total_holding: Decimal = Decimal(0)

    model_config = _RESPONSE_CONFIG


class BonusMatchResponse(ErrorsMixin):
    company_name: str
    normalized_company_name: str
    account_id: Optional[str] = None
    matching_bonuses: List[RawBonusRecord] = Field(default_factory=list)

    model_config = _RESPONSE_CONFIG
