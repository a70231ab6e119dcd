# src/core/models/request.py

from datetime import date
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from src.core.enums.output_mode import HoldingsView
from src.core.models.transaction import parse_record_date

_EXAMPLE_TRANSACTIONS = [
    {
        "accountId": "8800046",
        "securityName": "Astral Ltd.",
        "securityCode": "ASTRAL",
        "date": "2023-01-02",
        "rawTypeCode": "BY",
        "quantity": 100,
        "rate": 10.0,
        "netRate": 10.0,
        "netAmount": -1000.0,
        "sequenceId": 1
    },
    {
        "accountId": "8800046",
        "securityName": "Astral Ltd.",
        "date": "2023-01-05",
        "rawTypeCode": "BY",
        "quantity": 50,
        "netRate": 12.0,
        "netAmount": -600.0,
        "sequenceId": 2
    },
    {
        "accountId": "8800046",
        "securityName": "Astral Ltd.",
        "date": "2023-02-10",
        "rawTypeCode": "SL",
        "quantity": 120,
        "netRate": 15.0,
        "netAmount": 1800.0,
        "sequenceId": 3
    }
]

_EXAMPLE_BONUSES = [
    {
        "companyName": "ASTRAL LIMITED",
        "exDate": "15-01-2023",
        "bonusShare": 20,
        "accountId": None
    }
]

_REQUEST_CONFIG = dict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra='ignore' # Ignore extra fields in input
)

class RecordsMixin(BaseModel):
    """
    Fully materialized input records. Rows are kept as raw dictionaries so that
    a malformed row is reported individually instead of failing the request.
    """
    transactions: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Raw transaction rows (date, rawTypeCode, quantity, rate, netRate, netAmount, sequenceId)."
    )
    bonuses: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Raw bonus rows (companyName, exDate, bonusShare, accountId)."
    )
    as_of_date: Optional[date] = Field(None, description="Inclusive replay cutoff; all history when omitted.")

    model_config = ConfigDict(**_REQUEST_CONFIG)

    @field_validator("as_of_date", mode="before")
    @classmethod
    def _parse_as_of_date(cls, value: Any) -> Optional[date]:
        return parse_record_date(value)

def _account_id_to_str(value: Any) -> Any:
    return str(value).strip() if isinstance(value, (int, str)) else value

AccountId = Annotated[str, BeforeValidator(_account_id_to_str), StringConstraints(min_length=1)]

class TransactionHistoryRequest(RecordsMixin):
    account_id: AccountId
    security_name: str = Field(..., min_length=1)
    security_code: Optional[str] = Field(None, description="Display only; echoed in the response, never used to match bonuses.")

    model_config = ConfigDict(
        **_REQUEST_CONFIG,
        json_schema_extra={
            "example": {
                "accountId": "8800046",
                "securityName": "Astral Ltd.",
                "asOfDate": "2023-12-31",
                "transactions": _EXAMPLE_TRANSACTIONS,
                "bonuses": _EXAMPLE_BONUSES
            }
        }
    )

class HoldingsSummaryRequest(RecordsMixin):
    account_id: AccountId
    view: HoldingsView = Field(HoldingsView.ALL_TRADED, description="ACTIVE or ALL_TRADED")

    model_config = ConfigDict(
        **_REQUEST_CONFIG,
        json_schema_extra={
            "example": {
                "accountId": "8800046",
                "view": "ACTIVE",
                "transactions": _EXAMPLE_TRANSACTIONS,
                "bonuses": _EXAMPLE_BONUSES
            }
        }
    )

class WeightedAverageCostRequest(RecordsMixin):
    account_id: AccountId
    security_name: Optional[str] = Field(None, description="Restrict the report to one security.")

    model_config = ConfigDict(**_REQUEST_CONFIG)

class SecurityHoldersRequest(RecordsMixin):
    security_name: str = Field(..., min_length=1)

    model_config = ConfigDict(**_REQUEST_CONFIG)

class BonusMatchRequest(BaseModel):
    company_name: str = Field(..., min_length=1)
    account_id: Optional[AccountId] = None
    security_code: Optional[str] = None
    bonuses: list[dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(
        **_REQUEST_CONFIG,
        json_schema_extra={
            "example": {
                "companyName": "Astral Ltd.",
                "accountId": "8800046",
                "bonuses": _EXAMPLE_BONUSES
            }
        }
    )

