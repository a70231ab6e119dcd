# src/core/models/transaction.py

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, condecimal, field_validator
from pydantic.alias_generators import to_camel

from src.core.enums.transaction_type import TransactionType

_DAY_FIRST_DATE = re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{2,4})$")
_YEAR_FIRST_SLASH_DATE = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})(?:[T ].*)?$")


def coerce_decimal(value: Any) -> Decimal:
    """
    Converts a loosely typed numeric field into a Decimal.
    Missing, blank, non-numeric and non-finite values become Decimal(0).
    Thousands separators ("1,250.50") are accepted.
    """
    if value is None or isinstance(value, bool):
        return Decimal(0)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return Decimal(0)
        try:
            result = Decimal(text)
        except InvalidOperation:
            return Decimal(0)
    if not result.is_finite():
        return Decimal(0)
    return result


def parse_record_date(value: Any) -> Optional[date]:
    """
    Parses ISO and YYYY/MM/DD dates (time part ignored) and day-first
    DD-MM-YYYY / DD/MM/YY dates.
    Two-digit years pivot at 50. Returns None for blank input, raises ValueError
    for text that is not a valid date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    match = _DAY_FIRST_DATE.match(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        if year < 100:
            year = 2000 + year if year < 50 else 1900 + year
        return date(year, month, day)
    match = _YEAR_FIRST_SLASH_DATE.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return date(year, month, day)
    return date.fromisoformat(text[:10])


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class RawTransactionRecord(BaseModel):
    """
    A transaction row as delivered by the upstream transaction store.
    Numeric fields are coerced rather than validated: anything unreadable is 0.
    """
    account_id: str = Field(..., description="Brokerage account (client) identifier")
    security_name: str = Field(..., min_length=1, description="Security name as recorded by the broker")
    security_code: Optional[str] = Field(None, description="Security code, display only")
    trade_date: date = Field(..., alias="date", description="Trade date (ISO or DD-MM-YYYY)")
    raw_type_code: str = Field("", description="Free-form broker transaction type code")
    quantity: Decimal = Field(default=Decimal(0), description="Traded quantity")
    rate: Decimal = Field(default=Decimal(0), description="Gross rate per share")
    net_rate: Decimal = Field(default=Decimal(0), description="Rate per share net of charges")
    net_amount: Decimal = Field(default=Decimal(0), description="Net amount of the trade")
    sequence_id: int = Field(0, description="Source ordering, tie-break for same-date rows")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore'
    )

    @field_validator("account_id", mode="before")
    @classmethod
    def _account_id_to_str(cls, value: Any) -> Any:
        return str(value).strip() if isinstance(value, (int, str)) else value

    @field_validator("security_name", mode="before")
    @classmethod
    def _strip_security_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("security_code", mode="before")
    @classmethod
    def _security_code_to_str(cls, value: Any) -> Optional[str]:
        return _optional_str(value)

    @field_validator("raw_type_code", mode="before")
    @classmethod
    def _type_code_to_str(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("trade_date", mode="before")
    @classmethod
    def _parse_trade_date(cls, value: Any) -> Any:
        parsed = parse_record_date(value)
        if parsed is None:
            raise ValueError("trade date is required")
        return parsed

    @field_validator("quantity", "rate", "net_rate", "net_amount", mode="before")
    @classmethod
    def _coerce_numeric(cls, value: Any) -> Decimal:
        return coerce_decimal(value)


class RawBonusRecord(BaseModel):
    """
    A bonus-issue row from the bonus store. It shares no key with the
    transaction store; it is joined to securities by company name or code.
    """
    company_name: str = Field(..., min_length=1, description="Company name as recorded in the bonus store")
    ex_date: Optional[date] = Field(None, description="Ex-date of the bonus issue")
    bonus_share_quantity: Decimal = Field(
        default=Decimal(0),
        validation_alias=AliasChoices("bonusShareQuantity", "bonusShare", "bonus_share_quantity"),
        serialization_alias="bonusShareQuantity",
        description="Bonus shares credited"
    )
    account_id: Optional[str] = Field(None, description="Account the bonus applies to; None applies to all")
    security_code: Optional[str] = Field(None, description="Security code, preferred join key when present")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore'
    )

    @field_validator("company_name", mode="before")
    @classmethod
    def _strip_company_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("account_id", "security_code", mode="before")
    @classmethod
    def _optional_key_to_str(cls, value: Any) -> Optional[str]:
        return _optional_str(value)

    @field_validator("ex_date", mode="before")
    @classmethod
    def _parse_ex_date(cls, value: Any) -> Optional[date]:
        try:
            return parse_record_date(value)
        except ValueError:
            return None

    @field_validator("bonus_share_quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value: Any) -> Decimal:
        return coerce_decimal(value)


class TransactionEvent(BaseModel):
    """
    A classified transaction with its resolved price. Immutable once produced
    by the normalizer.
    """
    record_id: str = Field(..., description="Identifier used when reporting problems with the source row")
    account_id: str
    security_name: str
    security_code: Optional[str] = None
    event_date: date
    sequence_id: int = 0
    raw_type_code: str = ""
    category: TransactionType
    quantity: condecimal(ge=0) = Field(..., description="Absolute traded quantity")
    price: condecimal(ge=0) = Field(..., description="Resolved unit price")
    gross_amount: Decimal = Field(default=Decimal(0), description="Amount as reported by the source")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True
    )

    @property
    def is_bonus(self) -> bool:
        return False

    @property
    def display_type(self) -> str:
        return self.raw_type_code.strip().upper() or self.category.value


class BonusEvent(BaseModel):
    """
    A bonus issue merged into a security's ledger. Always priced at zero.
    """
    record_id: str
    company_name: str
    account_id: Optional[str] = None
    security_code: Optional[str] = None
    ex_date: Optional[date] = None
    effective_date: date = Field(..., description="Ex-date, or the sentinel date when the ex-date is missing")
    quantity: condecimal(ge=0)
    sequence_id: int = Field(0, description="Insertion order among bonus events")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True
    )

    @property
    def event_date(self) -> date:
        return self.effective_date

    @property
    def price(self) -> Decimal:
        return Decimal(0)

    @property
    def undated(self) -> bool:
        return self.ex_date is None

    @property
    def is_bonus(self) -> bool:
        return True

    @property
    def display_type(self) -> str:
        return "BONUS"
