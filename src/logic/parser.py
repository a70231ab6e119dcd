# src/logic/parser.py

import logging
from datetime import date
from decimal import Decimal, DecimalException
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from src.core.config.settings import settings
from src.core.models.transaction import (
    BonusEvent,
    RawBonusRecord,
    RawTransactionRecord,
    TransactionEvent,
)
from src.logic.classifier import TransactionClassifier
from src.logic.error_reporter import ErrorReporter

logger = logging.getLogger(__name__)


def resolve_price(net_rate: Decimal, rate: Decimal, gross_amount: Decimal, quantity: Decimal) -> Decimal:
    """
    Resolves the unit price of a trade: net rate if positive, else rate if
    positive, else |gross amount| / quantity, else 0.
    """
    if net_rate > 0:
        return net_rate
    if rate > 0:
        return rate
    if quantity > 0 and gross_amount != 0:
        return abs(gross_amount) / quantity
    return Decimal(0)


def _format_validation_error(error: ValidationError) -> str:
    messages = []
    for err in error.errors():
        location = err["loc"][0] if err["loc"] else "record"
        messages.append(f"{location}: {err['msg']}")
    return f"Validation error: {'; '.join(messages)}"


class EventNormalizer:
    """
    Parses raw transaction and bonus rows into classified, priced events.
    Rows that cannot be read at all are reported to the shared ErrorReporter
    and left out; numeric noise inside a readable row is coerced to 0.
    """
    def __init__(
        self,
        error_reporter: ErrorReporter,
        classifier: Optional[TransactionClassifier] = None,
        bonus_sentinel_date: Optional[date] = None,
        reject_undated_bonuses: Optional[bool] = None
    ):
        self._transaction_adapter = TypeAdapter(RawTransactionRecord)
        self._bonus_adapter = TypeAdapter(RawBonusRecord)
        self._error_reporter = error_reporter
        self._classifier = classifier or TransactionClassifier()
        self._bonus_sentinel_date = bonus_sentinel_date or settings.BONUS_SENTINEL_DATE
        self._reject_undated_bonuses = (
            settings.REJECT_UNDATED_BONUSES if reject_undated_bonuses is None else reject_undated_bonuses
        )

    def _report_arithmetic_error(self, record_id: str, error: DecimalException):
        error_reason = f"Arithmetic error: {type(error).__name__} while normalizing quantity or price"
        logger.warning(f"EventNormalizer: Rejected {record_id}: {error_reason}")
        self._error_reporter.add_error(record_id, error_reason)

    def parse_transaction_records(self, raw_transactions: list[Any]) -> list[tuple[str, RawTransactionRecord]]:
        """
        Validates raw transaction rows, returning (record_id, record) pairs for
        the rows that could be read.
        """
        records: list[tuple[str, RawTransactionRecord]] = []
        for index, raw in enumerate(raw_transactions):
            record_id = f"transactions[{index}]"
            try:
                records.append((record_id, self._transaction_adapter.validate_python(raw)))
            except ValidationError as e:
                error_reason = _format_validation_error(e)
                logger.warning(f"EventNormalizer: Rejected {record_id}: {error_reason}")
                self._error_reporter.add_error(record_id, error_reason)
        return records

    def parse_bonus_records(self, raw_bonuses: list[Any]) -> list[tuple[str, RawBonusRecord]]:
        records: list[tuple[str, RawBonusRecord]] = []
        for index, raw in enumerate(raw_bonuses):
            record_id = f"bonuses[{index}]"
            try:
                records.append((record_id, self._bonus_adapter.validate_python(raw)))
            except ValidationError as e:
                error_reason = _format_validation_error(e)
                logger.warning(f"EventNormalizer: Rejected {record_id}: {error_reason}")
                self._error_reporter.add_error(record_id, error_reason)
        return records

    def normalize_transaction(self, record_id: str, record: RawTransactionRecord) -> TransactionEvent:
        """
        Classifies the type code and resolves the price of one transaction.
        Quantities are taken as absolute values.
        """
        category = self._classifier.classify(record.raw_type_code)
        quantity = abs(record.quantity)
        price = resolve_price(record.net_rate, record.rate, record.net_amount, quantity)
        if quantity == Decimal(0) and category.mutates_lots:
            logger.debug(f"EventNormalizer: {record_id} ({record.raw_type_code}) has zero quantity and will not touch the ledger.")
        return TransactionEvent(
            record_id=record_id,
            account_id=record.account_id,
            security_name=record.security_name,
            security_code=record.security_code,
            event_date=record.trade_date,
            sequence_id=record.sequence_id,
            raw_type_code=record.raw_type_code,
            category=category,
            quantity=quantity,
            price=price,
            gross_amount=record.net_amount
        )

    def normalize_bonus(self, record_id: str, record: RawBonusRecord, insertion_order: int) -> Optional[BonusEvent]:
        """
        Builds a zero-priced bonus event. A bonus without an ex-date is either
        placed on the sentinel date or rejected, depending on configuration.
        """
        effective_date = record.ex_date
        if effective_date is None:
            if self._reject_undated_bonuses:
                self._error_reporter.add_error(record_id, f"Bonus for '{record.company_name}' has no ex-date.")
                return None
            logger.warning(
                f"EventNormalizer: Bonus {record_id} for '{record.company_name}' has no ex-date; "
                f"using sentinel date {self._bonus_sentinel_date.isoformat()}."
            )
            effective_date = self._bonus_sentinel_date
        return BonusEvent(
            record_id=record_id,
            company_name=record.company_name,
            account_id=record.account_id,
            security_code=record.security_code,
            ex_date=record.ex_date,
            effective_date=effective_date,
            quantity=abs(record.bonus_share_quantity),
            sequence_id=insertion_order
        )

    def parse_transactions(self, raw_transactions: list[Any]) -> list[TransactionEvent]:
        """
        Parses and normalizes raw transaction rows in their input order.
        """
        logger.info(f"EventNormalizer: Parsing {len(raw_transactions)} transaction rows.")
        events: list[TransactionEvent] = []
        for record_id, record in self.parse_transaction_records(raw_transactions):
            try:
                events.append(self.normalize_transaction(record_id, record))
            except DecimalException as e:
                self._report_arithmetic_error(record_id, e)
        return events

    def parse_bonuses(self, raw_bonuses: list[Any]) -> list[BonusEvent]:
        """
        Parses and normalizes raw bonus rows; insertion order is the position
        of the row in the input.
        """
        logger.info(f"EventNormalizer: Parsing {len(raw_bonuses)} bonus rows.")
        events: list[BonusEvent] = []
        for insertion_order, (record_id, record) in enumerate(self.parse_bonus_records(raw_bonuses)):
            try:
                event = self.normalize_bonus(record_id, record, insertion_order)
            except DecimalException as e:
                self._report_arithmetic_error(record_id, e)
                continue
            if event is not None:
                events.append(event)
        return events
