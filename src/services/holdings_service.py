# src/services/holdings_service.py

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from src.core.enums.output_mode import HoldingsView, OutputMode
from src.core.models.ledger import HoldingSummary, SecurityHolder, WeightedAverageCost
from src.core.models.response import (
    BonusMatchResponse,
    HoldingsSummaryResponse,
    SecurityHoldersResponse,
    TransactionHistoryResponse,
    WeightedAverageCostResponse,
)
from src.core.models.transaction import TransactionEvent
from src.logic.aggregator import HoldingsAggregator, SecurityGroup
from src.logic.error_reporter import ErrorReporter
from src.logic.name_matcher import BonusMatcher, normalize_security_name
from src.logic.parser import EventNormalizer

logger = logging.getLogger(__name__)


class HoldingsService:
    """
    Orchestrates parsing, grouping and ledger replay for every holdings view.
    The history stream, the portfolio summary and the weighted average cost
    report all go through the same aggregator and replay engine, so they agree
    on every number for the same account, security and as-of date.
    """
    def __init__(
        self,
        normalizer: EventNormalizer,
        aggregator: HoldingsAggregator,
        bonus_matcher: BonusMatcher,
        error_reporter: ErrorReporter
    ):
        self._normalizer = normalizer
        self._aggregator = aggregator
        self._bonus_matcher = bonus_matcher
        self._error_reporter = error_reporter

    def _collect_errors(self) -> dict[str, list]:
        if not self._error_reporter.has_errors():
            return {"errored_records": [], "errored_groups": []}
        errors = {
            "errored_records": self._error_reporter.get_errors(),
            "errored_groups": self._error_reporter.get_group_errors(),
        }
        logger.warning(f"HoldingsService: {len(errors['errored_records'])} errored records, {len(errors['errored_groups'])} errored groups.")
        # The reporter is shared by all components of this service; reset it for the next call.
        self._error_reporter.clear()
        return errors

    def _parse_for_account(self, account_id: str, raw_transactions: list[Any]) -> list[TransactionEvent]:
        events = self._normalizer.parse_transactions(raw_transactions)
        return [event for event in events if event.account_id == account_id]

    def transaction_history(
        self,
        account_id: str,
        security_name: str,
        raw_transactions: list[Any],
        raw_bonuses: list[Any],
        security_code: Optional[str] = None,
        as_of_date: Optional[date] = None
    ) -> TransactionHistoryResponse:
        """
        Snapshot stream for one security of one account, with the summary of
        the same replay.
        """
        logger.info(f"HoldingsService: History for account {account_id}, security '{security_name}', as of {as_of_date}.")
        normalized_name = normalize_security_name(security_name)
        events = [
            event for event in self._parse_for_account(account_id, raw_transactions)
            if normalize_security_name(event.security_name) == normalized_name
        ]
        bonuses = self._normalizer.parse_bonuses(raw_bonuses)

        groups = self._aggregator.group_transactions(events)
        if groups:
            group = groups[0]
        else:
            group = SecurityGroup(account_id=account_id, normalized_name=normalized_name, security_name=security_name)
        group.security_name = security_name

        # The request's code is display only; bonuses join on the code the rows carry
        response = TransactionHistoryResponse(
            account_id=account_id,
            security_name=security_name,
            security_code=security_code or group.security_code
        )
        try:
            result = self._aggregator.replay_group(group, bonuses, OutputMode.EMIT_STREAM, as_of_date)
            response.entries = result.entries
            response.summary = result.summary
        except Exception as e:
            error_reason = f"Ledger replay failed: {type(e).__name__}: {str(e)}"
            logger.error(f"HoldingsService: {account_id}/{security_name}: {error_reason}")
            self._error_reporter.add_group_error(account_id, security_name, error_reason)

        errors = self._collect_errors()
        response.errored_records = errors["errored_records"]
        response.errored_groups = errors["errored_groups"]
        return response

    def holdings_summary(
        self,
        account_id: str,
        raw_transactions: list[Any],
        raw_bonuses: list[Any],
        view: HoldingsView = HoldingsView.ALL_TRADED,
        as_of_date: Optional[date] = None
    ) -> HoldingsSummaryResponse:
        """
        One HoldingSummary per security held or traded by the account.
        """
        logger.info(f"HoldingsService: Summary for account {account_id}, view {view.value}, as of {as_of_date}.")
        events = self._parse_for_account(account_id, raw_transactions)
        bonuses = self._normalizer.parse_bonuses(raw_bonuses)
        holdings = self._aggregator.summarize(events, bonuses, view, as_of_date)
        logger.info(f"HoldingsService: {len(holdings)} securities in summary for account {account_id}.")
        return HoldingsSummaryResponse(account_id=account_id, holdings=holdings, **self._collect_errors())

    def weighted_average_cost(
        self,
        account_id: str,
        raw_transactions: list[Any],
        raw_bonuses: list[Any],
        security_name: Optional[str] = None,
        as_of_date: Optional[date] = None
    ) -> WeightedAverageCostResponse:
        """
        FIFO weighted average cost of the open lots: every currently held
        security, or the single named security whatever its holding.
        """
        logger.info(f"HoldingsService: Weighted average cost for account {account_id}, security {security_name!r}, as of {as_of_date}.")
        events = self._parse_for_account(account_id, raw_transactions)
        if security_name:
            normalized_name = normalize_security_name(security_name)
            events = [e for e in events if normalize_security_name(e.security_name) == normalized_name]
            view = HoldingsView.ALL_TRADED
        else:
            view = HoldingsView.ACTIVE
        bonuses = self._normalizer.parse_bonuses(raw_bonuses)
        summaries = self._aggregator.summarize(events, bonuses, view, as_of_date)
        costs = [_to_weighted_average_cost(summary) for summary in summaries]
        return WeightedAverageCostResponse(account_id=account_id, costs=costs, **self._collect_errors())

    def security_holders(
        self,
        security_name: str,
        raw_transactions: list[Any],
        raw_bonuses: list[Any],
        as_of_date: Optional[date] = None
    ) -> SecurityHoldersResponse:
        """
        Every account currently holding the security, with the cumulative
        holding across those accounts.
        """
        logger.info(f"HoldingsService: Holders of '{security_name}' as of {as_of_date}.")
        normalized_name = normalize_security_name(security_name)
        events = [
            event for event in self._normalizer.parse_transactions(raw_transactions)
            if normalize_security_name(event.security_name) == normalized_name
        ]
        bonuses = self._normalizer.parse_bonuses(raw_bonuses)
        summaries = self._aggregator.summarize(events, bonuses, HoldingsView.ACTIVE, as_of_date)
        holders = sorted(
            (
                SecurityHolder(
                    account_id=summary.account_id,
                    security_name=summary.security_name,
                    current_holding=summary.current_holding,
                    weighted_avg_price=summary.weighted_average_buy_price
                )
                for summary in summaries
            ),
            key=lambda holder: holder.account_id
        )
        total_holding = sum((holder.current_holding for holder in holders), Decimal(0))
        return SecurityHoldersResponse(
            security_name=security_name,
            holders=holders,
            total_holding=total_holding,
            **self._collect_errors()
        )

    def match_bonuses(
        self,
        company_name: str,
        raw_bonuses: list[Any],
        account_id: Optional[str] = None,
        security_code: Optional[str] = None
    ) -> BonusMatchResponse:
        """
        Bonus records that would be merged into the ledger of the given
        company (and account, when given).
        """
        records = self._normalizer.parse_bonus_records(raw_bonuses)
        matching = [
            record for _, record in records
            if self._bonus_matcher.matches(record, account_id, company_name, security_code)
        ]
        logger.info(f"HoldingsService: {len(matching)} of {len(records)} bonus records match '{company_name}' for account {account_id}.")
        return BonusMatchResponse(
            company_name=company_name,
            normalized_company_name=normalize_security_name(company_name),
            account_id=account_id,
            matching_bonuses=matching,
            **self._collect_errors()
        )


def _to_weighted_average_cost(summary: HoldingSummary) -> WeightedAverageCost:
    return WeightedAverageCost(
        account_id=summary.account_id,
        security_name=summary.security_name,
        security_code=summary.security_code,
        holding=summary.current_holding,
        cost_basis=summary.cost_basis,
        weighted_avg_price=summary.weighted_average_buy_price
    )
