# src/logic/aggregator.py

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from src.core.config.settings import settings
from src.core.enums.output_mode import HoldingsView, OutputMode
from src.core.models.ledger import HoldingSummary, LedgerEntry
from src.core.models.transaction import BonusEvent, TransactionEvent
from src.logic.error_reporter import ErrorReporter
from src.logic.name_matcher import BonusMatcher, SecurityExclusions, normalize_security_name
from src.logic.replay_engine import LedgerReplayEngine
from src.logic.sorter import TransactionSorter

logger = logging.getLogger(__name__)


@dataclass
class SecurityGroup:
    """All transaction events of one (account, normalized security name) pair."""
    account_id: str
    normalized_name: str
    security_name: str
    security_code: Optional[str] = None
    transactions: list[TransactionEvent] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        return (self.account_id, self.normalized_name)


@dataclass
class GroupResult:
    group: SecurityGroup
    summary: HoldingSummary
    entries: list[LedgerEntry] = field(default_factory=list)


def filter_as_of(events: Iterable, as_of_date: Optional[date]) -> list:
    """Keeps events dated on or before the as-of date (all events when None)."""
    if as_of_date is None:
        return list(events)
    return [event for event in events if event.event_date <= as_of_date]


def apply_view(summaries: Iterable[HoldingSummary], view: HoldingsView) -> list[HoldingSummary]:
    """
    ACTIVE keeps securities still held; ALL_TRADED keeps anything with buy,
    sell or bonus activity, fully sold positions included.
    """
    if view == HoldingsView.ACTIVE:
        return [summary for summary in summaries if summary.current_holding > 0]
    return [summary for summary in summaries if summary.has_activity]


class HoldingsAggregator:
    """
    Cuts events off at the as-of date, drops pseudo-securities, groups by
    account and normalized security name, and replays every group through the
    ledger. A group whose replay fails is reported and skipped; the other
    groups are still returned.
    """
    def __init__(
        self,
        error_reporter: ErrorReporter,
        replay_engine: Optional[LedgerReplayEngine] = None,
        sorter: Optional[TransactionSorter] = None,
        bonus_matcher: Optional[BonusMatcher] = None,
        exclusions: Optional[SecurityExclusions] = None
    ):
        self._error_reporter = error_reporter
        self._replay_engine = replay_engine or LedgerReplayEngine()
        self._sorter = sorter or TransactionSorter()
        self._bonus_matcher = bonus_matcher or BonusMatcher()
        self._exclusions = exclusions or SecurityExclusions(settings.EXCLUDED_SECURITY_NAMES)

    def group_transactions(self, transactions: Iterable[TransactionEvent]) -> list[SecurityGroup]:
        """
        Groups events by (account, normalized security name), excluding
        pseudo-securities. Groups come back sorted by account then name.
        """
        groups: dict[tuple[str, str], SecurityGroup] = {}
        excluded_count = 0
        for event in transactions:
            if self._exclusions.is_excluded(event.security_name):
                excluded_count += 1
                continue
            normalized_name = normalize_security_name(event.security_name)
            key = (event.account_id, normalized_name)
            group = groups.get(key)
            if group is None:
                group = SecurityGroup(
                    account_id=event.account_id,
                    normalized_name=normalized_name,
                    security_name=event.security_name
                )
                groups[key] = group
            if group.security_code is None and event.security_code:
                group.security_code = event.security_code
            group.transactions.append(event)

        if excluded_count:
            logger.debug(f"HoldingsAggregator: Excluded {excluded_count} pseudo-security events.")
        return sorted(groups.values(), key=lambda g: (g.account_id, g.security_name.upper()))

    def replay_group(
        self,
        group: SecurityGroup,
        bonuses: Iterable[BonusEvent],
        mode: OutputMode,
        as_of_date: Optional[date] = None
    ) -> GroupResult:
        """
        Matches bonuses to the group, applies the as-of cutoff, merges and
        replays. Raises whatever the replay raises.
        """
        matched_bonuses = self._bonus_matcher.select(
            bonuses, group.account_id, group.security_name, group.security_code
        )
        merged = self._sorter.sort_transactions(
            filter_as_of(group.transactions, as_of_date),
            filter_as_of(matched_bonuses, as_of_date)
        )
        result = self._replay_engine.replay(
            merged,
            account_id=group.account_id,
            security_name=group.security_name,
            security_code=group.security_code,
            mode=mode
        )
        return GroupResult(group=group, summary=result.summary, entries=result.entries)

    def aggregate(
        self,
        transactions: Iterable[TransactionEvent],
        bonuses: Iterable[BonusEvent],
        mode: OutputMode = OutputMode.EMIT_SUMMARY_ONLY,
        as_of_date: Optional[date] = None
    ) -> list[GroupResult]:
        """
        Replays every (account, security) group found in the transactions.
        """
        bonus_list = list(bonuses)
        results: list[GroupResult] = []
        for group in self.group_transactions(filter_as_of(transactions, as_of_date)):
            try:
                results.append(self.replay_group(group, bonus_list, mode, as_of_date))
            except Exception as e:
                error_reason = f"Ledger replay failed: {type(e).__name__}: {str(e)}"
                logger.error(f"HoldingsAggregator: {group.account_id}/{group.security_name}: {error_reason}")
                self._error_reporter.add_group_error(group.account_id, group.security_name, error_reason)
        logger.info(f"HoldingsAggregator: Replayed {len(results)} securities in {mode.value} mode.")
        return results

    def summarize(
        self,
        transactions: Iterable[TransactionEvent],
        bonuses: Iterable[BonusEvent],
        view: HoldingsView = HoldingsView.ALL_TRADED,
        as_of_date: Optional[date] = None
    ) -> list[HoldingSummary]:
        """
        One HoldingSummary per security, filtered by the view and sorted by
        security name.
        """
        results = self.aggregate(transactions, bonuses, OutputMode.EMIT_SUMMARY_ONLY, as_of_date)
        summaries = apply_view((result.summary for result in results), view)
        return sorted(summaries, key=lambda s: (s.security_name.upper(), s.account_id))
