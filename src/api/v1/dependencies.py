# src/api/v1/dependencies.py

from src.core.config.settings import settings
from src.logic.aggregator import HoldingsAggregator
from src.logic.cost_calculator import CostCalculator
from src.logic.error_reporter import ErrorReporter
from src.logic.name_matcher import BonusMatcher, SecurityExclusions
from src.logic.parser import EventNormalizer
from src.logic.replay_engine import LedgerReplayEngine
from src.logic.sorter import TransactionSorter
from src.services.holdings_service import HoldingsService


def get_holdings_service() -> HoldingsService:
    """
    Provides a new instance of HoldingsService with its dependencies.
    A fresh ErrorReporter per request keeps error lists request-scoped.
    """
    error_reporter = ErrorReporter()
    bonus_matcher = BonusMatcher()

    replay_engine = LedgerReplayEngine(
        cost_calculator=CostCalculator(),
        precision=settings.DECIMAL_PRECISION
    )
    aggregator = HoldingsAggregator(
        error_reporter=error_reporter,
        replay_engine=replay_engine,
        sorter=TransactionSorter(),
        bonus_matcher=bonus_matcher,
        exclusions=SecurityExclusions(settings.EXCLUDED_SECURITY_NAMES)
    )
    normalizer = EventNormalizer(
        error_reporter=error_reporter,
        bonus_sentinel_date=settings.BONUS_SENTINEL_DATE,
        reject_undated_bonuses=settings.REJECT_UNDATED_BONUSES
    )
    return HoldingsService(
        normalizer=normalizer,
        aggregator=aggregator,
        bonus_matcher=bonus_matcher,
        error_reporter=error_reporter
    )
