# src/logic/classifier.py

import logging
from enum import Enum
from typing import Iterable, NamedTuple, Optional

from src.core.enums.transaction_type import TransactionType

logger = logging.getLogger(__name__)


class MatchKind(str, Enum):
    EQUALS = "EQUALS"
    PREFIX = "PREFIX"
    CONTAINS = "CONTAINS"


class ClassificationRule(NamedTuple):
    """One row of the code table: a token and how it must appear in the code."""
    category: TransactionType
    match: MatchKind
    token: str

    def matches(self, code: str) -> bool:
        if self.match is MatchKind.EQUALS:
            return code == self.token
        if self.match is MatchKind.PREFIX:
            return code.startswith(self.token)
        return self.token in code


# First match wins. Dividend rows must stay first; SQB must stay above the SELL rows.
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(TransactionType.DIVIDEND, MatchKind.EQUALS, "DIO"),
    ClassificationRule(TransactionType.DIVIDEND, MatchKind.EQUALS, "DIVIDEND"),
    ClassificationRule(TransactionType.DIVIDEND, MatchKind.EQUALS, "DIVIDEND REINVEST"),
    ClassificationRule(TransactionType.DIVIDEND, MatchKind.EQUALS, "DIVIDEND REINVESTMENT"),
    ClassificationRule(TransactionType.DIVIDEND, MatchKind.EQUALS, "DIVIDEND RECEIVED"),
    ClassificationRule(TransactionType.DIVIDEND, MatchKind.PREFIX, "DIVIDEND"),
    ClassificationRule(TransactionType.DIVIDEND, MatchKind.CONTAINS, "DIO"),
    ClassificationRule(TransactionType.DIVIDEND, MatchKind.CONTAINS, "DIVIDEND"),

    ClassificationRule(TransactionType.BUY, MatchKind.PREFIX, "B"),
    ClassificationRule(TransactionType.BUY, MatchKind.EQUALS, "BUY"),
    ClassificationRule(TransactionType.BUY, MatchKind.EQUALS, "PURCHASE"),
    ClassificationRule(TransactionType.BUY, MatchKind.CONTAINS, "BUY"),
    ClassificationRule(TransactionType.BUY, MatchKind.EQUALS, "SQB"), # sell-quantity-buy
    ClassificationRule(TransactionType.BUY, MatchKind.EQUALS, "OPI"), # opening position in

    ClassificationRule(TransactionType.SELL, MatchKind.PREFIX, "S"),
    ClassificationRule(TransactionType.SELL, MatchKind.EQUALS, "SELL"),
    ClassificationRule(TransactionType.SELL, MatchKind.EQUALS, "SALE"),
    ClassificationRule(TransactionType.SELL, MatchKind.CONTAINS, "SELL"),
    ClassificationRule(TransactionType.SELL, MatchKind.EQUALS, "SQS"),
    ClassificationRule(TransactionType.SELL, MatchKind.EQUALS, "OPO"), # opening position out
    ClassificationRule(TransactionType.SELL, MatchKind.PREFIX, "NF-"),
)


def normalize_type_code(raw_type_code: Optional[str]) -> str:
    if raw_type_code is None:
        return ""
    return str(raw_type_code).strip().upper()


class TransactionClassifier:
    """
    Maps free-form broker type codes onto the closed TransactionType set using
    an ordered code table. Anything the table does not recognise is OTHER.
    """
    def __init__(self, rules: Iterable[ClassificationRule] = CLASSIFICATION_RULES):
        self._rules = tuple(rules)

    def classify(self, raw_type_code: Optional[str]) -> TransactionType:
        code = normalize_type_code(raw_type_code)
        if not code:
            return TransactionType.OTHER
        for rule in self._rules:
            if rule.matches(code):
                return rule.category
        logger.debug(f"Classifier: Unrecognised type code '{code}' classified as OTHER.")
        return TransactionType.OTHER


_default_classifier = TransactionClassifier()


def classify(raw_type_code: Optional[str]) -> TransactionType:
    """Classifies a raw type code with the default code table."""
    return _default_classifier.classify(raw_type_code)
