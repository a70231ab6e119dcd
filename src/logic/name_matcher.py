# src/logic/name_matcher.py

import re
from typing import Iterable, Optional

from src.core.models.transaction import BonusEvent, RawBonusRecord

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[^\w\s]")
_SUFFIXES = (
    (re.compile(r"\bLIMITED\b"), "LTD"),
    (re.compile(r"\bINCORPORATED\b"), "INC"),
    (re.compile(r"\bCORPORATION\b"), "CORP"),
    (re.compile(r"\bPRIVATE\b"), "PVT"),
)


def normalize_security_name(name: Optional[str]) -> str:
    """
    Canonical form used to join bonus records to traded securities:
    upper case, punctuation stripped, whitespace collapsed and common company
    suffixes shortened ("Astral Limited." -> "ASTRAL LTD").
    """
    if not name:
        return ""
    normalized = _WHITESPACE.sub(" ", str(name).strip().upper())
    normalized = _PUNCTUATION.sub("", normalized)
    for pattern, replacement in _SUFFIXES:
        normalized = pattern.sub(replacement, normalized)
    return _WHITESPACE.sub(" ", normalized).strip()


def normalize_excluded_name(name: Optional[str]) -> str:
    if not name:
        return ""
    return _WHITESPACE.sub(" ", str(name).strip().upper())


class SecurityExclusions:
    """
    Case-insensitive exact-name filter for pseudo-securities (cash lines, tax
    deductions) that appear in the transaction store but are not holdings.
    """
    def __init__(self, excluded_names: Iterable[str]):
        self._excluded = frozenset(normalize_excluded_name(name) for name in excluded_names)

    def is_excluded(self, security_name: Optional[str]) -> bool:
        return normalize_excluded_name(security_name) in self._excluded


class BonusMatcher:
    """
    Decides whether a bonus record belongs to an (account, security) ledger.
    The security code is used when both sides carry one; otherwise the
    normalized company name must equal the normalized security name.
    """
    def matches(
        self,
        bonus: BonusEvent | RawBonusRecord,
        account_id: Optional[str],
        security_name: str,
        security_code: Optional[str] = None
    ) -> bool:
        if bonus.account_id is not None and account_id is not None and bonus.account_id != account_id:
            return False
        if bonus.security_code and security_code:
            return bonus.security_code.strip().upper() == security_code.strip().upper()
        return normalize_security_name(bonus.company_name) == normalize_security_name(security_name)

    def select(
        self,
        bonuses: Iterable[BonusEvent],
        account_id: str,
        security_name: str,
        security_code: Optional[str] = None
    ) -> list[BonusEvent]:
        return [
            bonus for bonus in bonuses
            if self.matches(bonus, account_id, security_name, security_code)
        ]
