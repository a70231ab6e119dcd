# src/tests/unit/test_name_matcher.py

import pytest
from datetime import date
from decimal import Decimal

from src.core.models.transaction import BonusEvent, RawBonusRecord
from src.logic.name_matcher import (
    BonusMatcher,
    SecurityExclusions,
    normalize_excluded_name,
    normalize_security_name,
)

def bonus(company_name="ASTRAL LIMITED", account_id=None, security_code=None, record_id="bonuses[0]"):
    return BonusEvent(
        record_id=record_id,
        company_name=company_name,
        account_id=account_id,
        security_code=security_code,
        ex_date=date(2023, 1, 15),
        effective_date=date(2023, 1, 15),
        quantity=Decimal("20")
    )

@pytest.mark.parametrize("name, expected", [
    ("Astral Limited.", "ASTRAL LTD"),
    ("Astral Ltd.", "ASTRAL LTD"),
    ("  tata   motors ltd ", "TATA MOTORS LTD"),
    ("ABC Corporation", "ABC CORP"),
    ("XYZ Private Limited", "XYZ PVT LTD"),
    ("Infosys Incorporated", "INFOSYS INC"),
    ("Bajaj-Auto Ltd.", "BAJAJAUTO LTD"),
    ("L&T Finance", "LT FINANCE"),
    ("Limitedness Foods", "LIMITEDNESS FOODS"),
    ("", ""),
    (None, ""),
])
def test_normalize_security_name(name, expected):
    assert normalize_security_name(name) == expected

def test_normalize_excluded_name_keeps_punctuation():
    assert normalize_excluded_name("  tax deducted   at source ") == "TAX DEDUCTED AT SOURCE"
    assert normalize_excluded_name(None) == ""

def test_security_exclusions():
    exclusions = SecurityExclusions(["CASH", "TAX", "TDS", "TAX DEDUCTED AT SOURCE"])
    assert exclusions.is_excluded("cash")
    assert exclusions.is_excluded(" Tax Deducted  at Source ")
    assert exclusions.is_excluded("TDS")
    assert not exclusions.is_excluded("CASHEW INDUSTRIES")
    assert not exclusions.is_excluded("Astral Ltd.")
    assert not exclusions.is_excluded(None)

# --- BonusMatcher ---

@pytest.fixture
def matcher():
    return BonusMatcher()

def test_match_by_normalized_name(matcher):
    assert matcher.matches(bonus("ASTRAL LIMITED"), "8800046", "Astral Ltd.")
    assert not matcher.matches(bonus("ASTRAL POLY"), "8800046", "Astral Ltd.")

def test_bonus_without_account_applies_to_every_account(matcher):
    assert matcher.matches(bonus(account_id=None), "8800046", "Astral Ltd.")
    assert matcher.matches(bonus(account_id=None), "9900001", "Astral Ltd.")

def test_account_specific_bonus(matcher):
    assert matcher.matches(bonus(account_id="8800046"), "8800046", "Astral Ltd.")
    assert not matcher.matches(bonus(account_id="8800046"), "9900001", "Astral Ltd.")

def test_account_filter_skipped_when_no_account_given(matcher):
    assert matcher.matches(bonus(account_id="8800046"), None, "Astral Ltd.")

def test_security_code_preferred_over_name(matcher):
    assert matcher.matches(bonus("Astral Poly Technik", security_code="astral"), "8800046", "Astral Ltd.", "ASTRAL")
    assert not matcher.matches(bonus("Astral Ltd.", security_code="ASTRALPOLY"), "8800046", "Astral Ltd.", "ASTRAL")

def test_name_used_when_one_side_has_no_code(matcher):
    assert matcher.matches(bonus("Astral Limited", security_code="ASTRAL"), "8800046", "Astral Ltd.")
    assert matcher.matches(bonus("Astral Limited"), "8800046", "Astral Ltd.", "ASTRAL")

def test_matches_raw_bonus_records(matcher):
    record = RawBonusRecord(company_name="Astral Limited", ex_date="2023-01-15", bonus_share_quantity=20)
    assert matcher.matches(record, "8800046", "Astral Ltd.")

def test_select_keeps_input_order(matcher):
    bonuses = [
        bonus("ASTRAL LIMITED", record_id="bonuses[0]"),
        bonus("INFOSYS LTD", record_id="bonuses[1]"),
        bonus("Astral Ltd", account_id="8800046", record_id="bonuses[2]"),
        bonus("Astral Ltd", account_id="9900001", record_id="bonuses[3]"),
    ]
    selected = matcher.select(bonuses, "8800046", "Astral Ltd.")
    assert [b.record_id for b in selected] == ["bonuses[0]", "bonuses[2]"]
