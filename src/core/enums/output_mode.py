# src/core/enums/output_mode.py

from enum import Enum

class OutputMode(str, Enum):
    """
    Selects what a ledger replay hands back to its caller.
    Both modes run the identical fold; only retention of the entries differs.
    """
    EMIT_STREAM = "EMIT_STREAM"
    EMIT_SUMMARY_ONLY = "EMIT_SUMMARY_ONLY"


class HoldingsView(str, Enum):
    """Filters applied to per-security summaries in the portfolio view."""
    ACTIVE = "ACTIVE" # current holding > 0
    ALL_TRADED = "ALL_TRADED" # any buy, sell or bonus activity, fully sold included
