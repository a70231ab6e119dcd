# src/core/enums/transaction_type.py

from enum import Enum

class TransactionType(str, Enum):
    """
    Ledger category of a transaction, derived from the broker's free-form
    type code by the classifier.
    """
    BUY = "BUY"
    SELL = "SELL"
    DIVIDEND = "DIVIDEND"
    OTHER = "OTHER" # shown in history, never touches the lots

    @property
    def mutates_lots(self) -> bool:
        return self in (TransactionType.BUY, TransactionType.SELL)
