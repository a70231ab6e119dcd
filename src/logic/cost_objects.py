# src/logic/cost_objects.py

from decimal import Decimal


class Lot:
    """Represents a single 'lot' of shares acquired through a BUY or a bonus issue."""
    def __init__(self, source_id: str, quantity: Decimal, unit_cost: Decimal):
        self.source_id = source_id
        self.original_quantity = quantity
        self.quantity = quantity
        self.unit_cost = unit_cost

    @property
    def cost(self) -> Decimal:
        """Cost of the quantity still open in this lot."""
        return self.quantity * self.unit_cost

    @property
    def is_exhausted(self) -> bool:
        return self.quantity <= Decimal(0)

    def consume(self, quantity: Decimal) -> tuple[Decimal, Decimal]:
        """
        Takes up to `quantity` shares out of the lot.
        Returns (quantity taken, cost of the quantity taken).
        """
        taken = min(self.quantity, quantity)
        self.quantity -= taken
        return taken, taken * self.unit_cost

    def __repr__(self) -> str:
        return (f"Lot(source_id='{self.source_id}', "
                f"original_qty={self.original_quantity}, "
                f"qty={self.quantity}, "
                f"unit_cost={self.unit_cost})")
