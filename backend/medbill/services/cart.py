"""
Point-of-sale cart.

Holds one line per medicine and recomputes GST and totals on every change:

    line GST   = unit_price * quantity * gst_rate / 100
    line total = unit_price * quantity + round(line GST)
    subtotal   = sum(unit_price * quantity)
    GST        = round(sum(line GST))
    total      = subtotal + GST

All money is Decimal rounded half-up to paise (0.01). Line GST is summed
unrounded, so a single-rate cart always has GST == round(subtotal * rate / 100);
the rounded per-line figures are for display and the stored invoice lines.
A line can never ask for more units than the medicine has in stock.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from medbill.core.exceptions import InsufficientStockError, NotFoundError
from medbill.models.medicine import Medicine

PAISE = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(PAISE, rounding=ROUND_HALF_UP)


def calculate_gst(base_amount, gst_rate) -> Decimal:
    """GST on a pre-tax amount. gst_rate is a percentage: calculate_gst(100, 18) == 18.00"""
    return to_money(Decimal(str(base_amount)) * Decimal(str(gst_rate)) / Decimal("100"))


@dataclass
class CartLine:
    medicine: Medicine
    quantity: int
    unit_price: Decimal
    gst_rate: Decimal

    @property
    def medicine_id(self) -> int:
        return self.medicine.id

    @property
    def base_amount(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)

    @property
    def line_gst(self) -> Decimal:
        return self.base_amount * self.gst_rate / Decimal("100")

    @property
    def gst_amount(self) -> Decimal:
        return calculate_gst(self.base_amount, self.gst_rate)

    @property
    def total_price(self) -> Decimal:
        return self.base_amount + self.gst_amount


@dataclass
class Cart:
    lines: Dict[int, CartLine] = field(default_factory=dict)

    def add(
        self,
        medicine: Medicine,
        quantity: int = 1,
        unit_price: Optional[Decimal] = None,
        gst_rate: Optional[Decimal] = None,
    ) -> CartLine:
        """Add units of a medicine, merging with an existing line for it."""
        if quantity <= 0:
            raise ValueError("Quantity must be positive")

        line = self.lines.get(medicine.id)
        new_quantity = quantity + (line.quantity if line else 0)
        self._check_stock(medicine, new_quantity)

        if line:
            line.quantity = new_quantity
            if unit_price is not None:
                line.unit_price = to_money(unit_price)
            if gst_rate is not None:
                line.gst_rate = Decimal(str(gst_rate))
            return line

        line = CartLine(
            medicine=medicine,
            quantity=new_quantity,
            unit_price=to_money(unit_price if unit_price is not None else medicine.mrp),
            gst_rate=Decimal(str(gst_rate if gst_rate is not None else medicine.gst_rate)),
        )
        self.lines[medicine.id] = line
        return line

    def remove(self, medicine_id: int) -> None:
        self.lines.pop(medicine_id, None)

    def update_quantity(self, medicine_id: int, quantity: int) -> Optional[CartLine]:
        """Set a line's quantity. Zero or less drops the line."""
        line = self.lines.get(medicine_id)
        if not line:
            raise NotFoundError(f"Medicine {medicine_id} is not in the cart")
        if quantity <= 0:
            self.remove(medicine_id)
            return None
        self._check_stock(line.medicine, quantity)
        line.quantity = quantity
        return line

    def clear(self) -> None:
        self.lines.clear()

    @property
    def items(self) -> List[CartLine]:
        return list(self.lines.values())

    @property
    def subtotal(self) -> Decimal:
        return sum((line.base_amount for line in self.lines.values()), Decimal("0.00"))

    @property
    def gst_amount(self) -> Decimal:
        return to_money(sum((line.line_gst for line in self.lines.values()), Decimal("0")))

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.gst_amount

    def is_empty(self) -> bool:
        return not self.lines

    @staticmethod
    def _check_stock(medicine: Medicine, quantity: int) -> None:
        if quantity > medicine.stock:
            raise InsufficientStockError(
                f"Insufficient stock for {medicine.name}: only {medicine.stock} units available"
            )
