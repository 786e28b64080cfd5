"""
Order data structures (OrderIntent, ExecutionReport).
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal, Optional


@dataclass(frozen=True)
class OrderIntent:
    """
    Signed quantity change for one instrument.

    Positive delta buys, negative delta sells.
    """

    instrument: str
    delta_quantity: Decimal

    @property
    def side(self) -> Literal["Buy", "Sell"]:
        return "Buy" if self.delta_quantity > 0 else "Sell"

    @property
    def is_buy(self) -> bool:
        return self.delta_quantity > 0


@dataclass
class ExecutionReport:
    """Result of submitting one intent."""

    instrument: str
    status: Literal["pending", "skipped", "rejected"] = "pending"
    size: str = "0"  # Size as sent to the exchange (lot-formatted)
    cloid: Optional[str] = None  # Client order ID
    error_code: Optional[str] = None
    error_msg: Optional[str] = None
