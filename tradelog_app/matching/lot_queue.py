"""Per-instrument queue of open buy lots."""

from collections import deque
from dataclasses import dataclass
from datetime import date
from typing import Iterator, Optional

from ..data.models import ExecutionRecord

# Residuals at or below this are float rounding, not open quantity
QUANTITY_EPSILON = 1e-9


@dataclass
class LotFragment:
    """Open buy quantity waiting to be matched against a sell."""
    price: float
    quantity: float              # Residual quantity, shrinks as sells consume it
    date: date
    source_id: Optional[int] = None

    @classmethod
    def from_execution(cls, execution: ExecutionRecord) -> "LotFragment":
        """Create a fragment covering the full quantity of a buy execution."""
        return cls(
            price=execution.price,
            quantity=execution.quantity,
            date=execution.date,
            source_id=execution.id,
        )

    @property
    def cost(self) -> float:
        return self.price * self.quantity


class LotQueue:
    """
    FIFO queue of open buy fragments for a single instrument.

    Fragments are consumed oldest first. A fragment leaves the queue once
    its residual quantity reaches zero (within QUANTITY_EPSILON); residuals
    never go negative.
    """

    def __init__(self):
        self._fragments: deque[LotFragment] = deque()

    def __len__(self) -> int:
        return len(self._fragments)

    def __bool__(self) -> bool:
        return bool(self._fragments)

    def __iter__(self) -> Iterator[LotFragment]:
        return iter(self._fragments)

    @property
    def open_quantity(self) -> float:
        """Total residual quantity across all fragments."""
        return sum(fragment.quantity for fragment in self._fragments)

    def push(self, fragment: LotFragment) -> None:
        """Append a buy fragment at the tail."""
        self._fragments.append(fragment)

    def consume(self, quantity: float) -> tuple[list[LotFragment], float]:
        """
        Consume up to ``quantity`` from the head of the queue.

        Head fragments no larger than the remaining quantity are removed
        whole. A larger head fragment is split: a matched fragment for the
        remaining quantity is returned and the head keeps the residual.

        Args:
            quantity: Quantity to match

        Returns:
            Tuple of (matched fragments oldest first, unmatched remainder)
        """
        matched: list[LotFragment] = []
        remaining = quantity

        while remaining > QUANTITY_EPSILON and self._fragments:
            head = self._fragments[0]

            if head.quantity <= remaining + QUANTITY_EPSILON:
                matched.append(self._fragments.popleft())
                remaining = max(remaining - head.quantity, 0.0)
            else:
                matched.append(LotFragment(
                    price=head.price,
                    quantity=remaining,
                    date=head.date,
                    source_id=head.source_id,
                ))
                head.quantity -= remaining
                remaining = 0.0

        if remaining <= QUANTITY_EPSILON:
            remaining = 0.0
        return matched, remaining
