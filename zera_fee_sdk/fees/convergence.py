"""
Bounded fixed-point iteration between transaction size and fee.

The network fee depends on the serialized size, and the serialized size
contains the fee amount. The solver alternates between the two until
neither moves by more than its tolerance between consecutive iterations.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from ..amounts import to_decimal

# Configure logger
logger = logging.getLogger(__name__)


class ConvergenceSettings(BaseModel):
    """Tolerances and iteration bound of the size/fee solver"""
    max_iterations: int = Field(10, ge=1)
    byte_tolerance: int = Field(1, ge=0)
    fee_tolerance: Decimal = Decimal("0.000001")

    @field_validator("fee_tolerance", mode="before")
    @classmethod
    def _parse_fee_tolerance(cls, value):
        tolerance = to_decimal(value)
        if tolerance < 0:
            raise ValueError("fee_tolerance must not be negative")
        return tolerance


@dataclass
class ConvergenceResult:
    size: int
    fee: Decimal
    iterations: int
    converged: bool
    history: List[Tuple[int, Decimal]] = field(default_factory=list)


def converge(
    estimate_size: Callable[[], int],
    price: Callable[[int], Decimal],
    apply_fee: Callable[[Decimal], None],
    settings: Optional[ConvergenceSettings] = None,
) -> ConvergenceResult:
    """
    Iterate size -> fee -> size until both settle.

    Args:
        estimate_size: Returns the current size in bytes of the fee-carrying record
        price: Returns the fee for a given size
        apply_fee: Writes a fee into the record
        settings: Tolerances and iteration bound

    Returns:
        The last size and fee, with ``converged`` False when the bound was hit
    """
    settings = settings or ConvergenceSettings()
    history: List[Tuple[int, Decimal]] = []
    for iteration in range(1, settings.max_iterations + 1):
        size = estimate_size()
        fee = price(size)
        apply_fee(fee)
        if history:
            last_size, last_fee = history[-1]
            if abs(size - last_size) <= settings.byte_tolerance and abs(fee - last_fee) <= settings.fee_tolerance:
                history.append((size, fee))
                logger.debug(f"Fee converged after {iteration} iterations at {size} bytes")
                return ConvergenceResult(size, fee, iteration, True, history)
        history.append((size, fee))

    size, fee = history[-1]
    logger.warning(f"Fee did not converge within {settings.max_iterations} iterations; using last estimate")
    return ConvergenceResult(size, fee, settings.max_iterations, False, history)
