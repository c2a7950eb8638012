"""Package Metrics.

Aggregate weight and volume of an order's packages. Inputs are assumed
validated upstream; no rounding is applied.
"""

from typing import Iterable

from ..models.domain import Order, Package

CUBIC_CM_PER_CUBIC_M = 1_000_000


def total_weight(packages: Iterable[Package]) -> float:
    """Total weight of packages in kg."""
    return sum((pkg.weight for pkg in packages), 0.0)


def total_volume(packages: Iterable[Package]) -> float:
    """Total volume of packages in cubic meters."""
    return sum(
        (
            pkg.dimensions.length * pkg.dimensions.width * pkg.dimensions.height
            / CUBIC_CM_PER_CUBIC_M
            for pkg in packages
        ),
        0.0,
    )


def order_weight(order: Order) -> float:
    return total_weight(order.packages)


def order_volume(order: Order) -> float:
    return total_volume(order.packages)
