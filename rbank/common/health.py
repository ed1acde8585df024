"""Account health normalization.

The controller contract exposes `getAccountHealth(account)` as a signed,
mantissa-scaled integer. Client code presents it as a 0..1 score:

    x   = raw_health / mantissa
    s   = 1 / (1 + e^-x)
    pct = (s - SIGMOID_LOW) / (SIGMOID_HIGH - SIGMOID_LOW)

where 0 means liquidatable and 1 means no outstanding debt. The calibration
bounds are fixed values consumers already depend on; keep them bit-for-bit.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
import math

# ---------------------------------------------------------------------------
# Calibration bounds of the sigmoid window
# ---------------------------------------------------------------------------
SIGMOID_LOW: float = 0.731059
SIGMOID_HIGH: float = 0.999999

HEALTHY: float = 1.0
UNHEALTHY: float = 0.0
HEALTH_DECIMALS: int = 6


def sigmoid(x: float) -> float:
    """Logistic function, stable for large magnitudes of *x*."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    # exp(-x) overflows for very negative x; use the equivalent form.
    z = math.exp(x)
    return z / (1.0 + z)


def round_half_up(value: float, decimals: int = HEALTH_DECIMALS) -> float:
    """Round *value* to *decimals* places with exact binary ties going up.

    Matches JavaScript's `toFixed`. Builtin `round` sends ties to even.
    """
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def normalize_health(raw_health: int, mantissa: int, has_outstanding_debt: bool) -> float:
    """Map a raw on-chain health statistic into a [0, 1] score.

    Args:
        raw_health: Signed health value as returned by the controller.
        mantissa: Positive fixed-point scaling factor of the controller.
        has_outstanding_debt: Whether the account's borrow value is above zero.

    Returns:
        float: ``1.0`` without debt, otherwise the rescaled sigmoid rounded to
        six decimals and clamped into ``[0, 1]``.
    """
    if not has_outstanding_debt:
        return HEALTHY

    x = raw_health / mantissa
    pct = (sigmoid(x) - SIGMOID_LOW) / (SIGMOID_HIGH - SIGMOID_LOW)
    if pct < 0:
        return UNHEALTHY
    # s == 1.0 lands a hair above SIGMOID_HIGH.
    return min(round_half_up(pct), HEALTHY)
