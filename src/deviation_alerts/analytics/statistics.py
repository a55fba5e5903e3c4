# src/deviation_alerts/analytics/statistics.py

# --- Built Ins ---
import math
from typing import Sequence

# --- Installed ---
import numpy as np

# --- Local Application Imports ---
from ..core.errors import PriceArithmeticError
from ..core.models import PriceStats


def compute_price_stats(price_history: Sequence[float], last_price: float) -> PriceStats:
    """
    Scores how far the last price sits from its recent history.

    The last price is appended to the history before computing the population
    mean and standard deviation. `change` is the absolute distance between the
    mean and the last price; `deviation_score` is the absolute z-score of the
    last price. A constant series has no spread, so a zero change forces a zero
    score instead of 0/0.

    Raises:
        PriceArithmeticError: if any input or result is not a finite number.
    """
    try:
        prices = np.asarray([*price_history, last_price], dtype=float)
    except (TypeError, ValueError) as e:
        raise PriceArithmeticError(f"Price series is not numeric: {e}") from e

    if not np.all(np.isfinite(prices)):
        raise PriceArithmeticError("Price series contains non-finite values")

    last = float(prices[-1])
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        mean = float(np.mean(prices))
        std_dev = float(np.std(prices))
        change = abs(mean - last)
        if change == 0:
            deviation_score = 0.0
        else:
            deviation_score = abs(float(np.divide(last - mean, std_dev)))

    if not all(math.isfinite(v) for v in (mean, std_dev, change, deviation_score)):
        raise PriceArithmeticError(
            f"Degenerate price series (mean={mean}, stddev={std_dev}, last={last})"
        )

    return PriceStats(mean=mean, change=change, deviation_score=deviation_score)
