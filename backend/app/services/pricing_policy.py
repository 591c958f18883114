from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

import numpy as np

# Seasonal multipliers for a coastal/leisure hotel, keyed by month (1-12).
# Winter is low season, July/August peak.
SEASONALITY_BY_MONTH: Mapping[int, float] = MappingProxyType({
    1: 0.85,
    2: 0.80,
    3: 0.90,
    4: 1.00,
    5: 1.05,
    6: 1.15,
    7: 1.20,
    8: 1.20,
    9: 1.10,
    10: 1.00,
    11: 0.90,
    12: 0.85,
})

DEFAULT_SEASONALITY: float = 1.0

# Neutral defaults used when there is not enough history
NEUTRAL_DEMAND: float = 0.5
NEUTRAL_TREND: float = 0.0

# Window sizes (in records)
TREND_WINDOW: int = 7
COMPETITOR_WINDOW: int = 30
CONFIDENCE_FULL_RECORDS: int = 30


@dataclass(frozen=True)
class FieldPolicy:
    """How a missing historical field is handled during extraction."""
    field: str
    policy: str  # "base_price" | "zero" | "omit"
    description: str


FIELD_DEFAULTS: Mapping[str, FieldPolicy] = MappingProxyType({
    "competitor_avg_price": FieldPolicy(
        "competitor_avg_price", "base_price", "No competitor average -> use hotel's own price"
    ),
    "competitor_min_price": FieldPolicy(
        "competitor_min_price", "base_price", "No competitor minimum -> use hotel's own price"
    ),
    "competitor_max_price": FieldPolicy(
        "competitor_max_price", "base_price", "No competitor maximum -> use hotel's own price"
    ),
    "occupancy_rate": FieldPolicy(
        "occupancy_rate", "zero", "Unrecorded occupancy counts as 0%"
    ),
    "weather_score": FieldPolicy(
        "weather_score", "omit", "No weather score -> weather step skipped"
    ),
    "event_impact_score": FieldPolicy(
        "event_impact_score", "omit", "No event score -> passed through as None"
    ),
})


def resolve_field(field: str, value: Optional[float], base_price: float) -> Optional[float]:
    """Apply the FIELD_DEFAULTS policy to a single raw value."""
    policy = FIELD_DEFAULTS[field].policy

    if policy == "base_price":
        # A price of 0 is never a real rate, treat it as absent
        if value is None or value <= 0:
            return base_price
        return float(value)

    if policy == "zero":
        return float(value) if value is not None else 0.0

    return float(value) if value is not None else None


def seasonality_for_month(month: int) -> float:
    return SEASONALITY_BY_MONTH.get(month, DEFAULT_SEASONALITY)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def safe_mean(values: Iterable[float], default: float) -> float:
    """Mean of values, or `default` for an empty collection."""
    arr = np.fromiter((float(v) for v in values), dtype=float)
    if arr.size == 0:
        return default
    return float(np.mean(arr))


def round_money(value: float) -> float:
    """Round half-up to the cent (2.675 -> 2.68)."""
    return float(Decimal(repr(float(value))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
