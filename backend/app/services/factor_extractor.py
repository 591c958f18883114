from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

import numpy as np

from app.services.pricing_policy import (
    COMPETITOR_WINDOW,
    NEUTRAL_DEMAND,
    NEUTRAL_TREND,
    TREND_WINDOW,
    clamp,
    resolve_field,
    safe_mean,
    seasonality_for_month,
)

logger = logging.getLogger(__name__)


def day_of_week(d: date) -> int:
    """Day of week with Sunday = 0 ... Saturday = 6."""
    return (d.weekday() + 1) % 7


def is_weekend_day(d: date) -> bool:
    return d.weekday() >= 5


@dataclass(frozen=True)
class HistoricalRecord:
    """One day of hotel history, as read from the historical data store"""
    hotel_id: str
    date: date
    occupancy_rate: Optional[float] = 0.0  # percentage 0-100
    adr: float = 0.0
    revpar: float = 0.0
    total_revenue: float = 0.0
    total_costs: float = 0.0
    competitor_avg_price: Optional[float] = None
    competitor_min_price: Optional[float] = None
    competitor_max_price: Optional[float] = None
    weather_score: Optional[float] = None  # 0-1
    event_impact_score: Optional[float] = None  # 0-1
    is_weekend: bool = False
    is_holiday: bool = False

    @property
    def day_of_week(self) -> int:
        return day_of_week(self.date)

    @property
    def month(self) -> int:
        return self.date.month


@dataclass(frozen=True)
class PricingFactors:
    base_price: float
    competitor_price: float
    competitor_avg_price: float
    competitor_min_price: float
    competitor_max_price: float
    demand_level: float  # 0-1
    seasonality_factor: float  # ~0.8-1.2
    occupancy_trend: float  # -1 to 1
    day_of_week: int  # 0 = Sunday
    is_weekend: bool
    is_holiday: bool
    weather_score: Optional[float] = None
    event_impact_score: Optional[float] = None


class FactorExtractor:
    """Derive pricing factors from a hotel's historical series"""

    @staticmethod
    def extract_pricing_factors(
        historical_data: Sequence[HistoricalRecord],
        target_date: date,
        base_price: float,
    ) -> PricingFactors:
        """
        Build the PricingFactors for one target date.

        Args:
            historical_data: Records for a single hotel, in any order (may be empty)
            target_date: Date the price is recommended for
            base_price: Hotel's current price, must be > 0

        Returns:
            PricingFactors; empty history degrades to neutral defaults.
        """
        records = sorted(historical_data, key=lambda r: r.date)

        # Competitor window: last 30 records on or before the target date
        recent = [r for r in records if r.date <= target_date][-COMPETITOR_WINDOW:]

        if recent:
            avg_prices = [resolve_field("competitor_avg_price", r.competitor_avg_price, base_price) for r in recent]
            min_prices = [resolve_field("competitor_min_price", r.competitor_min_price, base_price) for r in recent]
            max_prices = [resolve_field("competitor_max_price", r.competitor_max_price, base_price) for r in recent]

            competitor_price = avg_prices[-1]
            competitor_avg_price = safe_mean(avg_prices, base_price)
            competitor_min_price = float(np.min(min_prices))
            competitor_max_price = float(np.max(max_prices))

            last = recent[-1]
            weather_score = resolve_field("weather_score", last.weather_score, base_price)
            event_impact_score = resolve_field("event_impact_score", last.event_impact_score, base_price)
        else:
            competitor_price = competitor_avg_price = base_price
            competitor_min_price = competitor_max_price = base_price
            weather_score = None
            event_impact_score = None

        factors = PricingFactors(
            base_price=float(base_price),
            competitor_price=float(competitor_price),
            competitor_avg_price=float(competitor_avg_price),
            competitor_min_price=competitor_min_price,
            competitor_max_price=competitor_max_price,
            demand_level=FactorExtractor.calculate_demand_level(records, target_date),
            seasonality_factor=seasonality_for_month(target_date.month),
            occupancy_trend=FactorExtractor.calculate_occupancy_trend(records),
            day_of_week=day_of_week(target_date),
            is_weekend=is_weekend_day(target_date),
            # No holiday calendar source yet
            is_holiday=False,
            weather_score=weather_score,
            event_impact_score=event_impact_score,
        )

        logger.debug(
            f"Extracted pricing factors for {target_date} from {len(records)} records "
            f"({len(recent)} in competitor window)"
        )
        return factors

    @staticmethod
    def calculate_demand_level(records: Sequence[HistoricalRecord], target_date: date) -> float:
        """Average occupancy of comparable days, normalized to 0-1."""
        if not records:
            return NEUTRAL_DEMAND

        # Same weekday, same or adjacent month (linear distance, no wrap)
        similar_days = [
            r for r in records
            if r.date.weekday() == target_date.weekday()
            and abs(r.date.month - target_date.month) <= 1
        ]
        pool = similar_days or list(records)

        avg_occupancy = safe_mean(_occupancies(pool), NEUTRAL_DEMAND * 100.0)
        return clamp(avg_occupancy / 100.0, 0.0, 1.0)

    @staticmethod
    def calculate_occupancy_trend(records: Sequence[HistoricalRecord]) -> float:
        """Last 7 records vs. the 7 before them, as a -1..1 delta."""
        if len(records) < TREND_WINDOW * 2:
            return NEUTRAL_TREND

        ordered = sorted(records, key=lambda r: r.date)
        recent = np.array(_occupancies(ordered[-TREND_WINDOW:]), dtype=float)
        previous = np.array(_occupancies(ordered[-TREND_WINDOW * 2:-TREND_WINDOW]), dtype=float)

        diff = float(np.mean(recent)) - float(np.mean(previous))
        return clamp(diff / 100.0, -1.0, 1.0)


def _occupancies(records: Sequence[HistoricalRecord]) -> List[float]:
    return [resolve_field("occupancy_rate", r.occupancy_rate, 0.0) for r in records]
