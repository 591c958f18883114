from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompetitorObservation:
    competitor_name: str
    date: date
    price: float


class CompetitorAlertDetector:
    """Detect significant day-over-day price moves by competitors"""

    HIGH_CHANGE_PCT = 15.0
    MEDIUM_CHANGE_PCT = 8.0

    SEVERITY_ORDER = {"high": 2, "medium": 1}

    @staticmethod
    def detect_alerts(observations: Iterable[CompetitorObservation]) -> List[Dict]:
        """
        Compare each competitor's latest price with the one before it.

        Moves under 8% are ignored; 8-15% is medium, 15%+ is high.
        Alerts come back sorted by severity, then by size of the move.
        """
        by_competitor: Dict[str, List[CompetitorObservation]] = defaultdict(list)
        for obs in observations:
            by_competitor[obs.competitor_name].append(obs)

        alerts = []
        for name, points in by_competitor.items():
            if len(points) < 2:
                continue

            ordered = sorted(points, key=lambda p: p.date)
            latest, previous = ordered[-1], ordered[-2]

            alert = CompetitorAlertDetector._compare(name, previous, latest)
            if alert is not None:
                alerts.append(alert)

        alerts.sort(
            key=lambda a: (
                -CompetitorAlertDetector.SEVERITY_ORDER[a["severity"]],
                -abs(a["price_change_percent"]),
            )
        )

        logger.info(f"Detected {len(alerts)} competitor price alerts across {len(by_competitor)} competitors")
        return alerts

    @staticmethod
    def _compare(
        name: str,
        previous: CompetitorObservation,
        latest: CompetitorObservation,
    ) -> Optional[Dict]:
        if not latest.price or not previous.price or latest.price <= 0 or previous.price <= 0:
            return None

        price_change = latest.price - previous.price
        change_pct = price_change / previous.price * 100.0
        abs_pct = abs(change_pct)

        if abs_pct >= CompetitorAlertDetector.HIGH_CHANGE_PCT:
            severity = "high"
        elif abs_pct >= CompetitorAlertDetector.MEDIUM_CHANGE_PCT:
            severity = "medium"
        else:
            return None

        if change_pct > 0:
            alert_type = "price_increase"
            verb = "raised"
        else:
            alert_type = "price_decrease"
            verb = "lowered"

        return {
            "competitor_name": name,
            "date": latest.date.isoformat(),
            "previous_price": float(previous.price),
            "current_price": float(latest.price),
            "price_change": float(price_change),
            "price_change_percent": float(change_pct),
            "severity": severity,
            "alert_type": alert_type,
            "message": (
                f"{name} {verb} its price by {abs_pct:.1f}% "
                f"(from €{previous.price:.2f} to €{latest.price:.2f})"
            ),
        }

    @staticmethod
    def summarize(alerts: List[Dict]) -> Dict[str, int]:
        return {
            "total_alerts": len(alerts),
            "high_severity": sum(1 for a in alerts if a["severity"] == "high"),
            "medium_severity": sum(1 for a in alerts if a["severity"] == "medium"),
        }
