from sqlalchemy.orm import Session
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from app.db.models import HistoricalDataRecord, CompetitorPrice
from app.services.factor_extractor import HistoricalRecord
from app.services.historical_parser import HistoricalParser, HistoricalParseError

logger = logging.getLogger(__name__)

COMPETITOR_FIELDS = ("competitor_avg_price", "competitor_min_price", "competitor_max_price")


class HistoricalStore:
    """Read/write access to the historical_data table"""

    @staticmethod
    def save_entries(
        db: Session,
        hotel_id: str,
        entries: Iterable[Dict[str, Any]],
    ) -> Tuple[List[str], List[str]]:
        """
        Upsert daily entries for a hotel, keyed by (hotel_id, date)

        Returns:
            Tuple of (saved ISO dates, error messages)
        """
        saved: List[str] = []
        errors: List[str] = []
        # Rows added in this batch (autoflush is off, so queries won't see them)
        pending: Dict[date, HistoricalDataRecord] = {}

        for raw in entries:
            try:
                fields = HistoricalParser.normalize_entry(hotel_id, raw)
            except HistoricalParseError as e:
                errors.append(str(e))
                continue

            existing = pending.get(fields["date"]) or db.query(HistoricalDataRecord).filter(
                HistoricalDataRecord.hotel_id == hotel_id,
                HistoricalDataRecord.date == fields["date"],
            ).first()

            if existing:
                for key, value in fields.items():
                    # Keep previously stored competitor/weather data unless a new value is sent
                    if value is None:
                        continue
                    setattr(existing, key, value)
                existing.updated_at = datetime.utcnow()
            else:
                row = HistoricalDataRecord(**fields)
                if not any(fields[f] for f in COMPETITOR_FIELDS):
                    # Competitor prices may have been scraped before the day was entered
                    HistoricalStore._apply_competitor_stats(db, row)
                db.add(row)
                pending[fields["date"]] = row

            saved.append(fields["date"].isoformat())

        db.flush()
        logger.info(f"Saved {len(saved)} historical entries for hotel {hotel_id} ({len(errors)} errors)")
        return saved, errors

    @staticmethod
    def load_window(
        db: Session,
        hotel_id: str,
        end_date: date,
        days: int,
    ) -> List[HistoricalRecord]:
        """Load records in [end_date - days, end_date], oldest first"""
        start_date = end_date - timedelta(days=days)
        rows = HistoricalStore.query_rows(db, hotel_id, start_date, end_date)
        return [HistoricalStore.to_record(row) for row in rows]

    @staticmethod
    def query_rows(
        db: Session,
        hotel_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[HistoricalDataRecord]:
        query = db.query(HistoricalDataRecord).filter(HistoricalDataRecord.hotel_id == hotel_id)
        if start_date is not None:
            query = query.filter(HistoricalDataRecord.date >= start_date)
        if end_date is not None:
            query = query.filter(HistoricalDataRecord.date <= end_date)
        return query.order_by(HistoricalDataRecord.date.asc()).all()

    @staticmethod
    def latest_adr(db: Session, hotel_id: str, since: date) -> Optional[float]:
        """Most recent non-zero ADR on or after `since`"""
        row = (
            db.query(HistoricalDataRecord)
            .filter(
                HistoricalDataRecord.hotel_id == hotel_id,
                HistoricalDataRecord.date >= since,
            )
            .order_by(HistoricalDataRecord.date.desc())
            .first()
        )
        if row is None or not row.adr:
            return None
        return float(row.adr)

    @staticmethod
    def refresh_competitor_stats(db: Session, hotel_id: str, day: date) -> bool:
        """
        Recompute competitor avg/min/max on the hotel's record for `day`
        from stored competitor prices. Returns False if there is no record.
        """
        record = db.query(HistoricalDataRecord).filter(
            HistoricalDataRecord.hotel_id == hotel_id,
            HistoricalDataRecord.date == day,
        ).first()
        if record is None:
            return False
        return HistoricalStore._apply_competitor_stats(db, record)

    @staticmethod
    def _apply_competitor_stats(db: Session, record: HistoricalDataRecord) -> bool:
        prices = [
            float(p.price)
            for p in db.query(CompetitorPrice).filter(
                CompetitorPrice.hotel_id == record.hotel_id,
                CompetitorPrice.date == record.date,
            ).all()
            if p.price and p.price > 0
        ]
        if not prices:
            return False

        record.competitor_avg_price = sum(prices) / len(prices)
        record.competitor_min_price = min(prices)
        record.competitor_max_price = max(prices)
        record.updated_at = datetime.utcnow()
        return True

    @staticmethod
    def to_record(row: HistoricalDataRecord) -> HistoricalRecord:
        """Convert an ORM row into the engine's read-only record"""
        return HistoricalRecord(
            hotel_id=row.hotel_id,
            date=row.date,
            occupancy_rate=row.occupancy_rate or 0.0,
            adr=row.adr or 0.0,
            revpar=row.revpar or 0.0,
            total_revenue=row.total_revenue or 0.0,
            total_costs=row.total_costs or 0.0,
            competitor_avg_price=row.competitor_avg_price,
            competitor_min_price=row.competitor_min_price,
            competitor_max_price=row.competitor_max_price,
            weather_score=row.weather_score,
            event_impact_score=row.event_impact_score,
            is_weekend=bool(row.is_weekend),
            is_holiday=bool(row.is_holiday),
        )

    @staticmethod
    def to_dict(row: HistoricalDataRecord) -> Dict[str, Any]:
        return {
            "hotel_id": row.hotel_id,
            "date": row.date.isoformat(),
            "occupancy_rate": row.occupancy_rate,
            "adr": row.adr,
            "revpar": row.revpar,
            "total_revenue": row.total_revenue,
            "total_costs": row.total_costs,
            "competitor_avg_price": row.competitor_avg_price,
            "competitor_min_price": row.competitor_min_price,
            "competitor_max_price": row.competitor_max_price,
            "weather_score": row.weather_score,
            "event_impact_score": row.event_impact_score,
            "is_weekend": row.is_weekend,
            "is_holiday": row.is_holiday,
            "day_of_week": row.day_of_week,
            "month": row.month,
        }
