from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from datetime import date, datetime, timedelta
from typing import Optional
import logging

from app.core.config import settings
from app.db.session import get_db
from app.db.models import CompetitorPrice
from app.schemas.competitors import (
    CompetitorAlertsResponse,
    CompetitorPricesRequest,
    CompetitorPricesResponse,
)
from app.services.competitor_alerts import CompetitorAlertDetector, CompetitorObservation
from app.services.historical_store import HistoricalStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/competitors", tags=["competitors"])


@router.post("/prices", response_model=CompetitorPricesResponse)
async def save_competitor_prices(
    payload: CompetitorPricesRequest,
    db: Session = Depends(get_db)
):
    """
    Store competitor prices extracted by the scraper

    Prices are keyed by (hotel, competitor, date). The daily competitor
    avg/min/max on the hotel's historical record is refreshed when that
    day exists.
    """
    hotel_id = payload.hotel_id.strip()
    if not hotel_id:
        raise HTTPException(status_code=400, detail="Missing required parameter: hotel_id")

    try:
        touched_days = set()
        for item in payload.prices:
            existing = db.query(CompetitorPrice).filter(
                CompetitorPrice.hotel_id == hotel_id,
                CompetitorPrice.competitor_name == item.competitor_name,
                CompetitorPrice.date == item.date,
            ).first()

            if existing:
                existing.price = item.price
                existing.room_type = item.room_type or existing.room_type
                existing.source = item.source or existing.source
                existing.scraped_at = datetime.utcnow()
            else:
                db.add(CompetitorPrice(
                    hotel_id=hotel_id,
                    competitor_name=item.competitor_name,
                    date=item.date,
                    price=item.price,
                    room_type=item.room_type,
                    source=item.source,
                ))
            # Make the row visible to the queries below
            db.flush()
            touched_days.add(item.date)

        updated = sum(
            1 for day in touched_days
            if HistoricalStore.refresh_competitor_stats(db, hotel_id, day)
        )
        db.commit()

        logger.info(
            f"Saved {len(payload.prices)} competitor prices for {hotel_id}, "
            f"updated {updated} historical days"
        )
        return CompetitorPricesResponse(saved=len(payload.prices), historical_days_updated=updated)

    except Exception as e:
        logger.error(f"Unexpected error in save_competitor_prices: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/alerts", response_model=CompetitorAlertsResponse)
async def competitor_price_alerts(
    hotel_id: str = Query(..., min_length=1),
    days_to_check: int = Query(settings.competitor_alert_days, ge=1, le=90),
    end_date: Optional[date] = Query(None, description="Last day of the period, defaults to today"),
    db: Session = Depends(get_db)
):
    """
    Detect significant competitor price changes

    Compares each competitor's latest price with the previous one in the
    period. Moves of 8% or more raise an alert; 15% or more is high severity.
    """
    end = end_date or date.today()
    start = end - timedelta(days=days_to_check)
    logger.info(f"Competitor alerts request: hotel={hotel_id} days={days_to_check}")

    rows = (
        db.query(CompetitorPrice)
        .filter(
            CompetitorPrice.hotel_id == hotel_id,
            CompetitorPrice.date >= start,
            CompetitorPrice.date <= end,
        )
        .order_by(CompetitorPrice.date.asc())
        .all()
    )

    period = {
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "days_checked": days_to_check,
    }

    if not rows:
        return CompetitorAlertsResponse(
            alerts=[],
            period=period,
            summary=CompetitorAlertDetector.summarize([]),
            message="No competitor data available for the selected period.",
        )

    alerts = CompetitorAlertDetector.detect_alerts(
        CompetitorObservation(competitor_name=r.competitor_name, date=r.date, price=r.price)
        for r in rows
    )

    return CompetitorAlertsResponse(
        alerts=alerts,
        your_current_price=HistoricalStore.latest_adr(db, hotel_id, start),
        period=period,
        summary=CompetitorAlertDetector.summarize(alerts),
    )
