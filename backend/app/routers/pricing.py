from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import date as date_type
from typing import Optional
import logging

from app.core.config import settings
from app.db.session import get_db
from app.db.models import PricePrediction
from app.schemas.pricing import (
    PriceRecommendation,
    PriceRecommendationResponse,
    PredictionList,
    PredictionListItem,
)
from app.services.historical_store import HistoricalStore
from app.services.pricing_engine import PricingEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/pricing", tags=["pricing"])


def _market_position(recommended_price: float, competitor_avg_price: float) -> str:
    if recommended_price > competitor_avg_price:
        return "above"
    if recommended_price < competitor_avg_price:
        return "below"
    return "average"


def _save_prediction(db: Session, hotel_id: str, target_date: date_type, rec: PriceRecommendation) -> None:
    """Upsert the prediction for (hotel, date)"""
    values = {
        "current_price": rec.current_price,
        "suggested_price": rec.recommended_price,
        "min_price": rec.min_price,
        "max_price": rec.max_price,
        "confidence_score": rec.confidence,
        "reasoning": rec.reasoning,
        "demand_level": rec.factors.demand_level,
        "competitor_avg_price": rec.factors.competitor_avg_price,
        "market_position": _market_position(rec.recommended_price, rec.factors.competitor_avg_price),
    }

    prediction = db.query(PricePrediction).filter(
        PricePrediction.hotel_id == hotel_id,
        PricePrediction.prediction_date == target_date,
    ).first()

    if prediction:
        for key, value in values.items():
            setattr(prediction, key, value)
    else:
        prediction = PricePrediction(hotel_id=hotel_id, prediction_date=target_date, **values)
        db.add(prediction)

    db.flush()


@router.get("/recommend", response_model=PriceRecommendationResponse)
async def recommend_price(
    hotel_id: str = Query(..., min_length=1, description="Hotel identifier"),
    date: Optional[date_type] = Query(None, description="Target date (YYYY-MM-DD), defaults to today"),
    current_price: float = Query(..., gt=0, description="Hotel's current price"),
    db: Session = Depends(get_db)
):
    """
    Suggest an optimal price for a hotel on a date

    Uses the last 90 days of historical data (occupancy, competitor prices)
    ending on the target date. The prediction is stored for later review.
    """
    hotel_id = hotel_id.strip()
    if not hotel_id:
        raise HTTPException(status_code=400, detail="Missing required parameter: hotel_id")

    target_date = date or date_type.today()
    logger.info(f"Price recommendation request: hotel={hotel_id} date={target_date} current_price={current_price}")

    try:
        historical_data = HistoricalStore.load_window(
            db, hotel_id, target_date, settings.history_window_days
        )

        if not historical_data:
            logger.info(f"No historical data for hotel {hotel_id}")
            raise HTTPException(
                status_code=400,
                detail="No historical data available. Add daily revenue data to get price recommendations."
            )

        recommendation = PricingEngine.recommend_price(historical_data, target_date, current_price)

    except HTTPException:
        raise
    except ValueError as e:
        logger.error(f"Validation error: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error in recommend_price: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    if settings.persist_predictions:
        # Storing the prediction must never block the response
        try:
            _save_prediction(db, hotel_id, target_date, recommendation)
            db.commit()
            logger.info(f"Saved price prediction for {hotel_id} on {target_date}")
        except SQLAlchemyError as e:
            logger.warning(f"Failed to save price prediction: {e}")
            db.rollback()

    return PriceRecommendationResponse(recommendation=recommendation)


@router.get("/predictions/{hotel_id}", response_model=PredictionList)
async def list_predictions(
    hotel_id: str,
    limit: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db)
):
    """List stored price predictions for a hotel, newest date first"""
    predictions = (
        db.query(PricePrediction)
        .filter(PricePrediction.hotel_id == hotel_id)
        .order_by(PricePrediction.prediction_date.desc())
        .limit(limit)
        .all()
    )

    return PredictionList(
        hotel_id=hotel_id,
        predictions=[
            PredictionListItem(
                id=p.id,
                hotel_id=p.hotel_id,
                prediction_date=p.prediction_date.isoformat(),
                current_price=p.current_price,
                suggested_price=p.suggested_price,
                min_price=p.min_price,
                max_price=p.max_price,
                confidence_score=p.confidence_score,
                reasoning=p.reasoning,
                demand_level=p.demand_level,
                competitor_avg_price=p.competitor_avg_price,
                market_position=p.market_position,
                created_at=p.created_at.isoformat(),
            )
            for p in predictions
        ]
    )
