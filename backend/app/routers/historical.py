from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
import logging

from app.db.session import get_db
from app.schemas.historical import (
    HistoricalRecordOut,
    SaveHistoricalRequest,
    SaveHistoricalResponse,
)
from app.services.historical_parser import HistoricalParser, HistoricalParseError
from app.services.historical_store import HistoricalStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/historical", tags=["historical"])


def _save(db: Session, hotel_id: str, entries: List[dict]) -> SaveHistoricalResponse:
    saved, errors = HistoricalStore.save_entries(db, hotel_id, entries)

    if not saved and errors:
        db.rollback()
        raise HTTPException(
            status_code=400,
            detail={"error": "No data saved", "errors": errors}
        )

    db.commit()
    return SaveHistoricalResponse(
        success=True,
        saved=len(saved),
        errors=errors or None,
        message=f"Saved {len(saved)} days of historical data",
    )


@router.post("/entries", response_model=SaveHistoricalResponse)
async def save_historical_entries(
    payload: SaveHistoricalRequest,
    db: Session = Depends(get_db)
):
    """
    Save daily historical data for a hotel

    Each entry needs a date. ADR, RevPAR, weekday and weekend flags are
    derived when not provided. Existing days are updated in place.
    """
    hotel_id = payload.hotel_id.strip()
    if not hotel_id:
        raise HTTPException(status_code=400, detail="Missing required parameter: hotel_id")

    logger.info(f"Save historical data request: hotel={hotel_id} entries={len(payload.entries)}")

    try:
        return _save(db, hotel_id, payload.entries)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in save_historical_entries: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/upload", response_model=SaveHistoricalResponse)
async def upload_historical_csv(
    csv_file: UploadFile = File(..., description="CSV with date and occupancy_rate columns"),
    hotel_id: str = Form(..., min_length=1, description="Hotel identifier"),
    db: Session = Depends(get_db)
):
    """
    Import daily historical data from a CSV export

    Required columns: date, occupancy_rate. Optional: adr, total_revenue,
    total_costs, rooms_sold, competitor_avg_price, competitor_min_price,
    competitor_max_price, weather_score, event_impact_score, is_holiday.
    """
    hotel_id = hotel_id.strip()
    if not hotel_id:
        raise HTTPException(status_code=400, detail="Missing required parameter: hotel_id")

    try:
        file_content = await csv_file.read()
        entries = HistoricalParser.parse_csv(file_content)
        return _save(db, hotel_id, entries)
    except HTTPException:
        raise
    except HistoricalParseError as e:
        logger.warning(f"Historical CSV rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error in upload_historical_csv: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{hotel_id}", response_model=List[HistoricalRecordOut])
async def list_historical_data(
    hotel_id: str,
    start: Optional[date] = Query(None, description="First date (inclusive)"),
    end: Optional[date] = Query(None, description="Last date (inclusive)"),
    db: Session = Depends(get_db)
):
    """List stored historical records for a hotel, oldest first"""
    if start and end and start > end:
        raise HTTPException(status_code=400, detail="start must be on or before end")

    rows = HistoricalStore.query_rows(db, hotel_id, start, end)
    return [HistoricalRecordOut(**HistoricalStore.to_dict(row)) for row in rows]
