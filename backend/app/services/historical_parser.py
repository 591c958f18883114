import pandas as pd
from io import BytesIO
from typing import Any, Dict, List
import logging

from pydantic import ValidationError

from app.schemas.historical import HistoricalEntryInput
from app.services.factor_extractor import day_of_week, is_weekend_day

logger = logging.getLogger(__name__)


class HistoricalParseError(Exception):
    """Raised when historical data cannot be parsed"""
    pass


class HistoricalParser:
    """Parse and normalize daily hotel data (JSON entries or CSV exports)"""

    REQUIRED_COLUMNS = ["date", "occupancy_rate"]

    NUMERIC_COLUMNS = [
        "occupancy_rate",
        "adr",
        "total_revenue",
        "total_costs",
        "rooms_sold",
        "competitor_avg_price",
        "competitor_min_price",
        "competitor_max_price",
        "weather_score",
        "event_impact_score",
    ]

    # Common export headers mapped to our column names
    COLUMN_ALIASES = {
        "occupancy": "occupancy_rate",
        "occupancy_%": "occupancy_rate",
        "revenue": "total_revenue",
        "costs": "total_costs",
        "rooms": "rooms_sold",
    }

    @staticmethod
    def normalize_entry(hotel_id: str, raw: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate one raw entry and derive the stored fields.

        ADR falls back to revenue / rooms sold; RevPAR is ADR x occupancy.
        Weekday, month and weekend flags come from the date.

        Raises:
            HistoricalParseError: If the entry is invalid
        """
        if not raw.get("date"):
            raise HistoricalParseError("Entry without date")

        try:
            entry = HistoricalEntryInput.model_validate(raw)
        except ValidationError as e:
            raise HistoricalParseError(f"Invalid entry for {raw.get('date')}: {e.errors()[0]['msg']}")

        revenue_per_room = (
            entry.total_revenue / entry.rooms_sold
            if entry.total_revenue and entry.rooms_sold
            else 0.0
        )

        adr = entry.adr or revenue_per_room
        if adr and entry.occupancy_rate:
            revpar = adr * (entry.occupancy_rate / 100.0)
        else:
            revpar = revenue_per_room

        return {
            "hotel_id": hotel_id,
            "date": entry.date,
            "occupancy_rate": float(entry.occupancy_rate),
            "adr": float(adr),
            "revpar": float(revpar),
            "total_revenue": float(entry.total_revenue),
            "total_costs": float(entry.total_costs),
            "competitor_avg_price": entry.competitor_avg_price,
            "competitor_min_price": entry.competitor_min_price,
            "competitor_max_price": entry.competitor_max_price,
            "weather_score": entry.weather_score,
            "event_impact_score": entry.event_impact_score,
            "is_weekend": is_weekend_day(entry.date),
            "is_holiday": entry.is_holiday,
            "day_of_week": day_of_week(entry.date),
            "month": entry.date.month,
        }

    @staticmethod
    def parse_csv(file_content: bytes) -> List[Dict[str, Any]]:
        """
        Parse a CSV export into raw daily entries

        Args:
            file_content: Raw CSV file bytes

        Returns:
            List of entry dicts (one per date, last row wins on duplicates)

        Raises:
            HistoricalParseError: If parsing or validation fails
        """
        try:
            df = pd.read_csv(BytesIO(file_content))
        except Exception as e:
            logger.error(f"Historical CSV parsing failed: {e}")
            raise HistoricalParseError(f"Failed to read CSV: {str(e)}")

        logger.info(f"Loaded CSV with {len(df)} rows and columns: {df.columns.tolist()}")

        # Normalize column names (lowercase, strip spaces)
        df.columns = df.columns.str.lower().str.strip().str.replace(" ", "_")
        df = df.rename(columns=HistoricalParser.COLUMN_ALIASES)

        HistoricalParser._validate_columns(df)

        df["date"] = pd.to_datetime(df["date"], errors="coerce").dt.date
        for col in HistoricalParser.NUMERIC_COLUMNS:
            if col in df.columns:
                df[col] = HistoricalParser._parse_numbers(df[col])

        valid_df = df.dropna(subset=["date"])
        if len(valid_df) == 0:
            raise HistoricalParseError("No valid dates found in CSV")
        if len(valid_df) < len(df):
            logger.warning(f"{len(df) - len(valid_df)} rows dropped with unparseable dates")

        valid_df = valid_df.drop_duplicates(subset=["date"], keep="last").sort_values("date")

        known = ["date", "is_holiday"] + HistoricalParser.NUMERIC_COLUMNS
        columns = [c for c in known if c in valid_df.columns]

        entries = []
        for row in valid_df[columns].to_dict("records"):
            # NaN means the cell was empty
            entry = {k: v for k, v in row.items() if not (isinstance(v, float) and pd.isna(v))}
            if "rooms_sold" in entry:
                entry["rooms_sold"] = int(entry["rooms_sold"])
            if "is_holiday" in entry:
                entry["is_holiday"] = HistoricalParser._parse_bool(entry["is_holiday"])
            entries.append(entry)

        logger.info(f"Parsed {len(entries)} days of historical data")
        return entries

    @staticmethod
    def _validate_columns(df: pd.DataFrame) -> None:
        missing_cols = [col for col in HistoricalParser.REQUIRED_COLUMNS if col not in df.columns]
        if missing_cols:
            raise HistoricalParseError(
                f"Missing required columns: {missing_cols}. "
                f"Found: {df.columns.tolist()}"
            )

    @staticmethod
    def _parse_numbers(series: pd.Series) -> pd.Series:
        """Parse numbers, handling currency symbols, percent signs and thousands separators"""
        cleaned = series.astype(str).str.replace(r"[$€%,\s]", "", regex=True)
        return pd.to_numeric(cleaned, errors="coerce")

    @staticmethod
    def _parse_bool(value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "y")
        return bool(value)
