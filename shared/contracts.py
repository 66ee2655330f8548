# shared/contracts.py
"""
This module defines the Pydantic models that serve as the formal data contracts
for the Bell Curve API.

The raw Alpha Vantage shapes are described as type aliases only, since they are
consumed permissively. The normalized shapes are validated before they leave
the service.
"""

from typing import Dict, List, Optional, TypeAlias
from pydantic import BaseModel, ConfigDict

# --- Contract 1: RawSeriesEntry ---
RawSeriesEntry: TypeAlias = Dict[str, Dict[str, str]]
"""Date-keyed upstream series, e.g. {"2024-01-02": {"1. open": "10", ...}}."""

# The five field labels used by the upstream provider, in OHLCV order.
OPEN_KEY = "1. open"
HIGH_KEY = "2. high"
LOW_KEY = "3. low"
CLOSE_KEY = "4. close"
VOLUME_KEY = "5. volume"

# Series labels keyed by the series type accepted by the selector.
SERIES_LABELS = {
    "daily": "Time Series (Daily)",
    "1min": "Time Series (1min)",
}


# --- Contract 2: NormalizedRecord ---
class NormalizedRecord(BaseModel):
    """A single OHLCV data point. NaN is allowed for fields the provider left out."""
    model_config = ConfigDict(strict=True, allow_inf_nan=True)

    timestamp: str
    open: float
    high: float
    low: float
    close: float
    volume: float


# --- Contract 3: NormalizedSeries ---
NormalizedSeries: TypeAlias = List[NormalizedRecord]
"""Normalized records ordered ascending by timestamp."""


# --- Contract 4: ErrorResponse ---
class ErrorResponse(BaseModel):
    """Body of every non-200 response."""
    error: str
    details: Optional[str] = None
