# providers/alphavantage_provider.py
import requests

from helper_functions import parse_time_series, select_time_series

import logging
logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.alphavantage.co/query"
DEFAULT_TIMEOUT = 20
INVALID_CALL_PREFIX = "Invalid API call"

# Query parameters that differ per series type.
SERIES_QUERY_PARAMS = {
    "daily": {"function": "TIME_SERIES_DAILY"},
    "1min": {"function": "TIME_SERIES_INTRADAY", "interval": "1min"},
}


# --- Custom Exceptions ---
class AlphaVantageError(Exception):
    """Base class for every failure talking to Alpha Vantage."""
    pass

class UpstreamTransportError(AlphaVantageError):
    """Raised when the request never got a response (DNS, connection, timeout)."""
    pass

class UpstreamStatusError(AlphaVantageError):
    """Raised when Alpha Vantage answers with a non-200 status."""
    def __init__(self, status_code: int):
        super().__init__(f"Upstream responded with status {status_code}")
        self.status_code = status_code

class UpstreamPayloadError(AlphaVantageError):
    """Raised when the response body is not a JSON object."""
    pass

class InvalidSymbolError(AlphaVantageError):
    """Raised when Alpha Vantage rejects the call, usually because of an unknown ticker."""
    pass

class UpstreamAPIError(AlphaVantageError):
    """Raised for any other error message reported by Alpha Vantage."""
    pass


def build_query_params(series_type: str, symbol: str, api_key: str | None) -> dict:
    """
    Builds the query string for a time-series request.

    Args:
        series_type: "daily" or "1min".
        symbol: The ticker to request.
        api_key: The Alpha Vantage credential, supplied by the caller.
    """
    if series_type not in SERIES_QUERY_PARAMS:
        raise ValueError(f"Unsupported series type: {series_type}")
    return {
        **SERIES_QUERY_PARAMS[series_type],
        "symbol": symbol,
        "apikey": api_key,
        "datatype": "json",
    }


def fetch_time_series(
    symbol: str,
    series_type: str,
    *,
    api_key: str | None,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict:
    """
    Requests a time series from Alpha Vantage and returns the decoded body.
    Raises an AlphaVantageError subclass on any failure.
    """
    params = build_query_params(series_type, symbol, api_key)
    try:
        response = requests.get(base_url, params=params, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.error(f"Error requesting {series_type} series for {symbol}: {e}")
        raise UpstreamTransportError(str(e)) from e

    if response.status_code != 200:
        logger.error(f"Alpha Vantage returned status {response.status_code} for {symbol}")
        raise UpstreamStatusError(response.status_code)

    try:
        body = response.json()
    except ValueError as e:
        logger.error(f"Alpha Vantage returned a non-JSON body for {symbol}: {e}")
        raise UpstreamPayloadError("Response body is not valid JSON") from e

    if not isinstance(body, dict):
        logger.error(f"Alpha Vantage returned a {type(body).__name__} instead of an object for {symbol}")
        raise UpstreamPayloadError("Response body is not a JSON object")

    error_message = body.get("Error Message")
    if error_message:
        if str(error_message).startswith(INVALID_CALL_PREFIX):
            logger.warning(f"Alpha Vantage rejected the call for {symbol}: {error_message}")
            raise InvalidSymbolError(error_message)
        logger.error(f"Alpha Vantage reported an error for {symbol}: {error_message}")
        raise UpstreamAPIError(error_message)

    return body


def get_time_series(symbol: str, series_type: str, **kwargs) -> list:
    """
    Fetches a series and transforms it into the application's normalized
    list-of-records format. A payload without the series object yields [].
    """
    body = fetch_time_series(symbol, series_type, **kwargs)
    series = select_time_series(body, series_type)
    records = parse_time_series(series)
    logger.info(f"Normalized {len(records)} {series_type} records for {symbol}")
    return records
