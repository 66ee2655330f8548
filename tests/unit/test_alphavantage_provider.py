# tests/unit/test_alphavantage_provider.py

import unittest
from unittest.mock import patch, MagicMock
import requests

from providers import alphavantage_provider as av

DAILY_BODY = {
    "Meta Data": {"1. Information": "Daily Prices", "2. Symbol": "IBM"},
    "Time Series (Daily)": {
        "2024-01-03": {"1. open": "161.0", "2. high": "162.5", "3. low": "160.1", "4. close": "161.9", "5. volume": "4000"},
        "2024-01-02": {"1. open": "160.0", "2. high": "161.0", "3. low": "158.7", "4. close": "160.5", "5. volume": "3500"},
    },
}


def _mock_response(status_code=200, body=None, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


class TestBuildQueryParams(unittest.TestCase):
    def test_daily_params(self):
        params = av.build_query_params("daily", "IBM", "secret")
        self.assertEqual(params, {
            "function": "TIME_SERIES_DAILY",
            "symbol": "IBM",
            "apikey": "secret",
            "datatype": "json",
        })

    def test_intraday_params_include_interval(self):
        params = av.build_query_params("1min", "MSFT", "secret")
        self.assertEqual(params["function"], "TIME_SERIES_INTRADAY")
        self.assertEqual(params["interval"], "1min")
        self.assertEqual(params["apikey"], "secret")

    def test_unsupported_series_type(self):
        with self.assertRaises(ValueError):
            av.build_query_params("weekly", "IBM", "secret")


class TestFetchTimeSeries(unittest.TestCase):
    @patch('providers.alphavantage_provider.requests.get')
    def test_success_returns_body_and_passes_explicit_key(self, mock_get):
        mock_get.return_value = _mock_response(body=DAILY_BODY)

        body = av.fetch_time_series("IBM", "daily", api_key="explicit_key", base_url="http://upstream/query", timeout=5)

        self.assertEqual(body, DAILY_BODY)
        mock_get.assert_called_once_with(
            "http://upstream/query",
            params={"function": "TIME_SERIES_DAILY", "symbol": "IBM", "apikey": "explicit_key", "datatype": "json"},
            timeout=5,
        )

    @patch('providers.alphavantage_provider.requests.get')
    def test_transport_failure(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("connection refused")
        with self.assertRaises(av.UpstreamTransportError):
            av.fetch_time_series("IBM", "daily", api_key="k")

    @patch('providers.alphavantage_provider.requests.get')
    def test_timeout_is_a_transport_failure(self, mock_get):
        mock_get.side_effect = requests.exceptions.Timeout("timed out")
        with self.assertRaises(av.UpstreamTransportError):
            av.fetch_time_series("IBM", "1min", api_key="k")

    @patch('providers.alphavantage_provider.requests.get')
    def test_non_200_status(self, mock_get):
        mock_get.return_value = _mock_response(status_code=503, body={})
        with self.assertRaises(av.UpstreamStatusError) as ctx:
            av.fetch_time_series("IBM", "daily", api_key="k")
        self.assertEqual(ctx.exception.status_code, 503)

    @patch('providers.alphavantage_provider.requests.get')
    def test_invalid_json_body(self, mock_get):
        mock_get.return_value = _mock_response(json_error=ValueError("Expecting value"))
        with self.assertRaises(av.UpstreamPayloadError):
            av.fetch_time_series("IBM", "daily", api_key="k")

    @patch('providers.alphavantage_provider.requests.get')
    def test_non_object_body(self, mock_get):
        mock_get.return_value = _mock_response(body=["not", "an", "object"])
        with self.assertRaises(av.UpstreamPayloadError):
            av.fetch_time_series("IBM", "daily", api_key="k")

    @patch('providers.alphavantage_provider.requests.get')
    def test_invalid_call_message(self, mock_get):
        mock_get.return_value = _mock_response(body={
            "Error Message": "Invalid API call. Please retry or visit the documentation for TIME_SERIES_DAILY."
        })
        with self.assertRaises(av.InvalidSymbolError):
            av.fetch_time_series("NOPE", "daily", api_key="k")

    @patch('providers.alphavantage_provider.requests.get')
    def test_other_error_message(self, mock_get):
        mock_get.return_value = _mock_response(body={"Error Message": "the parameter apikey is invalid or missing."})
        with self.assertRaises(av.UpstreamAPIError):
            av.fetch_time_series("IBM", "daily", api_key=None)

    def test_every_failure_shares_a_base_class(self):
        for exc in (av.UpstreamTransportError, av.UpstreamStatusError, av.UpstreamPayloadError,
                    av.InvalidSymbolError, av.UpstreamAPIError):
            self.assertTrue(issubclass(exc, av.AlphaVantageError))


class TestGetTimeSeries(unittest.TestCase):
    @patch('providers.alphavantage_provider.requests.get')
    def test_returns_normalized_sorted_records(self, mock_get):
        mock_get.return_value = _mock_response(body=DAILY_BODY)

        records = av.get_time_series("IBM", "daily", api_key="k")

        self.assertEqual([r["timestamp"] for r in records], ["2024-01-02", "2024-01-03"])
        self.assertEqual(records[0], {
            "timestamp": "2024-01-02", "open": 160.0, "high": 161.0,
            "low": 158.7, "close": 160.5, "volume": 3500.0,
        })

    @patch('providers.alphavantage_provider.requests.get')
    def test_missing_series_label_yields_empty_list(self, mock_get):
        mock_get.return_value = _mock_response(body={"Information": "Rate limit reached."})
        self.assertEqual(av.get_time_series("IBM", "1min", api_key="k"), [])


if __name__ == '__main__':
    unittest.main()
