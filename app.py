# app.py
# Single interface for the backend services required by the Bell Curve application.
import os
import json
import time
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask, request, jsonify, g
from flask.json.provider import JSONProvider
from flask_cors import CORS
from pydantic import TypeAdapter, ValidationError

# --- 1. Initialize Flask App and Basic Config ---
app = Flask(__name__)
PORT = int(os.getenv("PORT", 3000))

app.config.from_mapping({
    "ALPHAVANTAGE_API_KEY": os.getenv("ALPHAVANTAGE_API_KEY"),
    "ALPHAVANTAGE_BASE_URL": os.getenv("ALPHAVANTAGE_BASE_URL", "https://www.alphavantage.co/query"),
    "UPSTREAM_TIMEOUT": float(os.getenv("UPSTREAM_TIMEOUT", "20")),
    "CORS_ORIGINS": [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()],
})

# Only allow browser requests from the frontend's origin(s)
CORS(app, resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}})

# --- 2. Define Logging Setup Function ---
def setup_logging(app):
    """Configures console (and optional rotating file) logging for the Flask app."""
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    log_directory = os.getenv("LOG_DIR")
    if log_directory:
        os.makedirs(log_directory, exist_ok=True)
        log_file = os.path.join(log_directory, "bell_curve_api.log")
        file_handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    # Module loggers share the app's handlers
    module_names = [
        app.logger.name,
        "providers.alphavantage_provider",
        "helper_functions",
    ]
    for name in module_names:
        module_logger = logging.getLogger(name)
        module_logger.setLevel(log_level)
        module_logger.propagate = False
        # Clear existing handlers to avoid duplication
        for h in list(module_logger.handlers):
            module_logger.removeHandler(h)
        for h in handlers:
            module_logger.addHandler(h)

    app.logger.info("Bell Curve API logging initialized.")
# --- End of Logging Setup ---
setup_logging(app)

# --- 3. Import Project-Specific Modules ---
from providers import alphavantage_provider as av_provider
from helper_functions import sanitize_for_json
from shared.contracts import NormalizedSeries, ErrorResponse

if not app.config["ALPHAVANTAGE_API_KEY"]:
    app.logger.warning("ALPHAVANTAGE_API_KEY is not set. Upstream calls will be rejected by Alpha Vantage.")

# --- 4. JSON Serialization ---
# NaN is not valid JSON, so non-finite floats are emitted as null.
class FiniteJSONProvider(JSONProvider):
    def dumps(self, obj, **kwargs):
        return json.dumps(sanitize_for_json(obj), allow_nan=False, **kwargs)
    def loads(self, s, **kwargs):
        return json.loads(s, **kwargs)

app.json = FiniteJSONProvider(app)

NormalizedSeriesValidator = TypeAdapter(NormalizedSeries)

# --- 5. Request Logging ---
@app.before_request
def _start_timer():
    g.request_started = time.perf_counter()

@app.after_request
def _log_request(response):
    started = g.get("request_started")
    elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
    app.logger.info(f"{request.method} {request.full_path.rstrip('?')} {response.status_code} - {elapsed_ms:.1f} ms")
    return response

# --- 6. Routes ---
def _error_body(message: str, details: str | None = None):
    """Builds a JSON error body that conforms to the ErrorResponse contract."""
    return jsonify(ErrorResponse(error=message, details=details).model_dump(exclude_none=True))

def _series_response(series_type: str):
    """Shared handler for the two time-series endpoints."""
    symbol = (request.args.get("symbol") or "").strip()
    if not symbol:
        return _error_body("Please include a symbol"), 400

    try:
        records = av_provider.get_time_series(
            symbol,
            series_type,
            api_key=app.config["ALPHAVANTAGE_API_KEY"],
            base_url=app.config["ALPHAVANTAGE_BASE_URL"],
            timeout=app.config["UPSTREAM_TIMEOUT"],
        )
    except av_provider.UpstreamTransportError:
        return _error_body("Unable to complete request"), 500
    except av_provider.InvalidSymbolError:
        return _error_body("Invalid API Call. Please try another ticker"), 400
    except av_provider.UpstreamStatusError as e:
        return _error_body("Problem with underlying API", details=f"Upstream status {e.status_code}"), 500
    except av_provider.AlphaVantageError:
        return _error_body("Problem with underlying API"), 500
    except Exception as e:
        app.logger.critical(f"An unhandled exception occurred while serving {series_type} data for {symbol}: {e}", exc_info=True)
        return _error_body("An unexpected internal server error occurred."), 500

    # Validate the output against the NormalizedSeries contract before returning.
    try:
        NormalizedSeriesValidator.validate_python(records)
    except ValidationError as e:
        app.logger.error(f"Internal data validation error for {symbol}: {e}")
        return _error_body("Internal server error: malformed price data."), 500

    return jsonify(records), 200

@app.route('/api/priceHistory')
def price_history_endpoint():
    """Daily price history for a given security, forwarded to Alpha Vantage."""
    return _series_response("daily")

@app.route('/api/currentPrice')
def current_price_endpoint():
    """Current (1-minute intraday) prices for a given security, forwarded to Alpha Vantage."""
    return _series_response("1min")

@app.route('/api/', strict_slashes=False)
def api_root_endpoint():
    return _error_body(
        "Please use the 'priceHistory' or 'currentPrice' endpoints and specify a ticker in the query string"
    ), 500

@app.route('/')
def root_endpoint():
    return _error_body("Please use the 'api' namespace and specify a ticker in the query string"), 500

@app.route('/health')
def health_check():
    return jsonify({"status": "healthy"}), 200

if __name__ == '__main__':
    app.logger.info(f"Bell Curve API is listening on port {PORT}")
    app.run(host='0.0.0.0', port=PORT)
