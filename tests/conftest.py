# tests/conftest.py

import sys
import os
import pytest

# This adds the project root (one level up from tests/) to the path globally for all tests
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# --- Environment Configuration ---
# Set before any test module imports the app, which reads its config at import time.
os.environ['ALPHAVANTAGE_API_KEY'] = 'test_key'
os.environ['ALPHAVANTAGE_BASE_URL'] = 'https://www.alphavantage.co/query'
os.environ.pop('LOG_DIR', None)

def pytest_configure(config):
    """Register custom markers to avoid warnings."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated, no network).")
    config.addinivalue_line("markers", "integration: Flask route tests with the upstream mocked.")

def pytest_collection_modifyitems(config, items):
    # auto-tag tests by folder so `-m unit|integration` works consistently
    for item in items:
        path = str(item.fspath)
        if f"{os.sep}integration{os.sep}" in path:
            item.add_marker(pytest.mark.integration)
        elif f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)
