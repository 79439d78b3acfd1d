"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timezone

import pytest
from unittest.mock import Mock


@pytest.fixture
def mock_session():
    """Create a mock ODataSession."""
    session = Mock()
    session.cfg = Mock()
    session.cfg.default_sap_client = "100"
    session.base = "https://test.example.com/sap/c4c/odata/v1/"
    session.timeout = 60.0
    session.verify = True
    return session


@pytest.fixture
def sample_odata_response():
    """Sample OData v2 response."""
    return {
        "d": {
            "results": [
                {"ObjectID": "001", "Name": "Lead 1", "StatusCode": "1"},
                {"ObjectID": "002", "Name": "Lead 2", "StatusCode": "2"},
            ],
            "__next": None,
        }
    }


@pytest.fixture
def new_year():
    """2020-01-01T00:00:00 UTC."""
    return datetime(2020, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def end_of_january():
    """2020-01-31T23:59:59.500 UTC."""
    return datetime(2020, 1, 31, 23, 59, 59, 500000, tzinfo=timezone.utc)
