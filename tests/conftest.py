"""Pytest configuration and fixtures for ControlMySpa tests."""

from collections.abc import Callable
from typing import Any

import pytest

SPA_ID = "spa-123"
ACCESS_TOKEN = "test_access_token"


def create_dashboard(**overrides: Any) -> dict[str, Any]:
    """Create a dashboard ``data`` object with optional field overrides.

    Args:
        **overrides: Fields replacing the defaults.

    Returns:
        A dictionary shaped like the vendor dashboard payload.

    """
    dashboard: dict[str, Any] = {
        "desiredTemp": "100,0",
        "targetDesiredTemp": "100.4",
        "currentTemp": "98,5",
        "isPanelLocked": False,
        "heaterMode": "READY",
        "tempRange": "HIGH",
        "isOnline": True,
        "time": "14:30",
        "isMilitaryTime": True,
        "rangeLimits": {
            "highRangeLow": 80,
            "highRangeHigh": 104,
            "lowRangeLow": 50,
            "lowRangeHigh": 99,
        },
        "components": [
            {"componentType": "HEATER", "port": "0", "value": "OFF"},
            {"componentType": "PUMP", "port": "0", "value": "HIGH"},
            {"componentType": "PUMP", "port": "1", "value": "OFF"},
            {"componentType": "BLOWER", "port": "0", "value": "OFF"},
            {"componentType": "LIGHT", "port": "0", "value": "ON"},
            {"componentType": "CIRCULATION_PUMP", "value": "ON"},
            {"componentType": "OZONE", "value": "ACTIVE"},
        ],
    }
    dashboard.update(overrides)
    return dashboard


@pytest.fixture
def sample_login_response() -> dict:
    """Fixture providing a sample login API response."""
    return {"message": "OK", "data": {"accessToken": ACCESS_TOKEN}}


@pytest.fixture
def sample_profile_response() -> dict:
    """Fixture providing a sample profile API response."""
    return {
        "message": "OK",
        "data": {
            "user": {
                "_id": "user-1",
                "email": "test@example.com",
                "spaId": SPA_ID,
            },
        },
    }


@pytest.fixture
def dashboard_factory() -> Callable[..., dict[str, Any]]:
    """Fixture providing a builder for dashboard data objects."""
    return create_dashboard


@pytest.fixture
def sample_dashboard() -> dict[str, Any]:
    """Fixture providing the data object of a dashboard response."""
    return create_dashboard()


@pytest.fixture
def sample_dashboard_response(sample_dashboard: dict[str, Any]) -> dict:
    """Fixture providing a sample dashboard API response."""
    return {"message": "OK", "data": sample_dashboard}


@pytest.fixture
def sample_command_response() -> dict:
    """Fixture providing a sample command API response."""
    return {"message": "Command sent"}
