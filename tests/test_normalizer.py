"""Tests for the ControlMySpa dashboard normalizer."""

from collections.abc import Callable
from typing import Any

import pytest

from custom_components.controlmyspa.models import (
    Component,
    HeaterMode,
    SpaClock,
    SpaState,
    TemperatureRange,
)
from custom_components.controlmyspa.normalizer import (
    normalize,
    parse_clock,
    parse_number,
)

EXPECTED_COMPONENT_COUNT = 7


class TestParseNumber:
    """Tests for parse_number function."""

    def test_comma_and_dot_decimals_are_equal(self) -> None:
        """Test that comma and dot decimal separators parse to the same value."""
        assert parse_number("21,5") == parse_number("21.5") == 21.5

    def test_numbers_pass_through(self) -> None:
        """Test that numeric values are returned as floats."""
        assert parse_number(100) == 100.0
        assert parse_number(98.6) == 98.6

    @pytest.mark.parametrize("value", [None, "", "n/a", True])
    def test_unparsable_values_return_none(self, value: Any) -> None:
        """Test that missing and unparsable values become None."""
        assert parse_number(value) is None


class TestParseClock:
    """Tests for parse_clock function."""

    def test_parse_clock_splits_hour_and_minute(self) -> None:
        """Test that HH:MM is split into integers."""
        assert parse_clock("07:05", True) == SpaClock(
            hour=7, minute=5, time_not_set=False, military=True
        )

    def test_missing_time_means_clock_not_set(self) -> None:
        """Test that a missing time marks the clock as never set."""
        clock = parse_clock(None, False)
        assert clock.time_not_set is True
        assert clock.hour is None
        assert clock.military is False

    def test_malformed_time_keeps_clock_set(self) -> None:
        """Test that a malformed time leaves hour and minute empty."""
        clock = parse_clock("noon", True)
        assert clock.time_not_set is False
        assert clock.hour is None
        assert clock.minute is None


class TestNormalize:
    """Tests for normalize function."""

    def test_normalize_full_dashboard(self, sample_dashboard: dict[str, Any]) -> None:
        """Test that every dashboard field is normalized."""
        state = normalize(sample_dashboard)

        assert state.desired_temp == 100.0
        assert state.target_desired_temp == 100.4
        assert state.current_temp == 98.5
        assert state.panel_locked is False
        assert state.heater_mode is HeaterMode.READY
        assert state.temp_range is TemperatureRange.HIGH
        assert state.online is True
        assert state.range_limits.high_low == 80.0
        assert state.range_limits.high_high == 104.0
        assert state.range_limits.low_low == 50.0
        assert state.range_limits.low_high == 99.0
        assert state.clock == SpaClock(
            hour=14, minute=30, time_not_set=False, military=True
        )
        assert len(state.components) == EXPECTED_COMPONENT_COUNT
        assert Component("PUMP", "0", "HIGH") in state.components
        assert Component("OZONE", None, "ACTIVE") in state.components

    def test_normalize_non_object_returns_empty_state(self) -> None:
        """Test that a payload that is not an object yields the default state."""
        assert normalize(None) == SpaState()
        assert normalize(["not", "a", "dashboard"]) == SpaState()

    def test_missing_fields_become_none(
        self, dashboard_factory: Callable[..., dict[str, Any]]
    ) -> None:
        """Test that missing fields do not prevent normalizing the rest."""
        raw = dashboard_factory()
        del raw["targetDesiredTemp"]
        del raw["rangeLimits"]
        raw["currentTemp"] = "--"

        state = normalize(raw)

        assert state.target_desired_temp is None
        assert state.current_temp is None
        assert state.range_limits.high_high is None
        assert state.desired_temp == 100.0

    def test_unknown_enum_values_become_none(
        self, dashboard_factory: Callable[..., dict[str, Any]]
    ) -> None:
        """Test that unknown heater modes and ranges are not coerced."""
        state = normalize(dashboard_factory(heaterMode="READY_REST", tempRange=None))
        assert state.heater_mode is None
        assert state.temp_range is None

    def test_components_skip_invalid_entries(
        self, dashboard_factory: Callable[..., dict[str, Any]]
    ) -> None:
        """Test that non-object component entries are skipped and ports stringified."""
        state = normalize(
            dashboard_factory(
                components=["junk", {"componentType": "BLOWER", "port": 1, "value": "LOW"}]
            )
        )
        assert state.components == (Component("BLOWER", "1", "LOW"),)
