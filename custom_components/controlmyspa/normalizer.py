"""Normalization of ControlMySpa dashboard payloads into SpaState values."""

from __future__ import annotations

import logging
from typing import Any

from .models import (
    Component,
    HeaterMode,
    RangeLimits,
    SpaClock,
    SpaState,
    TemperatureRange,
)

_LOGGER = logging.getLogger(__name__)


def parse_number(value: Any) -> float | None:
    """Parse a vendor number that may use a comma as decimal separator.

    Args:
        value: Raw value, usually a string such as ``"100,5"`` or a number.

    Returns:
        The parsed float, or None if the value is missing or unparsable.

    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    try:
        return float(str(value).strip().replace(",", "."))
    except ValueError:
        _LOGGER.debug("Unparsable number in dashboard: %r", value)
        return None


def parse_clock(time_value: Any, military: Any) -> SpaClock:
    """Split an ``HH:MM`` time into hour and minute.

    A missing time means the spa clock was never set. A present but malformed
    time keeps ``time_not_set`` False and leaves hour and minute empty.
    """
    if not time_value:
        return SpaClock(time_not_set=True, military=bool(military))

    hour = minute = None
    try:
        hour_text, minute_text = str(time_value).split(":")[:2]
        hour, minute = int(hour_text), int(minute_text)
    except ValueError:
        _LOGGER.debug("Unparsable spa time: %r", time_value)
        hour = minute = None

    return SpaClock(
        hour=hour, minute=minute, time_not_set=False, military=bool(military)
    )


def _parse_range_limits(raw: Any) -> RangeLimits:
    if not isinstance(raw, dict):
        return RangeLimits()
    return RangeLimits(
        high_low=parse_number(raw.get("highRangeLow")),
        high_high=parse_number(raw.get("highRangeHigh")),
        low_low=parse_number(raw.get("lowRangeLow")),
        low_high=parse_number(raw.get("lowRangeHigh")),
    )


def _parse_components(raw: Any) -> tuple[Component, ...]:
    if not isinstance(raw, list):
        return ()

    components = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        port = item.get("port")
        value = item.get("value")
        components.append(
            Component(
                component_type=str(item.get("componentType", "")),
                port=str(port) if port is not None else None,
                value=str(value) if value is not None else None,
            )
        )
    return tuple(components)


def _parse_heater_mode(value: Any) -> HeaterMode | None:
    try:
        return HeaterMode(value)
    except ValueError:
        return None


def _parse_temp_range(value: Any) -> TemperatureRange | None:
    try:
        return TemperatureRange(value)
    except ValueError:
        return None


def normalize(raw: dict[str, Any] | None) -> SpaState:
    """Convert a raw dashboard ``data`` object into a SpaState.

    Never raises: missing or malformed fields become None or their default
    while the rest of the record is still normalized.

    Args:
        raw: The ``data`` envelope of a dashboard response.

    Returns:
        A new SpaState snapshot.

    """
    if not isinstance(raw, dict):
        _LOGGER.warning("Dashboard payload is not an object: %r", raw)
        return SpaState()

    return SpaState(
        desired_temp=parse_number(raw.get("desiredTemp")),
        target_desired_temp=parse_number(raw.get("targetDesiredTemp")),
        current_temp=parse_number(raw.get("currentTemp")),
        panel_locked=bool(raw.get("isPanelLocked")),
        heater_mode=_parse_heater_mode(raw.get("heaterMode")),
        temp_range=_parse_temp_range(raw.get("tempRange")),
        online=bool(raw.get("isOnline")),
        components=_parse_components(raw.get("components")),
        range_limits=_parse_range_limits(raw.get("rangeLimits")),
        clock=parse_clock(raw.get("time"), raw.get("isMilitaryTime")),
    )
