"""Reconciliation of spa state into the exposed capability set.

The reconciler takes each freshly normalized SpaState, works out which
capabilities exist for the spa's component list, derives the displayed
target temperature and its range, applies every changed value to the
capability sink and fires change notifications for triggered capabilities.
The first pass after (re)initialization only establishes the baseline and
fires nothing.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol

from homeassistant.util import dt as dt_util

from .api import ControlMySpaError
from .clock import format_spa_date, format_spa_time, should_sync_clock
from .const import (
    BOOLEAN_COMPONENT_CAPABILITIES,
    CAP_CURRENT_TEMPERATURE,
    CAP_HEATER_MODE,
    CAP_HEATER_READY,
    CAP_LIGHT,
    CAP_ONLINE,
    CAP_PANEL_LOCK,
    CAP_TARGET_TEMPERATURE,
    CAP_TEMPERATURE_RANGE,
    CAP_TEMPERATURE_RANGE_HIGH,
    COMPONENT_CAPABILITIES,
    ROUNDED_CAPABILITIES,
    TEMPERATURE_WRITE_OFFSET,
    TRIGGER_CAPABILITIES,
)
from .models import HeaterMode, SpaState, TemperatureRange
from .normalizer import normalize

if TYPE_CHECKING:
    from datetime import datetime

    from .api import SpaCommandClient
    from .models import Component, SpaSettings

_LOGGER = logging.getLogger(__name__)

ON_TOKENS = frozenset({"HIGH", "ON"})
TEMPERATURE_TOLERANCE = 0.01


class CapabilitySink(Protocol):
    """Host side store of capabilities the reconciler writes into."""

    def has_capability(self, key: str) -> bool:
        """Return True if the capability is exposed."""

    def get_capability_value(self, key: str) -> Any:  # noqa: ANN401
        """Return the current value of a capability."""

    def set_capability_value(self, key: str, value: Any) -> None:  # noqa: ANN401
        """Store a new capability value."""

    def add_capability(self, key: str) -> None:
        """Expose a capability."""

    def remove_capability(self, key: str) -> None:
        """Stop exposing a capability."""

    def set_capability_options(
        self, key: str, min_value: float, max_value: float
    ) -> None:
        """Set the valid range of a numeric capability."""

    def notify_change(self, key: str, value: Any) -> None:  # noqa: ANN401
        """Report a capability transition to the host."""


def is_on(value: str | None) -> bool:
    """Return True for the HIGH and ON state tokens."""
    return value in ON_TOKENS


def find_component(
    components: Iterable[Component],
    component_type: str,
    port: str | None = None,
) -> Component | None:
    """Return the first component of a type, at ``port`` when one is given."""
    for component in components:
        if component.component_type != component_type:
            continue
        if port is None or component.port == port:
            return component
    return None


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def _same_temperature(value: float, other: float | None) -> bool:
    return other is not None and math.isclose(
        value, other, abs_tol=TEMPERATURE_TOLERANCE
    )


def derive_target_temperature(state: SpaState) -> float | None:
    """Work out the target temperature to display.

    Writes are sent with a +0.4 offset, so ``targetDesiredTemp`` normally sits
    0.4 above ``desiredTemp``. When that holds, or when the target sits on the
    top of the high range or the bottom of the low range (a range switch in
    flight), ``desiredTemp`` is trusted. Otherwise one of the two fields has
    not caught up yet and the target minus the offset is used.

    Args:
        state: Normalized spa state.

    Returns:
        The target temperature, or None if the spa reports neither field.

    """
    desired = state.desired_temp
    target = state.target_desired_temp
    if target is None:
        return desired

    limits = state.range_limits
    if desired is not None and (
        _same_temperature(target, desired + TEMPERATURE_WRITE_OFFSET)
        or _same_temperature(target, limits.high_high)
        or _same_temperature(target, limits.low_low)
    ):
        return desired
    return target - TEMPERATURE_WRITE_OFFSET


def temperature_bounds(state: SpaState) -> tuple[float, float] | None:
    """Return the valid target temperature range for the active range."""
    limits = state.range_limits
    if state.temp_range is TemperatureRange.HIGH:
        bounds = (limits.high_low, limits.high_high)
    elif state.temp_range is TemperatureRange.LOW:
        bounds = (limits.low_low, limits.low_high)
    else:
        return None

    if bounds[0] is None or bounds[1] is None:
        return None
    return bounds


class Reconciler:
    """Keeps the capability sink in sync with the spa."""

    def __init__(
        self,
        client: SpaCommandClient,
        sink: CapabilitySink,
        settings: SpaSettings,
        *,
        triggers: Iterable[str] = TRIGGER_CAPABILITIES,
        now: Callable[[], datetime] = dt_util.now,
    ) -> None:
        """Initialize the reconciler.

        Args:
            client: Client used to fetch state and push the clock.
            sink: Capability store to apply values to.
            settings: User settings.
            triggers: Capabilities whose changes are reported.
            now: Returns the current time in the configured time zone.

        """
        self._client = client
        self._sink = sink
        self.settings = settings
        self._triggers = frozenset(triggers)
        self._now = now
        self._snapshot: dict[str, Any] = {}
        self._bounds: tuple[float, float] | None = None
        self._first_run = True

    @property
    def first_run(self) -> bool:
        """Return True until the baseline has been applied."""
        return self._first_run

    @property
    def snapshot(self) -> Mapping[str, Any]:
        """Return a read-only view of the last applied values."""
        return MappingProxyType(self._snapshot)

    def reset(self) -> None:
        """Forget the applied values so the next pass establishes a new baseline."""
        self._snapshot.clear()
        self._bounds = None
        self._first_run = True

    async def async_run_cycle(self) -> SpaState | None:
        """Run one fetch, normalize, diff and apply pass.

        Returns:
            The applied state, or None if fetching failed and the cycle
            was skipped.

        """
        try:
            raw = await self._client.async_fetch_state()
        except ControlMySpaError as err:
            _LOGGER.warning("Skipping reconciliation, fetching state failed: %s", err)
            return None

        state = normalize(raw)
        self.apply_state(state)
        return await self._async_sync_clock(state) or state

    def apply_state(self, state: SpaState) -> None:
        """Apply a state to the capability sink."""
        first_run = self._first_run
        _LOGGER.debug("Reconciling state (first run: %s): %s", first_run, state)

        self._apply_components(state, first_run)

        light = find_component(state.components, "LIGHT")
        self._apply(CAP_LIGHT, is_on(light.value) if light else False, first_run)
        self._apply(CAP_PANEL_LOCK, state.panel_locked, first_run)
        self._apply(CAP_ONLINE, state.online, first_run)

        if state.heater_mode is not None:
            self._apply(
                CAP_HEATER_READY, state.heater_mode is HeaterMode.READY, first_run
            )
            self._apply(CAP_HEATER_MODE, state.heater_mode.value, first_run)

        if state.temp_range is not None:
            self._apply(
                CAP_TEMPERATURE_RANGE_HIGH,
                state.temp_range is TemperatureRange.HIGH,
                first_run,
            )
            self._apply(CAP_TEMPERATURE_RANGE, state.temp_range.value, first_run)

        self._apply_bounds(state)

        if state.current_temp is not None:
            self._apply(CAP_CURRENT_TEMPERATURE, state.current_temp, first_run)

        target = derive_target_temperature(state)
        if target is not None:
            self._apply(CAP_TARGET_TEMPERATURE, target, first_run)

        self._first_run = False

    def _apply_components(self, state: SpaState, first_run: bool) -> None:
        for key, (component_type, port) in COMPONENT_CAPABILITIES.items():
            component = find_component(state.components, component_type, port)
            if component is None:
                if first_run and self._sink.has_capability(key):
                    _LOGGER.debug("No %s component, removing %s", component_type, key)
                    self._sink.remove_capability(key)
                continue

            if not self._sink.has_capability(key):
                _LOGGER.debug("Found %s component, adding %s", component_type, key)
                self._sink.add_capability(key)

            if key in BOOLEAN_COMPONENT_CAPABILITIES:
                self._apply(key, is_on(component.value), first_run)
            else:
                self._apply(key, component.value, first_run)

    def _apply_bounds(self, state: SpaState) -> None:
        bounds = temperature_bounds(state)
        if bounds is None or bounds == self._bounds:
            return
        if not self._sink.has_capability(CAP_TARGET_TEMPERATURE):
            return

        _LOGGER.debug("Target temperature range is now %s", bounds)
        self._sink.set_capability_options(CAP_TARGET_TEMPERATURE, *bounds)
        self._bounds = bounds

    def _apply(self, key: str, value: Any, first_run: bool) -> None:  # noqa: ANN401
        if not self._sink.has_capability(key):
            return

        if key in ROUNDED_CAPABILITIES and self.settings.round_temperature:
            value = round_half_up(value)

        if key in self._snapshot and self._snapshot[key] == value:
            return

        self._sink.set_capability_value(key, value)
        self._snapshot[key] = value
        _LOGGER.debug("Capability %s set to %s", key, value)

        if not first_run and key in self._triggers:
            self._sink.notify_change(key, value)

    async def _async_sync_clock(self, state: SpaState) -> SpaState | None:
        local_now = self._now()
        if not should_sync_clock(
            state.clock,
            local_now,
            online=state.online,
            enabled=self.settings.clock_sync,
            use_24h=self.settings.clock_24h,
        ):
            _LOGGER.debug("Clock sync disabled or spa clock is in sync")
            return None

        date, time = format_spa_date(local_now), format_spa_time(local_now)
        _LOGGER.info(
            "Setting spa clock to %s %s (24h: %s)", date, time, self.settings.clock_24h
        )
        try:
            raw = await self._client.async_set_time(date, time, self.settings.clock_24h)
        except ControlMySpaError as err:
            _LOGGER.warning("Setting the spa clock failed: %s", err)
            return None

        synced = normalize(raw)
        self.apply_state(synced)
        return synced
