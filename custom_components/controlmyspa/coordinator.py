"""Coordinator for the ControlMySpa integration."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta
from functools import partial
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .api import ControlMySpaError, SpaCommandClient, SpaValidationError
from .const import (
    CAP_BLOWER_0,
    CAP_BLOWER_1,
    CAP_BLOWER_2,
    CAP_HEATER_READY,
    CAP_LIGHT,
    CAP_PANEL_LOCK,
    CAP_PUMP_0,
    CAP_PUMP_1,
    CAP_PUMP_2,
    CAP_TARGET_TEMPERATURE,
    CAP_TEMPERATURE_RANGE_HIGH,
    DOMAIN,
)
from .models import ComponentType, HeaterMode, SpaState
from .normalizer import normalize
from .reconciler import Reconciler

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .capabilities import SpaCapabilityStore
    from .models import SpaSettings

_LOGGER = logging.getLogger(__name__)

SpaCommandCall = Callable[[], Awaitable[dict[str, Any]]]
CapabilityCommand = Callable[[SpaCommandClient, Any], Awaitable[dict[str, Any]]]


def _component_command(
    component_type: ComponentType, device_number: int
) -> CapabilityCommand:
    def command(client: SpaCommandClient, value: Any) -> Awaitable[dict[str, Any]]:  # noqa: ANN401
        return client.async_set_component_state(
            component_type, device_number, bool(value)
        )

    return command


CAPABILITY_COMMANDS: dict[str, CapabilityCommand] = {
    CAP_TARGET_TEMPERATURE: lambda client, value: client.async_set_temperature(
        float(value)
    ),
    CAP_PANEL_LOCK: lambda client, value: client.async_set_panel_lock(bool(value)),
    CAP_HEATER_READY: lambda client, value: client.async_set_heater_mode(
        HeaterMode.READY if value else HeaterMode.REST
    ),
    CAP_TEMPERATURE_RANGE_HIGH: lambda client, value: (
        client.async_set_temperature_range(bool(value))
    ),
    CAP_LIGHT: _component_command(ComponentType.LIGHT, 0),
    CAP_PUMP_0: _component_command(ComponentType.JET, 0),
    CAP_PUMP_1: _component_command(ComponentType.JET, 1),
    CAP_PUMP_2: _component_command(ComponentType.JET, 2),
    CAP_BLOWER_0: _component_command(ComponentType.BLOWER, 0),
    CAP_BLOWER_1: _component_command(ComponentType.BLOWER, 1),
    CAP_BLOWER_2: _component_command(ComponentType.BLOWER, 2),
}


class SpaCoordinator(DataUpdateCoordinator[SpaState]):
    """Polls the spa and funnels host commands through one busy slot.

    The poll cycle and user commands share a single lock so only one vendor
    round-trip is outstanding at a time. A poll tick that finds the slot
    taken is skipped; a command waits for it.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        client: SpaCommandClient,
        capabilities: SpaCapabilityStore,
        settings: SpaSettings,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=DOMAIN,
            update_interval=timedelta(seconds=settings.update_interval),
        )
        self.client = client
        self.capabilities = capabilities
        self.reconciler = Reconciler(client, capabilities, settings)
        self._busy = asyncio.Lock()

    @property
    def busy(self) -> bool:
        """Return True while a vendor round-trip is in flight."""
        return self._busy.locked()

    @property
    def settings(self) -> SpaSettings:
        """Return the settings in use."""
        return self.reconciler.settings

    async def _async_update_data(self) -> SpaState:
        """Run one reconciliation cycle unless another round-trip is running."""
        if self._busy.locked():
            _LOGGER.debug("Spa round-trip still in flight, skipping this cycle")
            if self.data is None:
                error_msg = "Spa is busy"
                raise UpdateFailed(error_msg)
            return self.data

        async with self._busy:
            state = await self.reconciler.async_run_cycle()

        if state is None:
            error_msg = "Fetching spa state failed"
            raise UpdateFailed(error_msg)
        return state

    def apply_settings(self, settings: SpaSettings) -> None:
        """Use new settings and re-establish the capability baseline.

        A changed poll interval cancels the pending refresh before the next
        one is scheduled.
        """
        self.reconciler.settings = settings
        self.reconciler.reset()

        interval = timedelta(seconds=settings.update_interval)
        if interval != self.update_interval:
            _LOGGER.info("Poll interval changed to %s", interval)
            self._unschedule_refresh()
            self.update_interval = interval
            self._schedule_refresh()

    async def async_execute(self, command: SpaCommandCall) -> SpaState:
        """Run a command in the busy slot and apply the refetched state.

        Args:
            command: Coroutine factory issuing the command on the client.

        Returns:
            The state applied after the command settled.

        Raises:
            ServiceValidationError: If the command parameters are rejected.
            HomeAssistantError: If the command or the refetch fails.

        """
        async with self._busy:
            try:
                raw = await command()
            except SpaValidationError as err:
                _LOGGER.warning("Rejected spa command: %s", err)
                raise ServiceValidationError(str(err)) from err
            except ControlMySpaError as err:
                _LOGGER.exception("Spa command failed")
                error_msg = f"Spa command failed: {err}"
                raise HomeAssistantError(error_msg) from err

            state = normalize(raw)
            self.reconciler.apply_state(state)

        self.async_set_updated_data(state)
        return state

    async def async_set_capability(self, key: str, value: Any) -> SpaState:  # noqa: ANN401
        """Write a capability value to the spa.

        Raises:
            HomeAssistantError: If the capability is read-only or the write fails.

        """
        command = CAPABILITY_COMMANDS.get(key)
        if command is None:
            error_msg = f"Capability {key} cannot be written"
            raise HomeAssistantError(error_msg)

        _LOGGER.debug("Writing %s = %s", key, value)
        return await self.async_execute(partial(command, self.client, value))

    async def async_set_filter_cycle(
        self, device_number: int, interval_index: int, start_time: str
    ) -> SpaState:
        """Schedule a filter cycle."""
        return await self.async_execute(
            partial(
                self.client.async_set_filter_cycle,
                device_number,
                interval_index,
                start_time,
            )
        )
