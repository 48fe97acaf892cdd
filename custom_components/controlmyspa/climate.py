"""Climate entity for ControlMySpa hot tubs.

The spa reports and accepts temperatures in degrees Fahrenheit; Home
Assistant converts them to the configured unit system.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.components.climate import (
    ClimateEntity,
    ClimateEntityFeature,
    HVACMode,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.exceptions import ServiceValidationError

from .const import CAP_CURRENT_TEMPERATURE, CAP_TARGET_TEMPERATURE, DOMAIN
from .entity import ControlMySpaEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import SpaCoordinator

_LOGGER = logging.getLogger(__name__)

DEFAULT_MIN_TEMP = 50.0
DEFAULT_MAX_TEMP = 104.0


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the climate entity of a spa."""
    coordinator: SpaCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([ControlMySpaClimateEntity(coordinator)])


class ControlMySpaClimateEntity(ControlMySpaEntity, ClimateEntity):
    """Climate entity exposing the spa water temperature and set point."""

    _attr_name = None
    _attr_temperature_unit = UnitOfTemperature.FAHRENHEIT
    _attr_target_temperature_step = 1.0
    _attr_hvac_modes = [HVACMode.HEAT]
    _attr_hvac_mode = HVACMode.HEAT
    _attr_supported_features = ClimateEntityFeature.TARGET_TEMPERATURE

    def __init__(self, coordinator: SpaCoordinator) -> None:
        """Initialize the climate entity."""
        super().__init__(coordinator, CAP_TARGET_TEMPERATURE)

    @property
    def current_temperature(self) -> float | None:
        """Return the water temperature."""
        return self.coordinator.capabilities.get_capability_value(
            CAP_CURRENT_TEMPERATURE
        )

    @property
    def target_temperature(self) -> float | None:
        """Return the set point."""
        return self.capability_value

    @property
    def min_temp(self) -> float:
        """Return the bottom of the active temperature range."""
        bounds = self.coordinator.capabilities.get_capability_options(
            CAP_TARGET_TEMPERATURE
        )
        return bounds[0] if bounds else DEFAULT_MIN_TEMP

    @property
    def max_temp(self) -> float:
        """Return the top of the active temperature range."""
        bounds = self.coordinator.capabilities.get_capability_options(
            CAP_TARGET_TEMPERATURE
        )
        return bounds[1] if bounds else DEFAULT_MAX_TEMP

    async def async_set_temperature(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Set the target temperature.

        Args:
            **kwargs: Keyword arguments containing temperature data.

        """
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            return

        _LOGGER.debug("%s: setting target temperature to %s", self.entity_id, temperature)
        await self.coordinator.async_set_capability(CAP_TARGET_TEMPERATURE, temperature)

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Accept the only supported mode, heating."""
        if hvac_mode != HVACMode.HEAT:
            error_msg = f"Unsupported HVAC mode: {hvac_mode}"
            raise ServiceValidationError(error_msg)
