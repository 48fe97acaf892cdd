"""Switch entities for ControlMySpa hot tubs."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from homeassistant.components.switch import SwitchEntity
from homeassistant.core import callback

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
    CAP_TEMPERATURE_RANGE_HIGH,
    DOMAIN,
)
from .entity import ControlMySpaEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import SpaCoordinator

SWITCH_CAPABILITIES = (
    CAP_PANEL_LOCK,
    CAP_LIGHT,
    CAP_HEATER_READY,
    CAP_TEMPERATURE_RANGE_HIGH,
    CAP_PUMP_0,
    CAP_PUMP_1,
    CAP_PUMP_2,
    CAP_BLOWER_0,
    CAP_BLOWER_1,
    CAP_BLOWER_2,
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up switches for the capabilities the spa exposes.

    Components reported after setup get their switch when the capability
    is added.
    """
    coordinator: SpaCoordinator = hass.data[DOMAIN][entry.entry_id]
    known: set[str] = set()

    @callback
    def async_add_switches(capabilities: Iterable[str]) -> None:
        new = [
            capability
            for capability in capabilities
            if capability in SWITCH_CAPABILITIES and capability not in known
        ]
        if not new:
            return
        known.update(new)
        async_add_entities(
            [ControlMySpaSwitchEntity(coordinator, capability) for capability in new]
        )

    async_add_switches(
        capability
        for capability in SWITCH_CAPABILITIES
        if coordinator.capabilities.has_capability(capability)
    )
    entry.async_on_unload(
        coordinator.capabilities.async_add_capability_listener(
            lambda capability: async_add_switches([capability])
        )
    )


class ControlMySpaSwitchEntity(ControlMySpaEntity, SwitchEntity):
    """Switch for an on/off capability such as a pump, blower or the light."""

    def __init__(self, coordinator: SpaCoordinator, capability: str) -> None:
        """Initialize the switch."""
        super().__init__(coordinator, capability)
        self._attr_translation_key = capability

    @property
    def is_on(self) -> bool | None:
        """Return the capability state."""
        return self.capability_value

    async def async_turn_on(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Turn the capability on."""
        await self.coordinator.async_set_capability(self._capability, True)

    async def async_turn_off(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Turn the capability off."""
        await self.coordinator.async_set_capability(self._capability, False)
