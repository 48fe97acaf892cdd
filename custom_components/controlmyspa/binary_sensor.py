"""Binary sensor reporting whether the spa is connected to the cloud."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
)

from .const import CAP_ONLINE, DOMAIN
from .entity import ControlMySpaEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import SpaCoordinator


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the connectivity sensor of a spa."""
    coordinator: SpaCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([ControlMySpaOnlineEntity(coordinator)])


class ControlMySpaOnlineEntity(ControlMySpaEntity, BinarySensorEntity):
    """Connectivity of the spa as reported by the cloud."""

    _attr_device_class = BinarySensorDeviceClass.CONNECTIVITY
    _attr_translation_key = CAP_ONLINE

    def __init__(self, coordinator: SpaCoordinator) -> None:
        """Initialize the binary sensor."""
        super().__init__(coordinator, CAP_ONLINE)

    @property
    def is_on(self) -> bool | None:
        """Return True if the spa is online."""
        return self.capability_value
