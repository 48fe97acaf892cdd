"""Sensor entities for ControlMySpa hot tubs."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
)
from homeassistant.core import callback

from .const import (
    CAP_CIRCULATION_PUMP,
    CAP_HEATER,
    CAP_HEATER_MODE,
    CAP_OZONE,
    CAP_TEMPERATURE_RANGE,
    DOMAIN,
)
from .entity import ControlMySpaEntity
from .models import HeaterMode, TemperatureRange

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import SpaCoordinator

SENSOR_DESCRIPTIONS = (
    SensorEntityDescription(
        key=CAP_HEATER_MODE,
        translation_key=CAP_HEATER_MODE,
        device_class=SensorDeviceClass.ENUM,
        options=[mode.value for mode in HeaterMode],
    ),
    SensorEntityDescription(
        key=CAP_TEMPERATURE_RANGE,
        translation_key=CAP_TEMPERATURE_RANGE,
        device_class=SensorDeviceClass.ENUM,
        options=[temp_range.value for temp_range in TemperatureRange],
    ),
    # Component state tokens as reported by the spa (OFF, ON, LOW, HIGH, ...)
    SensorEntityDescription(key=CAP_HEATER, translation_key=CAP_HEATER),
    SensorEntityDescription(
        key=CAP_CIRCULATION_PUMP, translation_key=CAP_CIRCULATION_PUMP
    ),
    SensorEntityDescription(key=CAP_OZONE, translation_key=CAP_OZONE),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensors for the capabilities the spa exposes."""
    coordinator: SpaCoordinator = hass.data[DOMAIN][entry.entry_id]
    descriptions = {description.key: description for description in SENSOR_DESCRIPTIONS}
    known: set[str] = set()

    @callback
    def async_add_sensors(capabilities: Iterable[str]) -> None:
        new = [
            capability
            for capability in capabilities
            if capability in descriptions and capability not in known
        ]
        if not new:
            return
        known.update(new)
        async_add_entities(
            [
                ControlMySpaSensorEntity(coordinator, descriptions[capability])
                for capability in new
            ]
        )

    async_add_sensors(
        key for key in descriptions if coordinator.capabilities.has_capability(key)
    )
    entry.async_on_unload(
        coordinator.capabilities.async_add_capability_listener(
            lambda capability: async_add_sensors([capability])
        )
    )


class ControlMySpaSensorEntity(ControlMySpaEntity, SensorEntity):
    """Sensor reporting a read-only capability."""

    def __init__(
        self, coordinator: SpaCoordinator, description: SensorEntityDescription
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def native_value(self) -> str | None:
        """Return the capability value."""
        return self.capability_value
