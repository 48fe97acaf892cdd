"""Base class for ControlMySpa entities."""

from __future__ import annotations

from typing import Any

from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import SpaCoordinator


class ControlMySpaEntity(CoordinatorEntity[SpaCoordinator]):
    """Entity backed by one capability of the spa."""

    _attr_has_entity_name = True

    def __init__(self, coordinator: SpaCoordinator, capability: str) -> None:
        """Initialize the entity for a capability."""
        super().__init__(coordinator)
        self._capability = capability
        spa_id = coordinator.client.spa_id
        self._attr_unique_id = f"{spa_id}_{capability}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, spa_id)},
            name=f"Spa {spa_id}",
            manufacturer="Balboa Water Group",
            model="ControlMySpa",
        )

    @property
    def capability_value(self) -> Any:  # noqa: ANN401
        """Return the current value of the backing capability."""
        return self.coordinator.capabilities.get_capability_value(self._capability)

    @property
    def available(self) -> bool:
        """Return True if the last cycle succeeded and the capability exists."""
        return super().available and self.coordinator.capabilities.has_capability(
            self._capability
        )
