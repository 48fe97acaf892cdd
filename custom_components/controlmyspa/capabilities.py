"""Capability store backing the ControlMySpa entities."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from .const import BASE_CAPABILITIES, EVENT_CAPABILITY_CHANGED

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

_LOGGER = logging.getLogger(__name__)


class SpaCapabilityStore:
    """Holds the exposed capabilities of one spa and their current values.

    Entities read from the store; the reconciler writes into it. Change
    notifications are fired on the Home Assistant event bus so automations
    can trigger on them.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        spa_id: str,
        capabilities: Iterable[str] = BASE_CAPABILITIES,
    ) -> None:
        """Initialize the store with the capabilities every spa exposes."""
        self._hass = hass
        self._spa_id = spa_id
        self._values: dict[str, Any] = dict.fromkeys(capabilities)
        self._options: dict[str, tuple[float, float]] = {}
        self._add_listeners: list[Callable[[str], None]] = []

    def async_add_capability_listener(
        self, listener: Callable[[str], None]
    ) -> Callable[[], None]:
        """Call ``listener`` with the key of every capability added later.

        Returns:
            A callable removing the listener.

        """
        self._add_listeners.append(listener)

        def remove_listener() -> None:
            self._add_listeners.remove(listener)

        return remove_listener

    @property
    def capabilities(self) -> list[str]:
        """Return the exposed capability keys."""
        return list(self._values)

    def has_capability(self, key: str) -> bool:
        """Return True if the capability is exposed."""
        return key in self._values

    def get_capability_value(self, key: str) -> Any:  # noqa: ANN401
        """Return the value of a capability, None if unknown or not set."""
        return self._values.get(key)

    def set_capability_value(self, key: str, value: Any) -> None:  # noqa: ANN401
        """Store a new capability value.

        Raises:
            KeyError: If the capability is not exposed.

        """
        if key not in self._values:
            error_msg = f"Capability {key} is not exposed"
            raise KeyError(error_msg)
        self._values[key] = value

    def add_capability(self, key: str) -> None:
        """Expose a capability without a value."""
        if key not in self._values:
            _LOGGER.info("Adding capability %s to spa %s", key, self._spa_id)
            self._values[key] = None
            for listener in list(self._add_listeners):
                listener(key)

    def remove_capability(self, key: str) -> None:
        """Stop exposing a capability."""
        if key in self._values:
            _LOGGER.info("Removing capability %s from spa %s", key, self._spa_id)
        self._values.pop(key, None)
        self._options.pop(key, None)

    def set_capability_options(
        self, key: str, min_value: float, max_value: float
    ) -> None:
        """Set the valid range of a numeric capability."""
        self._options[key] = (min_value, max_value)

    def get_capability_options(self, key: str) -> tuple[float, float] | None:
        """Return the valid range of a numeric capability, if set."""
        return self._options.get(key)

    def notify_change(self, key: str, value: Any) -> None:  # noqa: ANN401
        """Fire a capability changed event."""
        _LOGGER.debug("Capability %s of spa %s changed to %s", key, self._spa_id, value)
        self._hass.bus.async_fire(
            EVENT_CAPABILITY_CHANGED,
            {"spa_id": self._spa_id, "capability": key, "value": value},
        )
