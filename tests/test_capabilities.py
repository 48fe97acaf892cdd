"""Tests for the ControlMySpa capability store."""

from unittest.mock import Mock

import pytest

from custom_components.controlmyspa.capabilities import SpaCapabilityStore
from custom_components.controlmyspa.const import (
    BASE_CAPABILITIES,
    CAP_LIGHT,
    CAP_PUMP_0,
    CAP_TARGET_TEMPERATURE,
    EVENT_CAPABILITY_CHANGED,
)

SPA_ID = "spa-123"


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    return Mock()


@pytest.fixture
def store(mock_hass: Mock) -> SpaCapabilityStore:
    """Create a capability store with the base capabilities."""
    return SpaCapabilityStore(mock_hass, SPA_ID)


class TestSpaCapabilityStore:
    """Tests for SpaCapabilityStore class."""

    def test_store_exposes_base_capabilities(self, store: SpaCapabilityStore) -> None:
        """Test that a new store exposes the base capabilities without values."""
        assert store.capabilities == list(BASE_CAPABILITIES)
        assert store.has_capability(CAP_LIGHT)
        assert store.get_capability_value(CAP_LIGHT) is None
        assert not store.has_capability(CAP_PUMP_0)

    def test_set_value_of_exposed_capability(self, store: SpaCapabilityStore) -> None:
        """Test that values are stored for exposed capabilities."""
        store.set_capability_value(CAP_LIGHT, True)
        assert store.get_capability_value(CAP_LIGHT) is True

    def test_set_value_of_unknown_capability_raises(
        self, store: SpaCapabilityStore
    ) -> None:
        """Test that writing a capability that is not exposed raises KeyError."""
        with pytest.raises(KeyError):
            store.set_capability_value(CAP_PUMP_0, True)

    def test_add_and_remove_capability(self, store: SpaCapabilityStore) -> None:
        """Test that capabilities can be added and removed."""
        store.add_capability(CAP_PUMP_0)
        store.set_capability_value(CAP_PUMP_0, True)
        store.add_capability(CAP_PUMP_0)
        assert store.get_capability_value(CAP_PUMP_0) is True

        store.remove_capability(CAP_PUMP_0)
        assert not store.has_capability(CAP_PUMP_0)
        store.remove_capability(CAP_PUMP_0)

    def test_capability_options(self, store: SpaCapabilityStore) -> None:
        """Test that numeric ranges are stored per capability."""
        assert store.get_capability_options(CAP_TARGET_TEMPERATURE) is None
        store.set_capability_options(CAP_TARGET_TEMPERATURE, 80.0, 104.0)
        assert store.get_capability_options(CAP_TARGET_TEMPERATURE) == (80.0, 104.0)

    def test_notify_change_fires_event(
        self, mock_hass: Mock, store: SpaCapabilityStore
    ) -> None:
        """Test that notify_change fires a capability changed event."""
        store.notify_change(CAP_LIGHT, False)
        mock_hass.bus.async_fire.assert_called_once_with(
            EVENT_CAPABILITY_CHANGED,
            {"spa_id": SPA_ID, "capability": CAP_LIGHT, "value": False},
        )

    def test_capability_listener_called_on_add(
        self, store: SpaCapabilityStore
    ) -> None:
        """Test that listeners hear about newly exposed capabilities only."""
        listener = Mock()
        remove_listener = store.async_add_capability_listener(listener)

        store.add_capability(CAP_PUMP_0)
        store.add_capability(CAP_PUMP_0)
        store.set_capability_value(CAP_PUMP_0, True)
        listener.assert_called_once_with(CAP_PUMP_0)

        remove_listener()
        store.remove_capability(CAP_PUMP_0)
        store.add_capability(CAP_PUMP_0)
        listener.assert_called_once()
