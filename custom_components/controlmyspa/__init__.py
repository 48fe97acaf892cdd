"""The ControlMySpa integration."""

from __future__ import annotations

import logging

import voluptuous as vol
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_EMAIL, CONF_PASSWORD, Platform
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers import config_validation as cv

from .api import (
    ControlMySpaError,
    SpaAuthError,
    SpaCommandClient,
    SpaValidationError,
    create_session_client,
    filter_interval_index,
)
from .capabilities import SpaCapabilityStore
from .const import (
    ATTR_DURATION,
    ATTR_FILTER,
    ATTR_START_TIME,
    CONF_SPA_ID,
    DOMAIN,
    SERVICE_REFRESH,
    SERVICE_SET_FILTER_CYCLE,
)
from .coordinator import SpaCoordinator
from .models import SpaSettings

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [
    Platform.BINARY_SENSOR,
    Platform.CLIMATE,
    Platform.SENSOR,
    Platform.SWITCH,
]

SET_FILTER_CYCLE_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_SPA_ID): cv.string,
        vol.Required(ATTR_FILTER): vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Required(ATTR_DURATION): cv.time_period,
        vol.Required(ATTR_START_TIME): cv.time,
    }
)
REFRESH_SCHEMA = vol.Schema({vol.Optional(CONF_SPA_ID): cv.string})


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up ControlMySpa integration for entry %s", entry.entry_id)

    session = create_session_client(hass)
    client = SpaCommandClient(
        session,
        entry.data[CONF_EMAIL],
        entry.data[CONF_PASSWORD],
        spa_id=entry.data.get(CONF_SPA_ID),
    )

    try:
        user = await client.async_fetch_profile()
    except SpaAuthError as err:
        _LOGGER.warning("Authentication failed for entry %s: %s", entry.entry_id, err)
        return False
    except ControlMySpaError as err:
        _LOGGER.error("API error for entry %s: %s", entry.entry_id, err)
        return False

    capabilities = SpaCapabilityStore(hass, user.spa_id)
    coordinator = SpaCoordinator(
        hass, entry, client, capabilities, SpaSettings.from_options(entry.options)
    )
    await coordinator.async_config_entry_first_refresh()

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = coordinator
    _LOGGER.debug(
        "Stored coordinator for entry %s with capabilities %s",
        entry.entry_id,
        capabilities.capabilities,
    )

    entry.async_on_unload(entry.add_update_listener(async_update_options))
    _async_register_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    _LOGGER.info("Successfully set up ControlMySpa for spa %s", user.spa_id)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading ControlMySpa integration for entry %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not unload_ok:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)
        return False

    coordinator: SpaCoordinator = hass.data[DOMAIN].pop(entry.entry_id)
    await coordinator.async_shutdown()

    if not hass.data[DOMAIN]:
        hass.services.async_remove(DOMAIN, SERVICE_SET_FILTER_CYCLE)
        hass.services.async_remove(DOMAIN, SERVICE_REFRESH)
    return True


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Apply changed options to the running coordinator."""
    coordinator: SpaCoordinator = hass.data[DOMAIN][entry.entry_id]
    coordinator.apply_settings(SpaSettings.from_options(entry.options))
    await coordinator.async_request_refresh()


def _target_coordinators(hass: HomeAssistant, call: ServiceCall) -> list[SpaCoordinator]:
    spa_id = call.data.get(CONF_SPA_ID)
    return [
        coordinator
        for coordinator in hass.data.get(DOMAIN, {}).values()
        if spa_id is None or coordinator.client.spa_id == spa_id
    ]


def _async_register_services(hass: HomeAssistant) -> None:
    if hass.services.has_service(DOMAIN, SERVICE_SET_FILTER_CYCLE):
        return

    async def async_set_filter_cycle(call: ServiceCall) -> None:
        try:
            interval_index = filter_interval_index(call.data[ATTR_DURATION])
        except SpaValidationError as err:
            raise ServiceValidationError(str(err)) from err

        start_time = call.data[ATTR_START_TIME].strftime("%H:%M")
        for coordinator in _target_coordinators(hass, call):
            await coordinator.async_set_filter_cycle(
                call.data[ATTR_FILTER], interval_index, start_time
            )

    async def async_refresh(call: ServiceCall) -> None:
        for coordinator in _target_coordinators(hass, call):
            await coordinator.async_request_refresh()

    hass.services.async_register(
        DOMAIN,
        SERVICE_SET_FILTER_CYCLE,
        async_set_filter_cycle,
        schema=SET_FILTER_CYCLE_SCHEMA,
    )
    hass.services.async_register(
        DOMAIN, SERVICE_REFRESH, async_refresh, schema=REFRESH_SCHEMA
    )
