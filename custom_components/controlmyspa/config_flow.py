"""
Configuration flow for the ControlMySpa integration.

This module handles pairing a ControlMySpa account and editing the polling
and clock options through Home Assistant's config flow system.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
import voluptuous as vol
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.const import CONF_EMAIL, CONF_PASSWORD
from homeassistant.core import callback
from homeassistant.helpers.httpx_client import get_async_client

from .api import SpaApiError, SpaApiErrorKind, SpaAuthError, SpaCommandClient
from .const import (
    CONF_CLOCK_24H,
    CONF_CLOCK_SYNC,
    CONF_ROUND_TEMPERATURE,
    CONF_SPA_ID,
    CONF_UPDATE_INTERVAL,
    DOMAIN,
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
    MAX_UPDATE_INTERVAL,
    MIN_UPDATE_INTERVAL,
)
from .models import SpaSettings

_LOGGER = logging.getLogger(__name__)


def _auth_error_code(err: SpaAuthError) -> str:
    """Map a login failure to a form error, looking at its transport cause."""
    if isinstance(err.__cause__, httpx.TimeoutException):
        return ERROR_TIMEOUT
    if isinstance(err.__cause__, httpx.RequestError):
        return ERROR_CANNOT_CONNECT
    return ERROR_INVALID_AUTH


class ControlMySpaConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for the ControlMySpa integration."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input data containing email and password.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            email = user_input[CONF_EMAIL]
            password = user_input[CONF_PASSWORD]
            client = SpaCommandClient(get_async_client(self.hass), email, password)

            try:
                devices = await client.async_list_devices()
                _LOGGER.info("Successfully authenticated with ControlMySpa")

            except SpaAuthError as err:
                errors["base"] = _auth_error_code(err)
                _LOGGER.warning("Authentication failed (%s): %s", errors["base"], err)
            except SpaApiError as err:
                if err.kind is SpaApiErrorKind.TRANSPORT:
                    errors["base"] = ERROR_CANNOT_CONNECT
                else:
                    errors["base"] = ERROR_API_ERROR
                _LOGGER.exception("API client error (%s)", errors["base"])
            except Exception:
                _LOGGER.exception(
                    "Unexpected error during authentication (%s)",
                    ERROR_UNKNOWN,
                )
                errors["base"] = ERROR_UNKNOWN

            else:
                device = devices[0]
                await self.async_set_unique_id(device.id)
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=f"ControlMySpa ({email})",
                    data={
                        CONF_EMAIL: email,
                        CONF_PASSWORD: password,
                        CONF_SPA_ID: device.id,
                    },
                )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_EMAIL): str,
                    vol.Required(CONF_PASSWORD): str,
                }
            ),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> OptionsFlow:
        """Return the options flow handler."""
        return ControlMySpaOptionsFlow()


class ControlMySpaOptionsFlow(OptionsFlow):
    """Edit polling, clock and rounding options."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Show the options form and store the result."""
        if user_input is not None:
            return self.async_create_entry(data=user_input)

        settings = SpaSettings.from_options(self.config_entry.options)
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Required(
                        CONF_UPDATE_INTERVAL, default=settings.update_interval
                    ): vol.All(
                        vol.Coerce(int),
                        vol.Range(min=MIN_UPDATE_INTERVAL, max=MAX_UPDATE_INTERVAL),
                    ),
                    vol.Required(CONF_CLOCK_SYNC, default=settings.clock_sync): bool,
                    vol.Required(CONF_CLOCK_24H, default=settings.clock_24h): bool,
                    vol.Required(
                        CONF_ROUND_TEMPERATURE, default=settings.round_temperature
                    ): bool,
                }
            ),
        )
