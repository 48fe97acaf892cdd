"""Tests for the ControlMySpa Config Flow."""

from unittest.mock import AsyncMock, Mock, PropertyMock, patch

import httpx
import pytest
from homeassistant.const import CONF_EMAIL, CONF_PASSWORD
from homeassistant.data_entry_flow import FlowResultType

from custom_components.controlmyspa.api import (
    SpaApiError,
    SpaApiErrorKind,
    SpaAuthError,
    SpaCommandClient,
)
from custom_components.controlmyspa.config_flow import (
    ControlMySpaConfigFlow,
    ControlMySpaOptionsFlow,
)
from custom_components.controlmyspa.const import (
    CONF_CLOCK_24H,
    CONF_CLOCK_SYNC,
    CONF_ROUND_TEMPERATURE,
    CONF_SPA_ID,
    CONF_UPDATE_INTERVAL,
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
)
from custom_components.controlmyspa.models import SpaDevice

SPA_ID = "spa-123"
USER_INPUT = {
    CONF_EMAIL: "test@example.com",
    CONF_PASSWORD: "password123",
}


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    return Mock()


@pytest.fixture
def flow(mock_hass: Mock) -> ControlMySpaConfigFlow:
    """Create a ControlMySpaConfigFlow instance for testing."""
    flow_instance = ControlMySpaConfigFlow()
    flow_instance.hass = mock_hass
    flow_instance.async_set_unique_id = AsyncMock()
    flow_instance._abort_if_unique_id_configured = Mock()
    flow_instance.async_create_entry = Mock(
        return_value={"type": FlowResultType.CREATE_ENTRY},
    )
    flow_instance.async_show_form = Mock(return_value={"type": FlowResultType.FORM})
    return flow_instance


def auth_error_with_cause(cause: Exception) -> SpaAuthError:
    """Create a login error chained to a transport failure."""
    error = SpaAuthError(f"Login request failed: {cause}")
    error.__cause__ = cause
    return error


class TestControlMySpaConfigFlowAsyncStepUser:
    """Tests for async_step_user method."""

    @pytest.mark.asyncio
    async def test_async_step_user_shows_form_when_no_input(
        self,
        flow: ControlMySpaConfigFlow,
    ) -> None:
        """Test that async_step_user shows form when no input provided."""
        result = await flow.async_step_user()
        flow.async_show_form.assert_called_once()
        assert flow.async_show_form.call_args[1]["step_id"] == "user"
        assert result["type"] == FlowResultType.FORM

    @pytest.mark.asyncio
    async def test_async_step_user_creates_entry_for_account_spa(
        self,
        flow: ControlMySpaConfigFlow,
    ) -> None:
        """Test that async_step_user creates an entry for the spa of the account."""
        with (
            patch(
                "custom_components.controlmyspa.config_flow.get_async_client",
                return_value=Mock(),
            ),
            patch.object(
                SpaCommandClient,
                "async_list_devices",
                new=AsyncMock(return_value=[SpaDevice(id=SPA_ID, name="Spa")]),
            ),
        ):
            result = await flow.async_step_user(dict(USER_INPUT))

        flow.async_set_unique_id.assert_called_once_with(SPA_ID)
        flow._abort_if_unique_id_configured.assert_called_once()
        call_args = flow.async_create_entry.call_args
        assert call_args[1]["title"] == "ControlMySpa (test@example.com)"
        assert call_args[1]["data"] == {
            CONF_EMAIL: "test@example.com",
            CONF_PASSWORD: "password123",
            CONF_SPA_ID: SPA_ID,
        }
        assert result["type"] == FlowResultType.CREATE_ENTRY

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (SpaAuthError("Login failed: 401"), ERROR_INVALID_AUTH),
            (auth_error_with_cause(httpx.ConnectError("refused")), ERROR_CANNOT_CONNECT),
            (auth_error_with_cause(httpx.ConnectTimeout("slow")), ERROR_TIMEOUT),
            (
                SpaApiError(SpaApiErrorKind.TRANSPORT, "Connection error"),
                ERROR_CANNOT_CONNECT,
            ),
            (
                SpaApiError(SpaApiErrorKind.MALFORMED_BODY, "No spa", 200),
                ERROR_API_ERROR,
            ),
            (ValueError("Unexpected"), ERROR_UNKNOWN),
        ],
    )
    @pytest.mark.asyncio
    async def test_async_step_user_shows_error(
        self,
        flow: ControlMySpaConfigFlow,
        error: Exception,
        expected: str,
    ) -> None:
        """Test that async_step_user maps failures to form errors."""
        with (
            patch(
                "custom_components.controlmyspa.config_flow.get_async_client",
                return_value=Mock(),
            ),
            patch.object(
                SpaCommandClient,
                "async_list_devices",
                new=AsyncMock(side_effect=error),
            ),
        ):
            result = await flow.async_step_user(dict(USER_INPUT))

        flow.async_create_entry.assert_not_called()
        assert flow.async_show_form.call_args[1]["errors"]["base"] == expected
        assert result["type"] == FlowResultType.FORM


class TestControlMySpaOptionsFlow:
    """Tests for the options flow."""

    @pytest.fixture
    def options_flow(self) -> ControlMySpaOptionsFlow:
        """Create an options flow for an entry without options."""
        flow_instance = ControlMySpaOptionsFlow()
        flow_instance.async_create_entry = Mock(
            return_value={"type": FlowResultType.CREATE_ENTRY},
        )
        flow_instance.async_show_form = Mock(return_value={"type": FlowResultType.FORM})
        return flow_instance

    @pytest.mark.asyncio
    async def test_options_form_shows_current_settings(
        self,
        options_flow: ControlMySpaOptionsFlow,
    ) -> None:
        """Test that the options form is shown with the defaults."""
        entry = Mock()
        entry.options = {CONF_UPDATE_INTERVAL: 30}
        with patch.object(
            ControlMySpaOptionsFlow,
            "config_entry",
            new_callable=PropertyMock,
            return_value=entry,
        ):
            result = await options_flow.async_step_init()

        call_args = options_flow.async_show_form.call_args
        assert call_args[1]["step_id"] == "init"
        validated = call_args[1]["data_schema"]({})
        assert validated == {
            CONF_UPDATE_INTERVAL: 30,
            CONF_CLOCK_SYNC: True,
            CONF_CLOCK_24H: True,
            CONF_ROUND_TEMPERATURE: False,
        }
        assert result["type"] == FlowResultType.FORM

    @pytest.mark.asyncio
    async def test_options_are_stored(
        self,
        options_flow: ControlMySpaOptionsFlow,
    ) -> None:
        """Test that submitted options create the options entry."""
        user_input = {
            CONF_UPDATE_INTERVAL: 120,
            CONF_CLOCK_SYNC: False,
            CONF_CLOCK_24H: True,
            CONF_ROUND_TEMPERATURE: True,
        }
        result = await options_flow.async_step_init(user_input)

        options_flow.async_create_entry.assert_called_once_with(data=user_input)
        assert result["type"] == FlowResultType.CREATE_ENTRY
