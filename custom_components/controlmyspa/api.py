"""API client for the ControlMySpa cloud.

This module provides the functions and classes used to talk to the vendor
cloud, including authentication, profile and dashboard retrieval, and command
sending with the settle-then-refetch contract.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client

from .const import (
    BASE_URL,
    COMMAND_SETTLE_DELAY,
    COMMAND_VIA,
    DEFAULT_TOKEN_TTL,
    FILTER_INTERVAL_MINUTES,
    MAX_FILTER_INTERVAL_INDEX,
    REQUEST_TIMEOUT,
    TEMPERATURE_WRITE_OFFSET,
    USER_AGENT,
)
from .models import (
    AuthToken,
    ComponentType,
    HeaterMode,
    SpaCommand,
    SpaDevice,
    UserInfo,
)

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_OK = 200
HTTP_UNAUTHORIZED = 401


class ControlMySpaError(Exception):
    """Base exception for ControlMySpa client errors."""


class SpaAuthError(ControlMySpaError):
    """Exception raised when logging in fails or the session cannot be renewed."""


class SpaValidationError(ControlMySpaError):
    """Exception raised when command parameters are rejected before sending."""


class SpaApiErrorKind(StrEnum):
    """Failure classes of a vendor call."""

    TRANSPORT = "transport"
    HTTP = "http"
    MALFORMED_BODY = "malformed_body"


class SpaApiError(ControlMySpaError):
    """Exception raised for a failed vendor call."""

    def __init__(
        self,
        kind: SpaApiErrorKind,
        message: str,
        http_status: int | None = None,
    ) -> None:
        """Initialize the error with its failure class and optional status."""
        super().__init__(message)
        self.kind = kind
        self.http_status = http_status


def create_headers(token: str | None = None, *, json_body: bool = False) -> dict[str, str]:
    """Create HTTP headers for ControlMySpa requests.

    Args:
        token: Optional bearer token to include in headers.
        json_body: Whether the request carries a JSON body.

    Returns:
        Dictionary containing HTTP headers for API requests.

    """
    headers = {
        "Accept": "*/*",
        "Accept-Encoding": "gzip, deflate, br",
        "Accept-Language": "en-GB,en;q=0.9",
        "User-Agent": USER_AGENT,
    }
    if json_body:
        headers["Content-Type"] = "application/json"
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def is_success(status: int) -> bool:
    """Return True if the status code is the only one the vendor uses for success."""
    return status == HTTP_OK


def is_auth_error(status: int) -> bool:
    """Return True if the status code indicates a rejected bearer token."""
    return status == HTTP_UNAUTHORIZED


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def validate_response(response: httpx.Response) -> dict[str, Any]:
    """Validate a query response and return its ``data`` envelope.

    Args:
        response: HTTP response object to validate.

    Returns:
        The ``data`` object of the response body.

    Raises:
        SpaApiError: If the status is not 200 or the body has no ``data``.

    """
    if not is_success(response.status_code):
        message = f"Request failed: {response.status_code}"
        raise SpaApiError(SpaApiErrorKind.HTTP, message, response.status_code)

    body = _json_or_none(response)
    if not isinstance(body, dict) or not isinstance(body.get("data"), dict):
        message = "Response body is missing the data envelope"
        raise SpaApiError(
            SpaApiErrorKind.MALFORMED_BODY, message, response.status_code
        )
    return body["data"]


def validate_command_response(response: httpx.Response) -> None:
    """Validate a command response, which only has to be a 200.

    Raises:
        SpaApiError: If the status is not 200.

    """
    if not is_success(response.status_code):
        message = f"Command failed: {response.status_code}"
        raise SpaApiError(SpaApiErrorKind.HTTP, message, response.status_code)


def extract_access_token(body: Any) -> str | None:
    """Extract ``data.accessToken`` from a login response body."""
    if not isinstance(body, dict):
        return None
    data = body.get("data")
    if not isinstance(data, dict):
        return None
    token = data.get("accessToken")
    return token if isinstance(token, str) and token else None


def extract_user_info(data: dict[str, Any]) -> UserInfo:
    """Extract the profile of the account from a profile ``data`` envelope.

    Raises:
        SpaApiError: If the user object or its spa identifier is missing.

    """
    user = data.get("user")
    if not isinstance(user, dict) or not user.get("spaId"):
        message = "Profile response has no user with a spa identifier"
        raise SpaApiError(SpaApiErrorKind.MALFORMED_BODY, message, HTTP_OK)

    user_id = user.get("_id") or user.get("id")
    return UserInfo(
        user_id=str(user_id) if user_id is not None else None,
        email=user.get("email"),
        spa_id=str(user["spaId"]),
    )


def filter_interval_index(duration: timedelta) -> int:
    """Return the filter cycle interval index for a duration.

    Durations are counted in 15 minute steps from 0 (disabled) up to
    96 (24 hours).

    Raises:
        SpaValidationError: If the duration is not a whole number of steps
            or falls outside 0 to 24 hours.

    """
    minutes, remainder = divmod(int(duration.total_seconds()), 60)
    index, step_remainder = divmod(minutes, FILTER_INTERVAL_MINUTES)
    if remainder or step_remainder or not 0 <= index <= MAX_FILTER_INTERVAL_INDEX:
        message = f"Unsupported filter cycle duration: {duration}"
        raise SpaValidationError(message)
    return index


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create the HTTP client used for ControlMySpa calls.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient.

    """
    return create_async_httpx_client(hass, timeout=REQUEST_TIMEOUT)


async def _async_request(
    session: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: Any,
) -> httpx.Response:
    try:
        return await session.request(method, url, **kwargs)
    except httpx.RequestError as err:
        message = f"Connection error during {method} {url}: {err}"
        raise SpaApiError(SpaApiErrorKind.TRANSPORT, message) from err


async def async_authenticate(
    session: httpx.AsyncClient,
    email: str,
    password: str,
) -> AuthToken:
    """Authenticate with the ControlMySpa cloud using email and password.

    Args:
        session: HTTP client session.
        email: User email address.
        password: User password.

    Returns:
        A new AuthToken with the default lifetime.

    Raises:
        SpaAuthError: If the login is rejected, malformed, or cannot be sent.

    """
    url = f"{BASE_URL}/auth/login"
    payload = {"email": email, "password": password}

    _LOGGER.debug("Authenticating with ControlMySpa")
    try:
        response = await session.post(
            url, headers=create_headers(json_body=True), json=payload
        )
    except httpx.RequestError as err:
        message = f"Login request failed: {err}"
        raise SpaAuthError(message) from err

    if not is_success(response.status_code):
        message = f"Login failed: {response.status_code}"
        raise SpaAuthError(message)

    access_token = extract_access_token(_json_or_none(response))
    if access_token is None:
        message = "Login response has no access token"
        raise SpaAuthError(message)

    _LOGGER.debug("Successfully authenticated with ControlMySpa")
    return AuthToken(
        value=access_token,
        issued_at=datetime.now(UTC),
        ttl_seconds=DEFAULT_TOKEN_TTL,
    )


class AuthSession:
    """Owns the bearer token of one account and renews it on expiry.

    Concurrent callers that find the token expired share a single login.
    """

    def __init__(self, session: httpx.AsyncClient, email: str, password: str) -> None:
        """Initialize the session without a token."""
        self._session = session
        self._email = email
        self._password = password
        self._token: AuthToken | None = None
        self._login_task: asyncio.Task[AuthToken] | None = None

    @property
    def token(self) -> AuthToken | None:
        """Return the current token, valid or not."""
        return self._token

    def is_valid(self, now: datetime | None = None) -> bool:
        """Return True if a token is held and has not expired at ``now``."""
        return self._token is not None and self._token.is_valid(now)

    async def async_login(self) -> AuthToken:
        """Log in and replace the token.

        The previous token is kept if the login fails.

        Raises:
            SpaAuthError: If authentication fails.

        """
        token = await async_authenticate(self._session, self._email, self._password)
        self._token = token
        _LOGGER.info("Logged in to ControlMySpa, token valid until %s", token.expire_at)
        return token

    async def async_get_token(self) -> AuthToken:
        """Return a valid token, logging in first if needed.

        Callers arriving while a login is in flight await that login and
        get its token or its SpaAuthError.

        Raises:
            SpaAuthError: If the shared login fails.

        """
        token = self._token
        if token is not None and token.is_valid():
            return token

        if self._login_task is None:
            _LOGGER.debug("Token missing or expired, logging in")
            self._login_task = asyncio.create_task(self._async_shared_login())
        return await asyncio.shield(self._login_task)

    async def _async_shared_login(self) -> AuthToken:
        try:
            return await self.async_login()
        finally:
            self._login_task = None

    def invalidate(self, token: AuthToken) -> None:
        """Drop ``token`` if it is still the current one."""
        if self._token is token:
            _LOGGER.debug("Dropping rejected token")
            self._token = None


class SpaCommandClient:
    """Client for the ControlMySpa query and command surface of one account.

    Every successful command waits for the settle delay and then refetches
    the dashboard, since the backend applies writes asynchronously. The
    returned payload is that refetched dashboard, never the command response.
    """

    def __init__(
        self,
        session: httpx.AsyncClient,
        email: str,
        password: str,
        *,
        spa_id: str | None = None,
        settle_delay: float = COMMAND_SETTLE_DELAY,
    ) -> None:
        """Initialize the client.

        Args:
            session: HTTP client session.
            email: Account email address.
            password: Account password.
            spa_id: Spa identifier, resolved from the profile when omitted.
            settle_delay: Seconds to wait between a command and the refetch.

        """
        self._session = session
        self._auth = AuthSession(session, email, password)
        self._user: UserInfo | None = None
        self._spa_id = spa_id
        self._settle_delay = settle_delay

    @property
    def auth(self) -> AuthSession:
        """Return the authentication session."""
        return self._auth

    @property
    def spa_id(self) -> str | None:
        """Return the spa identifier, if resolved."""
        return self._spa_id

    @property
    def user(self) -> UserInfo | None:
        """Return the last fetched profile."""
        return self._user

    async def _async_authorized_request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> httpx.Response:
        token = await self._auth.async_get_token()
        headers = create_headers(token.value, json_body=payload is not None)
        response = await _async_request(
            self._session, method, f"{BASE_URL}{path}", headers=headers, json=payload
        )
        if is_auth_error(response.status_code):
            self._auth.invalidate(token)
        return response

    async def _async_get_spa_id(self) -> str:
        if self._spa_id is None:
            await self.async_fetch_profile()
        return self._spa_id

    async def async_fetch_profile(self) -> UserInfo:
        """Fetch the account profile and cache the spa identifier.

        Raises:
            SpaAuthError: If logging in fails.
            SpaApiError: If the request fails.

        """
        _LOGGER.debug("Fetching ControlMySpa profile")
        response = await self._async_authorized_request(
            "GET", "/user-management/profile"
        )
        user = extract_user_info(validate_response(response))
        self._user = user
        self._spa_id = user.spa_id
        _LOGGER.debug("Profile resolved spa %s", user.spa_id)
        return user

    async def async_list_devices(self) -> list[SpaDevice]:
        """Return the spas controllable with this account."""
        user = await self.async_fetch_profile()
        return [SpaDevice(id=user.spa_id, name=f"Spa {user.spa_id}")]

    async def async_fetch_state(self) -> dict[str, Any]:
        """Fetch the raw dashboard of the spa.

        Raises:
            SpaAuthError: If logging in fails.
            SpaApiError: If the request fails.

        """
        spa_id = await self._async_get_spa_id()
        response = await self._async_authorized_request(
            "GET", f"/spas/{spa_id}/dashboard"
        )
        data = validate_response(response)
        _LOGGER.debug("Dashboard for spa %s: %s", spa_id, data)
        return data

    async def async_send_command(
        self,
        kind: SpaCommand,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """Send a command, wait for it to settle, and return the refetched dashboard.

        Args:
            kind: Command to send.
            payload: Command specific fields.

        Returns:
            The raw dashboard fetched after the settle delay.

        Raises:
            SpaAuthError: If logging in fails.
            SpaApiError: If the command or the refetch fails.

        """
        spa_id = await self._async_get_spa_id()
        body = {"spaId": spa_id, "via": COMMAND_VIA, **payload}

        _LOGGER.debug("Sending %s command to spa %s: %s", kind.name, spa_id, payload)
        response = await self._async_authorized_request(
            "POST", f"/spa-commands/{kind.value}", body
        )
        validate_command_response(response)
        _LOGGER.debug(
            "Command %s accepted, refetching state in %.1fs",
            kind.name,
            self._settle_delay,
        )

        await asyncio.sleep(self._settle_delay)
        return await self.async_fetch_state()

    async def async_set_temperature(self, value: float) -> dict[str, Any]:
        """Set the target temperature in degrees Fahrenheit."""
        return await self.async_send_command(
            SpaCommand.TEMPERATURE,
            {"value": round(value + TEMPERATURE_WRITE_OFFSET, 1)},
        )

    async def async_set_temperature_range(self, high: bool) -> dict[str, Any]:
        """Switch between the high and low temperature range."""
        return await self.async_send_command(
            SpaCommand.TEMPERATURE_RANGE, {"range": "HIGH" if high else "LOW"}
        )

    async def async_set_panel_lock(self, locked: bool) -> dict[str, Any]:
        """Lock or unlock the spa control panel."""
        return await self.async_send_command(
            SpaCommand.PANEL_LOCK,
            {"state": "LOCK_PANEL" if locked else "UNLOCK_PANEL"},
        )

    async def async_set_component_state(
        self,
        component_type: ComponentType,
        device_number: int,
        on: bool,
    ) -> dict[str, Any]:
        """Turn a jet, blower or light on or off."""
        return await self.async_send_command(
            SpaCommand.COMPONENT_STATE,
            {
                "deviceNumber": device_number,
                "state": "HIGH" if on else "OFF",
                "componentType": ComponentType(component_type).value,
            },
        )

    async def async_set_heater_mode(self, mode: str) -> dict[str, Any]:
        """Set the heater mode.

        Raises:
            SpaValidationError: If the mode is not READY or REST.

        """
        try:
            heater_mode = HeaterMode(mode)
        except ValueError as err:
            message = f"Unsupported heater mode: {mode}"
            raise SpaValidationError(message) from err

        return await self.async_send_command(
            SpaCommand.HEATER_MODE, {"mode": heater_mode.value}
        )

    async def async_set_filter_cycle(
        self,
        device_number: int,
        interval_index: int,
        start_time: str,
    ) -> dict[str, Any]:
        """Schedule a filter cycle.

        Args:
            device_number: Filter cycle number, 0 being the primary cycle.
            interval_index: Duration as an interval index, 0 disables the cycle.
            start_time: Start time as ``HH:MM``.

        Raises:
            SpaValidationError: If the primary cycle would be disabled or the
                interval index is out of range.

        """
        if device_number == 0 and interval_index == 0:
            message = "The primary filter cycle cannot be disabled"
            raise SpaValidationError(message)
        if not 0 <= interval_index <= MAX_FILTER_INTERVAL_INDEX:
            message = f"Unsupported filter interval index: {interval_index}"
            raise SpaValidationError(message)

        return await self.async_send_command(
            SpaCommand.FILTER_CYCLE,
            {
                "deviceNumber": device_number,
                "numOfIntervals": interval_index,
                "time": start_time,
            },
        )

    async def async_set_time(
        self,
        date: str,
        time: str,
        military: bool = True,
    ) -> dict[str, Any]:
        """Set the spa clock.

        Args:
            date: Date as ``MM/DD/YYYY``.
            time: Time as ``HH:MM``.
            military: Whether the spa should display a 24 hour clock.

        """
        return await self.async_send_command(
            SpaCommand.TIME,
            {"date": date, "time": time, "isMilitaryFormat": military},
        )
