"""Data models for the ControlMySpa integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

from .const import (
    CONF_CLOCK_24H,
    CONF_CLOCK_SYNC,
    CONF_ROUND_TEMPERATURE,
    CONF_UPDATE_INTERVAL,
    DEFAULT_CLOCK_24H,
    DEFAULT_CLOCK_SYNC,
    DEFAULT_ROUND_TEMPERATURE,
    DEFAULT_UPDATE_INTERVAL,
)


class HeaterMode(StrEnum):
    """Heater modes accepted by the spa."""

    READY = "READY"
    REST = "REST"


class TemperatureRange(StrEnum):
    """Temperature ranges of the spa."""

    HIGH = "HIGH"
    LOW = "LOW"


class ComponentType(StrEnum):
    """Component families addressable by the component-state command."""

    JET = "jet"
    BLOWER = "blower"
    LIGHT = "light"


class SpaCommand(StrEnum):
    """Command kinds, valued by their path below the command endpoint."""

    TEMPERATURE = "temperature/value"
    TEMPERATURE_RANGE = "temperature/range"
    PANEL_LOCK = "panel/state"
    COMPONENT_STATE = "component-state"
    HEATER_MODE = "temperature/heater-mode"
    FILTER_CYCLE = "filter-cycles/schedule"
    TIME = "time"


@dataclass(frozen=True)
class AuthToken:
    """Bearer token with the moment it was issued and its lifetime."""

    value: str
    issued_at: datetime
    ttl_seconds: int

    @property
    def expire_at(self) -> datetime:
        """Return the moment the token stops being valid."""
        return self.issued_at + timedelta(seconds=self.ttl_seconds)

    def is_valid(self, now: datetime | None = None) -> bool:
        """Return True while ``now`` is before the expiry."""
        if now is None:
            now = datetime.now(UTC)
        return now < self.expire_at


@dataclass(frozen=True)
class UserInfo:
    """Profile of the account owning the spa."""

    user_id: str | None
    email: str | None
    spa_id: str


@dataclass(frozen=True)
class SpaDevice:
    """Represents a spa listed for the account.

    Attributes:
        id: Spa identifier used in every command.
        name: Human-readable spa name.

    """

    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Component:
    """A physical sub-device reported in the dashboard component list."""

    component_type: str
    port: str | None
    value: str | None


@dataclass(frozen=True, slots=True)
class RangeLimits:
    """Set point bounds of the high and low temperature ranges."""

    high_low: float | None = None
    high_high: float | None = None
    low_low: float | None = None
    low_high: float | None = None


@dataclass(frozen=True, slots=True)
class SpaClock:
    """Clock fields reported by the spa."""

    hour: int | None = None
    minute: int | None = None
    time_not_set: bool = True
    military: bool = False


@dataclass(frozen=True, slots=True)
class SpaState:
    """Canonical snapshot of the spa, built from one dashboard payload."""

    desired_temp: float | None = None
    target_desired_temp: float | None = None
    current_temp: float | None = None
    panel_locked: bool = False
    heater_mode: HeaterMode | None = None
    temp_range: TemperatureRange | None = None
    online: bool = False
    components: tuple[Component, ...] = ()
    range_limits: RangeLimits = field(default_factory=RangeLimits)
    clock: SpaClock = field(default_factory=SpaClock)


@dataclass(frozen=True)
class SpaSettings:
    """User settings that drive polling and reconciliation."""

    update_interval: int = DEFAULT_UPDATE_INTERVAL
    clock_sync: bool = DEFAULT_CLOCK_SYNC
    clock_24h: bool = DEFAULT_CLOCK_24H
    round_temperature: bool = DEFAULT_ROUND_TEMPERATURE

    @classmethod
    def from_options(cls, options: dict[str, Any]) -> SpaSettings:
        """Build settings from config entry options, filling in defaults."""
        return cls(
            update_interval=int(
                options.get(CONF_UPDATE_INTERVAL, DEFAULT_UPDATE_INTERVAL)
            ),
            clock_sync=bool(options.get(CONF_CLOCK_SYNC, DEFAULT_CLOCK_SYNC)),
            clock_24h=bool(options.get(CONF_CLOCK_24H, DEFAULT_CLOCK_24H)),
            round_temperature=bool(
                options.get(CONF_ROUND_TEMPERATURE, DEFAULT_ROUND_TEMPERATURE)
            ),
        )
