"""Constants for the ControlMySpa integration.

This module contains all the constants used throughout the integration,
including API endpoints, timing defaults, option keys and capability keys.
"""

DOMAIN = "controlmyspa"

BASE_URL = "https://production.controlmyspa.net"
USER_AGENT = "cms/34 CFNetwork/3826.500.111.2.2 Darwin/24.4.0"
COMMAND_VIA = "MOBILE"

DEFAULT_TOKEN_TTL = 3600  # Vendor does not return an expiry
COMMAND_SETTLE_DELAY = 5.0  # Seconds between a command and the state refetch
REQUEST_TIMEOUT = 10.0

# Write path offset in degrees Fahrenheit, as used by the vendor mobile app
TEMPERATURE_WRITE_OFFSET = 0.4
CLOCK_DRIFT_TOLERANCE_MINUTES = 5

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TIMEOUT = "timeout_error"
ERROR_API_ERROR = "api_error"
ERROR_UNKNOWN = "unknown_error"

CONF_SPA_ID = "spa_id"
CONF_UPDATE_INTERVAL = "update_interval"
CONF_CLOCK_SYNC = "clock_sync"
CONF_CLOCK_24H = "clock_24h"
CONF_ROUND_TEMPERATURE = "round_temperature"

DEFAULT_UPDATE_INTERVAL = 60
MIN_UPDATE_INTERVAL = 10
MAX_UPDATE_INTERVAL = 3600
DEFAULT_CLOCK_SYNC = True
DEFAULT_CLOCK_24H = True
DEFAULT_ROUND_TEMPERATURE = False

EVENT_CAPABILITY_CHANGED = f"{DOMAIN}_capability_changed"

SERVICE_SET_FILTER_CYCLE = "set_filter_cycle"
SERVICE_REFRESH = "refresh"
ATTR_FILTER = "filter"
ATTR_DURATION = "duration"
ATTR_START_TIME = "start_time"

# Filter cycle durations are expressed in 15 minute steps, 0 disables the cycle
FILTER_INTERVAL_MINUTES = 15
MAX_FILTER_INTERVAL_INDEX = 96

CAP_TARGET_TEMPERATURE = "target_temperature"
CAP_CURRENT_TEMPERATURE = "current_temperature"
CAP_PANEL_LOCK = "panel_lock"
CAP_LIGHT = "light"
CAP_HEATER_READY = "heater_ready"
CAP_TEMPERATURE_RANGE_HIGH = "temperature_range_high"
CAP_TEMPERATURE_RANGE = "temperature_range"
CAP_HEATER_MODE = "heater_mode"
CAP_ONLINE = "online"
CAP_PUMP_0 = "pump_0"
CAP_PUMP_1 = "pump_1"
CAP_PUMP_2 = "pump_2"
CAP_BLOWER_0 = "blower_0"
CAP_BLOWER_1 = "blower_1"
CAP_BLOWER_2 = "blower_2"
CAP_CIRCULATION_PUMP = "circulation_pump"
CAP_HEATER = "heater"
CAP_OZONE = "ozone"

# Capabilities every spa exposes regardless of its component list
BASE_CAPABILITIES = (
    CAP_TARGET_TEMPERATURE,
    CAP_CURRENT_TEMPERATURE,
    CAP_PANEL_LOCK,
    CAP_LIGHT,
    CAP_HEATER_READY,
    CAP_TEMPERATURE_RANGE_HIGH,
    CAP_TEMPERATURE_RANGE,
    CAP_HEATER_MODE,
    CAP_ONLINE,
)

# Capability -> (component type, port). A port of None matches any port.
COMPONENT_CAPABILITIES: dict[str, tuple[str, str | None]] = {
    CAP_PUMP_0: ("PUMP", "0"),
    CAP_PUMP_1: ("PUMP", "1"),
    CAP_PUMP_2: ("PUMP", "2"),
    CAP_BLOWER_0: ("BLOWER", "0"),
    CAP_BLOWER_1: ("BLOWER", "1"),
    CAP_BLOWER_2: ("BLOWER", "2"),
    CAP_CIRCULATION_PUMP: ("CIRCULATION_PUMP", None),
    CAP_HEATER: ("HEATER", None),
    CAP_OZONE: ("OZONE", None),
}

# Component capabilities reported as on/off rather than as the raw token
BOOLEAN_COMPONENT_CAPABILITIES = frozenset(
    {CAP_PUMP_0, CAP_PUMP_1, CAP_PUMP_2, CAP_BLOWER_0, CAP_BLOWER_1, CAP_BLOWER_2}
)

# Capabilities with a registered change trigger
TRIGGER_CAPABILITIES = frozenset(
    {
        CAP_PANEL_LOCK,
        CAP_LIGHT,
        CAP_HEATER_READY,
        CAP_TEMPERATURE_RANGE_HIGH,
        *BOOLEAN_COMPONENT_CAPABILITIES,
    }
)

ROUNDED_CAPABILITIES = frozenset({CAP_TARGET_TEMPERATURE, CAP_CURRENT_TEMPERATURE})
