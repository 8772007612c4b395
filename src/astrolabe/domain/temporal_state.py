# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Temporal state and its transitions.

The master clock counts integer seconds since the Big Bang and is the
single source of truth; every calendar in the registry is a view over
it. The display clock is a scratch copy that can be scrubbed and then
committed. All transitions return new states.
"""
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from astrolabe.domain.calendar import (
    BucketDrainCalendar,
    CalendarDefinition,
    CalendarUnit,
    LeapLogic,
    MonthDef,
    RatioLinearCalendar,
    calendar_to_mapping,
    parse_calendar_definition,
    parse_clock_seconds,
    validate_calendar,
)
from astrolabe.domain.contracts import CalendarConfigurationError
from astrolabe.domain.epoch import (
    EpochOverride,
    align_calendar,
    override_ratio_value,
    override_year,
)
from astrolabe.domain.temporal import CalendarFields, ResolvedTemporal, format_calendar

logger = logging.getLogger(__name__)

BIG_BANG_TO_UNIX_EPOCH_S = 435_084_631_200_000_000
FALLBACK_DISPLAY_FORMAT = "t={master_t}s"
GREGORIAN_LEAP_PHASE_S = 70_875

GREGORIAN_KEY = "gregorian_earth"
STARDATE_KEY = "star_trek_stardate"
DEFAULT_ACTIVE_KEY = GREGORIAN_KEY


def unix_to_master(unix_s: float) -> int:
    """Master seconds for a unix timestamp (fractional seconds floored)."""
    return BIG_BANG_TO_UNIX_EPOCH_S + int(unix_s // 1)


def master_to_unix(master_s: int) -> int:
    return master_s - BIG_BANG_TO_UNIX_EPOCH_S


def _gregorian_earth() -> BucketDrainCalendar:
    calendar = BucketDrainCalendar(
        id="EARTH_GREG",
        name="Gregorian (Earth)",
        hierarchy=(
            CalendarUnit("year", 31_536_000),
            CalendarUnit("day", 86_400),
            CalendarUnit("hour", 3600),
            CalendarUnit("min", 60),
            CalendarUnit("sec", 1),
        ),
        months=(
            MonthDef("January", 31), MonthDef("February", 28),
            MonthDef("March", 31), MonthDef("April", 30),
            MonthDef("May", 31), MonthDef("June", 30),
            MonthDef("July", 31), MonthDef("August", 31),
            MonthDef("September", 30), MonthDef("October", 31),
            MonthDef("November", 30), MonthDef("December", 31),
        ),
        weekdays=("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
        # 0.2421875 day per year, inserted as whole leap days into February.
        # The phase puts leap days on 1996, 2000, ... 2024, so dates agree
        # with the civil calendar from March 1992 through February 2028.
        leap_logic=LeapLogic(
            drift_per_year_s=20_925,
            threshold_s=86_400,
            month_index=1,
            phase_s=GREGORIAN_LEAP_PHASE_S,
        ),
        format="{hour:02}:{min:02}:{sec:02}, {weekday} {mday}{suffix} {month}, {year} AD",
    )
    validate_calendar(calendar)
    # Anchor so the unix epoch reads Thursday 1 January 1970, 00:00:00.
    return align_calendar(
        calendar,
        BIG_BANG_TO_UNIX_EPOCH_S,
        CalendarFields(year=1970, month=1, day=1),
        weekday="Thursday",
    )


def _star_trek_stardate() -> RatioLinearCalendar:
    return validate_calendar(RatioLinearCalendar(
        id="TNG_SD",
        name="Stardate",
        seconds_per_year=31_557_600,
        units_per_year=1000.0,
        epoch_offset_s=-BIG_BANG_TO_UNIX_EPOCH_S,
        precision_digits=1,
        format="Stardate {val}",
    ))


_BUILTIN_CALENDARS: dict[str, CalendarDefinition] = {
    GREGORIAN_KEY: _gregorian_earth(),
    STARDATE_KEY: _star_trek_stardate(),
}


def builtin_registry() -> dict[str, CalendarDefinition]:
    """Fresh copy of the builtin calendar registry."""
    return dict(_BUILTIN_CALENDARS)


@dataclass(frozen=True)
class TemporalState:
    """Master/display clock pair plus the calendar registry."""
    master_time_s: int
    display_time_s: int
    active_calendar_key: str = DEFAULT_ACTIVE_KEY
    registry: Mapping[str, CalendarDefinition] = field(default_factory=builtin_registry)

    @property
    def active_calendar(self) -> CalendarDefinition | None:
        return self.registry.get(self.active_calendar_key)


def create_default_temporal_state(
    unix_s: float | None = None,
    registry: Mapping[str, CalendarDefinition] | None = None,
    active_calendar_key: str | None = None,
) -> TemporalState:
    """
    New state with both clocks at unix_s (now when omitted).

    User calendars in `registry` are merged over the builtins.
    """
    seed = unix_to_master(time.time() if unix_s is None else unix_s)
    merged = builtin_registry()
    if registry:
        merged.update(registry)
    return normalize_temporal_state(TemporalState(
        master_time_s=seed,
        display_time_s=seed,
        active_calendar_key=active_calendar_key or DEFAULT_ACTIVE_KEY,
        registry=merged,
    ))


def normalize_temporal_state(state: TemporalState) -> TemporalState:
    """Restore missing builtin calendars and repair an unknown active key."""
    registry = dict(state.registry)
    missing = [key for key in _BUILTIN_CALENDARS if key not in registry]
    for key in missing:
        registry[key] = _BUILTIN_CALENDARS[key]
    if missing:
        logger.info("Restored builtin calendars: %s", ", ".join(missing))

    active = state.active_calendar_key
    if active not in registry:
        fallback = DEFAULT_ACTIVE_KEY if DEFAULT_ACTIVE_KEY in registry else next(iter(registry))
        logger.warning("Unknown active calendar %r; using %r", active, fallback)
        active = fallback
    return replace(state, registry=registry, active_calendar_key=active)


def advance_display(state: TemporalState, delta_s: int) -> TemporalState:
    """Move the display clock; the master clock is untouched."""
    return replace(state, display_time_s=state.display_time_s + delta_s)


def commit_display(state: TemporalState) -> TemporalState:
    """Master clock takes the display value."""
    return replace(state, master_time_s=state.display_time_s)


def set_active_calendar(state: TemporalState, key: str) -> TemporalState:
    if key not in state.registry:
        raise CalendarConfigurationError(
            f"Unknown calendar {key!r}; available: {', '.join(sorted(state.registry))}"
        )
    return replace(state, active_calendar_key=key)


def save_calendar(state: TemporalState, key: str, calendar: CalendarDefinition) -> TemporalState:
    """Add or replace a calendar after validating it."""
    validate_calendar(calendar)
    registry = dict(state.registry)
    registry[key] = calendar
    return replace(state, registry=registry)


def _active_or_raise(state: TemporalState) -> CalendarDefinition:
    calendar = state.active_calendar
    if calendar is None:
        raise CalendarConfigurationError(f"No calendar registered as {state.active_calendar_key!r}")
    return calendar


def apply_year_override(state: TemporalState, year: int) -> tuple[TemporalState, EpochOverride]:
    """Re-anchor the active BUCKET_DRAIN calendar so the display time reads `year`."""
    result = override_year(_active_or_raise(state), state.display_time_s, year)
    return save_calendar(state, state.active_calendar_key, result.calendar), result


def apply_ratio_override(state: TemporalState, value) -> tuple[TemporalState, EpochOverride]:
    """Re-anchor the active RATIO_LINEAR calendar so the display time reads `value`."""
    result = override_ratio_value(_active_or_raise(state), state.display_time_s, value)
    return save_calendar(state, state.active_calendar_key, result.calendar), result


def resolve_temporal_display(state: TemporalState) -> ResolvedTemporal:
    """Render the display clock through the active calendar, or as raw seconds without one."""
    calendar = state.active_calendar
    if calendar is None:
        master_t = str(state.display_time_s)
        return ResolvedTemporal(
            formatted=FALLBACK_DISPLAY_FORMAT.format(master_t=master_t),
            placeholders={"master_t": master_t},
        )
    return format_calendar(state.display_time_s, calendar)


def temporal_state_to_mapping(state: TemporalState) -> dict[str, Any]:
    """JSON-ready mapping; clocks and offsets are decimal strings."""
    return {
        "master_time_s": str(state.master_time_s),
        "display_time_s": str(state.display_time_s),
        "active_calendar_key": state.active_calendar_key,
        "registry": {key: calendar_to_mapping(cal) for key, cal in state.registry.items()},
    }


def temporal_state_from_mapping(data: Mapping[str, Any]) -> TemporalState:
    """
    Parse a temporal state mapping.

    A missing display clock defaults to the master clock; missing builtin
    calendars are restored.

    Raises:
        ValueError: Missing or non-integer master clock.
        CalendarConfigurationError: Any calendar fails to parse.
    """
    if "master_time_s" not in data:
        raise ValueError("Temporal state needs 'master_time_s'")
    master = parse_clock_seconds(data["master_time_s"])
    display = parse_clock_seconds(data.get("display_time_s", master))
    raw_registry = data.get("registry", {})
    if not isinstance(raw_registry, Mapping):
        raise CalendarConfigurationError(
            f"Temporal state 'registry' must be an object, got {type(raw_registry).__name__}"
        )
    registry = {
        key: parse_calendar_definition(raw, key)
        for key, raw in raw_registry.items()
    }
    return normalize_temporal_state(TemporalState(
        master_time_s=master,
        display_time_s=display,
        active_calendar_key=str(data.get("active_calendar_key", DEFAULT_ACTIVE_KEY)),
        registry=registry,
    ))
