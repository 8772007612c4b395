# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Calendar definitions.

A calendar is a view over the integer master clock. Two models exist:

- BUCKET_DRAIN: nested integer units (year > day > hour > min > sec) with
  a month lookup table and optional drift correction per elapsed year.
- RATIO_LINEAR: one continuously increasing scalar (e.g. a stardate).

Definitions are frozen dataclasses; parsing validates the whole
definition and fails closed on unknown models or inconsistent tables.
"""
import math
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from typing import Any, Mapping, Union

from astrolabe.domain.contracts import CalendarConfigurationError

YEAR_UNIT = "year"
DAY_UNIT = "day"
SECOND_UNIT = "sec"
SUB_DAY_UNITS = ("hour", "min", SECOND_UNIT)
DEFAULT_BUCKET_FORMAT = "{year}-{month}-{mday} {hour:02}:{min:02}:{sec:02}"
DEFAULT_RATIO_FORMAT = "{val}"


class MathType(Enum):
    BUCKET_DRAIN = "BUCKET_DRAIN"
    RATIO_LINEAR = "RATIO_LINEAR"


@dataclass(frozen=True)
class CalendarUnit:
    name: str
    multiplier_s: int


@dataclass(frozen=True)
class MonthDef:
    name: str
    days: int


@dataclass(frozen=True)
class LeapLogic:
    """Drift correction applied once per elapsed year.

    drift_per_year_s is signed (positive lengthens years). With a
    threshold, drift accumulates silently and whole threshold-sized units
    are inserted once it crosses a multiple. The surplus or deficit of a
    year lands in month_index (0-based; default last month).

    phase_s (threshold only, 0 <= phase_s < threshold_s) is drift already
    accumulated at the origin. It picks which years receive the inserted
    units without changing their long-run rate.
    """
    drift_per_year_s: int = 0
    threshold_s: int | None = None
    month_index: int | None = None
    phase_s: int = 0


@dataclass(frozen=True)
class BucketDrainCalendar:
    id: str
    hierarchy: tuple[CalendarUnit, ...]
    months: tuple[MonthDef, ...] = ()
    weekdays: tuple[str, ...] = ()
    leap_logic: LeapLogic | None = None
    epoch_offset_s: int = 0
    format: str = DEFAULT_BUCKET_FORMAT
    name: str = ""
    # weekday index of the origin's first day
    weekday_offset: int = 0

    @property
    def math_type(self) -> MathType:
        return MathType.BUCKET_DRAIN

    def unit_seconds(self, unit: str) -> int | None:
        for u in self.hierarchy:
            if u.name == unit:
                return u.multiplier_s
        return None

    @property
    def year_s(self) -> int:
        return self.unit_seconds(YEAR_UNIT)

    @property
    def day_s(self) -> int:
        return self.unit_seconds(DAY_UNIT)

    @property
    def sub_day_units(self) -> tuple[CalendarUnit, ...]:
        """Units below the day, largest first."""
        day = self.day_s
        return tuple(u for u in self.hierarchy if u.multiplier_s < day)

    @property
    def leap_month_index(self) -> int | None:
        if not self.months:
            return None
        if self.leap_logic is not None and self.leap_logic.month_index is not None:
            return self.leap_logic.month_index
        return len(self.months) - 1


@dataclass(frozen=True)
class RatioLinearCalendar:
    id: str
    seconds_per_year: int | float
    units_per_year: int | float
    epoch_offset_s: int = 0
    precision_digits: int = 1
    format: str = DEFAULT_RATIO_FORMAT
    name: str = ""

    @property
    def math_type(self) -> MathType:
        return MathType.RATIO_LINEAR

    @property
    def seconds_per_unit(self) -> Fraction:
        return exact(self.seconds_per_year) / exact(self.units_per_year)


CalendarDefinition = Union[BucketDrainCalendar, RatioLinearCalendar]


def exact(value: int | float | str | Fraction) -> Fraction:
    """Exact rational for a configured number (decimal text preserved)."""
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    return Fraction(str(value))


def parse_clock_seconds(value: Any) -> int:
    """
    Parse an integer clock value from an int or a decimal string.

    Raises:
        ValueError: Anything that is not an exact integer.
    """
    if isinstance(value, bool):
        raise ValueError(f"Clock value must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ValueError(f"Clock value must be a decimal integer, got {value!r}") from None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(f"Clock value must be an integer, got {value!r}")


def validate_calendar(calendar: CalendarDefinition) -> CalendarDefinition:
    """
    Check a calendar definition for internal consistency.

    Raises:
        CalendarConfigurationError: On any inconsistency or unknown model.
    """
    if isinstance(calendar, BucketDrainCalendar):
        _validate_bucket_drain(calendar)
    elif isinstance(calendar, RatioLinearCalendar):
        _validate_ratio_linear(calendar)
    else:
        raise CalendarConfigurationError(
            f"Unsupported calendar type {type(calendar).__name__}"
        )
    return calendar


def _validate_bucket_drain(cal: BucketDrainCalendar) -> None:
    names = [u.name for u in cal.hierarchy]
    if len(set(names)) != len(names):
        raise CalendarConfigurationError(f"Calendar {cal.id}: duplicate hierarchy units {names}")
    for unit in cal.hierarchy:
        if isinstance(unit.multiplier_s, bool) or not isinstance(unit.multiplier_s, int) or unit.multiplier_s <= 0:
            raise CalendarConfigurationError(
                f"Calendar {cal.id}: unit {unit.name} needs a positive integer multiplier"
            )
    multipliers = [u.multiplier_s for u in cal.hierarchy]
    if multipliers != sorted(set(multipliers), reverse=True):
        raise CalendarConfigurationError(
            f"Calendar {cal.id}: hierarchy must be ordered largest unit first with distinct sizes"
        )
    if cal.year_s is None or cal.day_s is None or cal.unit_seconds(SECOND_UNIT) is None:
        raise CalendarConfigurationError(
            f"Calendar {cal.id}: hierarchy needs 'year', 'day' and 'sec' units"
        )
    if cal.year_s < cal.day_s:
        raise CalendarConfigurationError(f"Calendar {cal.id}: year shorter than a day")
    extra = [u.name for u in cal.hierarchy if u.multiplier_s > cal.day_s and u.name != YEAR_UNIT]
    if extra:
        raise CalendarConfigurationError(
            f"Calendar {cal.id}: units {extra} between year and day; use the month table"
        )

    if cal.unit_seconds(SECOND_UNIT) != 1:
        raise CalendarConfigurationError(f"Calendar {cal.id}: 'sec' multiplier must be 1")
    larger = cal.day_s
    for unit in cal.sub_day_units:
        if unit.name not in SUB_DAY_UNITS:
            raise CalendarConfigurationError(
                f"Calendar {cal.id}: unsupported unit {unit.name!r} below the day"
            )
        if larger % unit.multiplier_s:
            raise CalendarConfigurationError(
                f"Calendar {cal.id}: unit {unit.name} does not divide the unit above it"
            )
        larger = unit.multiplier_s

    if cal.months:
        if any(m.days <= 0 for m in cal.months):
            raise CalendarConfigurationError(f"Calendar {cal.id}: months must have positive length")
        table_s = sum(m.days for m in cal.months) * cal.day_s
        if table_s != cal.year_s:
            raise CalendarConfigurationError(
                f"Calendar {cal.id}: month table spans {table_s} s, year is {cal.year_s} s"
            )

    leap = cal.leap_logic
    if leap is None:
        return
    if leap.threshold_s is not None and leap.threshold_s <= 0:
        raise CalendarConfigurationError(f"Calendar {cal.id}: leap threshold must be positive")
    if leap.phase_s and (leap.threshold_s is None or not 0 <= leap.phase_s < leap.threshold_s):
        raise CalendarConfigurationError(
            f"Calendar {cal.id}: leap phase {leap.phase_s} must lie in [0, threshold_s)"
        )
    idx = cal.leap_month_index
    if leap.month_index is not None and cal.months and not (0 <= leap.month_index < len(cal.months)):
        raise CalendarConfigurationError(
            f"Calendar {cal.id}: leap month index {leap.month_index} out of range"
        )
    shortest = _smallest_year_delta(leap)
    if cal.year_s + shortest <= 0:
        raise CalendarConfigurationError(f"Calendar {cal.id}: drift makes years non-positive")
    if idx is not None and cal.months[idx].days * cal.day_s + shortest <= 0:
        raise CalendarConfigurationError(
            f"Calendar {cal.id}: drift makes leap month {cal.months[idx].name} non-positive"
        )


def _smallest_year_delta(leap: LeapLogic) -> int:
    if leap.threshold_s is None:
        return leap.drift_per_year_s
    return leap.threshold_s * math.floor(Fraction(leap.drift_per_year_s, leap.threshold_s))


def _validate_ratio_linear(cal: RatioLinearCalendar) -> None:
    for label, value in (("seconds_per_year", cal.seconds_per_year), ("units_per_year", cal.units_per_year)):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
            raise CalendarConfigurationError(f"Calendar {cal.id}: {label} must be a positive number")
    if isinstance(cal.precision_digits, bool) or not isinstance(cal.precision_digits, int) or cal.precision_digits < 0:
        raise CalendarConfigurationError(f"Calendar {cal.id}: precision_digits must be a non-negative integer")


def _require(data: Mapping[str, Any], key: str, cal_id: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise CalendarConfigurationError(f"Calendar {cal_id}: missing '{key}'") from None


def parse_calendar_definition(data: Mapping[str, Any], key: str = "") -> CalendarDefinition:
    """
    Build and validate a calendar from its JSON mapping.

    Args:
        data: Mapping with a ``math_type`` discriminator.
        key: Registry key, used as id when the mapping has none.

    Raises:
        CalendarConfigurationError: Unknown math_type or invalid definition.
    """
    if not isinstance(data, Mapping):
        raise CalendarConfigurationError(
            f"Calendar {key}: definition must be an object, got {type(data).__name__}"
        )
    cal_id = str(data.get("id", key))
    raw_type = data.get("math_type")
    try:
        math_type = MathType(raw_type)
    except ValueError:
        raise CalendarConfigurationError(
            f"Calendar {cal_id or key}: unknown math_type {raw_type!r}"
        ) from None

    try:
        epoch_offset_s = parse_clock_seconds(data.get("epoch_offset_s", 0))
    except ValueError as e:
        raise CalendarConfigurationError(f"Calendar {cal_id}: {e}") from None

    if math_type is MathType.RATIO_LINEAR:
        params = _section(data, "parameters", cal_id, default=None)
        if params is None:
            params = data
        calendar: CalendarDefinition = RatioLinearCalendar(
            id=cal_id,
            name=str(data.get("name", "")),
            seconds_per_year=_require(params, "seconds_per_year", cal_id),
            units_per_year=_require(params, "units_per_year", cal_id),
            epoch_offset_s=epoch_offset_s,
            precision_digits=params.get("precision_digits", 1),
            format=str(data.get("format", DEFAULT_RATIO_FORMAT)),
        )
        return validate_calendar(calendar)

    tables = _section(data, "lookup_tables", cal_id, default={})
    leap_data = _section(data, "leap_logic", cal_id, default=None)
    try:
        hierarchy = tuple(sorted(
            (CalendarUnit(name=str(u["unit"]), multiplier_s=u["multiplier"])
             for u in _require(data, "hierarchy", cal_id)),
            key=lambda u: -u.multiplier_s,
        ))
        months = tuple(MonthDef(name=str(m["name"]), days=int(m["days"])) for m in tables.get("months", ()))
        weekdays = tuple(str(w) for w in tables.get("weekdays", ()))
        weekday_offset = int(data.get("weekday_offset", 0))
        leap = None
        if leap_data is not None:
            threshold = leap_data.get("threshold_s")
            month_index = leap_data.get("month_index")
            leap = LeapLogic(
                drift_per_year_s=int(leap_data.get("drift_per_year_s", 0)),
                threshold_s=int(threshold) if threshold is not None else None,
                month_index=int(month_index) if month_index is not None else None,
                phase_s=int(leap_data.get("phase_s", 0)),
            )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise CalendarConfigurationError(f"Calendar {cal_id}: malformed definition ({e})") from None

    calendar = BucketDrainCalendar(
        id=cal_id,
        name=str(data.get("name", "")),
        hierarchy=hierarchy,
        months=months,
        weekdays=weekdays,
        leap_logic=leap,
        epoch_offset_s=epoch_offset_s,
        format=str(data.get("format", DEFAULT_BUCKET_FORMAT)),
        weekday_offset=weekday_offset,
    )
    return validate_calendar(calendar)


def _section(data: Mapping[str, Any], key: str, cal_id: str, default: Any) -> Any:
    """Nested object of a definition; anything other than a mapping is rejected."""
    value = data.get(key, default)
    if value is not None and not isinstance(value, Mapping):
        raise CalendarConfigurationError(
            f"Calendar {cal_id}: '{key}' must be an object, got {type(value).__name__}"
        )
    return value


def calendar_to_mapping(calendar: CalendarDefinition) -> dict[str, Any]:
    """JSON-ready mapping; the epoch offset is a decimal string."""
    if isinstance(calendar, RatioLinearCalendar):
        return {
            "id": calendar.id,
            "name": calendar.name,
            "math_type": calendar.math_type.value,
            "epoch_offset_s": str(calendar.epoch_offset_s),
            "format": calendar.format,
            "parameters": {
                "seconds_per_year": calendar.seconds_per_year,
                "units_per_year": calendar.units_per_year,
                "precision_digits": calendar.precision_digits,
            },
        }
    if isinstance(calendar, BucketDrainCalendar):
        data: dict[str, Any] = {
            "id": calendar.id,
            "name": calendar.name,
            "math_type": calendar.math_type.value,
            "epoch_offset_s": str(calendar.epoch_offset_s),
            "format": calendar.format,
            "hierarchy": [{"unit": u.name, "multiplier": u.multiplier_s} for u in calendar.hierarchy],
            "lookup_tables": {
                "weekdays": list(calendar.weekdays),
                "months": [{"name": m.name, "days": m.days} for m in calendar.months],
            },
            "weekday_offset": calendar.weekday_offset,
        }
        if calendar.leap_logic is not None:
            leap = calendar.leap_logic
            data["leap_logic"] = {
                "drift_per_year_s": leap.drift_per_year_s,
                "threshold_s": leap.threshold_s,
                "month_index": leap.month_index,
                "phase_s": leap.phase_s,
            }
        return data
    raise CalendarConfigurationError(f"Unsupported calendar type {type(calendar).__name__}")
