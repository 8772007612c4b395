# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Temporal resolver: master seconds ↔ calendar fields.

All BUCKET_DRAIN arithmetic is on Python ints and RATIO_LINEAR on
Fractions, so conversions are exact at any clock magnitude. Local time
is master + epoch_offset_s for both models.

Year n (0-based elapsed years; displayed as n + 1) starts at
n·year_s + cumulative_drift(n). Its surplus or deficit relative to the
base year lands in the leap month.
"""
import logging
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any

from astrolabe.domain.calendar import (
    SECOND_UNIT,
    BucketDrainCalendar,
    CalendarDefinition,
    RatioLinearCalendar,
    exact,
)
from astrolabe.domain.contracts import CalendarConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarFields:
    """Displayed BUCKET_DRAIN fields. year, month, day and day_of_year are 1-based."""
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    month_name: str = ""
    day_of_year: int = 1
    weekday: int = 0
    weekday_name: str = ""
    clamped: bool = False


@dataclass(frozen=True)
class ResolvedTemporal:
    """Rendered display string plus the values that fed it."""
    formatted: str
    placeholders: dict[str, Any] = field(default_factory=dict)
    fields: CalendarFields | None = None
    value: Fraction | None = None
    clamped: bool = False


# --- BUCKET_DRAIN ---

def cumulative_drift_s(calendar: BucketDrainCalendar, years: int) -> int:
    """Drift accumulated over the first `years` elapsed years."""
    leap = calendar.leap_logic
    if leap is None or leap.drift_per_year_s == 0:
        return 0
    total = years * leap.drift_per_year_s
    if leap.threshold_s is None:
        return total
    # phase_s < threshold_s, so year 0 starts at the origin
    return leap.threshold_s * ((total + leap.phase_s) // leap.threshold_s)


def year_start_s(calendar: BucketDrainCalendar, year_index: int) -> int:
    """Local second at which 0-based year_index begins."""
    return year_index * calendar.year_s + cumulative_drift_s(calendar, year_index)


def year_length_s(calendar: BucketDrainCalendar, year_index: int) -> int:
    return year_start_s(calendar, year_index + 1) - year_start_s(calendar, year_index)


def month_lengths_s(calendar: BucketDrainCalendar, year_index: int) -> list[int]:
    """Month lengths in seconds for one year, leap adjustment included."""
    length = year_length_s(calendar, year_index)
    if not calendar.months:
        return [length]
    lengths = [m.days * calendar.day_s for m in calendar.months]
    lengths[calendar.leap_month_index] += length - calendar.year_s
    return lengths


def locate_year(calendar: BucketDrainCalendar, local_s: int) -> tuple[int, int]:
    """
    Exact (year_index, seconds into year) for a non-negative local time.

    Brackets the mean-year estimate with doubling steps, then bisects.
    A threshold much larger than the year can put the estimate many
    years off, so the search stays logarithmic in that error.
    """
    leap = calendar.leap_logic
    mean_year = calendar.year_s + (leap.drift_per_year_s if leap is not None else 0)
    lo = hi = local_s // mean_year
    step = 1
    while year_start_s(calendar, lo) > local_s:
        lo -= step
        step *= 2
    step = 1
    while year_start_s(calendar, hi + 1) <= local_s:
        hi += step
        step *= 2
    # year_start(lo) <= local_s < year_start(hi + 1)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if year_start_s(calendar, mid) <= local_s:
            lo = mid
        else:
            hi = mid - 1
    return lo, local_s - year_start_s(calendar, lo)


def _split_day(calendar: BucketDrainCalendar, seconds_in_day: int) -> dict[str, int]:
    parts: dict[str, int] = {}
    remainder = seconds_in_day
    for unit in calendar.sub_day_units:
        parts[unit.name], remainder = divmod(remainder, unit.multiplier_s)
    return parts


def fields_from_seconds(calendar: BucketDrainCalendar, master_s: int) -> CalendarFields:
    """
    Drain master seconds into calendar fields.

    Local time before the calendar origin is clamped to the origin and
    the result is flagged clamped.
    """
    local = master_s + calendar.epoch_offset_s
    clamped = local < 0
    if clamped:
        logger.debug("Calendar %s: local time %d before origin; clamped", calendar.id, local)
        local = 0

    year_index, into_year = locate_year(calendar, local)
    lengths = month_lengths_s(calendar, year_index)

    month_index = 0
    into_month = into_year
    for month_index, length in enumerate(lengths):
        if into_month < length:
            break
        into_month -= length

    day_s = calendar.day_s
    day_in_month, into_day = divmod(into_month, day_s)
    parts = _split_day(calendar, into_day)

    weekday = (local // day_s + calendar.weekday_offset) % len(calendar.weekdays) if calendar.weekdays else 0
    return CalendarFields(
        year=year_index + 1,
        month=month_index + 1,
        day=day_in_month + 1,
        hour=parts.get("hour", 0),
        minute=parts.get("min", 0),
        second=parts.get(SECOND_UNIT, 0),
        month_name=calendar.months[month_index].name if calendar.months else "",
        day_of_year=into_year // day_s + 1,
        weekday=weekday,
        weekday_name=calendar.weekdays[weekday] if calendar.weekdays else "",
        clamped=clamped,
    )


def seconds_from_fields(calendar: BucketDrainCalendar, fields: CalendarFields) -> int:
    """
    Master seconds for calendar fields; inverse of fields_from_seconds.

    Raises:
        ValueError: Fields outside the calendar (year < 1, unknown month,
            day past the month's end, time-of-day component out of range).
    """
    if fields.year < 1:
        raise ValueError(f"Year must be >= 1, got {fields.year}")
    year_index = fields.year - 1
    lengths = month_lengths_s(calendar, year_index)
    if not 1 <= fields.month <= len(lengths):
        raise ValueError(f"Month must be in 1..{len(lengths)}, got {fields.month}")
    if fields.day < 1:
        raise ValueError(f"Day must be >= 1, got {fields.day}")

    into_month = (fields.day - 1) * calendar.day_s + time_of_day_s(calendar, fields)
    if into_month >= lengths[fields.month - 1]:
        raise ValueError(
            f"Day {fields.day} {fields.hour:02}:{fields.minute:02}:{fields.second:02} "
            f"is past the end of month {fields.month} in year {fields.year}"
        )
    local = year_start_s(calendar, year_index) + sum(lengths[:fields.month - 1]) + into_month
    return local - calendar.epoch_offset_s


def time_of_day_s(calendar: BucketDrainCalendar, fields: CalendarFields) -> int:
    """
    Seconds into the day for the hour/minute/second fields.

    Raises:
        ValueError: A component is negative, reaches the size of the unit
            above it, or is nonzero for a unit the calendar does not have.
    """
    values = {"hour": fields.hour, "min": fields.minute, SECOND_UNIT: fields.second}
    total = 0
    larger = calendar.day_s
    for name, value in values.items():
        size = calendar.unit_seconds(name)
        if size is None:
            if value:
                raise ValueError(f"Calendar {calendar.id} has no '{name}' unit, got {name}={value}")
            continue
        if not 0 <= value < larger // size:
            raise ValueError(f"{name}={value} out of range 0..{larger // size - 1}")
        total += value * size
        larger = size
    return total


def days_in_month(calendar: BucketDrainCalendar, year: int, month: int) -> int:
    """Number of (possibly partial) days in a month of a 1-based year."""
    length = month_lengths_s(calendar, year - 1)[month - 1]
    return -(-length // calendar.day_s)


def ordinal_suffix(value: int) -> str:
    if value % 10 == 1 and value % 100 != 11:
        return "st"
    if value % 10 == 2 and value % 100 != 12:
        return "nd"
    if value % 10 == 3 and value % 100 != 13:
        return "rd"
    return "th"


# --- RATIO_LINEAR ---

def ratio_value(calendar: RatioLinearCalendar, master_s: int | Fraction) -> Fraction:
    """Scalar value ((master + offset) / seconds_per_year) · units_per_year, exactly."""
    local = exact(master_s) + calendar.epoch_offset_s
    return local * exact(calendar.units_per_year) / exact(calendar.seconds_per_year)


def ratio_seconds(calendar: RatioLinearCalendar, value: int | float | str | Fraction) -> Fraction:
    """Master seconds (exact, possibly fractional) at which the scale reads value."""
    return exact(value) * calendar.seconds_per_unit - calendar.epoch_offset_s


def fixed_point(value: Fraction, digits: int) -> str:
    """Decimal rendering of an exact value, rounded half-even to digits places."""
    scale = 10 ** digits
    scaled = round(value * scale)
    sign = "-" if scaled < 0 else ""
    whole, frac = divmod(abs(scaled), scale)
    if digits == 0:
        return f"{sign}{whole}"
    return f"{sign}{whole}.{frac:0{digits}d}"


# --- Rendering ---

def _render(template: str, placeholders: dict[str, Any], calendar_id: str) -> str:
    try:
        return template.format_map(placeholders)
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
        raise CalendarConfigurationError(
            f"Calendar {calendar_id}: cannot render format {template!r} ({e})"
        ) from None


def _resolve_bucket_drain(master_s: int, calendar: BucketDrainCalendar) -> ResolvedTemporal:
    f = fields_from_seconds(calendar, master_s)
    placeholders = {
        "year": f.year,
        "month": f.month_name or str(f.month),
        "month_num": f.month,
        "mday": f.day,
        "day": f.day_of_year,
        "suffix": ordinal_suffix(f.day),
        "weekday": f.weekday_name,
        "hour": f.hour,
        "min": f.minute,
        "sec": f.second,
        "master_t": str(master_s),
    }
    return ResolvedTemporal(
        formatted=_render(calendar.format, placeholders, calendar.id),
        placeholders=placeholders,
        fields=f,
        clamped=f.clamped,
    )


def _resolve_ratio_linear(master_s: int, calendar: RatioLinearCalendar) -> ResolvedTemporal:
    value = ratio_value(calendar, master_s)
    placeholders = {
        "val": fixed_point(value, calendar.precision_digits),
        "master_t": str(master_s),
    }
    return ResolvedTemporal(
        formatted=_render(calendar.format, placeholders, calendar.id),
        placeholders=placeholders,
        value=value,
    )


def format_calendar(master_s: int, calendar: CalendarDefinition) -> ResolvedTemporal:
    """
    Render master seconds through a calendar.

    Raises:
        CalendarConfigurationError: Unknown calendar model or a format
            string naming a placeholder the model does not provide.
    """
    if isinstance(calendar, BucketDrainCalendar):
        return _resolve_bucket_drain(master_s, calendar)
    if isinstance(calendar, RatioLinearCalendar):
        return _resolve_ratio_linear(master_s, calendar)
    raise CalendarConfigurationError(
        f"Cannot resolve calendar of type {type(calendar).__name__}"
    )
