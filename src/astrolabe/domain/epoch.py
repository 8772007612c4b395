# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Epoch-offset solving.

Overriding a calendar's displayed date never touches the master clock:
the calendar's epoch_offset_s is shifted so the same master second reads
as the requested date. Other calendars over the same clock are unaffected.
"""
import logging
from dataclasses import dataclass, replace

from astrolabe.domain.calendar import (
    BucketDrainCalendar,
    CalendarDefinition,
    RatioLinearCalendar,
)
from astrolabe.domain.temporal import (
    CalendarFields,
    days_in_month,
    fields_from_seconds,
    month_lengths_s,
    ratio_seconds,
    seconds_from_fields,
    time_of_day_s,
    year_start_s,
)

logger = logging.getLogger(__name__)

__all__ = [
    "EpochOverride",
    "align_calendar",
    "fields_from_seconds",
    "override_ratio_value",
    "override_year",
    "seconds_from_fields",
]


@dataclass(frozen=True)
class EpochOverride:
    """Outcome of an override.

    delta_s is the change applied to the calendar's epoch offset. clamped
    means the requested date was before the calendar origin and the origin
    was used instead; day_adjusted means the day (or time of day) did not
    exist in the target year and was pulled back to the month's end.
    """
    calendar: CalendarDefinition
    delta_s: int
    clamped: bool = False
    day_adjusted: bool = False


def _local_for_fields(calendar: BucketDrainCalendar, fields: CalendarFields) -> tuple[int, bool]:
    """Local second for fields; a day past the month end moves to the month's last day."""
    year_index = fields.year - 1
    lengths = month_lengths_s(calendar, year_index)
    month_length = lengths[fields.month - 1]
    last_day = days_in_month(calendar, fields.year, fields.month)
    day = min(fields.day, last_day)
    adjusted = day != fields.day
    into_month = (day - 1) * calendar.day_s + time_of_day_s(calendar, fields)
    # a partial last day may not reach this time of day
    if into_month >= month_length:
        into_month = month_length - 1
        adjusted = True
    local = year_start_s(calendar, year_index) + sum(lengths[:fields.month - 1]) + into_month
    return local, adjusted


def override_year(calendar: BucketDrainCalendar, display_s: int, year: int) -> EpochOverride:
    """
    Make display_s read as `year`, keeping month, day and time of day.

    Args:
        calendar: BUCKET_DRAIN calendar to re-anchor.
        display_s: Master second currently displayed.
        year: Target 1-based year.

    Returns:
        EpochOverride with the re-anchored calendar.
    """
    if not isinstance(calendar, BucketDrainCalendar):
        raise ValueError(f"Year override needs a BUCKET_DRAIN calendar, got {calendar.math_type.value}")

    current = fields_from_seconds(calendar, display_s)
    clamped = False
    day_adjusted = False
    if year < 1:
        logger.warning(
            "Calendar %s: year %d precedes the calendar origin; clamping to its first instant",
            calendar.id, year,
        )
        target_local = 0
        clamped = True
    else:
        target = replace(current, year=year)
        target_local, day_adjusted = _local_for_fields(calendar, target)
        if day_adjusted:
            logger.warning(
                "Calendar %s: %s %d does not exist in year %d; using the month's last instant",
                calendar.id, current.month_name or current.month, current.day, year,
            )

    new_offset = target_local - display_s
    return EpochOverride(
        calendar=replace(calendar, epoch_offset_s=new_offset),
        delta_s=new_offset - calendar.epoch_offset_s,
        clamped=clamped,
        day_adjusted=day_adjusted,
    )


def override_ratio_value(calendar: RatioLinearCalendar, display_s: int, value) -> EpochOverride:
    """Make display_s read as `value` on a RATIO_LINEAR scale; the offset is rounded to whole seconds."""
    if not isinstance(calendar, RatioLinearCalendar):
        raise ValueError(f"Value override needs a RATIO_LINEAR calendar, got {calendar.math_type.value}")
    at_zero_offset = replace(calendar, epoch_offset_s=0)
    new_offset = round(ratio_seconds(at_zero_offset, value)) - display_s
    return EpochOverride(
        calendar=replace(calendar, epoch_offset_s=new_offset),
        delta_s=new_offset - calendar.epoch_offset_s,
    )


def align_calendar(
    calendar: BucketDrainCalendar,
    master_s: int,
    fields: CalendarFields,
    weekday: str | None = None,
) -> BucketDrainCalendar:
    """
    Re-anchor a calendar so master_s displays exactly `fields`.

    With `weekday`, the weekday offset is also set so that day reads as
    the named weekday.

    Raises:
        ValueError: fields do not exist in the calendar, or weekday is
            not one of its weekdays.
    """
    at_zero_offset = replace(calendar, epoch_offset_s=0)
    target_local = seconds_from_fields(at_zero_offset, fields)
    aligned = replace(calendar, epoch_offset_s=target_local - master_s)
    if weekday is None:
        return aligned
    if weekday not in calendar.weekdays:
        raise ValueError(f"Calendar {calendar.id} has no weekday {weekday!r}")
    days = len(calendar.weekdays)
    offset = (calendar.weekdays.index(weekday) - target_local // calendar.day_s) % days
    return replace(aligned, weekday_offset=offset)
