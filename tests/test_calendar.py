# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for calendar definition parsing and validation."""
from dataclasses import replace
from fractions import Fraction

import pytest

from astrolabe.domain.calendar import (
    BucketDrainCalendar,
    CalendarUnit,
    LeapLogic,
    MathType,
    MonthDef,
    RatioLinearCalendar,
    calendar_to_mapping,
    parse_calendar_definition,
    parse_clock_seconds,
    validate_calendar,
)
from astrolabe.domain.contracts import CalendarConfigurationError
from astrolabe.domain.temporal_state import GREGORIAN_KEY, STARDATE_KEY, builtin_registry

DAY = 86_400


def _mapping(**overrides):
    data = {
        "id": "TEST",
        "math_type": "BUCKET_DRAIN",
        "hierarchy": [
            {"unit": "sec", "multiplier": 1},
            {"unit": "year", "multiplier": 10 * DAY},
            {"unit": "min", "multiplier": 60},
            {"unit": "day", "multiplier": DAY},
            {"unit": "hour", "multiplier": 3600},
        ],
        "lookup_tables": {
            "weekdays": ["Work", "Rest"],
            "months": [{"name": "Early", "days": 4}, {"name": "Late", "days": 6}],
        },
    }
    data.update(overrides)
    return data


class TestParseBucketDrain:

    def test_hierarchy_sorted_largest_first(self):
        cal = parse_calendar_definition(_mapping())
        assert isinstance(cal, BucketDrainCalendar)
        assert [u.name for u in cal.hierarchy] == ["year", "day", "hour", "min", "sec"]
        assert cal.year_s == 10 * DAY
        assert cal.weekdays == ("Work", "Rest")
        assert cal.math_type is MathType.BUCKET_DRAIN

    def test_key_used_as_id(self):
        data = _mapping()
        del data["id"]
        assert parse_calendar_definition(data, "mine").id == "mine"

    def test_leap_logic(self):
        cal = parse_calendar_definition(_mapping(
            leap_logic={"drift_per_year_s": 3600, "threshold_s": DAY, "month_index": 0},
        ))
        assert cal.leap_logic == LeapLogic(drift_per_year_s=3600, threshold_s=DAY, month_index=0)
        assert cal.leap_month_index == 0

    def test_leap_phase_and_weekday_offset_round_trip(self):
        cal = parse_calendar_definition(_mapping(
            leap_logic={"drift_per_year_s": 3600, "threshold_s": DAY, "phase_s": 7200},
            weekday_offset=1,
        ))
        assert cal.leap_logic.phase_s == 7200
        assert cal.weekday_offset == 1
        assert parse_calendar_definition(calendar_to_mapping(cal)) == cal

    def test_default_leap_month_is_last(self):
        cal = parse_calendar_definition(_mapping(leap_logic={"drift_per_year_s": 100}))
        assert cal.leap_month_index == 1

    def test_epoch_offset_string(self):
        cal = parse_calendar_definition(_mapping(epoch_offset_s="-435084631200000000"))
        assert cal.epoch_offset_s == -435_084_631_200_000_000

    @pytest.mark.parametrize("builtin", [GREGORIAN_KEY, STARDATE_KEY])
    def test_builtin_mapping_round_trip(self, builtin):
        cal = builtin_registry()[builtin]
        data = calendar_to_mapping(cal)
        assert isinstance(data["epoch_offset_s"], str)
        assert parse_calendar_definition(data, builtin) == cal


class TestCalendarErrors:
    """Inconsistent definitions fail closed."""

    @pytest.mark.parametrize("math_type", ["SOLAR_LUNAR", None, 3])
    def test_unknown_math_type(self, math_type):
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(_mapping(math_type=math_type))

    def test_missing_math_type(self):
        data = _mapping()
        del data["math_type"]
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(data)

    def test_month_table_mismatch(self):
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(_mapping(lookup_tables={"months": [{"name": "Only", "days": 9}]}))

    def test_missing_day_unit(self):
        hierarchy = [u for u in _mapping()["hierarchy"] if u["unit"] != "day"]
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(_mapping(hierarchy=hierarchy, lookup_tables={}))

    def test_second_multiplier_must_be_one(self):
        hierarchy = [
            {"unit": "year", "multiplier": 20},
            {"unit": "day", "multiplier": 10},
            {"unit": "sec", "multiplier": 2},
        ]
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(_mapping(hierarchy=hierarchy, lookup_tables={}))

    def test_non_dividing_unit(self):
        hierarchy = [
            {"unit": "year", "multiplier": 1000},
            {"unit": "day", "multiplier": 100},
            {"unit": "hour", "multiplier": 7},
            {"unit": "sec", "multiplier": 1},
        ]
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(_mapping(hierarchy=hierarchy, lookup_tables={}))

    def test_malformed_multiplier(self):
        hierarchy = [{"unit": "year", "multiplier": "lots"}, {"unit": "sec", "multiplier": 1}]
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(_mapping(hierarchy=hierarchy))

    def test_zero_threshold(self):
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(_mapping(leap_logic={"drift_per_year_s": 10, "threshold_s": 0}))

    def test_leap_month_out_of_range(self):
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(_mapping(leap_logic={"drift_per_year_s": 10, "month_index": 5}))

    def test_drift_empties_leap_month(self):
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(_mapping(leap_logic={"drift_per_year_s": -6 * DAY}))

    def test_unit_between_year_and_day(self):
        cal = BucketDrainCalendar(
            id="W",
            hierarchy=(
                CalendarUnit("year", 28 * DAY),
                CalendarUnit("week", 7 * DAY),
                CalendarUnit("day", DAY),
                CalendarUnit("sec", 1),
            ),
        )
        with pytest.raises(CalendarConfigurationError):
            validate_calendar(cal)

    def test_unsupported_type(self):
        with pytest.raises(CalendarConfigurationError):
            validate_calendar(object())

    @pytest.mark.parametrize("overrides", [
        {"lookup_tables": []},
        {"lookup_tables": "months"},
        {"leap_logic": [1, 2]},
        {"leap_logic": 3600},
        {"lookup_tables": {"weekdays": 5}},
        {"lookup_tables": {"months": [["Early", 4]]}},
        {"hierarchy": 12},
        {"weekday_offset": "soon"},
    ])
    def test_malformed_sections(self, overrides):
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(_mapping(**overrides))

    @pytest.mark.parametrize("data", [[1, 2], "BUCKET_DRAIN", None])
    def test_definition_must_be_object(self, data):
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(data, "broken")

    @pytest.mark.parametrize("leap_logic", [
        {"drift_per_year_s": 10, "phase_s": 5},
        {"drift_per_year_s": 10, "threshold_s": DAY, "phase_s": DAY},
        {"drift_per_year_s": 10, "threshold_s": DAY, "phase_s": -1},
    ])
    def test_leap_phase_out_of_range(self, leap_logic):
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition(_mapping(leap_logic=leap_logic))


class TestRatioLinear:

    def test_parse_parameters(self):
        cal = parse_calendar_definition({
            "math_type": "RATIO_LINEAR",
            "format": "SD {val}",
            "parameters": {"seconds_per_year": 31_557_600, "units_per_year": 1000, "precision_digits": 2},
        }, "sd")
        assert isinstance(cal, RatioLinearCalendar)
        assert cal.id == "sd"
        assert cal.precision_digits == 2
        assert cal.seconds_per_unit == Fraction("31557.6")

    @pytest.mark.parametrize("field, value", [
        ("units_per_year", 0),
        ("seconds_per_year", -1),
        ("units_per_year", float("nan")),
        ("precision_digits", -1),
    ])
    def test_invalid_parameters(self, field, value):
        cal = replace(RatioLinearCalendar(id="x", seconds_per_year=100, units_per_year=1), **{field: value})
        with pytest.raises(CalendarConfigurationError):
            validate_calendar(cal)

    def test_missing_parameter(self):
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition({"math_type": "RATIO_LINEAR", "parameters": {"seconds_per_year": 10}})

    @pytest.mark.parametrize("parameters", [[1], "fast", 7])
    def test_parameters_must_be_object(self, parameters):
        with pytest.raises(CalendarConfigurationError):
            parse_calendar_definition({"math_type": "RATIO_LINEAR", "parameters": parameters}, "sd")

    def test_flat_parameters(self):
        cal = parse_calendar_definition({"math_type": "RATIO_LINEAR", "seconds_per_year": 10, "units_per_year": 1})
        assert cal.seconds_per_unit == 10


class TestParseClockSeconds:

    @pytest.mark.parametrize("value, expected", [
        (12, 12),
        ("435084631200000000", 435_084_631_200_000_000),
        (" -7 ", -7),
        (3.0, 3),
    ])
    def test_valid(self, value, expected):
        assert parse_clock_seconds(value) == expected

    @pytest.mark.parametrize("value", ["1.5", 1.5, True, None, "abc"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_clock_seconds(value)


def test_month_def_days_sum_matches_year():
    cal = parse_calendar_definition(_mapping())
    assert sum(m.days for m in cal.months) * cal.day_s == cal.year_s
    assert cal.months[0] == MonthDef("Early", 4)
