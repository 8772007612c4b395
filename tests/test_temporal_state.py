# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the temporal state, builtin calendars and state transitions."""
import logging

import pytest

from astrolabe.domain.calendar import BucketDrainCalendar, CalendarUnit, RatioLinearCalendar
from astrolabe.domain.contracts import CalendarConfigurationError
from astrolabe.domain.temporal import days_in_month, fields_from_seconds, year_length_s
from astrolabe.domain.temporal_state import (
    BIG_BANG_TO_UNIX_EPOCH_S,
    GREGORIAN_KEY,
    STARDATE_KEY,
    TemporalState,
    advance_display,
    apply_ratio_override,
    apply_year_override,
    builtin_registry,
    commit_display,
    create_default_temporal_state,
    master_to_unix,
    normalize_temporal_state,
    resolve_temporal_display,
    save_calendar,
    set_active_calendar,
    temporal_state_from_mapping,
    temporal_state_to_mapping,
    unix_to_master,
)

DAY = 86_400


class TestClockConversion:

    def test_unix_epoch(self):
        assert unix_to_master(0) == BIG_BANG_TO_UNIX_EPOCH_S
        assert master_to_unix(BIG_BANG_TO_UNIX_EPOCH_S) == 0

    def test_fractional_seconds_floor(self):
        assert unix_to_master(1.9) == BIG_BANG_TO_UNIX_EPOCH_S + 1
        assert unix_to_master(-0.5) == BIG_BANG_TO_UNIX_EPOCH_S - 1


class TestBuiltinCalendars:
    """The Gregorian and stardate views over the master clock."""

    def test_gregorian_unix_epoch(self):
        state = create_default_temporal_state(unix_s=0)
        text = resolve_temporal_display(state).formatted
        assert text.startswith("00:00:00, ")
        assert text.endswith(" 1st January, 1970 AD")

    def test_gregorian_one_day_later(self):
        state = advance_display(create_default_temporal_state(unix_s=0), DAY + 3661)
        text = resolve_temporal_display(state).formatted
        assert text.startswith("01:01:01, ")
        assert text.endswith(" 2nd January, 1970 AD")

    def test_gregorian_mean_year(self):
        # 0.2421875 day of drift per year is exactly 31 leap days per 128 years
        gregorian = builtin_registry()[GREGORIAN_KEY]
        total = sum(year_length_s(gregorian, n) for n in range(1969, 1969 + 128))
        assert total == (128 * 365 + 31) * DAY

    def test_gregorian_unix_epoch_is_thursday(self):
        state = create_default_temporal_state(unix_s=0)
        assert resolve_temporal_display(state).formatted == "00:00:00, Thursday 1st January, 1970 AD"

    @pytest.mark.parametrize("unix_s, date, weekday", [
        (5_097_600, (1970, 3, 1), "Sunday"),
        (951_782_400, (2000, 2, 29), "Tuesday"),
        (1_709_164_800, (2024, 2, 29), "Thursday"),
        (1_792_195_200, (2026, 10, 17), "Saturday"),
    ])
    def test_gregorian_civil_dates(self, unix_s, date, weekday):
        gregorian = builtin_registry()[GREGORIAN_KEY]
        f = fields_from_seconds(gregorian, unix_to_master(unix_s))
        assert (f.year, f.month, f.day) == date
        assert f.weekday_name == weekday

    def test_gregorian_leap_years(self):
        gregorian = builtin_registry()[GREGORIAN_KEY]
        assert days_in_month(gregorian, 1970, 2) == 28
        for year in range(1993, 2028):
            expected = 29 if year % 4 == 0 else 28
            assert days_in_month(gregorian, year, 2) == expected, year

    def test_stardate_unix_epoch(self):
        state = create_default_temporal_state(unix_s=0, active_calendar_key=STARDATE_KEY)
        assert resolve_temporal_display(state).formatted == "Stardate 0.0"

    def test_stardate_one_julian_year(self):
        state = create_default_temporal_state(unix_s=31_557_600, active_calendar_key=STARDATE_KEY)
        assert resolve_temporal_display(state).formatted == "Stardate 1000.0"

    def test_registry_contents(self):
        registry = builtin_registry()
        assert isinstance(registry[GREGORIAN_KEY], BucketDrainCalendar)
        assert isinstance(registry[STARDATE_KEY], RatioLinearCalendar)
        assert registry[GREGORIAN_KEY].id == "EARTH_GREG"
        assert registry[STARDATE_KEY].id == "TNG_SD"


class TestTransitions:
    """Transitions return new states; the master clock moves only on commit."""

    def test_default_uses_current_time(self, monkeypatch):
        import astrolabe.domain.temporal_state as temporal_state
        monkeypatch.setattr(temporal_state.time, "time", lambda: 86_400.5)
        state = create_default_temporal_state()
        assert state.master_time_s == BIG_BANG_TO_UNIX_EPOCH_S + 86_400
        assert state.display_time_s == state.master_time_s

    def test_advance_then_commit(self):
        state = create_default_temporal_state(unix_s=0)
        advanced = advance_display(state, 500)
        assert advanced.master_time_s == state.master_time_s
        assert advanced.display_time_s == state.master_time_s + 500
        committed = commit_display(advanced)
        assert committed.master_time_s == committed.display_time_s
        assert state.display_time_s == state.master_time_s

    def test_set_active_calendar(self):
        state = set_active_calendar(create_default_temporal_state(unix_s=0), STARDATE_KEY)
        assert state.active_calendar.id == "TNG_SD"

    def test_set_unknown_calendar(self):
        with pytest.raises(CalendarConfigurationError):
            set_active_calendar(create_default_temporal_state(unix_s=0), "mayan")

    def test_year_override_leaves_master_and_other_calendars(self):
        state = create_default_temporal_state(unix_s=0)
        new_state, result = apply_year_override(state, 2400)
        text = resolve_temporal_display(new_state).formatted
        assert text.startswith("00:00:00, ")
        assert text.endswith(" 1st January, 2400 AD")
        assert new_state.master_time_s == state.master_time_s
        assert new_state.registry[STARDATE_KEY] == state.registry[STARDATE_KEY]
        assert result.delta_s != 0

    def test_ratio_override(self):
        state = create_default_temporal_state(unix_s=0, active_calendar_key=STARDATE_KEY)
        new_state, _ = apply_ratio_override(state, 41153.7)
        assert resolve_temporal_display(new_state).formatted == "Stardate 41153.7"

    def test_ratio_override_on_bucket_calendar(self):
        with pytest.raises(ValueError):
            apply_ratio_override(create_default_temporal_state(unix_s=0), 1.0)

    def test_save_calendar_validates(self):
        bad = BucketDrainCalendar(id="BAD", hierarchy=(CalendarUnit("year", 10),))
        with pytest.raises(CalendarConfigurationError):
            save_calendar(create_default_temporal_state(unix_s=0), "bad", bad)

    def test_save_calendar(self):
        custom = RatioLinearCalendar(id="KY", seconds_per_year=100, units_per_year=1)
        state = save_calendar(create_default_temporal_state(unix_s=0), "kilo", custom)
        assert state.registry["kilo"] == custom


class TestNormalization:

    def test_restores_builtins(self):
        state = normalize_temporal_state(TemporalState(0, 0, GREGORIAN_KEY, registry={}))
        assert set(state.registry) == {GREGORIAN_KEY, STARDATE_KEY}

    def test_repairs_unknown_active_key(self, caplog):
        with caplog.at_level(logging.WARNING, logger="astrolabe.domain.temporal_state"):
            state = normalize_temporal_state(TemporalState(0, 0, "gone"))
        assert state.active_calendar_key == GREGORIAN_KEY
        assert any("gone" in r.message for r in caplog.records)

    def test_fallback_display_without_calendar(self):
        state = TemporalState(5, 7, "missing", registry={})
        assert resolve_temporal_display(state).formatted == "t=7s"


class TestMapping:

    def test_round_trip(self):
        state, _ = apply_year_override(advance_display(create_default_temporal_state(unix_s=1e9), 12), 3001)
        data = temporal_state_to_mapping(state)
        assert data["master_time_s"] == str(state.master_time_s)
        assert isinstance(data["registry"][GREGORIAN_KEY]["epoch_offset_s"], str)
        assert temporal_state_from_mapping(data) == state

    def test_display_defaults_to_master(self):
        state = temporal_state_from_mapping({"master_time_s": "435084631200000000"})
        assert state.display_time_s == state.master_time_s == BIG_BANG_TO_UNIX_EPOCH_S
        assert set(state.registry) == {GREGORIAN_KEY, STARDATE_KEY}

    @pytest.mark.parametrize("data", [{}, {"master_time_s": "12.5"}, {"master_time_s": None}])
    def test_bad_master_clock(self, data):
        with pytest.raises(ValueError):
            temporal_state_from_mapping(data)

    def test_bad_calendar_rejected(self):
        data = {"master_time_s": 0, "registry": {"odd": {"math_type": "LUNAR"}}}
        with pytest.raises(CalendarConfigurationError):
            temporal_state_from_mapping(data)
