"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from pixelperfect.config import (
    AppConfig,
    ScheduleConfig,
    SimulationConfig,
    StudioConfig,
    _safe_bool,
    _safe_float,
    _safe_int,
    _validate_config,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_default_schedule_has_five_slots(self):
        assert AppConfig().schedule.daily_slots == ("09:00", "11:00", "13:00", "15:00", "17:00")

    def test_empty_schedule_rejected(self):
        config = replace(AppConfig(), schedule=ScheduleConfig(daily_slots=()))
        with pytest.raises(ValueError, match="DAILY_SLOTS"):
            _validate_config(config)

    def test_malformed_slot_rejected(self):
        config = replace(AppConfig(), schedule=ScheduleConfig(daily_slots=("9am",)))
        with pytest.raises(ValueError, match="HH:MM"):
            _validate_config(config)

    def test_unsorted_slots_rejected(self):
        config = replace(AppConfig(), schedule=ScheduleConfig(daily_slots=("11:00", "09:00")))
        with pytest.raises(ValueError, match="ascending"):
            _validate_config(config)

    def test_duplicate_slots_rejected(self):
        config = replace(AppConfig(), schedule=ScheduleConfig(daily_slots=("09:00", "09:00")))
        with pytest.raises(ValueError, match="unique"):
            _validate_config(config)

    def test_booking_window_must_be_positive(self):
        config = replace(AppConfig(), schedule=ScheduleConfig(booking_window_days=0))
        with pytest.raises(ValueError, match="BOOKING_WINDOW_DAYS"):
            _validate_config(config)

    def test_negative_delay_rejected(self):
        config = replace(AppConfig(), simulation=SimulationConfig(payment_delay_sec=-1.0))
        with pytest.raises(ValueError, match="PAYMENT_DELAY_SECONDS"):
            _validate_config(config)

    def test_admin_email_must_look_like_email(self):
        config = replace(AppConfig(), studio=StudioConfig(admin_email="admin"))
        with pytest.raises(ValueError, match="ADMIN_EMAIL"):
            _validate_config(config)


class TestEnvParsing:
    def test_safe_int_parsing(self):
        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_bad_value(self, monkeypatch):
        monkeypatch.setenv("PP_TEST_INT", "many")
        with pytest.raises(ValueError, match="PP_TEST_INT"):
            _safe_int("PP_TEST_INT", "1")

    def test_safe_float_parsing(self):
        assert _safe_float("NONEXISTENT_VAR_12345", "2.5") == pytest.approx(2.5)

    @pytest.mark.parametrize("raw,expected", [("true", True), ("YES", True), ("0", False), ("off", False)])
    def test_safe_bool_parsing(self, monkeypatch, raw, expected):
        monkeypatch.setenv("PP_TEST_BOOL", raw)
        assert _safe_bool("PP_TEST_BOOL", "true") is expected

    def test_safe_bool_bad_value(self, monkeypatch):
        monkeypatch.setenv("PP_TEST_BOOL", "maybe")
        with pytest.raises(ValueError, match="PP_TEST_BOOL"):
            _safe_bool("PP_TEST_BOOL", "true")
