"""Tests for environment-driven settings and money helpers."""

import logging
import logging.handlers
from datetime import UTC
from zoneinfo import ZoneInfo

import pytest

from pos import settings
from pos.pricing.money import format_money, round_money
from pos.utils.logging import get_log_level, setup_stdlib_logging


class TestTaxRate:
    def test_default(self, monkeypatch):
        monkeypatch.delenv("POS_TAX_RATE", raising=False)
        assert settings.tax_rate() == 0.085

    def test_override(self, monkeypatch):
        monkeypatch.setenv("POS_TAX_RATE", "0.07")
        assert settings.tax_rate() == 0.07

    @pytest.mark.parametrize("raw", ["seven", "-0.1", "nan"])
    def test_invalid(self, monkeypatch, raw):
        monkeypatch.setenv("POS_TAX_RATE", raw)
        with pytest.raises(ValueError):
            settings.tax_rate()


class TestShopTimezone:
    def test_default_is_utc(self, monkeypatch):
        monkeypatch.delenv("POS_TIMEZONE", raising=False)
        assert settings.shop_timezone() is UTC

    def test_named_zone(self, monkeypatch):
        monkeypatch.setenv("POS_TIMEZONE", "Europe/Lisbon")
        assert settings.shop_timezone() == ZoneInfo("Europe/Lisbon")


class TestMoney:
    def test_rounds_half_up(self):
        assert round_money(2.675) == 2.68
        assert round_money(1.005) == 1.01

    def test_no_negative_zero(self):
        assert str(round_money(-0.001)) == "0.0"

    def test_format(self, monkeypatch):
        monkeypatch.delenv("POS_CURRENCY_SYMBOL", raising=False)
        assert format_money(12.25) == "$12.25"
        assert format_money(-5) == "-$5.00"

    def test_currency_symbol(self, monkeypatch):
        monkeypatch.setenv("POS_CURRENCY_SYMBOL", "€")
        assert format_money(3) == "€3.00"


class TestLogLevel:
    def test_explicit_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert get_log_level() == "ERROR"

    def test_test_environment_is_quiet(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ENV", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.setenv("PROTEAN_ENV", "test")
        assert get_log_level() == "WARNING"


class TestLogSinks:
    def test_console_and_rotating_file(self, monkeypatch, tmp_path):
        root_logger = logging.getLogger()
        monkeypatch.setattr(root_logger, "handlers", list(root_logger.handlers))
        monkeypatch.setattr(root_logger, "level", root_logger.level)
        monkeypatch.setenv("LOG_DIR", str(tmp_path))

        setup_stdlib_logging()

        files = [h for h in root_logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(root_logger.handlers) == 2
        assert [h.baseFilename for h in files] == [str(tmp_path / "pos.log")]
        for handler in files:
            handler.close()
