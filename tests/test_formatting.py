import logging

from fincore import config
from fincore.formatting import format_currency, format_percentage


def test_format_currency_rupiah():
    assert format_currency(1500000) == "Rp 1.500.000"
    assert format_currency(0) == "Rp 0"
    assert format_currency(-50000) == "-Rp 50.000"
    assert format_currency(999.6) == "Rp 1.000"


def test_format_percentage():
    assert format_percentage(80) == "80.0%"
    assert format_percentage(12.345) == "12.3%"


def test_seed_path_points_at_data_dir():
    assert config.get_seed_path().endswith("seed.json")


def test_log_level_resolution(monkeypatch):
    monkeypatch.setattr(config, "LOG_LEVEL", "debug")
    assert config.get_log_level() == logging.DEBUG
    monkeypatch.setattr(config, "LOG_LEVEL", "nonsense")
    assert config.get_log_level() == logging.INFO
