"""
Settings and logging tests.
"""
import json
import logging

import pytest

from config import Settings
from logging_config import _JsonFormatter
from models import LicenseStructParameters


def test_default_parameters():
    params = Settings(SEED_LENGTH=6, PAYLOAD_LENGTH=10, CHUNK_SIZE=2).parameters()
    assert params == LicenseStructParameters()


def test_parameters_from_environment(monkeypatch):
    monkeypatch.setenv("SEED_LENGTH", "16")
    monkeypatch.setenv("CHUNK_SIZE", "4")
    params = Settings().parameters()
    assert params.seed_length == 16
    assert params.chunk_size == 4
    assert params.license_length == 16 + 10 * 4 + 2


def test_invalid_layout_fails_on_build():
    with pytest.raises(ValueError):
        Settings(CHUNK_SIZE=64).parameters()


def test_blocked_seeds_are_split_and_trimmed():
    assert Settings(BLOCKED_SEEDS=" AQID , BAUG,,").blocked_seeds() == ["AQID", "BAUG"]


def test_json_formatter_includes_extra():
    record = logging.LogRecord("codec", logging.WARNING, __file__, 1, "bad %s", ("list",), None)
    record.url = "https://example.com/blocked.txt"
    line = json.loads(_JsonFormatter().format(record))
    assert line["level"] == "WARNING"
    assert line["msg"] == "bad list"
    assert line["url"] == "https://example.com/blocked.txt"
