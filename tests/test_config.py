import logging
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
import config
from services.admission_service import Limits


def test_env_int_default(monkeypatch):
    monkeypatch.delenv("IMAGE_GUARD_TEST", raising=False)
    assert config.env_int("IMAGE_GUARD_TEST", 7) == 7


def test_env_int_reads_value(monkeypatch):
    monkeypatch.setenv("IMAGE_GUARD_TEST", "1024")
    assert config.env_int("IMAGE_GUARD_TEST", 7) == 1024


@pytest.mark.parametrize("raw", ["abc", "-1", "1.5"])
def test_env_int_rejects_bad_values(monkeypatch, raw):
    monkeypatch.setenv("IMAGE_GUARD_TEST", raw)
    with pytest.raises(ValueError, match="IMAGE_GUARD_TEST"):
        config.env_int("IMAGE_GUARD_TEST", 7)


def test_limits_default_follows_config(monkeypatch):
    monkeypatch.setattr(config, "MAX_WIDTH", 100)
    monkeypatch.setattr(config, "MAX_HEIGHT", 0)
    monkeypatch.setattr(config, "MAX_MEMORY_BYTES", 5000)
    assert Limits.default() == Limits(100, 0, 5000)


def test_configure_logging_sets_level():
    root = logging.getLogger()
    previous = root.level
    try:
        config.configure_logging("DEBUG")
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)
