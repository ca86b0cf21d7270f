import io
import logging
from pathlib import Path

import pytest

from showbiz.config import DEFAULT_DATA_FILE, Settings
from showbiz.exceptions import ValidationError
from showbiz.logging_config import configure_logging


def test_defaults():
    settings = Settings.from_env({})

    assert settings.data_file == DEFAULT_DATA_FILE
    assert settings.date_format == "iso"
    assert settings.csv_header is True
    assert settings.strict_load is True
    assert settings.log_level == "INFO"
    assert not settings.is_development
    assert settings.allowed_origins == ()


def test_values_come_from_the_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("SHOWBIZ_DATA_FILE", str(tmp_path / "books.csv"))
    monkeypatch.setenv("SHOWBIZ_DATE_FORMAT", "Dotted")
    monkeypatch.setenv("SHOWBIZ_CSV_HEADER", "no")
    monkeypatch.setenv("SHOWBIZ_STRICT_LOAD", "off")
    monkeypatch.setenv("SHOWBIZ_LOG_LEVEL", "debug")
    monkeypatch.setenv("SHOWBIZ_ENV", "development")
    monkeypatch.setenv("SHOWBIZ_ALLOWED_ORIGINS", "http://a.test, ,http://b.test")

    settings = Settings.from_env()

    assert settings.data_file == tmp_path / "books.csv"
    assert settings.date_format == "dotted"
    assert settings.csv_header is False
    assert settings.strict_load is False
    assert settings.log_level == "DEBUG"
    assert settings.is_development
    assert settings.allowed_origins == ("http://a.test", "http://b.test")


@pytest.mark.parametrize(
    "environ",
    [
        {"SHOWBIZ_DATE_FORMAT": "us"},
        {"SHOWBIZ_CSV_HEADER": "maybe"},
        {"SHOWBIZ_STRICT_LOAD": ""},
        {"SHOWBIZ_LOG_LEVEL": "LOUD"},
    ],
)
def test_bad_environment_values_are_rejected(environ):
    with pytest.raises(ValidationError):
        Settings.from_env(environ)


def test_overrides_ignore_missing_values():
    settings = Settings().with_overrides(data_file="other.csv", date_format=None, strict_load=False)

    assert settings.data_file == Path("other.csv")
    assert settings.date_format == "iso"
    assert settings.strict_load is False


def test_codec_follows_settings():
    codec = Settings(date_format="dotted", csv_header=False, strict_load=False).codec()

    assert codec.date_format == "dotted"
    assert codec.strict is False
    assert codec.fields[0] == "kind"


def test_configure_logging_is_idempotent():
    stream = io.StringIO()

    first = configure_logging("debug", stream)
    second = configure_logging("warning", stream)

    assert first is second
    assert len([h for h in first.handlers if h.get_name() == "showbiz-stream"]) == 1
    assert first.level == logging.WARNING

    logging.getLogger("showbiz.storage").warning("disk almost full")
    assert "WARNING showbiz.storage: disk almost full" in stream.getvalue()
