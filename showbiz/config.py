"""Environment-driven settings shared by the console and the HTTP API."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .exceptions import ValidationError
from .models import DATE_FORMATS
from .storage import RecordCodec

DEFAULT_DATA_FILE = Path("data") / "finance_records.csv"
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(raw: str, name: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValidationError(f"{name} must be a boolean flag (true/false)")


@dataclass(frozen=True)
class Settings:
    data_file: Path = DEFAULT_DATA_FILE
    date_format: str = "iso"
    csv_header: bool = True
    strict_load: bool = True
    log_level: str = "INFO"
    environment: str = "prod"
    allowed_origins: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.date_format not in DATE_FORMATS:
            raise ValidationError(
                f"date format must be one of: {', '.join(sorted(DATE_FORMATS))}"
            )
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValidationError(f"log level must be one of: {', '.join(sorted(LOG_LEVELS))}")
        object.__setattr__(self, "log_level", self.log_level.upper())
        object.__setattr__(self, "data_file", Path(self.data_file))

    @property
    def is_development(self) -> bool:
        return self.environment in {"dev", "development"}

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = env.get("SHOWBIZ_ALLOWED_ORIGINS", "")
        return cls(
            data_file=Path(env.get("SHOWBIZ_DATA_FILE", str(DEFAULT_DATA_FILE))),
            date_format=env.get("SHOWBIZ_DATE_FORMAT", "iso").strip().lower(),
            csv_header=_parse_bool(env.get("SHOWBIZ_CSV_HEADER", "true"), "SHOWBIZ_CSV_HEADER"),
            strict_load=_parse_bool(env.get("SHOWBIZ_STRICT_LOAD", "true"), "SHOWBIZ_STRICT_LOAD"),
            log_level=env.get("SHOWBIZ_LOG_LEVEL", "INFO").strip(),
            environment=env.get("SHOWBIZ_ENV", "prod").strip().lower(),
            allowed_origins=tuple(
                origin.strip() for origin in origins.split(",") if origin.strip()
            ),
        )

    def with_overrides(self, **changes: object) -> "Settings":
        """Return a copy with the non-``None`` values in ``changes`` applied."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})

    def codec(self) -> RecordCodec:
        return RecordCodec(
            date_format=self.date_format,
            header=self.csv_header,
            strict=self.strict_load,
        )
