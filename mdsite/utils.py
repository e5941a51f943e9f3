from __future__ import annotations

import datetime as dt
import shutil
from pathlib import Path

from .errors import ConfigError

TRUE_WORDS = {"1", "true", "yes", "y", "on"}
FALSE_WORDS = {"0", "false", "no", "n", "off", ""}


def parse_flag(value: object) -> bool:
    """Parse a boolean-looking value; raises ValueError on anything else."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"not a boolean: {value!r}")
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_WORDS:
            return True
        if lowered in FALSE_WORDS:
            return False
    raise ValueError(f"not a boolean: {value!r}")


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def join_url(base: str, path: str) -> str:
    base = base.rstrip("/")
    path = path.lstrip("/")
    if not path:
        return base
    return f"{base}/{path}"


def as_utc(value: dt.datetime) -> dt.datetime:
    # Naive datetimes are taken to be UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def rfc822_date(value: dt.datetime) -> str:
    return as_utc(value).strftime("%a, %d %b %Y %H:%M:%S %z")


def iso_date(value: dt.datetime) -> str:
    return as_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def clean_output_dir(output_dir: Path, protected: list[Path]) -> None:
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    cwd = Path.cwd().resolve()
    if cwd == output_resolved or cwd.is_relative_to(output_resolved):
        raise ConfigError(f"Refusing to clean {output_dir}: it contains the working directory")
    for path in protected:
        resolved = path.resolve()
        if resolved == output_resolved or resolved.is_relative_to(output_resolved):
            raise ConfigError(f"Refusing to clean {output_dir}: it contains {path}")
    shutil.rmtree(output_dir)
