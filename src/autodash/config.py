"""Runtime settings read from ``AD_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from autodash.errors import InvalidConfiguration

DEFAULT_PERMISSIONS = ("/",)


def _parse_int(name: str, default: int | None = None) -> int | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidConfiguration(f"{name} must be an integer, got '{raw}'", {name: raw}) from None


def _positive_or_none(value: int | None) -> int | None:
    return value if value is not None and value > 0 else None


def _parse_paths(raw: str | None) -> tuple[str, ...]:
    if raw is None or not raw.strip():
        return DEFAULT_PERMISSIONS
    return tuple(p.strip() for p in raw.split(",") if p.strip())


@dataclass(frozen=True)
class Settings:
    """Knobs for a dashboard run.

    Attributes:
        rules_dir: Directory of YAML rule files (None = built-in library)
        max_candidates: Per-template cap on generated candidates (None = unbounded)
        database_id: Database id stamped on introspected metadata
        permissions: Object paths granted to the principal running the CLI
        log_level: Logging level name for the CLI
    """

    rules_dir: Path | None = None
    max_candidates: int | None = None
    database_id: int = 1
    permissions: tuple[str, ...] = field(default=DEFAULT_PERMISSIONS)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        rules_dir = os.environ.get("AD_RULES_DIR", "").strip()
        return cls(
            rules_dir=Path(rules_dir) if rules_dir else None,
            max_candidates=_positive_or_none(_parse_int("AD_MAX_CANDIDATES")),
            database_id=_parse_int("AD_DATABASE_ID", 1),
            permissions=_parse_paths(os.environ.get("AD_PERMISSIONS")),
            log_level=os.environ.get("AD_LOG_LEVEL", "WARNING").upper(),
        )
