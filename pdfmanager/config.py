"""Environment driven configuration for :mod:`pdfmanager`."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .utils import coerce_path, parse_bool

DEFAULT_OUTPUT_PATH = "pdf/generated/"

_STORAGE_ROOT_ENV = "PDF_MANAGER_STORAGE_ROOT"
_OUTPUT_PATH_ENV = "PDF_MANAGER_OUTPUT_PATH"
_VIEWS_PATH_ENV = "PDF_MANAGER_VIEWS_PATH"
_RENAME_FIELDS_ENV = "PDF_MANAGER_RENAME_FIELDS"
_LOG_LEVEL_ENV = "PDF_MANAGER_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    """Runtime settings shared by the manager and the CLI."""

    storage_root: Path = field(default_factory=Path.cwd)
    output_path: str = DEFAULT_OUTPUT_PATH
    views_path: Path = Path("views")
    rename_fields: bool = False
    log_level: str = "WARNING"


def _normalise_output_path(value: str) -> str:
    value = value.strip().lstrip("/")
    if value and not value.endswith("/"):
        value += "/"
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``PDF_MANAGER_*`` environment variables."""

    env = os.environ if environ is None else environ
    defaults = Settings()

    storage_root = env.get(_STORAGE_ROOT_ENV)
    views_path = env.get(_VIEWS_PATH_ENV)
    output_path = env.get(_OUTPUT_PATH_ENV)
    return Settings(
        storage_root=coerce_path(storage_root) if storage_root else defaults.storage_root,
        output_path=_normalise_output_path(output_path) if output_path else defaults.output_path,
        views_path=coerce_path(views_path) if views_path else defaults.views_path,
        rename_fields=parse_bool(env.get(_RENAME_FIELDS_ENV), defaults.rename_fields),
        log_level=(env.get(_LOG_LEVEL_ENV) or defaults.log_level).strip().upper(),
    )


__all__ = ["DEFAULT_OUTPUT_PATH", "Settings", "load_settings"]
