"""
Settings Loader
===============

Loads ``VaultSettings`` from an optional YAML file and ``MEMORYSTREAM_*``
environment variables.

Priority: environment variables > YAML file > defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import structlog
import yaml
from pydantic import ValidationError as PydanticValidationError

from memorystream.core.domain.config_schema import VaultSettings
from memorystream.core.domain.errors import ValidationError

logger = structlog.get_logger(__name__)

CONFIG_PATH_ENV = "MEMORYSTREAM_CONFIG"
ENV_PREFIX = "MEMORYSTREAM_"


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValidationError(
            "Settings file must contain a mapping", details={"path": str(path)}
        )
    # Allow the settings to live under a top-level ``vault:`` key.
    section = (data["vault"] or {}) if "vault" in data else data
    if not isinstance(section, dict):
        raise ValidationError(
            "The vault section must be a mapping", details={"path": str(path)}
        )
    return dict(section)


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in VaultSettings.model_fields:
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None and value != "":
            overrides[name] = value
    return overrides


def load_settings(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> VaultSettings:
    """Load vault settings.

    Args:
        config_path: Optional YAML file. Falls back to ``$MEMORYSTREAM_CONFIG``.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        Validated VaultSettings

    Raises:
        ValidationError: If the file or any value is invalid
    """
    environ = os.environ if environ is None else environ
    path = config_path or environ.get(CONFIG_PATH_ENV)

    data: dict[str, Any] = {}
    if path:
        path = Path(path)
        if not path.exists():
            raise ValidationError("Settings file not found", details={"path": str(path)})
        data = _read_yaml(path)
        logger.debug("settings.file_loaded", path=str(path))

    data.update(_env_overrides(environ))

    try:
        return VaultSettings(**data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid vault settings",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e
