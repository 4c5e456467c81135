"""Storage configuration.

Options are read from a YAML file with a top-level ``storage`` mapping::

    storage:
      base_path: ${HOME}/aistorm
      agent_templates_dir: AgentTemplates
      sessions_dir: Sessions

``${ENV_VAR}`` references in string values are resolved from the
environment, and ``AISTORM_BASE_PATH`` overrides ``base_path`` outright.
"""
from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, field_validator

BASE_PATH_ENV_VAR = "AISTORM_BASE_PATH"
_DEFAULT_BASE_PATH = str(Path.home() / ".aistorm")
_ENV_REFERENCE = re.compile(r"\$\{(\w+)\}")


class StorageOptions(BaseModel):
    """Where the markdown storage provider keeps its files.

    Parameters
    ----------
    base_path:
        Root directory.  Must not be empty.
    agent_templates_dir:
        Sub-directory for agent templates.
    sessions_dir:
        Sub-directory for session documents.
    """

    base_path: str = _DEFAULT_BASE_PATH
    agent_templates_dir: str = "AgentTemplates"
    sessions_dir: str = "Sessions"

    @field_validator("base_path", "agent_templates_dir", "sessions_dir")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("path must not be empty")
        return value.strip()


def _resolve_env_vars(value: str) -> str:
    """Replace ${ENV_VAR} patterns with environment values (empty if unset)."""
    return _ENV_REFERENCE.sub(lambda match: os.environ.get(match.group(1), ""), value)


def _walk_and_resolve(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {key: _walk_and_resolve(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_walk_and_resolve(value) for value in obj]
    if isinstance(obj, str):
        return _resolve_env_vars(obj)
    return obj


def load_storage_options(path: str | Path | None = None) -> StorageOptions:
    """Build ``StorageOptions`` from an optional YAML file and the environment.

    Parameters
    ----------
    path:
        YAML file to read.  When None, defaults are used.

    Returns
    -------
    StorageOptions
        Validated options.

    Raises
    ------
    FileNotFoundError
        If ``path`` is given but does not exist.
    ValueError
        If the file's ``storage`` entry is not a mapping or a value is invalid.
    """
    data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config not found: {config_path}")
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        section = (raw.get("storage") or {}) if isinstance(raw, dict) else None
        if not isinstance(section, dict):
            raise ValueError(f"'storage' in {config_path} must be a mapping")
        data = _walk_and_resolve(section)

    override = os.environ.get(BASE_PATH_ENV_VAR)
    if override:
        data["base_path"] = override

    return StorageOptions.model_validate(data)
