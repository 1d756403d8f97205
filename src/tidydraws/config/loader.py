"""Load engine settings from YAML files.

Layers are applied left to right: a later file overrides nested keys of
earlier ones, leaving sibling keys alone. ``$VAR`` / ``${VAR}`` references
in string values are expanded from the environment after merging. With no
explicit paths, ``TIDYDRAWS_CONFIG`` may list one or more files separated
by ``os.pathsep``; without it the built-in defaults apply.
"""

from __future__ import annotations

import os
from functools import reduce
from pathlib import Path
from typing import Any

import structlog
import yaml

from .schema import EngineConfig

logger = structlog.get_logger(__name__)

CONFIG_ENV_VAR = "TIDYDRAWS_CONFIG"

ConfigPaths = str | Path | list[str | Path]


def _merge_layer(base: dict[str, Any], layer: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in layer.items():
        current = out.get(key)
        out[key] = (
            _merge_layer(current, value)
            if isinstance(current, dict) and isinstance(value, dict)
            else value
        )
    return out


def _resolve_env(node: Any) -> Any:
    if isinstance(node, str):
        return os.path.expandvars(node)
    if isinstance(node, dict):
        return {key: _resolve_env(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_resolve_env(item) for item in node]
    return node


def _config_paths(paths: ConfigPaths | None) -> list[Path]:
    if paths is None:
        listed = os.environ.get(CONFIG_ENV_VAR, "")
        return [Path(p) for p in listed.split(os.pathsep) if p]
    if isinstance(paths, (str, Path)):
        return [Path(paths)]
    return [Path(p) for p in paths]


def _read_layer(path: Path) -> dict[str, Any]:
    layer = yaml.safe_load(path.read_text(encoding="utf-8"))
    if layer is None:
        return {}
    if not isinstance(layer, dict):
        raise TypeError(f"Config file {path} must hold a mapping, got {type(layer).__name__}")
    return layer


def load_config(paths: ConfigPaths | None = None) -> EngineConfig:
    """Read, merge and validate an EngineConfig.

    Raises:
        pydantic.ValidationError: If merged settings fail validation.
        FileNotFoundError: If a listed file does not exist.
        TypeError: If a file's top level is not a mapping.
    """
    files = _config_paths(paths)
    merged = reduce(_merge_layer, (_read_layer(path) for path in files), {})
    logger.debug("config_loaded", files=[str(path) for path in files])
    return EngineConfig.model_validate(_resolve_env(merged))
