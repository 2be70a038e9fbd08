from __future__ import annotations
import os, yaml
from typing import Any, Dict, Optional
from pydantic import ValidationError
from .schemas import SplitSettings
from ..partition.errors import ArgumentError

def _env_expand(v: Any) -> Any:
    if isinstance(v, str):
        return os.path.expandvars(v)
    if isinstance(v, dict):
        return {k: _env_expand(x) for k, x in v.items()}
    if isinstance(v, list):
        return [_env_expand(x) for x in v]
    return v

def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return _env_expand(data)

def load_settings(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> SplitSettings:
    """
    Merge the `split:` section of a YAML config with CLI overrides.
    Overrides set to None are treated as "not given".
    """
    raw: Dict[str, Any] = {}
    if path:
        if not os.path.exists(path):
            raise ArgumentError(f"Config not found: {path}")
        cfg = load_yaml(path)
        if not isinstance(cfg, dict):
            raise ArgumentError(f"Config {path} must be a mapping")
        section = cfg.get("split") or {}
        if not isinstance(section, dict):
            raise ArgumentError(f"Config {path}: 'split' must be a mapping")
        raw.update(section)
    for k, v in (overrides or {}).items():
        if v is not None:
            raw[k] = v
    try:
        return SplitSettings(**raw)
    except ValidationError as e:
        raise ArgumentError(f"Invalid settings: {e}") from e
