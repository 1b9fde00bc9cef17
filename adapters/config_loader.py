"""Config loading helpers."""
from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from config import CONFIG
from domain.work import Workcode


def load_config(path: str | Path) -> Dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(fh)
        else:
            data = json.load(fh)
    return data or {}


def merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge *override* onto a copy of *base*; lists are replaced."""

    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = merge(out[key], value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def build_config(path: Optional[str | Path] = None) -> Dict[str, Any]:
    if path is None:
        return copy.deepcopy(CONFIG)
    return merge(CONFIG, load_config(path))


def leave_catalog(config: Dict[str, Any]) -> List[Workcode]:
    return [Workcode.from_dict(entry) for entry in config.get("leave_codes", [])]


__all__ = ["load_config", "merge", "build_config", "leave_catalog"]
