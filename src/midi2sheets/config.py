# src/midi2sheets/config.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional, Union
import copy
import json
import logging
import yaml

from .schema import SongConfig

logger = logging.getLogger(__name__)

# Paket-Root: .../src/midi2sheets
PKG_ROOT = Path(__file__).resolve().parent
DEFAULT_CFG_PATH = PKG_ROOT / "config.default.yaml"
USER_CFG_PATH = Path.home() / ".config" / "midi2sheets" / "config.yaml"

PathLike = Union[str, Path]

def _safe_load(path: Path) -> Dict[str, Any]:
    try:
        if path.exists():
            return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        # lieber leer zurückgeben als den Core zu crashen
        logger.warning("ignoring unreadable settings file %s: %s", path, exc)
    return {}

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(a)
    for k, v in (b or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out

def load_config(
    user_path: Optional[PathLike] = None,
    default_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Pipeline settings (defaults + user overrides), merged into one dict.
    Keys: 'ticks_per_beat', 'split_point', 'chord_tolerance', 'json_indent'.
    """
    dpath = Path(default_path) if default_path else DEFAULT_CFG_PATH
    upath = Path(user_path) if user_path else USER_CFG_PATH

    cfg = _deep_merge(_safe_load(dpath), _safe_load(upath))

    # Minimal-Defaults sicherstellen
    cfg.setdefault("ticks_per_beat", 480)
    cfg.setdefault("split_point", 60)
    cfg.setdefault("chord_tolerance", 10)
    cfg.setdefault("json_indent", 2)
    return cfg

def get_ticks_per_beat(cfg: Dict[str, Any]) -> int:
    try:
        return int(cfg.get("ticks_per_beat", 480))
    except (TypeError, ValueError):
        return 480

def read_song_config_data(path: PathLike) -> Any:
    """Raw song config from a .yaml/.yml or .json file (not validated)."""
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)

def load_song_config(path: PathLike) -> SongConfig:
    """Raises pydantic.ValidationError for an invalid config."""
    return SongConfig.model_validate(read_song_config_data(path))
