# utils/settings.py
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

from factionmap.config import DEFAULT_THRESHOLD_LY

logger = logging.getLogger(__name__)

# One file per guild
SETTINGS_DIR = Path("data/settings")

# Default settings for a guild
DEFAULT_SETTINGS = {
    "threshold_ly": DEFAULT_THRESHOLD_LY,
    "ring_mode": "symmetric",          # or "asymmetric": only rings on the primary side
    "always_label_near_enemy": True,
    "report_channel_id": None,
}

def _path_for_guild(guild_id: int) -> Path:
    return SETTINGS_DIR / f"{guild_id}.json"

def _read_json(path: Path) -> Optional[Dict[str, Any]]:
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read settings file {path}: {e}", exc_info=True)
        return None
    return data if isinstance(data, dict) else None

def _write_json(path: Path, obj: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2), encoding="utf-8")

def load_settings(guild_id: Optional[int]) -> Dict[str, Any]:
    """
    Load settings for a guild. Creates a file with defaults if missing.
    DMs (no guild) get the defaults without touching disk.
    """
    if not guild_id:
        return DEFAULT_SETTINGS.copy()
    p = _path_for_guild(guild_id)
    data = _read_json(p)
    if data is None:
        data = DEFAULT_SETTINGS.copy()
        _write_json(p, data)
        logger.info(f"[Guild {guild_id}] Created default settings at {p}")

    # backfill new keys if we add them later
    changed = False
    for k, v in DEFAULT_SETTINGS.items():
        if k not in data:
            data[k] = v
            changed = True
    if changed:
        _write_json(p, data)
    return data

def save_settings(guild_id: int, updates: Dict[str, Any]) -> Dict[str, Any]:
    data = load_settings(guild_id)
    data.update(updates)
    _write_json(_path_for_guild(guild_id), data)
    logger.info(f"[Guild {guild_id}] Settings updated: {sorted(updates)}")
    return data
