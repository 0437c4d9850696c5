"""Pre-DB bootstrap configuration. Zero imports from the rest of the app.

Stores settings that must be known before opening the DB (db_folder,
log_level, owner_id). Config lives in ~/.recurring_bills/config.json to avoid
a bootstrapping problem.
"""
import json
import logging
import os
from pathlib import Path

CONFIG_DIR = Path.home() / ".recurring_bills"
CONFIG_FILE = CONFIG_DIR / "config.json"

logger = logging.getLogger(__name__)


def load_config(path: Path | None = None) -> dict:
    """Returns {} on a missing or corrupt file."""
    try:
        with open(path or CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except Exception:
        logger.warning("Ignoring unreadable config file %s", path or CONFIG_FILE)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict, path: Path | None = None) -> None:
    """Creates the config dir if needed; atomic write via .tmp + os.replace()."""
    target = Path(path or CONFIG_FILE)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, target)
    except OSError:
        logger.exception("Could not write config file %s", target)
        tmp.unlink(missing_ok=True)
        raise


def get_db_folder(path: Path | None = None) -> str | None:
    """Return config["db_folder"] or None if not set."""
    return load_config(path).get("db_folder")


def set_db_folder(folder: str | None, path: Path | None = None) -> None:
    """Update db_folder in config and save."""
    config = load_config(path)
    if folder is None:
        config.pop("db_folder", None)
    else:
        config["db_folder"] = folder
    save_config(config, path)


def get_log_level(path: Path | None = None) -> str:
    return str(load_config(path).get("log_level", "INFO")).upper()


def get_owner_id(default: str, path: Path | None = None) -> str:
    return load_config(path).get("owner_id") or default
