"""Snapshot configuration helpers."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from .constants import (
    CONFIG_FILE,
    METADATA_DIR,
    SNAPSHOT_DIR,
    SUPPORTED_EXTENSIONS,
)
from .errors import ConfigError, InvalidIdentityModeError

logger = logging.getLogger(__name__)

IDENTITY_MODES = ("name", "path")


@dataclass
class SnapshotConfig:
    """Configuration controlling snapshot storage and file discovery."""

    snapshot_dir: str = SNAPSHOT_DIR
    metadata_dir: str = METADATA_DIR
    extensions: List[str] = field(default_factory=lambda: list(SUPPORTED_EXTENSIONS))
    probe_content: bool = True
    identity: str = "name"  # "name" or "path"
    lock_timeout: float = 30.0
    ignore: List[str] = field(default_factory=list)

    def __post_init__(self):
        if isinstance(self.extensions, str):
            raise ConfigError(f"extensions must be a list, got {self.extensions!r}")
        if self.identity not in IDENTITY_MODES:
            raise InvalidIdentityModeError(self.identity)
        if self.lock_timeout <= 0:
            raise ConfigError(f"lock_timeout must be positive, got {self.lock_timeout}")
        self.extensions = sorted({ext.lower().lstrip(".") for ext in self.extensions})


def _typed(section: Dict[str, Any], key: str, default: Any, kinds: Tuple[type, ...], cfg_path: Path) -> Any:
    """Get section[key], raising ConfigError unless it is one of kinds."""
    value = section.get(key, default)
    # bool is an int subclass; only accept it where asked for
    if isinstance(value, bool) and bool not in kinds or not isinstance(value, kinds):
        expected = " or ".join(kind.__name__ for kind in kinds)
        raise ConfigError(f"{cfg_path}: '{key}' must be {expected}, got {value!r}")
    return value


def _string_list(section: Dict[str, Any], key: str, default: List[str], cfg_path: Path) -> List[str]:
    value = _typed(section, key, default, (list,), cfg_path)
    if not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{cfg_path}: '{key}' must be a list of strings, got {value!r}")
    return value


def load_config(root: Path) -> SnapshotConfig:
    """Load configuration from imagemeta.yaml in root if present."""

    cfg_path = root / CONFIG_FILE
    if not cfg_path.exists():
        return SnapshotConfig()

    try:
        data = yaml.safe_load(cfg_path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", cfg_path, e)
        return SnapshotConfig()

    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: expected a mapping", cfg_path)
        return SnapshotConfig()

    snapshot = data.get("snapshot", data)
    if not isinstance(snapshot, dict):
        raise ConfigError(f"{cfg_path}: 'snapshot' must be a mapping")
    return SnapshotConfig(
        snapshot_dir=_typed(snapshot, "snapshot_dir", SNAPSHOT_DIR, (str,), cfg_path),
        metadata_dir=_typed(snapshot, "metadata_dir", METADATA_DIR, (str,), cfg_path),
        extensions=_string_list(snapshot, "extensions", list(SUPPORTED_EXTENSIONS), cfg_path),
        probe_content=_typed(snapshot, "probe_content", True, (bool,), cfg_path),
        identity=_typed(snapshot, "identity", "name", (str,), cfg_path),
        lock_timeout=float(_typed(snapshot, "lock_timeout", 30.0, (int, float), cfg_path)),
        ignore=_string_list(snapshot, "ignore", [], cfg_path),
    )
