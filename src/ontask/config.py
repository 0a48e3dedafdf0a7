# src/ontask/config.py

"""Centralized settings loaded from environment variables (+ optional .env and YAML file).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Env vars give defaults; an optional YAML file carries the structured bits
  (status filters, top task tiers) that do not fit in a single variable.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from dotenv import load_dotenv

from .core.errors import ConfigError
from .tasks.task_models import DEFAULT_RANK_TIERS, RankTier

ENV_PREFIX = "ONTASK"

DEFAULT_STATUS_SYMBOLS: Tuple[str, ...] = (".", "+", "/", "x", "!", "*", "?", "r", "b", "<", ">", "#", "-")

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    parts = [p.strip() for p in raw.replace(",", " ").split() if p.strip()]
    return parts


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def parse_symbols(raw: str) -> Dict[str, bool]:
    """
    "./x!" -> {".": True, "/": True, "x": True, "!": True}.

    "_" stands for the space status, which cannot be written in an env var.
    """
    out: Dict[str, bool] = {}
    for ch in raw:
        if ch.isspace() or ch == ",":
            continue
        out[" " if ch == "_" else ch] = True
    return out


def parse_tiers(raw: Any) -> Tuple[RankTier, ...]:
    """Tier list from YAML: [{symbol: "/", priority: 1, name: "slash"}, ...]."""
    if not isinstance(raw, list):
        raise ConfigError("top_task_tiers must be a list")
    tiers: List[RankTier] = []
    for item in raw:
        if not isinstance(item, Mapping):
            raise ConfigError(f"invalid tier entry: {item!r}")
        symbol = str(item.get("symbol", ""))
        if len(symbol) != 1:
            raise ConfigError(f"tier symbol must be one character: {symbol!r}")
        try:
            priority = int(item.get("priority"))  # type: ignore[arg-type]
        except (TypeError, ValueError) as e:
            raise ConfigError(f"tier priority must be an integer: {item!r}") from e
        tiers.append(RankTier(status_symbol=symbol, priority=priority, name=str(item.get("name", "") or "")))
    return tuple(sorted(tiers, key=lambda t: t.priority))


def load_config_file(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping. Missing file -> {}."""
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping at the top level.")
    return data


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Documents ----
    vault_root: Path
    streams: List[str]
    daily_notes_enabled: bool
    custom_folder_path: str
    include_subfolders: bool

    # ---- Scanning ----
    load_more_limit: int
    only_show_today: bool
    status_filters: Dict[str, bool]

    # ---- Ranking ----
    top_task_tiers: Tuple[RankTier, ...]

    config_file: Optional[Path] = None

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "ontask") or "ontask"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/ontask"))

        vault_root = _env_path(_k("VAULT_ROOT"), Path("."))
        streams = _env_list(_k("STREAMS"), [])
        daily_notes_enabled = _env_bool(_k("DAILY_NOTES"), True)
        custom_folder_path = _env(_k("FOLDER"), "").strip()
        include_subfolders = _env_bool(_k("INCLUDE_SUBFOLDERS"), True)

        load_more_limit = max(1, _env_int(_k("LOAD_MORE_LIMIT"), 10))
        only_show_today = _env_bool(_k("ONLY_SHOW_TODAY"), False)

        raw_symbols = os.getenv(_k("STATUS_FILTERS"))
        if raw_symbols is not None and raw_symbols.strip():
            status_filters = parse_symbols(raw_symbols)
        else:
            status_filters = {s: True for s in DEFAULT_STATUS_SYMBOLS}

        settings = Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            vault_root=vault_root,
            streams=streams,
            daily_notes_enabled=daily_notes_enabled,
            custom_folder_path=custom_folder_path,
            include_subfolders=include_subfolders,
            load_more_limit=load_more_limit,
            only_show_today=only_show_today,
            status_filters=status_filters,
            top_task_tiers=DEFAULT_RANK_TIERS,
        )

        config_file = _env_path(_k("CONFIG_FILE"), data_dir / "config.yaml")
        return settings.with_file(config_file)

    def with_file(self, path: Path) -> "Settings":
        """Apply overrides from a YAML file (if it exists)."""
        data = load_config_file(path)
        if not data:
            return self

        updates: Dict[str, Any] = {"config_file": path}

        for key in ("app_name", "log_level", "custom_folder_path"):
            if key in data:
                updates[key] = str(data[key])
        for key in ("daily_notes_enabled", "include_subfolders", "only_show_today"):
            if key in data:
                updates[key] = bool(data[key])
        if "load_more_limit" in data:
            try:
                updates["load_more_limit"] = max(1, int(data["load_more_limit"]))
            except (TypeError, ValueError) as e:
                raise ConfigError("load_more_limit must be an integer") from e
        if "vault_root" in data:
            updates["vault_root"] = Path(str(data["vault_root"])).expanduser()
        if "streams" in data:
            streams = data["streams"] or []
            if not isinstance(streams, list):
                raise ConfigError("streams must be a list")
            updates["streams"] = [str(s) for s in streams]
        if "status_filters" in data:
            filters = data["status_filters"] or {}
            if not isinstance(filters, Mapping):
                raise ConfigError("status_filters must be a mapping of symbol -> bool")
            updates["status_filters"] = {str(k): v is True for k, v in filters.items()}
        if "top_task_tiers" in data:
            updates["top_task_tiers"] = parse_tiers(data["top_task_tiers"])

        return replace(self, **updates)


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
