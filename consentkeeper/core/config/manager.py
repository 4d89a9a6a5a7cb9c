from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from consentkeeper.core.config.io import atomic_write_json, ensure_dirs, quarantine_corrupt, read_json_file
from consentkeeper.core.config.models import ServerConfig
from consentkeeper.core.config.paths import ConfigFsPaths
from consentkeeper.core.errors import ConfigError


# Environment variable -> ServerConfig field.
ENV_OVERRIDES = {
    "PORT": "port",
    "CONSENTKEEPER_HOST": "host",
    "CONSENTKEEPER_DATA_DIR": "data_dir",
}


class ConfigManager:
    """
    Loads config/server.json, creating it with defaults on first boot.

    Environment overrides are applied on top of the file and never written back.
    """

    def __init__(self, *, fs: Optional[ConfigFsPaths] = None, logger=None, env: Optional[Mapping[str, str]] = None, read_only: bool = False):
        self.fs = fs or ConfigFsPaths(".")
        self.logger = logger
        self.env = os.environ if env is None else env
        self.read_only = read_only
        self._cfg: Optional[ServerConfig] = None

    # ---------- public API ----------
    def load(self) -> ServerConfig:
        raw = self._load_raw()
        try:
            cfg = ServerConfig.model_validate(raw)
        except PydanticValidationError as e:
            raise ConfigError("Invalid server config.", path=self.fs.server, errors=_error_summaries(e)) from e
        cfg = self._apply_env(cfg)
        self._cfg = cfg
        return cfg

    def get(self) -> ServerConfig:
        if self._cfg is None:
            raise ConfigError("Config not loaded.")
        return self._cfg

    # ---------- internals ----------
    def _load_raw(self) -> Dict[str, Any]:
        rr = read_json_file(self.fs.server)
        if rr.ok:
            return rr.data
        defaults = ServerConfig().model_dump()
        if self.read_only:
            if rr.error != "missing" and self.logger:
                self.logger.warning(f"Config file unreadable ({rr.error}); using defaults.")
            return defaults
        if rr.error != "missing":
            moved = quarantine_corrupt(self.fs.server, self.fs.backups_dir)
            if self.logger:
                self.logger.warning(f"Config file unreadable ({rr.error}); moved to {moved} and restored defaults.")
        ensure_dirs(self.fs.config_dir)
        atomic_write_json(self.fs.server, defaults)
        return defaults

    def _apply_env(self, cfg: ServerConfig) -> ServerConfig:
        updates: Dict[str, Any] = {}
        for var, field_name in ENV_OVERRIDES.items():
            val = self.env.get(var)
            if val is None or str(val).strip() == "":
                continue
            updates[field_name] = str(val).strip()
        if not updates:
            return cfg
        merged = cfg.model_dump()
        merged.update(updates)
        try:
            out = ServerConfig.model_validate(merged)
        except PydanticValidationError as e:
            raise ConfigError("Invalid environment override.", overrides=sorted(updates), errors=_error_summaries(e)) from e
        if self.logger:
            self.logger.info("Config overrides from environment: " + ", ".join(sorted(updates)))
        return out


def _error_summaries(e: PydanticValidationError) -> list[str]:
    return [f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in e.errors()]
