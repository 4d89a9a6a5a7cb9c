from __future__ import annotations

from consentkeeper.core.config.manager import ConfigManager
from consentkeeper.core.config.models import ServerConfig
from consentkeeper.core.config.paths import ConfigFsPaths

__all__ = ["ConfigFsPaths", "ConfigManager", "ServerConfig"]
