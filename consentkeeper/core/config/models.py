from __future__ import annotations

import os
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    config_version: int = Field(default=1, ge=1)
    host: str = "127.0.0.1"
    port: int = Field(default=4000, ge=1, le=65535)
    data_dir: str = "data"
    db_filename: str = Field(default="db.json", min_length=1)
    audit_filename: str = Field(default="audit.log", min_length=1)
    log_dir: str = "logs"
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])
    access_log: bool = True

    @field_validator("db_filename", "audit_filename")
    @classmethod
    def _plain_filename(cls, v: str) -> str:
        if os.path.basename(v) != v:
            raise ValueError("must be a plain file name")
        return v

    def resolve_data_dir(self, root: str = ".") -> str:
        if os.path.isabs(self.data_dir):
            return self.data_dir
        return os.path.join(root, self.data_dir)

    def resolve_log_dir(self, root: str = ".") -> str:
        if os.path.isabs(self.log_dir):
            return self.log_dir
        return os.path.join(root, self.log_dir)

    def db_path(self, root: str = ".") -> str:
        return os.path.join(self.resolve_data_dir(root), self.db_filename)

    def audit_path(self, root: str = ".") -> str:
        return os.path.join(self.resolve_data_dir(root), self.audit_filename)

    def backups_dir(self, root: str = ".") -> str:
        return os.path.join(self.resolve_data_dir(root), "backups")
