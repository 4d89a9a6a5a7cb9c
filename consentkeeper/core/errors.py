from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from consentkeeper.core.events import redact


class Severity(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class ConsentKeeperError(Exception):
    code: str
    user_message: str
    severity: Severity = Severity.ERROR
    recoverable: bool = True
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.code)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "user_message": self.user_message,
            "severity": self.severity.value,
            "recoverable": bool(self.recoverable),
            "context": redact(self.context or {}),
        }


class ValidationError(ConsentKeeperError):
    """Client input problem. `code` is the stable machine-readable reason."""

    def __init__(self, code: str = "invalid_request", user_message: str = "Invalid request.", **ctx: Any):
        super().__init__(code, user_message, severity=Severity.WARN, recoverable=False, context=ctx)


class NotFoundError(ConsentKeeperError):
    def __init__(self, user_message: str = "Not found.", **ctx: Any):
        super().__init__("not_found", user_message, severity=Severity.INFO, recoverable=False, context=ctx)


class StorageError(ConsentKeeperError):
    def __init__(self, user_message: str = "Storage error.", **ctx: Any):
        super().__init__("storage_error", user_message, severity=Severity.ERROR, recoverable=True, context=ctx)


class ConfigError(ConsentKeeperError):
    def __init__(self, user_message: str = "Configuration error.", **ctx: Any):
        super().__init__("config_error", user_message, severity=Severity.CRITICAL, recoverable=False, context=ctx)


# Codes a client can fix by changing the request.
VALIDATION_CODES = {
    "consent_required",
    "email_required",
    "consent_boolean_required",
    "invalid_json",
    "invalid_request",
}


def http_status_for(err: ConsentKeeperError) -> int:
    if isinstance(err, ValidationError) or err.code in VALIDATION_CODES:
        return 400
    if err.code == "not_found":
        return 404
    return 500
