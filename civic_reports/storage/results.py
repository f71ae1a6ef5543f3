#!/usr/bin/env python3
"""
Store operation results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

class ErrorKind(str, Enum):
    """Why a store operation failed."""
    NOT_FOUND = "not_found"
    STORAGE_FAILURE = "storage_failure"
    REMOTE_FAILURE = "remote_failure"

@dataclass
class StoreResult:
    """Outcome of a write operation. Truthy when the operation succeeded."""
    ok: bool
    value: Any = None
    error: Optional[ErrorKind] = None
    message: str = ""

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Any = None) -> "StoreResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str = "") -> "StoreResult":
        return cls(ok=False, error=error, message=message)
