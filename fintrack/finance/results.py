"""Mini README: Structured outcomes returned by store operations.

Structure:
    * ErrorKind - failure taxonomy (validation, import format, parse, persistence).
    * OperationResult - success/failure flag with reason code, message and payload.

Store operations report problems through these values instead of raising,
leaving the presentation layer free to show a toast, an alert or an HTTP
error body.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Enumerate the recoverable failure families."""

    VALIDATION = "validation"
    IMPORT_FORMAT = "import_format"
    PARSE = "parse"
    PERSISTENCE = "persistence"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a store operation."""

    ok: bool
    message: str = ""
    reason: str = "ok"
    kind: Optional[ErrorKind] = None
    payload: Any = None

    @classmethod
    def success(cls, message: str = "", payload: Any = None) -> "OperationResult":
        return cls(ok=True, message=message, payload=payload)

    @classmethod
    def failure(cls, kind: ErrorKind, reason: str, message: str) -> "OperationResult":
        return cls(ok=False, message=message, reason=reason, kind=kind)

    def __bool__(self) -> bool:
        return self.ok

    def as_dict(self) -> Dict[str, Any]:
        """Serialise the result for JSON responses."""

        return {
            "ok": self.ok,
            "reason": self.reason,
            "kind": self.kind.value if self.kind else None,
            "message": self.message,
        }
