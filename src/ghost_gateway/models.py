"""Internal models for tool descriptors, credentials and call outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type

from pydantic import BaseModel


class TimeoutClass(str, Enum):
    FAST = "fast"
    SLOW = "slow"


class ResultShape(str, Enum):
    STATUS = "status"
    INFO = "info"
    ITEM = "item"
    COLLECTION = "collection"
    SUMMARY = "summary"
    DELETION = "deletion"


class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    VALIDATION_FAILED = "validation_failed"
    BACKEND_FAILED = "backend_failed"
    TIMED_OUT = "timed_out"
    TRANSPORT_FAILED = "transport_failed"


@dataclass(frozen=True)
class CallerIdentity:
    username: str
    display_name: str = ""


@dataclass(frozen=True)
class CredentialPair:
    """Blog-level credentials: Ghost admin API key and Ghost site URL.

    Used both for per-call overrides and for the process environment. Either
    field may be missing on its own.
    """

    admin_api_key: Optional[str] = None
    api_url: Optional[str] = None


@dataclass(frozen=True)
class EffectiveCredentials:
    service_key: str
    admin_api_key: Optional[str] = None
    api_url: Optional[str] = None


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_model: Type[BaseModel]
    method: str
    path: str
    timeout_class: TimeoutClass = TimeoutClass.FAST
    accepts_override: bool = True
    result_shape: ResultShape = ResultShape.ITEM
    echo_fields: Tuple[str, ...] = ()
    # (parameter, value) pairs the caller can set to take a quicker backend path.
    fast_path: Tuple[Tuple[str, Any], ...] = ()


@dataclass(frozen=True)
class RawOutcome:
    kind: Outcome
    status_code: Optional[int] = None
    payload: Any = None
    error: Optional[str] = None
    timeout_seconds: Optional[float] = None


@dataclass
class CallResult:
    outcome: Outcome
    tool: str
    data: Any = None
    error: Optional[str] = None
    echo: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCEEDED

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "success": self.ok,
            "outcome": self.outcome.value,
            "tool": self.tool,
            "timestamp": self.timestamp,
        }
        if self.ok:
            result["data"] = self.data
        else:
            result["error"] = self.error
        if self.echo:
            result["input"] = self.echo
        return result
