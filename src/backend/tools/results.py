"""
Result types returned by the cache tools.

Each operation has a success variant carrying only the fields that outcome
guarantees, and shares ToolFailure for every error. `to_dict()` renders the
wire shape (camelCase keys, absent optionals omitted).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    STORE = "store"
    SCRAPE = "scrape"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ToolFailure:
    message: str
    error_kind: ErrorKind
    # Operation-specific fields always present on the wire, e.g. cached=False
    defaults: Mapping[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": False}
        data.update(self.defaults)
        data["message"] = self.message
        data["errorKind"] = self.error_kind.value
        return data


@dataclass(frozen=True)
class StoreMediaResult:
    message: str
    cached: bool
    bucket: str
    path: str

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": self.message,
            "cached": self.cached,
            "bucket": self.bucket,
            "path": self.path,
        }


@dataclass(frozen=True)
class ExistsResult:
    exists: bool
    message: str
    bucket: str
    path: Optional[str] = None

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": True,
            "exists": self.exists,
            "message": self.message,
            "bucket": self.bucket,
        }
        if self.path is not None:
            data["path"] = self.path
        return data


@dataclass(frozen=True)
class ShareLinkResolved:
    message: str
    public_url: str
    path: str
    bucket: str
    cached: bool

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": self.message,
            "publicUrl": self.public_url,
            "path": self.path,
            "bucket": self.bucket,
            "cached": self.cached,
        }


StoreMediaOutcome = Union[StoreMediaResult, ToolFailure]
ExistsOutcome = Union[ExistsResult, ToolFailure]
ResolveShareLinkOutcome = Union[ShareLinkResolved, ToolFailure]
