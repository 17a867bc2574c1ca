from .results import ErrorKind, ExistsResult, ShareLinkResolved, StoreMediaResult, ToolFailure
from .service import CacheToolService

__all__ = [
    "CacheToolService",
    "ErrorKind",
    "ExistsResult",
    "ShareLinkResolved",
    "StoreMediaResult",
    "ToolFailure",
]
