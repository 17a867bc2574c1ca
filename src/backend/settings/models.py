from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from ..net.retry import RetryConfig
from ..net.proxy import ProxyConfig
from ..scraper.config import ScrapeConfig


BACKEND_S3 = "s3"
BACKEND_MEMORY = "memory"
BACKENDS = frozenset({BACKEND_S3, BACKEND_MEMORY})

DEFAULT_FETCH_TIMEOUT_S = 60.0

ENV_ENDPOINT = "MEDIA_CACHE_STORE_ENDPOINT"
ENV_ACCESS_KEY_ID = "MEDIA_CACHE_ACCESS_KEY_ID"
ENV_ACCESS_KEY_SECRET = "MEDIA_CACHE_ACCESS_KEY_SECRET"
ENV_BUCKET = "MEDIA_CACHE_BUCKET"
ENV_BACKEND = "MEDIA_CACHE_BACKEND"


class ConfigurationError(ValueError):
    """Store configuration is incomplete; raised before any network I/O."""


@dataclass(frozen=True)
class StoreCredentials:
    endpoint: str = ""
    access_key_id: str = ""
    access_key_secret: str = ""
    region: Optional[str] = None
    backend: str = BACKEND_S3

    def is_complete(self) -> bool:
        if not self.endpoint.strip():
            return False
        if self.backend == BACKEND_MEMORY:
            return True
        return bool(self.access_key_id.strip()) and bool(self.access_key_secret.strip())

    def to_persist_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "endpoint": self.endpoint,
            "access_key_id": self.access_key_id,
            "access_key_secret": self.access_key_secret,
            "backend": self.backend,
        }
        if self.region:
            data["region"] = self.region
        return data

    @classmethod
    def from_persist_dict(cls, data: dict[str, Any]) -> "StoreCredentials":
        backend = str(data.get("backend") or BACKEND_S3).strip().lower()
        return cls(
            endpoint=str(data.get("endpoint", "") or ""),
            access_key_id=str(data.get("access_key_id", "") or ""),
            access_key_secret=str(data.get("access_key_secret", "") or ""),
            region=(str(data.get("region")) if data.get("region") else None),
            backend=backend if backend in BACKENDS else BACKEND_S3,
        )


@dataclass(frozen=True)
class StoreConfig:
    """Fully resolved store configuration for one call."""
    endpoint: str
    access_key_id: str
    access_key_secret: str
    bucket: str
    region: Optional[str] = None
    backend: str = BACKEND_S3

    @property
    def host(self) -> str:
        """Endpoint without scheme or trailing slash."""
        host = self.endpoint.strip()
        if "://" in host:
            host = host.split("://", 1)[1]
        return host.rstrip("/")

    def public_url(self, path: str) -> str:
        return f"https://{self.bucket}.{self.host}/{path.lstrip('/')}"


@dataclass
class GlobalSettings:
    store: Optional[StoreCredentials] = None
    bucket_name: str = ""
    fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S
    retry: Optional[RetryConfig] = None
    proxy: Optional[ProxyConfig] = None
    scrape: Optional[ScrapeConfig] = None

    def store_configured(self) -> bool:
        return self.store is not None and self.store.is_complete() and bool(self.bucket_name.strip())

    def get_retry(self) -> RetryConfig:
        """Get retry config, using defaults if not set."""
        return self.retry or RetryConfig()

    def get_proxy(self) -> ProxyConfig:
        """Get proxy config, using defaults if not set."""
        return self.proxy or ProxyConfig()

    def get_scrape(self) -> ScrapeConfig:
        """Get scrape config, using defaults if not set."""
        return self.scrape or ScrapeConfig()

    def to_persist_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "version": 1,
            "bucket_name": self.bucket_name,
            "fetch_timeout_s": self.fetch_timeout_s,
        }
        if self.store is not None:
            data["store"] = self.store.to_persist_dict()
        if self.retry is not None:
            data["retry"] = self.retry.to_persist_dict()
        if self.proxy is not None:
            data["proxy"] = self.proxy.to_persist_dict()
        if self.scrape is not None:
            data["scrape"] = self.scrape.to_persist_dict()
        return data

    @classmethod
    def from_persist_dict(cls, data: dict[str, Any]) -> "GlobalSettings":
        raw_store = data.get("store")
        store = StoreCredentials.from_persist_dict(raw_store) if isinstance(raw_store, dict) else None

        try:
            fetch_timeout_s = float(data.get("fetch_timeout_s", DEFAULT_FETCH_TIMEOUT_S))
        except (TypeError, ValueError):
            fetch_timeout_s = DEFAULT_FETCH_TIMEOUT_S

        raw_retry = data.get("retry")
        raw_proxy = data.get("proxy")
        raw_scrape = data.get("scrape")

        return cls(
            store=store,
            bucket_name=str(data.get("bucket_name", "") or ""),
            fetch_timeout_s=max(1.0, fetch_timeout_s),
            retry=RetryConfig.from_persist_dict(raw_retry) if isinstance(raw_retry, dict) else None,
            proxy=ProxyConfig.from_persist_dict(raw_proxy) if isinstance(raw_proxy, dict) else None,
            scrape=ScrapeConfig.from_persist_dict(raw_scrape) if isinstance(raw_scrape, dict) else None,
        )


def apply_env_overrides(settings: GlobalSettings, environ: Mapping[str, str]) -> GlobalSettings:
    """
    Overlay non-blank MEDIA_CACHE_* environment values on file settings.

    Returns a new GlobalSettings; the input is not modified.
    """
    def _env(name: str) -> Optional[str]:
        value = environ.get(name)
        if value is None or not value.strip():
            return None
        return value.strip()

    store = settings.store or StoreCredentials()
    backend = _env(ENV_BACKEND)
    store = replace(
        store,
        endpoint=_env(ENV_ENDPOINT) or store.endpoint,
        access_key_id=_env(ENV_ACCESS_KEY_ID) or store.access_key_id,
        access_key_secret=_env(ENV_ACCESS_KEY_SECRET) or store.access_key_secret,
        backend=backend.lower() if backend and backend.lower() in BACKENDS else store.backend,
    )

    result = replace(settings, store=store)
    bucket = _env(ENV_BUCKET)
    if bucket:
        result.bucket_name = bucket
    return result


def resolve_store_config(settings: GlobalSettings, bucket_override: Optional[str] = None) -> StoreConfig:
    """
    Build the per-call store configuration.

    The bucket comes from the call when given, else from settings. Endpoint
    and credentials come from settings only.

    Raises:
        ConfigurationError: If bucket, endpoint or credentials are missing.
    """
    bucket = bucket_override.strip() if bucket_override and bucket_override.strip() else settings.bucket_name.strip()
    store = settings.store
    if not bucket or store is None or not store.is_complete():
        raise ConfigurationError(
            "对象存储未配置完整，请配置 endpoint、access_key_id、access_key_secret、bucket_name"
        )
    return StoreConfig(
        endpoint=store.endpoint.strip(),
        access_key_id=store.access_key_id.strip(),
        access_key_secret=store.access_key_secret.strip(),
        bucket=bucket,
        region=store.region,
        backend=store.backend,
    )
