"""
Persisted settings for the cache tools (data/config.json by default).
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from .models import GlobalSettings, StoreCredentials, apply_env_overrides


logger = logging.getLogger(__name__)

# Settings sections that can be replaced as a whole
SECTIONS = frozenset({"retry", "proxy", "scrape", "fetch_timeout_s"})


class SettingsStore:
    """
    JSON-backed GlobalSettings.

    Reads never fail: a missing, unreadable or non-object file gives the
    defaults. Writes go to a sibling temp file that then replaces the target.
    """

    def __init__(self, *, path: Path) -> None:
        self._path = path
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> GlobalSettings:
        with self._lock:
            raw = self._read_raw()
        if raw is None:
            return GlobalSettings()
        return GlobalSettings.from_persist_dict(raw)

    def load_effective(self, environ: Mapping[str, str]) -> GlobalSettings:
        """File settings with MEDIA_CACHE_* environment values on top."""
        return apply_env_overrides(self.load(), environ)

    def _read_raw(self) -> Optional[dict[str, Any]]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Cannot read settings file %s: %s", self._path, exc)
            return None

        try:
            raw = json.loads(text)
        except ValueError as exc:
            logger.warning("Ignoring malformed settings file %s: %s", self._path, exc)
            return None
        if not isinstance(raw, dict):
            logger.warning("Ignoring settings file %s: top level is not an object", self._path)
            return None
        return raw

    def save(self, settings: GlobalSettings) -> None:
        text = json.dumps(settings.to_persist_dict(), ensure_ascii=False, indent=2) + "\n"
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_name(f".{self._path.name}.tmp")
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, self._path)

    def update(self, mutator: Callable[[GlobalSettings], None]) -> GlobalSettings:
        """Load, let `mutator` change the settings in place, save, return them."""
        with self._lock:
            settings = self.load()
            mutator(settings)
            self.save(settings)
            return settings

    def set_store(self, credentials: StoreCredentials) -> GlobalSettings:
        logger.info("Store endpoint set to %s (%s)", credentials.endpoint, credentials.backend)
        return self.update(lambda s: setattr(s, "store", credentials))

    def clear_store(self) -> GlobalSettings:
        return self.update(lambda s: setattr(s, "store", None))

    def set_bucket(self, bucket_name: str) -> GlobalSettings:
        return self.update(lambda s: setattr(s, "bucket_name", bucket_name))

    def set_section(self, key: str, value: Any) -> GlobalSettings:
        """
        Replace one of the option sections (retry, proxy, scrape, fetch_timeout_s).

        Raises:
            KeyError: For any other key.
        """
        if key not in SECTIONS:
            raise KeyError(key)
        return self.update(lambda s: setattr(s, key, value))
