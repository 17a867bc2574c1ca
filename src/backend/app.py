from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from fastapi import FastAPI

from .settings.api import create_settings_router
from .settings.models import GlobalSettings
from .settings.store import SettingsStore
from .tools.api import create_tools_router


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def create_app(*, repo_root: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> FastAPI:
    repo_root = repo_root or _repo_root()
    config_path = repo_root / "data" / "config.json"

    store = SettingsStore(path=config_path)
    # Environment is read once here; the core only sees the settings passed to it.
    env = dict(os.environ if environ is None else environ)

    def settings_provider() -> GlobalSettings:
        return store.load_effective(env)

    app = FastAPI(title="media-cache-relay")
    app.include_router(create_settings_router(store=store))
    app.include_router(create_tools_router(settings_provider=settings_provider))

    app.state.settings_store = store
    app.state.settings_provider = settings_provider
    app.state.repo_root = repo_root
    return app


app = create_app()
