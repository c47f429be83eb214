# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No site access required at import time.
- Everything the data layer and the board need is injectable (tests pass their own).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .board.models import DEFAULT_ALLOWED_EXTENSIONS

ENV_PREFIX = "TASKBOARD"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_tristate(name: str) -> Optional[bool]:
    """Unset/empty/"auto" -> None, otherwise a bool."""
    raw = os.getenv(name)
    if raw is None or raw.strip().lower() in {"", "auto", "none"}:
        return None
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: Sequence[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    parts = [p.strip() for p in raw.replace(",", " ").split() if p.strip()]
    return parts


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Connector flags ----
    console_enabled: bool
    offline_mode: bool

    # ---- Site / endpoint resolution ----
    fallback_site_url: str
    site_page_url: str
    api_root: str

    # ---- Transport ----
    proxy_url: Optional[str]
    use_proxy: Optional[bool]
    native_host_suffix: str

    # ---- Canonical lists ----
    tasks_list: str
    sales_list: str
    activity_list: str
    people_list: str
    default_top: int

    # ---- Board ----
    assignee: str
    max_attachment_bytes: int
    allowed_extensions: List[str]
    note_history_cap: int
    search_debounce_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        offline_mode = _env_bool(_k("OFFLINE_MODE"), False)

        fallback_site_url = _env(
            _k("FALLBACK_SITE_URL"),
            "https://chamberlaingroup.sharepoint.com/sites/"
            "PrincipalGTMStrategy-InternalUseOnly-ATLIntegrationProject",
        ).strip()
        site_page_url = _env(_k("SITE_PAGE_URL"), "").strip()
        api_root = _env(_k("API_ROOT"), "_api/web").strip().strip("/")

        proxy_url = _env(_k("PROXY_URL"), "").strip() or None
        use_proxy = _env_tristate(_k("USE_PROXY"))
        native_host_suffix = _env(_k("NATIVE_HOST_SUFFIX"), "sharepoint.com").strip().lower()

        tasks_list = _env(_k("TASKS_LIST"), "ATL_Project_Plan.v21")
        sales_list = _env(_k("SALES_LIST"), "ATL-SalesData")
        activity_list = _env(_k("ACTIVITY_LIST"), "ActivityLog")
        people_list = _env(_k("PEOPLE_LIST"), "PeopleMap")
        default_top = _env_int(_k("DEFAULT_TOP"), 500)

        assignee = _env(_k("ASSIGNEE"), "").strip()
        max_attachment_bytes = _env_int(_k("MAX_ATTACHMENT_BYTES"), 10 * 1024 * 1024)
        allowed_extensions = [
            e.lower().lstrip(".")
            for e in _env_list(_k("ALLOWED_EXTENSIONS"), DEFAULT_ALLOWED_EXTENSIONS)
        ]
        note_history_cap = _env_int(_k("NOTE_HISTORY_CAP"), 50)
        search_debounce_seconds = _env_float(_k("SEARCH_DEBOUNCE_SECONDS"), 0.3)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            console_enabled=console_enabled,
            offline_mode=offline_mode,
            fallback_site_url=fallback_site_url,
            site_page_url=site_page_url,
            api_root=api_root,
            proxy_url=proxy_url,
            use_proxy=use_proxy,
            native_host_suffix=native_host_suffix,
            tasks_list=tasks_list,
            sales_list=sales_list,
            activity_list=activity_list,
            people_list=people_list,
            default_top=default_top,
            assignee=assignee,
            max_attachment_bytes=max_attachment_bytes,
            allowed_extensions=allowed_extensions,
            note_history_cap=note_history_cap,
            search_debounce_seconds=search_debounce_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
