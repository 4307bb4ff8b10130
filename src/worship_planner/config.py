"""Runtime configuration read from the environment (and ``.env``)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from worship_planner.exceptions import ConfigError

DEFAULT_BASE_URL = "https://api.planningcenteronline.com/services/v2"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _env_bool(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


@dataclass
class Settings:
    """Settings for the Planning Center connection and text generation."""

    app_id: str = ""
    token: str = ""
    base_url: str = DEFAULT_BASE_URL
    all_plans_page_size: int = 500      # per service type, for /all-plans
    plans_page_size: int = 400          # single service type, for /plans
    request_timeout: float = 30.0
    hymnal_path: Optional[Path] = None
    ccli_license_number: str = "1564484"
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from environment variables, loading ``.env`` first."""
        from dotenv import load_dotenv

        load_dotenv()
        hymnal = os.getenv("HYMNAL_PATH", "").strip()
        return cls(
            app_id=os.getenv("PLANNING_CENTER_ID", "").strip(),
            token=os.getenv("PLANNING_CENTER_TOKEN", "").strip(),
            base_url=os.getenv("PLANNING_CENTER_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            all_plans_page_size=_env_int("ALL_PLANS_PAGE_SIZE", 500),
            plans_page_size=_env_int("PLANS_PAGE_SIZE", 400),
            request_timeout=float(_env_int("REQUEST_TIMEOUT", 30)),
            hymnal_path=Path(hymnal) if hymnal else None,
            ccli_license_number=os.getenv("CCLI_LICENSE_NUMBER", "1564484").strip(),
            debug=_env_bool("DEBUG"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.app_id and self.token)

    def require_credentials(self) -> tuple[str, str]:
        """Return the Basic-Auth pair or raise ConfigError."""
        if not self.has_credentials:
            raise ConfigError("Planning Center credentials not configured")
        return self.app_id, self.token
