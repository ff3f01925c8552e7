"""Configuration models for the audit engine."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, PrivateAttr, field_validator

DEFAULT_BASE_URL = "http://localhost:5000"


def resolve_base_url() -> str:
    """Work out the live platform URL from the deployment environment."""
    explicit = os.environ.get("PLATFORM_AUDIT_BASE_URL")
    if explicit:
        return explicit
    slug = os.environ.get("REPL_SLUG")
    owner = os.environ.get("REPL_OWNER")
    if slug and owner:
        return f"https://{slug}.{owner}.repl.co"
    return DEFAULT_BASE_URL


def _resolve(value: str) -> str:
    if value.startswith("env:"):
        return os.environ[value[4:]]
    return resolve_base_url()


class AuditConfig(BaseModel):
    # Live platform
    base_url: str = ""

    # Probing
    probe_timeout_seconds: float = Field(default=5.0, gt=0)
    max_parallel_probes: int = Field(default=8, ge=1)
    # Unreachable endpoints (DNS, refused connections) count as passing
    optimistic_on_unreachable: bool = True

    # Registry override (JSON file); the built-in registry is used when unset
    registry_path: Optional[str] = None

    # Persistence
    store_path: str = ".platform-audit/store.json"

    # Reporting
    report_output_dir: str = "./audit-reports"
    report_formats: list[str] = Field(default_factory=lambda: ["json"])

    initiated_by: str = "cli"

    # Unresolved base_url ("" or "env:NAME") and what it resolved to
    _base_url_source: Optional[str] = PrivateAttr(default=None)
    _resolved_base_url: Optional[str] = PrivateAttr(default=None)

    @field_validator("base_url", mode="before")
    @classmethod
    def check_env_base_url(cls, v: str) -> str:
        if isinstance(v, str) and v.startswith("env:"):
            env_var = v[4:]
            if os.environ.get(env_var) is None:
                raise ValueError(f"Environment variable '{env_var}' not set")
        return v

    def model_post_init(self, __context) -> None:
        if not self.base_url or self.base_url.startswith("env:"):
            self._base_url_source = self.base_url
            self.base_url = _resolve(self.base_url)
        self.base_url = self.base_url.rstrip("/")
        self._resolved_base_url = self.base_url

    @classmethod
    def load(cls, path: str | Path) -> "AuditConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_file_dict(), f, indent=2)

    def to_file_dict(self) -> dict:
        """Serialized form for the config file.

        A base URL that came from the environment is written back as its
        source, so later environment changes still apply on the next load.
        """
        data = self.model_dump()
        if self._base_url_source is not None and self.base_url == self._resolved_base_url:
            data["base_url"] = self._base_url_source
        return data
