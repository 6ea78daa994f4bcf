from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .parser import DEFAULT_MODEL

REQUIRED_KEYS = [
    "ANTHROPIC_API_KEY",
]

OPTIONAL_KEYS = [
    "ANTHROPIC_API_URL",
    "GROCERY_MATCH_MODEL",
    "GROCERY_MATCH_CATALOG",
    "GROCERY_MATCH_TIMEOUT",
    "GROCERY_MATCH_LOG_LEVEL",
]

_PLACEHOLDERS = {"PLACEHOLDER", "MASKED", "CHANGEME", ""}


@dataclass(frozen=True)
class Config:
    anthropic_api_key: str | None
    anthropic_api_url: str = "https://api.anthropic.com"
    model: str = DEFAULT_MODEL
    catalog_path: str | None = None
    request_timeout_s: float = 30.0
    log_level: str = "INFO"

    @property
    def online(self) -> bool:
        return bool(self.anthropic_api_key)

    @staticmethod
    def load_from_env(environ: Mapping[str, str] | None = None, *, require_api_key: bool = True) -> "Config":
        env = os.environ if environ is None else environ

        api_key: str | None = None
        for k in REQUIRED_KEYS:
            val = env.get(k)
            if val is None or val.strip() in _PLACEHOLDERS:
                if require_api_key:
                    raise RuntimeError(f"Missing or placeholder environment variable: {k}")
                continue
            api_key = val.strip()

        timeout_raw = env.get("GROCERY_MATCH_TIMEOUT", "30")
        try:
            timeout = float(timeout_raw)
        except ValueError:
            raise RuntimeError(f"GROCERY_MATCH_TIMEOUT must be a number of seconds, got {timeout_raw!r}")
        if timeout <= 0:
            raise RuntimeError("GROCERY_MATCH_TIMEOUT must be positive")

        return Config(
            anthropic_api_key=api_key,
            anthropic_api_url=env.get("ANTHROPIC_API_URL", "https://api.anthropic.com").rstrip("/"),
            model=env.get("GROCERY_MATCH_MODEL") or DEFAULT_MODEL,
            catalog_path=env.get("GROCERY_MATCH_CATALOG") or None,
            request_timeout_s=timeout,
            log_level=env.get("GROCERY_MATCH_LOG_LEVEL", "INFO").upper(),
        )

    @staticmethod
    def offline(environ: Mapping[str, str] | None = None) -> "Config":
        """Same as load_from_env but without requiring (or using) an API key."""
        cfg = Config.load_from_env(environ, require_api_key=False)
        return Config(
            anthropic_api_key=None,
            anthropic_api_url=cfg.anthropic_api_url,
            model=cfg.model,
            catalog_path=cfg.catalog_path,
            request_timeout_s=cfg.request_timeout_s,
            log_level=cfg.log_level,
        )
