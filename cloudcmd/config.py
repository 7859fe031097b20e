from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

CLOUDCMD_REGION = "CLOUDCMD_REGION"
CLOUDCMD_LOG_LEVEL = "CLOUDCMD_LOG_LEVEL"
CLOUDCMD_PLAIN_JSON = "CLOUDCMD_PLAIN_JSON"
CLOUDCMD_TRACING = "CLOUDCMD_TRACING"
CLOUDCMD_SERVER_NAME = "CLOUDCMD_SERVER_NAME"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def bootstrap_env() -> None:
    # Discover and load .env without overriding already-exported values.
    load_dotenv(find_dotenv(usecwd=True))


def _env_or_none(*names: str) -> str | None:
    for n in names:
        v = (os.environ.get(n) or "").strip()
        if v:
            return v
    return None


def _truthy(raw: str | None) -> bool:
    return str(raw or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    region: str = ""
    log_level: str = "WARNING"
    plain_json: bool = False
    tracing: bool = False
    server_name: str = "cloudcmd"

    @classmethod
    def from_env(cls) -> Settings:
        level = (_env_or_none(CLOUDCMD_LOG_LEVEL) or "WARNING").upper()
        if level not in _LOG_LEVELS:
            level = "WARNING"
        return cls(
            region=_env_or_none(CLOUDCMD_REGION, "AWS_REGION") or "",
            log_level=level,
            plain_json=_truthy(os.environ.get(CLOUDCMD_PLAIN_JSON)),
            tracing=_truthy(os.environ.get(CLOUDCMD_TRACING)),
            server_name=_env_or_none(CLOUDCMD_SERVER_NAME) or "cloudcmd",
        )
