from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DatabaseConnectionInfo:
    database_type: str
    database_server: str
    database_name: str
    connection_string: str
    connection_string_name: str
    is_configured: bool
    configured_at: datetime
    parameter_name: str | None = None
