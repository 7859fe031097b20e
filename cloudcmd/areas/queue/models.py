from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class QueueSummary:
    name: str
    url: str
    resource_group: str | None = None


@dataclass(frozen=True)
class QueueDetails:
    name: str
    url: str
    arn: str | None = None
    resource_group: str | None = None
    fifo: bool = False
    approximate_message_count: int = 0
    approximate_in_flight_count: int = 0
    approximate_delayed_count: int = 0
    visibility_timeout_seconds: int | None = None
    message_retention_seconds: int | None = None
    maximum_message_size_bytes: int | None = None
    delay_seconds: int | None = None
    dead_letter_target_arn: str | None = None
    max_receive_count: int | None = None
    created_at: datetime | None = None
