from __future__ import annotations

from dataclasses import dataclass

from ...common_options import SubscriptionOptions
from ...options import OptionDefinition, OptionKind

MAX_RESULTS_LIMIT = 1000


class QueueOptionDefinitions:
    QUEUE = OptionDefinition(
        "queue",
        "The queue name.",
        required=True,
        aliases=("name",),
    )
    PREFIX = OptionDefinition(
        "prefix",
        "Only return queues whose name starts with this value.",
    )
    MAX_RESULTS = OptionDefinition(
        "max-results",
        f"Maximum number of queues to return (1-{MAX_RESULTS_LIMIT}).",
        kind=OptionKind.INT,
        default=100,
    )


@dataclass(frozen=True)
class QueueListOptions:
    scope: SubscriptionOptions
    prefix: str | None = None
    max_results: int = 100


@dataclass(frozen=True)
class QueueOptions:
    scope: SubscriptionOptions
    queue: str | None = None
