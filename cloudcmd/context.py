from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Hashable, TypeVar

from .errors import ServiceNotAvailableError
from .response import CommandResponse

T = TypeVar("T")

ServiceFactory = Callable[["ServiceRegistry"], Any]


class ServiceRegistry:
    """Keyed service lookup: capability (usually a Protocol class) -> instance.

    Populated by each area's ``configure_services`` at startup and read-only
    afterwards. Factories are invoked on every lookup and cache nothing.
    """

    def __init__(self) -> None:
        self._instances: dict[Hashable, Any] = {}
        self._factories: dict[Hashable, ServiceFactory] = {}

    def add_singleton(self, key: Hashable, instance: Any) -> None:
        self._check_free(key)
        self._instances[key] = instance

    def add_factory(self, key: Hashable, factory: ServiceFactory) -> None:
        self._check_free(key)
        self._factories[key] = factory

    def try_add_singleton(self, key: Hashable, instance: Any) -> bool:
        if key in self:
            return False
        self._instances[key] = instance
        return True

    def try_add_factory(self, key: Hashable, factory: ServiceFactory) -> bool:
        if key in self:
            return False
        self._factories[key] = factory
        return True

    def _check_free(self, key: Hashable) -> None:
        if key in self._instances or key in self._factories:
            raise ValueError(f"service already registered: {getattr(key, '__name__', key)}")

    def __contains__(self, key: object) -> bool:
        return key in self._instances or key in self._factories

    def get(self, key: Hashable) -> Any:
        if key in self._instances:
            return self._instances[key]
        factory = self._factories.get(key)
        if factory is None:
            raise ServiceNotAvailableError(key)
        return factory(self)


class InvocationState(str, Enum):
    CREATED = "created"
    BOUND = "bound"
    VALIDATED = "validated"
    INVALID = "invalid"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    CLASSIFIED = "classified"


_TRANSITIONS: dict[InvocationState, frozenset[InvocationState]] = {
    InvocationState.CREATED: frozenset({InvocationState.BOUND}),
    InvocationState.BOUND: frozenset({InvocationState.VALIDATED, InvocationState.INVALID}),
    InvocationState.VALIDATED: frozenset({InvocationState.EXECUTING}),
    InvocationState.EXECUTING: frozenset({InvocationState.SUCCEEDED}),
    InvocationState.INVALID: frozenset(),
    InvocationState.SUCCEEDED: frozenset(),
    InvocationState.CLASSIFIED: frozenset(),
}

TERMINAL_STATES = frozenset(
    {InvocationState.INVALID, InvocationState.SUCCEEDED, InvocationState.CLASSIFIED}
)


@dataclass
class Activity:
    name: str
    tags: dict[str, str] = field(default_factory=dict)
    started: float = field(default_factory=time.monotonic)

    def add_tag(self, key: str, value: Any) -> None:
        if value is None:
            return
        self.tags[key] = str(value)

    def duration_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)


class CommandContext:
    """Per-invocation carrier: service lookup, the response being built, tracing."""

    def __init__(self, services: ServiceRegistry, *, activity: Activity | None = None) -> None:
        self.services = services
        self.response = CommandResponse()
        self.activity = activity
        self.state = InvocationState.CREATED

    def get_service(self, key: type[T]) -> T:
        return self.services.get(key)

    def transition(self, state: InvocationState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"invalid invocation transition: {self.state.value} -> {state.value}")
        self.state = state

    def mark_classified(self) -> None:
        # Failures can surface from any step, including a rejected transition.
        self.state = InvocationState.CLASSIFIED

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES
